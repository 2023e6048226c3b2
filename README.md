# agentkit

Building blocks for applications that drive a coding agent. The package has
no framework of its own; it gives you the data types and helpers that sit
around one.

## Modules

- `agentkit.message`: chat messages (`Message`, `DataMessage`) made of typed
  content parts: `TextContent`, `ReasoningContent`, `ImageURLContent`,
  `BinaryContent`, `ToolCall`, `ToolResult` and `Finish`. Also `Attachment`,
  `contains_text_attachment` and `prompt_with_text_attachments`.
- `agentkit.parts`: JSON storage of message parts: `marshal_parts`,
  `unmarshal_parts` and `unmarshal_part_data`.
- `agentkit.chunks`: streamed output pieces (`MessageChunk`,
  `MessageChunkData`, `MessageType`) with `session_id_chunk`,
  `request_id_chunk`, `error_chunk` and `tip_chunk`.
- `agentkit.sessions`: `Session`, `Todo` and `TodoStatus`, JSON encoding of
  todo lists (`marshal_todos`, `unmarshal_todos`) and agent tool session ids
  of the form `messageID$$toolCallID` (`create_agent_tool_session_id`,
  `parse_agent_tool_session_id`, `is_agent_tool_session`).
- `agentkit.skills`: parsing (`parse`), validation (`Skill.validate`, which
  raises `SkillValidationError`) and discovery (`discover`) of `SKILL.md`
  files, and `to_prompt_xml` to render them for a system prompt.
- `agentkit.shell`: a `Shell` that runs each command in a POSIX shell process
  and carries its working directory and exported variables over to the next
  command. Commands can be refused with `commands_blocker` and
  `arguments_blocker`; a refused command raises `CommandBlocked`.
- `agentkit.language`: `detect_language_id` maps a file name or URI to a
  language identifier.
- `agentkit.projects`: a `ProjectStore` that records project directories in a
  `projects.json` file, most recently used first.
- `agentkit.update`: `check` compares a running version with the latest
  release fetched by a client such as `GitHubClient`; `Info.available` and
  `Info.is_development` interpret the result.
- `agentkit.token`: an OAuth2 `Token` with expiry bookkeeping.
- `agentkit.stringext`: `capitalize` and `contains_any`.

## Installation

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Examples

Discover skills and render them for a system prompt:

```python
from agentkit.skills import discover, to_prompt_xml

skills = discover(["./skills"])
print(to_prompt_xml(skills))
```

Build a message and store its parts as JSON:

```python
from agentkit.message import Message, MessageRole
from agentkit.parts import marshal_parts, unmarshal_parts

msg = Message(id="m1", role=MessageRole.ASSISTANT, session_id="s1")
msg.append_content("Hello")
msg.append_content(", world")
print(msg.content().text)          # Hello, world

stored = marshal_parts(msg.parts)
assert unmarshal_parts(stored) == msg.parts
```

Run commands, with some commands blocked:

```python
from agentkit.shell import CommandBlocked, Shell, commands_blocker

shell = Shell(block_funcs=[commands_blocker(["rm"])])
shell.exec("cd /tmp")
result = shell.exec("pwd", timeout=10)
print(result.stdout, result.exit_code)

try:
    shell.exec("rm -rf build")
except CommandBlocked as exc:
    print(exc)
```

Record the projects you work on:

```python
from agentkit.projects import ProjectStore

store = ProjectStore.in_directory("./data")
store.register("/home/me/project", "/home/me/project/.data")
for project in store.list():
    print(project.path, project.last_accessed)
```

Check for a newer release:

```python
from agentkit.update import GitHubClient, UpdateCheckError, check

try:
    info = check("v1.2.0", GitHubClient("example/agent"))
    if info.available():
        print("update available:", info.latest, info.url)
except UpdateCheckError as exc:
    print(exc)
```

Detect a language identifier:

```python
from agentkit.language import detect_language_id

assert detect_language_id("main.go") == "go"
```

## What the package does not do

- It has no command-line program and no server.
- It stores nothing in a database: messages and sessions are data types with
  JSON encoding, and saving them is up to you.
- It has no event broker, no permission prompts and no manager for
  background jobs; `Shell` runs one command at a time and waits for it.
- It does not talk to language servers or tool servers, and does not apply
  editor edits to files; `detect_language_id` only names the language of a
  file.