import base64
from datetime import timedelta

import pytest

from agentkit.message import (
    Attachment,
    BinaryContent,
    ContentPartData,
    DataMessage,
    Finish,
    FinishReason,
    ImageURLContent,
    Message,
    MessageRole,
    MiniFileAttachment,
    PartType,
    ReasoningContent,
    TextContent,
    ToolCall,
    ToolResult,
    contains_text_attachment,
    prompt_with_text_attachments,
)


def test_attachment_kinds():
    text = Attachment(mime_type="text/plain")
    image = Attachment(mime_type="image/png")
    assert text.is_text() and not text.is_image()
    assert image.is_image() and not image.is_text()
    assert contains_text_attachment([image, text]) is True
    assert contains_text_attachment([image]) is False


def test_prompt_without_text_attachments_is_unchanged():
    prompt = "hello"
    assert prompt_with_text_attachments(prompt, [Attachment(mime_type="image/png")]) == prompt


def test_prompt_with_text_attachments_wraps_files():
    result = prompt_with_text_attachments(
        "question",
        [
            Attachment(file_path="a.txt", mime_type="text/plain", content=b"alpha"),
            Attachment(mime_type="text/plain", content=b"beta"),
        ],
    )
    assert result.startswith("question\n<system_info>")
    assert result.count("<system_info>") == 1
    assert "<file path='a.txt'>\n\nalpha\n</file>\n" in result
    assert "<file>\n\nbeta\n</file>\n" in result


def test_binary_to_string():
    part = BinaryContent(mime_type="image/png", data=b"\x00\x01binary")
    url = part.to_string("openai")
    prefix = "data:image/png;base64,"
    assert url.startswith(prefix)
    assert base64.b64decode(url[len(prefix):]) == part.data
    assert base64.b64decode(part.to_string("anthropic")) == part.data


def test_content_and_append_content():
    msg = Message(role=MessageRole.ASSISTANT)
    assert msg.content() == TextContent()
    msg.append_content("Hel")
    msg.append_content("lo")
    assert msg.content().text == "Hello"
    assert len(msg.parts) == 1


def test_reasoning_and_thinking_state():
    msg = Message(role=MessageRole.ASSISTANT)
    msg.append_reasoning_content("think")
    msg.append_reasoning_content("ing")
    assert msg.reasoning_content().thinking == "thinking"
    assert msg.reasoning_content().started_at > 0
    assert msg.is_thinking() is True
    msg.append_content("answer")
    assert msg.is_thinking() is False


def test_signatures():
    msg = Message()
    msg.append_reasoning_signature("sig")
    assert msg.reasoning_content().signature == "sig"
    msg.append_reasoning_signature("more")
    assert msg.reasoning_content().signature == "sigmore"
    msg.append_thought_signature("ts", "call-1")
    reasoning = msg.reasoning_content()
    assert reasoning.thought_signature == "ts"
    assert reasoning.tool_id == "call-1"
    assert reasoning.signature == "sigmore"


def test_thought_signature_without_reasoning_appends_part():
    msg = Message()
    msg.append_thought_signature("ts", "call-1")
    assert msg.parts == [ReasoningContent(thought_signature="ts")]


def test_set_reasoning_responses_data():
    msg = Message(parts=[ReasoningContent(thinking="x", signature="s")])
    msg.set_reasoning_responses_data({"id": "r1"})
    reasoning = msg.reasoning_content()
    assert reasoning.responses_data == {"id": "r1"}
    assert reasoning.thinking == "x"
    assert reasoning.signature == ""


def test_finish_thinking_and_duration():
    msg = Message(parts=[ReasoningContent(thinking="x", started_at=100, finished_at=105)])
    msg.finish_thinking()
    assert msg.reasoning_content().finished_at == 105
    assert msg.thinking_duration() == timedelta(seconds=5)

    open_msg = Message(parts=[ReasoningContent(thinking="x", started_at=100)])
    open_msg.finish_thinking()
    assert open_msg.reasoning_content().finished_at > 100
    assert Message().thinking_duration() == timedelta(0)


def test_tool_calls_lifecycle():
    msg = Message(role=MessageRole.ASSISTANT)
    msg.add_tool_call(ToolCall(id="c1", name="ls", input="{"))
    msg.append_tool_call_input("c1", "}")
    assert msg.tool_calls()[0].input == "{}"
    msg.finish_tool_call("c1")
    assert msg.tool_calls()[0].finished is True
    msg.add_tool_call(ToolCall(id="c1", name="cat"))
    assert [c.name for c in msg.tool_calls()] == ["cat"]
    msg.add_tool_call(ToolCall(id="c2", name="rm"))
    assert len(msg.tool_calls()) == 2


def test_set_tool_calls_replaces_existing():
    msg = Message(parts=[TextContent(text="t"), ToolCall(id="a"), ToolCall(id="b")])
    msg.set_tool_calls([ToolCall(id="c")])
    assert [c.id for c in msg.tool_calls()] == ["c"]
    assert msg.content().text == "t"


def test_tool_results():
    msg = Message(role=MessageRole.TOOL)
    msg.add_tool_result(ToolResult(tool_call_id="a"))
    msg.set_tool_results([ToolResult(tool_call_id="b"), ToolResult(tool_call_id="c")])
    assert [r.tool_call_id for r in msg.tool_results()] == ["a", "b", "c"]


def test_add_finish_replaces_previous():
    msg = Message()
    assert msg.finish_part() is None
    assert msg.finish_reason() == ""
    msg.add_finish(FinishReason.TOOL_USE, "", "")
    msg.add_finish(FinishReason.END_TURN, "done", "details")
    finishes = [p for p in msg.parts if isinstance(p, Finish)]
    assert len(finishes) == 1
    assert msg.finish_reason() == FinishReason.END_TURN
    assert msg.finish_part().message == "done"
    assert msg.is_finished() is True


def test_images_and_binaries():
    msg = Message()
    msg.add_image_url("http://example.com/a.png", "high")
    msg.add_binary("image/png", b"data")
    assert msg.image_url_content() == [ImageURLContent(url="http://example.com/a.png", detail="high")]
    assert msg.binary_content() == [BinaryContent(mime_type="image/png", data=b"data")]


def test_clone_is_independent():
    msg = Message(id="m1", parts=[TextContent(text="a")])
    copy = msg.clone()
    copy.append_content("b")
    assert msg.content().text == "a"
    assert copy.content().text == "ab"
    assert copy.id == msg.id


@pytest.mark.parametrize(
    "part",
    [
        ReasoningContent(thinking="t", signature="s", started_at=5),
        TextContent(text="hi", attachments=(MiniFileAttachment(id=1, path="p", name="n", size=2),)),
        ImageURLContent(url="u", detail="d"),
        BinaryContent(path="p", mime_type="image/png", data=b"\xff\x00"),
        ToolCall(id="c", name="n", input="{}", provider_executed=True, finished=True),
        ToolResult(tool_call_id="c", content="out", is_error=True),
        Finish(reason=FinishReason.END_TURN, time=3, message="m"),
    ],
)
def test_part_dict_round_trip(part):
    assert type(part).from_dict(part.to_dict()) == part


def test_omitempty_fields():
    assert "detail" not in ImageURLContent(url="u").to_dict()
    assert "attachments" not in TextContent(text="x").to_dict()
    assert "started_at" not in ReasoningContent().to_dict()
    assert set(BinaryContent().to_dict()) == {"Path", "MIMEType", "Data"}


def test_get_simple_message():
    dm = DataMessage(
        parts=[
            ContentPartData(PartType.REASONING, ReasoningContent(thinking="x")),
            ContentPartData(PartType.TEXT, TextContent(text="first")),
            ContentPartData(PartType.TEXT, TextContent(text="second")),
        ]
    )
    assert dm.get_simple_message() == "first"
    assert DataMessage(parts=[ContentPartData(PartType.TEXT, {"text": "raw"})]).get_simple_message() == "raw"
    assert DataMessage().get_simple_message() == ""


def test_content_part_data_to_dict():
    data = ContentPartData(PartType.TEXT, TextContent(text="hi")).to_dict()
    assert data == {"type": "text", "data": {"text": "hi"}}