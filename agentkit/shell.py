"""Run shell commands with a persistent working directory and environment.

Each command runs in a fresh POSIX shell process. After it finishes, the
shell's final working directory and exported variables are carried over
to the next command, so ``cd`` and ``export`` behave as in an interactive
session. Commands can be refused before they start by block functions.
"""

from __future__ import annotations

import codecs
import logging
import os
import re
import shlex
import shutil
import signal
import subprocess
import tempfile
import threading
import time
from contextlib import suppress
from dataclasses import dataclass
from typing import IO, Callable, Iterable, Protocol, Sequence

log = logging.getLogger(__name__)

BlockFunc = Callable[[Sequence[str]], bool]

_STATE_VAR = "AGENTKIT_SHELL_STATE"
_TRAILER = (
    "__agentkit_status=$?\n"
    '{ pwd; env; } > "$' + _STATE_VAR + '" 2>/dev/null\n'
    'exit "$__agentkit_status"\n'
)
_POLL_INTERVAL = 0.05

_SEPARATOR_CHARS = "();<>|&\n"
_KEYWORDS = frozenset(
    {"if", "then", "else", "elif", "fi", "do", "done", "while", "until",
     "for", "case", "esac", "{", "}", "!", "time"}
)
_ASSIGNMENT = re.compile(r"[A-Za-z_][A-Za-z0-9_]*=")
_ENV_ENTRY = re.compile(r"[A-Za-z_][A-Za-z0-9_]*=")


class CommandBlocked(Exception):
    """Raised when a block function refuses a command."""

    def __init__(self, command: str) -> None:
        self.command = command
        super().__init__(f'command is not allowed for security reasons: "{command}"')


class _TextSink(Protocol):
    def write(self, text: str, /) -> object: ...


def exit_code(error: BaseException | None) -> int:
    """Exit code for the outcome of a command: 0 on success, 1 for non-exit errors."""
    if error is None:
        return 0
    if isinstance(error, subprocess.CalledProcessError):
        return error.returncode
    return 1


def is_interrupt(error: BaseException | None) -> bool:
    """True if the error means the command was cancelled or timed out."""
    return isinstance(
        error, (InterruptedError, TimeoutError, subprocess.TimeoutExpired, KeyboardInterrupt)
    )


@dataclass(frozen=True)
class ShellResult:
    """Captured output of a command and the error it ended with, if any."""

    stdout: str
    stderr: str
    error: BaseException | None = None

    @property
    def exit_code(self) -> int:
        return exit_code(self.error)

    @property
    def interrupted(self) -> bool:
        return is_interrupt(self.error)


def commands_blocker(commands: Iterable[str]) -> BlockFunc:
    """Block commands whose name is one of the given names."""
    banned = frozenset(commands)

    def block(args: Sequence[str]) -> bool:
        return bool(args) and args[0] in banned

    return block


def split_args_flags(parts: Iterable[str]) -> tuple[list[str], list[str]]:
    """Split arguments from flags; a flag's ``=value`` part is dropped."""
    args: list[str] = []
    flags: list[str] = []
    for part in parts:
        if part.startswith("-"):
            flags.append(part.partition("=")[0])
        else:
            args.append(part)
    return args, flags


def arguments_blocker(command: str, args: Sequence[str], flags: Sequence[str]) -> BlockFunc:
    """Block ``command`` when its leading arguments and its flags include the given ones."""
    wanted_args = list(args)
    wanted_flags = list(flags)

    def block(parts: Sequence[str]) -> bool:
        if not parts or parts[0] != command:
            return False
        arg_parts, flag_parts = split_args_flags(parts[1:])
        if len(arg_parts) < len(wanted_args) or len(flag_parts) < len(wanted_flags):
            return False
        return arg_parts[: len(wanted_args)] == wanted_args and all(
            flag in flag_parts for flag in wanted_flags
        )

    return block


def _simple_commands(command: str) -> list[list[str]]:
    """Split a command line into the argument lists of its simple commands."""
    lexer = shlex.shlex(command, posix=True, punctuation_chars=_SEPARATOR_CHARS)
    lexer.whitespace = " \t\r"
    lexer.whitespace_split = True
    lexer.commenters = ""
    try:
        tokens = list(lexer)
    except ValueError as exc:
        raise ValueError(f"could not parse command: {exc}") from exc

    segments: list[list[str]] = []
    current: list[str] = []
    skip_next = False
    in_comment = False

    def flush() -> None:
        nonlocal current
        if current:
            segments.append(current)
        current = []

    for token in tokens:
        is_punct = bool(token) and all(c in _SEPARATOR_CHARS for c in token)
        if in_comment:
            if is_punct and "\n" in token:
                in_comment = False
                flush()
            continue
        if skip_next:
            skip_next = False
            if not is_punct:
                continue
        if is_punct:
            if "<" in token or ">" in token:
                if current and current[-1].isdigit():
                    current.pop()
                skip_next = True
            else:
                flush()
            continue
        if token.startswith("#"):
            in_comment = True
            continue
        if not current and (token in _KEYWORDS or _ASSIGNMENT.match(token)):
            continue
        current.append(token)
    flush()
    return segments


def _env_dict(env: Iterable[str]) -> dict[str, str]:
    result: dict[str, str] = {}
    for entry in env:
        key, sep, value = entry.partition("=")
        if sep and key:
            result[key] = value
    return result


def _parse_env(text: str) -> list[str]:
    text = text.removesuffix("\n")
    if not text:
        return []
    entries: list[str] = []
    for line in text.split("\n"):
        if _ENV_ENTRY.match(line) or not entries:
            entries.append(line)
        else:
            entries[-1] += "\n" + line
    return entries


def _shell_path() -> str:
    if os.path.exists("/bin/sh"):
        return "/bin/sh"
    return shutil.which("sh") or "sh"


def _pump(pipe: IO[bytes], write: Callable[[str], object]) -> None:
    decoder = codecs.getincrementaldecoder("utf-8")("replace")
    try:
        while chunk := pipe.read1(65536):  # type: ignore[attr-defined]
            text = decoder.decode(chunk)
            if text:
                write(text)
        tail = decoder.decode(b"", final=True)
        if tail:
            write(tail)
    finally:
        pipe.close()


def _terminate(proc: subprocess.Popen[bytes]) -> None:
    if os.name == "posix":
        try:
            os.killpg(proc.pid, signal.SIGKILL)
            return
        except (ProcessLookupError, PermissionError):
            pass
    with suppress(OSError):
        proc.kill()


class Shell:
    """A shell whose working directory and environment persist between commands."""

    def __init__(
        self,
        working_dir: str | os.PathLike[str] | None = None,
        env: Iterable[str] | None = None,
        block_funcs: Iterable[BlockFunc] | None = None,
    ) -> None:
        self._cwd = os.fspath(working_dir) if working_dir else os.getcwd()
        if env is None:
            self._env = [f"{k}={v}" for k, v in os.environ.items()]
        else:
            self._env = list(env)
        self._block_funcs: list[BlockFunc] = list(block_funcs or [])
        self._lock = threading.Lock()

    def exec(self, command: str, timeout: float | None = None) -> ShellResult:
        """Run a command and capture its output.

        A non-zero exit status or a timeout is reported in the result's
        ``error``. Raises CommandBlocked or ValueError before running.
        """
        out: list[str] = []
        err: list[str] = []
        with self._lock:
            error = self._run(command, out.append, err.append, None, timeout)
        return ShellResult("".join(out), "".join(err), error)

    def exec_stream(
        self,
        command: str,
        stdout: _TextSink,
        stderr: _TextSink,
        cancel: threading.Event | None = None,
    ) -> None:
        """Run a command, writing its output to the given streams as it arrives.

        Raises CalledProcessError on a non-zero exit status, InterruptedError
        when ``cancel`` is set, and CommandBlocked or ValueError before running.
        """
        with self._lock:
            error = self._run(command, stdout.write, stderr.write, cancel, None)
        if error is not None:
            raise error

    def working_dir(self) -> str:
        with self._lock:
            return self._cwd

    def set_working_dir(self, directory: str | os.PathLike[str]) -> None:
        """Change the working directory; raises FileNotFoundError if it is missing."""
        path = os.fspath(directory)
        with self._lock:
            try:
                os.stat(path)
            except OSError as exc:
                raise FileNotFoundError(f"directory does not exist: {exc}") from exc
            self._cwd = path

    def get_env(self) -> list[str]:
        """A copy of the environment as ``KEY=value`` entries."""
        with self._lock:
            return list(self._env)

    def set_env(self, key: str, value: str) -> None:
        prefix = key + "="
        with self._lock:
            for i, entry in enumerate(self._env):
                if entry.startswith(prefix):
                    self._env[i] = prefix + value
                    return
            self._env.append(prefix + value)

    def set_block_funcs(self, block_funcs: Iterable[BlockFunc]) -> None:
        with self._lock:
            self._block_funcs = list(block_funcs)

    def _check_blocked(self, command: str) -> None:
        segments = _simple_commands(command)
        for args in segments:
            for block in self._block_funcs:
                if block(args):
                    raise CommandBlocked(args[0])

    def _run(
        self,
        command: str,
        write_out: Callable[[str], object],
        write_err: Callable[[str], object],
        cancel: threading.Event | None,
        timeout: float | None,
    ) -> BaseException | None:
        self._check_blocked(command)
        if cancel is not None and cancel.is_set():
            return InterruptedError("command cancelled")

        fd, state_path = tempfile.mkstemp(prefix="agentkit-shell-")
        os.close(fd)
        interruption: BaseException | None = None
        try:
            env = _env_dict(self._env)
            env[_STATE_VAR] = state_path
            proc = subprocess.Popen(
                [_shell_path(), "-c", f"{command}\n{_TRAILER}"],
                cwd=self._cwd,
                env=env,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                start_new_session=os.name == "posix",
            )
            pumps = [
                threading.Thread(target=_pump, args=(proc.stdout, write_out), daemon=True),
                threading.Thread(target=_pump, args=(proc.stderr, write_err), daemon=True),
            ]
            for pump in pumps:
                pump.start()

            deadline = None if timeout is None else time.monotonic() + timeout
            while True:
                try:
                    proc.wait(timeout=_POLL_INTERVAL)
                    break
                except subprocess.TimeoutExpired:
                    pass
                if cancel is not None and cancel.is_set():
                    interruption = InterruptedError("command cancelled")
                    break
                if deadline is not None and time.monotonic() >= deadline:
                    interruption = TimeoutError(f"command timed out after {timeout} seconds")
                    break
            if interruption is not None:
                _terminate(proc)
                proc.wait()
            for pump in pumps:
                pump.join()
            self._update_state(state_path)
        finally:
            with suppress(OSError):
                os.unlink(state_path)

        if interruption is not None:
            error: BaseException | None = interruption
        elif proc.returncode != 0:
            error = subprocess.CalledProcessError(proc.returncode, command)
        else:
            error = None
        log.info("command finished: %s (error: %s)", command, error)
        return error

    def _update_state(self, state_path: str) -> None:
        try:
            with open(state_path, encoding="utf-8", errors="replace") as handle:
                content = handle.read()
        except OSError:
            return
        if not content:
            return
        cwd, _, env_text = content.partition("\n")
        if cwd:
            self._cwd = cwd
        if env_text:
            self._env = [
                entry for entry in _parse_env(env_text)
                if not entry.startswith(_STATE_VAR + "=")
            ]