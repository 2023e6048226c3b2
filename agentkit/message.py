"""Chat message model: roles, content parts and attachment helpers."""

from __future__ import annotations

import base64
import binascii
import logging
import time
from dataclasses import dataclass, field
from datetime import timedelta
from enum import StrEnum
from typing import Any, Iterable, TypeVar, Union

log = logging.getLogger(__name__)

INFERENCE_PROVIDER_OPENAI = "openai"


class MessageRole(StrEnum):
    """Who authored a message."""

    ASSISTANT = "assistant"
    USER = "user"
    SYSTEM = "system"
    TOOL = "tool"


class FinishReason(StrEnum):
    """Why a message stopped."""

    END_TURN = "end_turn"
    MAX_TOKENS = "max_tokens"
    TOOL_USE = "tool_use"
    CANCELED = "canceled"
    ERROR = "error"
    PERMISSION_DENIED = "permission_denied"
    UNKNOWN = "unknown"


class PartType(StrEnum):
    """Tag identifying the kind of a stored content part."""

    REASONING = "reasoning"
    TEXT = "text"
    IMAGE_URL = "image_url"
    BINARY = "binary"
    TOOL_CALL = "tool_call"
    TOOL_RESULT = "tool_result"
    FINISH = "finish"


def _now() -> int:
    return int(time.time())


@dataclass
class Attachment:
    """A file attached by the user."""

    file_path: str = ""
    file_name: str = ""
    mime_type: str = ""
    content: bytes = b""

    def is_text(self) -> bool:
        return self.mime_type.startswith("text/")

    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")


def contains_text_attachment(attachments: Iterable[Attachment]) -> bool:
    """True if any attachment carries text."""
    return any(a.is_text() for a in attachments)


def prompt_with_text_attachments(prompt: str, attachments: Iterable[Attachment]) -> str:
    """Append the text attachments to a prompt, each wrapped in a <file> block."""
    out = [prompt]
    added = False
    for attachment in attachments:
        if not attachment.is_text():
            continue
        if not added:
            out.append(
                "\n<system_info>The files below have been attached by the user, "
                "consider them in your response</system_info>\n"
            )
            added = True
        if attachment.file_path:
            out.append(f"<file path='{attachment.file_path}'>\n")
        else:
            out.append("<file>\n")
        out.append("\n")
        out.append(attachment.content.decode("utf-8", errors="replace"))
        out.append("\n</file>\n")
    return "".join(out)


@dataclass(frozen=True)
class ReasoningContent:
    """Model reasoning, with provider-specific signatures."""

    thinking: str = ""
    signature: str = ""
    thought_signature: str = ""
    tool_id: str = ""
    responses_data: Any = None
    started_at: int = 0
    finished_at: int = 0

    part_type = PartType.REASONING

    def __str__(self) -> str:
        return self.thinking

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "thinking": self.thinking,
            "signature": self.signature,
            "thought_signature": self.thought_signature,
            "tool_id": self.tool_id,
            "responses_data": self.responses_data,
        }
        if self.started_at:
            data["started_at"] = self.started_at
        if self.finished_at:
            data["finished_at"] = self.finished_at
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReasoningContent":
        return cls(
            thinking=data.get("thinking") or "",
            signature=data.get("signature") or "",
            thought_signature=data.get("thought_signature") or "",
            tool_id=data.get("tool_id") or "",
            responses_data=data.get("responses_data"),
            started_at=int(data.get("started_at") or 0),
            finished_at=int(data.get("finished_at") or 0),
        )


@dataclass(frozen=True)
class MiniFileAttachment:
    """Reference to an uploaded file attached to text content."""

    id: int = 0
    path: str = ""
    name: str = ""
    size: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "path": self.path, "name": self.name, "size": self.size}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MiniFileAttachment":
        return cls(
            id=int(data.get("id") or 0),
            path=data.get("path") or "",
            name=data.get("name") or "",
            size=int(data.get("size") or 0),
        )


@dataclass(frozen=True)
class TextContent:
    """Plain text, optionally with file attachments."""

    text: str = ""
    attachments: tuple[MiniFileAttachment, ...] = ()

    part_type = PartType.TEXT

    def __str__(self) -> str:
        return self.text

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"text": self.text}
        if self.attachments:
            data["attachments"] = [a.to_dict() for a in self.attachments]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TextContent":
        return cls(
            text=data.get("text") or "",
            attachments=tuple(
                MiniFileAttachment.from_dict(a) for a in data.get("attachments") or []
            ),
        )


@dataclass(frozen=True)
class ImageURLContent:
    """An image referenced by URL."""

    url: str = ""
    detail: str = ""

    part_type = PartType.IMAGE_URL

    def __str__(self) -> str:
        return self.url

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"url": self.url}
        if self.detail:
            data["detail"] = self.detail
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ImageURLContent":
        return cls(url=data.get("url") or "", detail=data.get("detail") or "")


@dataclass(frozen=True)
class BinaryContent:
    """Inline binary data such as an image or a file."""

    path: str = ""
    mime_type: str = ""
    data: bytes = b""

    part_type = PartType.BINARY

    def to_string(self, provider: str) -> str:
        """Base64 form of the data; a data URL for the OpenAI provider."""
        encoded = base64.b64encode(self.data).decode("ascii")
        if provider == INFERENCE_PROVIDER_OPENAI:
            return f"data:{self.mime_type};base64,{encoded}"
        return encoded

    def to_dict(self) -> dict[str, Any]:
        return {
            "Path": self.path,
            "MIMEType": self.mime_type,
            "Data": base64.b64encode(self.data).decode("ascii"),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BinaryContent":
        raw = data.get("Data") or ""
        try:
            decoded = base64.b64decode(raw, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError(f"invalid base64 data: {exc}") from exc
        return cls(path=data.get("Path") or "", mime_type=data.get("MIMEType") or "", data=decoded)


@dataclass(frozen=True)
class ToolCall:
    """A tool invocation requested by the model."""

    id: str = ""
    name: str = ""
    input: str = ""
    provider_executed: bool = False
    finished: bool = False

    part_type = PartType.TOOL_CALL

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "input": self.input,
            "provider_executed": self.provider_executed,
            "finished": self.finished,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ToolCall":
        return cls(
            id=data.get("id") or "",
            name=data.get("name") or "",
            input=data.get("input") or "",
            provider_executed=bool(data.get("provider_executed")),
            finished=bool(data.get("finished")),
        )


@dataclass(frozen=True)
class ToolResult:
    """The outcome of a tool call."""

    tool_call_id: str = ""
    name: str = ""
    content: str = ""
    data: str = ""
    mime_type: str = ""
    metadata: str = ""
    is_error: bool = False

    part_type = PartType.TOOL_RESULT

    def to_dict(self) -> dict[str, Any]:
        return {
            "tool_call_id": self.tool_call_id,
            "name": self.name,
            "content": self.content,
            "data": self.data,
            "mime_type": self.mime_type,
            "metadata": self.metadata,
            "is_error": self.is_error,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ToolResult":
        return cls(
            tool_call_id=data.get("tool_call_id") or "",
            name=data.get("name") or "",
            content=data.get("content") or "",
            data=data.get("data") or "",
            mime_type=data.get("mime_type") or "",
            metadata=data.get("metadata") or "",
            is_error=bool(data.get("is_error")),
        )


@dataclass(frozen=True)
class Finish:
    """Marks the end of a message and why it ended."""

    reason: str = ""
    time: int = 0
    message: str = ""
    details: str = ""

    part_type = PartType.FINISH

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"reason": str(self.reason), "time": self.time}
        if self.message:
            data["message"] = self.message
        if self.details:
            data["details"] = self.details
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Finish":
        reason = data.get("reason") or ""
        try:
            reason = FinishReason(reason)
        except ValueError:
            pass
        return cls(
            reason=reason,
            time=int(data.get("time") or 0),
            message=data.get("message") or "",
            details=data.get("details") or "",
        )


ContentPart = Union[
    ReasoningContent, TextContent, ImageURLContent, BinaryContent, ToolCall, ToolResult, Finish
]

_P = TypeVar("_P")


@dataclass
class ContentPartData:
    """A content part together with its type tag."""

    type: PartType
    data: Any

    def to_dict(self) -> dict[str, Any]:
        payload = self.data.to_dict() if hasattr(self.data, "to_dict") else self.data
        return {"type": str(self.type), "data": payload}


@dataclass
class Message:
    """A chat message made of ordered content parts."""

    id: str = ""
    role: MessageRole = MessageRole.USER
    session_id: str = ""
    parts: list[ContentPart] = field(default_factory=list)
    model: str = ""
    provider: str = ""
    created_at: int = 0
    updated_at: int = 0
    is_summary_message: bool = False

    def _first(self, kind: type[_P]) -> _P | None:
        return next((p for p in self.parts if isinstance(p, kind)), None)

    def _all(self, kind: type[_P]) -> list[_P]:
        return [p for p in self.parts if isinstance(p, kind)]

    def content(self) -> TextContent:
        return self._first(TextContent) or TextContent()

    def reasoning_content(self) -> ReasoningContent:
        return self._first(ReasoningContent) or ReasoningContent()

    def image_url_content(self) -> list[ImageURLContent]:
        return self._all(ImageURLContent)

    def binary_content(self) -> list[BinaryContent]:
        return self._all(BinaryContent)

    def tool_calls(self) -> list[ToolCall]:
        return self._all(ToolCall)

    def tool_results(self) -> list[ToolResult]:
        return self._all(ToolResult)

    def is_finished(self) -> bool:
        return self._first(Finish) is not None

    def finish_part(self) -> Finish | None:
        return self._first(Finish)

    def finish_reason(self) -> str:
        finish = self._first(Finish)
        return finish.reason if finish is not None else ""

    def is_thinking(self) -> bool:
        return (
            self.reasoning_content().thinking != ""
            and self.content().text == ""
            and not self.is_finished()
        )

    def append_content(self, delta: str) -> None:
        found = False
        for i, part in enumerate(self.parts):
            if isinstance(part, TextContent):
                self.parts[i] = TextContent(text=part.text + delta)
                found = True
        if not found:
            self.parts.append(TextContent(text=delta))

    def append_reasoning_content(self, delta: str) -> None:
        found = False
        for i, part in enumerate(self.parts):
            if isinstance(part, ReasoningContent):
                self.parts[i] = ReasoningContent(
                    thinking=part.thinking + delta,
                    signature=part.signature,
                    started_at=part.started_at,
                    finished_at=part.finished_at,
                )
                found = True
        if not found:
            self.parts.append(ReasoningContent(thinking=delta, started_at=_now()))

    def append_thought_signature(self, signature: str, tool_call_id: str) -> None:
        for i, part in enumerate(self.parts):
            if isinstance(part, ReasoningContent):
                self.parts[i] = ReasoningContent(
                    thinking=part.thinking,
                    thought_signature=part.thought_signature + signature,
                    tool_id=tool_call_id,
                    signature=part.signature,
                    started_at=part.started_at,
                    finished_at=part.finished_at,
                )
                return
        self.parts.append(ReasoningContent(thought_signature=signature))

    def append_reasoning_signature(self, signature: str) -> None:
        for i, part in enumerate(self.parts):
            if isinstance(part, ReasoningContent):
                self.parts[i] = ReasoningContent(
                    thinking=part.thinking,
                    signature=part.signature + signature,
                    started_at=part.started_at,
                    finished_at=part.finished_at,
                )
                return
        self.parts.append(ReasoningContent(signature=signature))

    def set_reasoning_responses_data(self, data: Any) -> None:
        for i, part in enumerate(self.parts):
            if isinstance(part, ReasoningContent):
                self.parts[i] = ReasoningContent(
                    thinking=part.thinking,
                    responses_data=data,
                    started_at=part.started_at,
                    finished_at=part.finished_at,
                )
                return

    def finish_thinking(self) -> None:
        for i, part in enumerate(self.parts):
            if isinstance(part, ReasoningContent):
                if part.finished_at == 0:
                    self.parts[i] = ReasoningContent(
                        thinking=part.thinking,
                        signature=part.signature,
                        started_at=part.started_at,
                        finished_at=_now(),
                    )
                return

    def thinking_duration(self) -> timedelta:
        reasoning = self.reasoning_content()
        if reasoning.started_at == 0:
            return timedelta(0)
        end = reasoning.finished_at or _now()
        return timedelta(seconds=end - reasoning.started_at)

    def finish_tool_call(self, tool_call_id: str) -> None:
        for i, part in enumerate(self.parts):
            if isinstance(part, ToolCall) and part.id == tool_call_id:
                self.parts[i] = ToolCall(
                    id=part.id, name=part.name, input=part.input, finished=True
                )
                return

    def append_tool_call_input(self, tool_call_id: str, input_delta: str) -> None:
        for i, part in enumerate(self.parts):
            if isinstance(part, ToolCall) and part.id == tool_call_id:
                self.parts[i] = ToolCall(
                    id=part.id,
                    name=part.name,
                    input=part.input + input_delta,
                    finished=part.finished,
                )
                return

    def add_tool_call(self, tool_call: ToolCall) -> None:
        for i, part in enumerate(self.parts):
            if isinstance(part, ToolCall) and part.id == tool_call.id:
                self.parts[i] = tool_call
                return
        self.parts.append(tool_call)

    def set_tool_calls(self, tool_calls: Iterable[ToolCall]) -> None:
        self.parts = [p for p in self.parts if not isinstance(p, ToolCall)]
        self.parts.extend(tool_calls)

    def add_tool_result(self, result: ToolResult) -> None:
        self.parts.append(result)

    def set_tool_results(self, results: Iterable[ToolResult]) -> None:
        self.parts.extend(results)

    def clone(self) -> "Message":
        """Copy of the message with its own parts list."""
        return Message(
            id=self.id,
            role=self.role,
            session_id=self.session_id,
            parts=list(self.parts),
            model=self.model,
            provider=self.provider,
            created_at=self.created_at,
            updated_at=self.updated_at,
            is_summary_message=self.is_summary_message,
        )

    def add_finish(self, reason: str, message: str = "", details: str = "") -> None:
        for i, part in enumerate(self.parts):
            if isinstance(part, Finish):
                del self.parts[i]
                break
        self.parts.append(Finish(reason=reason, time=_now(), message=message, details=details))

    def add_image_url(self, url: str, detail: str = "") -> None:
        self.parts.append(ImageURLContent(url=url, detail=detail))

    def add_binary(self, mime_type: str, data: bytes) -> None:
        self.parts.append(BinaryContent(mime_type=mime_type, data=data))


@dataclass
class DataMessage:
    """A message whose parts keep their type tags, for transport."""

    id: str = ""
    role: MessageRole = MessageRole.USER
    session_id: str = ""
    parts: list[ContentPartData] = field(default_factory=list)
    files: list[Any] = field(default_factory=list)
    model: str = ""
    provider: str = ""
    created_at: int = 0
    updated_at: int = 0
    is_summary_message: bool = False

    def get_simple_message(self) -> str:
        """Text of the first text part, or "" if there is none."""
        for part in self.parts:
            if part.type != PartType.TEXT:
                continue
            data = part.data
            if isinstance(data, TextContent):
                return data.text
            if isinstance(data, dict):
                text = data.get("text", "")
                if isinstance(text, str):
                    return text
            log.error("failed to convert message part: %r", data)
            return ""
        return ""