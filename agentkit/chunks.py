"""Streamed message chunks sent to clients while an agent runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from agentkit.message import MessageRole, ToolCall, ToolResult


class MessageType(StrEnum):
    """Kind of a streamed chunk."""

    REQUEST_ID = "request_id"
    TIPS = "tips"
    REASONING = "reasoning"
    TOOL_CALL = "tool_call"
    TOOL_RESULT = "tool_result"
    TEXT = "text"
    ERROR = "error"
    SESSION_ID = "session_id"


@dataclass
class MessageChunkData:
    """Payload of a chunk; only the fields that are set are emitted."""

    session_id: str = ""
    tool_call: ToolCall | None = None
    tool_result: ToolResult | None = None
    thinking: str = ""
    text: str = ""
    tips: str = ""
    error: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.session_id:
            data["session_id"] = self.session_id
        if self.tool_call is not None:
            data["tool_call"] = self.tool_call.to_dict()
        if self.tool_result is not None:
            data["tool_result"] = self.tool_result.to_dict()
        if self.thinking:
            data["thinking"] = self.thinking
        if self.text:
            data["text"] = self.text
        if self.tips:
            data["tips"] = self.tips
        if self.error:
            data["error"] = self.error
        return data


@dataclass
class MessageChunk:
    """One piece of streamed output."""

    type: MessageType
    data: MessageChunkData = field(default_factory=MessageChunkData)
    role: MessageRole | str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"role": str(self.role), "type": str(self.type), "data": self.data.to_dict()}


def session_id_chunk(session_id: str) -> MessageChunk:
    return MessageChunk(type=MessageType.SESSION_ID, data=MessageChunkData(session_id=session_id))


def request_id_chunk(request_id: str) -> MessageChunk:
    return MessageChunk(type=MessageType.REQUEST_ID, data=MessageChunkData(text=request_id))


def error_chunk(error: str) -> MessageChunk:
    return MessageChunk(type=MessageType.ERROR, data=MessageChunkData(error=error))


def tip_chunk(tips: str) -> MessageChunk:
    return MessageChunk(type=MessageType.TIPS, data=MessageChunkData(tips=tips))