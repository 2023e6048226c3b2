"""JSON storage format for message content parts."""

from __future__ import annotations

import json
from typing import Any, Iterable

from agentkit.message import (
    BinaryContent,
    ContentPart,
    ContentPartData,
    Finish,
    ImageURLContent,
    PartType,
    ReasoningContent,
    TextContent,
    ToolCall,
    ToolResult,
)

_PART_CLASSES: dict[PartType, type] = {
    PartType.REASONING: ReasoningContent,
    PartType.TEXT: TextContent,
    PartType.IMAGE_URL: ImageURLContent,
    PartType.BINARY: BinaryContent,
    PartType.TOOL_CALL: ToolCall,
    PartType.TOOL_RESULT: ToolResult,
    PartType.FINISH: Finish,
}

_TYPE_BY_CLASS = {cls: tag for tag, cls in _PART_CLASSES.items()}


def marshal_parts(parts: Iterable[ContentPart]) -> str:
    """Encode parts as a JSON array of {"type", "data"} wrappers.

    Raises TypeError for objects that are not content parts.
    """
    wrapped = []
    for part in parts:
        tag = _TYPE_BY_CLASS.get(type(part))
        if tag is None:
            raise TypeError(f"unknown part type: {type(part).__name__}")
        wrapped.append({"type": str(tag), "data": part.to_dict()})
    return json.dumps(wrapped, separators=(",", ":"), ensure_ascii=False)


def _decode_wrappers(data: str | bytes) -> Iterable[tuple[PartType, Any]]:
    items = json.loads(data)
    if items is None:
        return
    if not isinstance(items, list):
        raise ValueError("parts must be a JSON array")
    for item in items:
        if not isinstance(item, dict):
            raise ValueError("part must be a JSON object")
        raw_type = item.get("type") or ""
        try:
            tag = PartType(raw_type)
        except ValueError:
            raise ValueError(f"unknown part type: {raw_type}") from None
        if "data" not in item:
            raise ValueError(f"part of type {raw_type} has no data")
        payload = item["data"]
        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            raise ValueError(f"data of {raw_type} part must be a JSON object")
        yield tag, _PART_CLASSES[tag].from_dict(payload)


def unmarshal_parts(data: str | bytes) -> list[ContentPart]:
    """Decode the JSON produced by marshal_parts back into parts.

    Raises ValueError on malformed JSON or an unknown part type.
    """
    return [part for _, part in _decode_wrappers(data)]


def unmarshal_part_data(data: str | bytes) -> list[ContentPartData]:
    """Decode stored parts, keeping each part's type tag."""
    return [ContentPartData(type=tag, data=part) for tag, part in _decode_wrappers(data)]