"""Conversation sessions, their todo lists and agent tool session ids."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Iterable

_AGENT_TOOL_SEPARATOR = "$$"


class TodoStatus(StrEnum):
    """Progress of a todo item."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass
class Todo:
    """One item of a session's todo list."""

    content: str = ""
    status: TodoStatus | str = TodoStatus.PENDING
    active_form: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": self.content,
            "status": str(self.status),
            "active_form": self.active_form,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Todo":
        raw_status = data.get("status") or ""
        try:
            status: TodoStatus | str = TodoStatus(raw_status)
        except ValueError:
            status = raw_status
        return cls(
            content=data.get("content") or "",
            status=status,
            active_form=data.get("active_form") or "",
        )


@dataclass
class Session:
    """A conversation with its token usage, cost and todo list."""

    id: str = ""
    parent_session_id: str = ""
    title: str = ""
    message_count: int = 0
    prompt_tokens: int = 0
    completion_tokens: int = 0
    summary_message_id: str = ""
    cost: float = 0.0
    todos: list[Todo] = field(default_factory=list)
    created_at: int = 0
    updated_at: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "parent_session_id": self.parent_session_id,
            "title": self.title,
            "message_count": self.message_count,
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "summary_message_id": self.summary_message_id,
            "cost": self.cost,
            "todos": [todo.to_dict() for todo in self.todos],
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Session":
        return cls(
            id=data.get("id") or "",
            parent_session_id=data.get("parent_session_id") or "",
            title=data.get("title") or "",
            message_count=int(data.get("message_count") or 0),
            prompt_tokens=int(data.get("prompt_tokens") or 0),
            completion_tokens=int(data.get("completion_tokens") or 0),
            summary_message_id=data.get("summary_message_id") or "",
            cost=float(data.get("cost") or 0.0),
            todos=[Todo.from_dict(item) for item in data.get("todos") or []],
            created_at=int(data.get("created_at") or 0),
            updated_at=int(data.get("updated_at") or 0),
        )


def marshal_todos(todos: Iterable[Todo] | None) -> str:
    """Encode todos as JSON; an empty list is stored as the empty string."""
    items = [todo.to_dict() for todo in todos or []]
    if not items:
        return ""
    return json.dumps(items, separators=(",", ":"), ensure_ascii=False)


def unmarshal_todos(data: str) -> list[Todo]:
    """Decode todos stored by marshal_todos; raises ValueError on bad JSON."""
    if not data:
        return []
    items = json.loads(data)
    if items is None:
        return []
    if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
        raise ValueError("todos must be a JSON array of objects")
    return [Todo.from_dict(item) for item in items]


def create_agent_tool_session_id(message_id: str, tool_call_id: str) -> str:
    """Session id of an agent tool run: ``messageID$$toolCallID``."""
    return f"{message_id}{_AGENT_TOOL_SEPARATOR}{tool_call_id}"


def parse_agent_tool_session_id(session_id: str) -> tuple[str, str] | None:
    """Split an agent tool session id into (message_id, tool_call_id), or None."""
    parts = session_id.split(_AGENT_TOOL_SEPARATOR)
    if len(parts) != 2:
        return None
    return parts[0], parts[1]


def is_agent_tool_session(session_id: str) -> bool:
    """True if the id has the agent tool session form."""
    return parse_agent_tool_session_id(session_id) is not None