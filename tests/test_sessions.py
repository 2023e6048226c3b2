import json

import pytest

from agentkit.sessions import (
    Session,
    Todo,
    TodoStatus,
    create_agent_tool_session_id,
    is_agent_tool_session,
    marshal_todos,
    parse_agent_tool_session_id,
    unmarshal_todos,
)


def test_marshal_empty_todos_is_empty_string():
    assert marshal_todos([]) == ""
    assert marshal_todos(None) == ""


def test_unmarshal_empty_string_is_empty_list():
    assert unmarshal_todos("") == []


def test_todos_round_trip():
    todos = [
        Todo(content="write code", status=TodoStatus.IN_PROGRESS, active_form="writing code"),
        Todo(content="test", status=TodoStatus.PENDING, active_form="testing"),
    ]
    assert unmarshal_todos(marshal_todos(todos)) == todos


def test_marshal_uses_json_field_names():
    encoded = json.loads(marshal_todos([Todo(content="x", status=TodoStatus.COMPLETED)]))
    assert set(encoded[0]) == {"content", "status", "active_form"}
    assert encoded[0]["status"] == "completed"


def test_unmarshal_invalid_json_raises():
    with pytest.raises(ValueError):
        unmarshal_todos("{not json")


def test_unmarshal_non_list_raises():
    with pytest.raises(ValueError):
        unmarshal_todos('{"content": "x"}')


def test_session_round_trip():
    session = Session(
        id="s1",
        parent_session_id="p1",
        title="hello",
        message_count=3,
        prompt_tokens=10,
        completion_tokens=20,
        summary_message_id="m1",
        cost=0.5,
        todos=[Todo(content="a", status=TodoStatus.PENDING)],
        created_at=100,
        updated_at=200,
    )
    assert Session.from_dict(session.to_dict()) == session


def test_create_agent_tool_session_id():
    assert create_agent_tool_session_id("msg", "call") == "msg$$call"


def test_parse_agent_tool_session_id_round_trip():
    session_id = create_agent_tool_session_id("message-1", "tool-1")
    assert parse_agent_tool_session_id(session_id) == ("message-1", "tool-1")


@pytest.mark.parametrize("session_id", ["plain", "a$$b$$c", ""])
def test_parse_rejects_other_forms(session_id):
    assert parse_agent_tool_session_id(session_id) is None
    assert is_agent_tool_session(session_id) is False


def test_is_agent_tool_session():
    assert is_agent_tool_session("x$$y") is True