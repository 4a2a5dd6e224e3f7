"""Tests for relaybot/models.py — conversation state history rules."""

import pytest
from pydantic import ValidationError

from relaybot.models import (
    ConversationState,
    InlineMediaPart,
    Prompt,
    TextPart,
    ToolId,
    Turn,
)


def user_turn(text):
    return Turn(role="user", parts=[TextPart(text=text)])


def roles(state):
    return [t.role for t in state.history]


def test_turn_requires_parts():
    with pytest.raises(ValidationError):
        Turn(role="user", parts=[])


def test_turn_is_immutable():
    turn = user_turn("hi")
    with pytest.raises(ValidationError):
        turn.role = "model"


def test_new_state_defaults(state):
    assert state.history == []
    assert state.system_instruction is None
    assert state.tools == {ToolId.GOOGLE_SEARCH: True, ToolId.URL_CONTEXT: False}
    assert state.thinking_indicator is True
    assert state.total_tokens == 0


def test_record_exchange_appends_user_then_model(state):
    state.record_exchange(user_turn("Hello"), "Hi!")
    assert roles(state) == ["user", "model"]
    assert state.history[1].parts[0].text == "Hi!"


def test_empty_reply_stored_as_placeholder(state):
    state.record_exchange(user_turn("Hello"), "")
    assert roles(state) == ["user", "model"]
    assert state.history[1].parts == (TextPart(text=""),)


def test_failed_attempt_appends_user_only(state):
    state.record_exchange(user_turn("one"), "ok")
    state.record_failed_attempt(user_turn("two"))
    assert roles(state) == ["user", "model", "user"]


def test_dangling_user_turn_is_paired_before_next_exchange(state):
    state.record_failed_attempt(user_turn("lost"))
    state.record_exchange(user_turn("again"), "answer")
    assert roles(state) == ["user", "model", "user", "model"]
    assert state.history[1].parts[0].text == ""


def test_history_never_exceeds_bound():
    state = ConversationState(selected_model="gemini-2.5-pro", max_history=4)
    for i in range(10):
        state.record_exchange(user_turn(f"q{i}"), f"a{i}")
        assert len(state.history) <= 4
    assert [t.parts[0].text for t in state.history] == ["q8", "a8", "q9", "a9"]


def test_bounded_history_keeps_most_recent_twenty(state):
    for i in range(11):
        state.record_exchange(user_turn(f"q{i}"), f"a{i}")
    assert len(state.history) == 20
    assert state.history[0].parts[0].text == "q1"
    assert state.history[0].role == "user"


def test_eviction_with_failures_keeps_alternation():
    state = ConversationState(selected_model="gemini-2.5-pro", max_history=4)
    state.record_exchange(user_turn("a"), "b")
    state.record_failed_attempt(user_turn("c"))
    state.record_failed_attempt(user_turn("d"))
    state.record_exchange(user_turn("e"), "f")
    assert len(state.history) <= 4
    assert state.history[0].role == "user"
    for prev, nxt in zip(state.history, state.history[1:]):
        assert prev.role != nxt.role


def test_reset_clears_history_and_system_instruction(state):
    state.set_system_instruction("Be brief")
    state.record_exchange(user_turn("x"), "y")
    state.total_tokens = 50
    state.reset()
    assert state.history == []
    assert state.system_instruction is None
    assert state.total_tokens == 50


def test_empty_system_instruction_clears(state):
    state.set_system_instruction("Be brief")
    state.set_system_instruction("")
    assert state.system_instruction is None


def test_toggle_tool(state):
    assert state.toggle_tool(ToolId.GOOGLE_SEARCH) is False
    assert ToolId.GOOGLE_SEARCH not in state.enabled_tools
    assert state.toggle_tool(ToolId.URL_CONTEXT) is True
    assert state.enabled_tools == frozenset({ToolId.URL_CONTEXT})


def test_toggle_thinking_indicator(state):
    assert state.toggle_thinking_indicator() is False
    assert state.toggle_thinking_indicator() is True


def test_add_tokens_ignores_negative(state):
    state.add_tokens(100)
    state.add_tokens(-5)
    assert state.total_tokens == 100


def test_prompt_contents_end_with_current_turn():
    history = (user_turn("a"), Turn(role="model", parts=[TextPart(text="b")]))
    current = Turn(role="user", parts=[
        TextPart(text="what is this?"),
        InlineMediaPart(mime_type="image/png", data=b"\x89PNG"),
    ])
    prompt = Prompt(history=history, current_turn=current)
    assert prompt.contents == [*history, current]


def test_close_dangling_user_turn_pairs_trailing_user(state):
    state.record_failed_attempt(user_turn("lost"))
    state.close_dangling_user_turn()
    assert roles(state) == ["user", "model"]
    state.close_dangling_user_turn()
    assert roles(state) == ["user", "model"]
