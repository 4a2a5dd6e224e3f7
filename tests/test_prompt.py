"""Tests for relaybot/conversation/prompt.py"""

from relaybot.conversation.prompt import assemble
from relaybot.models import TextPart, ToolId, Turn


def user_turn(text):
    return Turn(role="user", parts=[TextPart(text=text)])


def test_assemble_carries_history_and_system_instruction(state):
    state.record_exchange(user_turn("Hello"), "Hi!")
    state.set_system_instruction("Answer in French")
    current = user_turn("How are you?")

    prompt = assemble(state, current)

    assert prompt.system_instruction == "Answer in French"
    assert prompt.history == tuple(state.history)
    assert prompt.current_turn == current
    assert [t.role for t in prompt.contents] == ["user", "model", "user"]


def test_default_tools_send_google_search(state):
    prompt = assemble(state, user_turn("x"))
    assert prompt.tools == frozenset({ToolId.GOOGLE_SEARCH})


def test_url_context_is_never_sent(state):
    state.toggle_tool(ToolId.URL_CONTEXT)
    state.toggle_tool(ToolId.GOOGLE_SEARCH)

    prompt = assemble(state, user_turn("x"))

    assert prompt.tools == frozenset()


def test_prompt_is_a_snapshot(state):
    prompt = assemble(state, user_turn("x"))
    state.record_exchange(user_turn("later"), "reply")
    assert prompt.history == ()
