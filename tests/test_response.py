import pytest
from google.genai import types

from storefront_chat_bridge.llm_core import TextBlock, ToolUseBlock
from storefront_chat_bridge.llm_impl.gemini.response import build_assistant_message, map_finish_reason


@pytest.mark.parametrize(
    "reason, expected",
    [
        ("STOP", "end_turn"),
        ("TOOL_USE", "tool_use"),
        ("MAX_TOKENS", "max_tokens"),
        (types.FinishReason.STOP, "end_turn"),
        (types.FinishReason.MAX_TOKENS, "max_tokens"),
        (types.FinishReason.SAFETY, "end_turn"),
        (types.FinishReason.MALFORMED_FUNCTION_CALL, "end_turn"),
        ("SOMETHING_NEW", "end_turn"),
        (None, "end_turn"),
    ],
)
def test_map_finish_reason(reason, expected):
    assert map_finish_reason(reason) == expected


def test_text_message():
    message = build_assistant_message("Hello!", [], "STOP", model="gemini-test")

    assert message.role == "assistant"
    assert message.content == [TextBlock(text="Hello!")]
    assert message.stop_reason == "end_turn"
    assert message.model == "gemini-test"


def test_empty_text_still_yields_one_text_block():
    message = build_assistant_message("", [], None)

    assert message.content == [TextBlock(text="")]


def test_tool_calls_exclude_text():
    calls = [types.FunctionCall(name="get_cart", args={"cart_id": "c1"}), types.FunctionCall(name="checkout")]

    message = build_assistant_message("ignored text", calls, "STOP")

    assert message.content == [
        ToolUseBlock(id="get_cart", name="get_cart", input={"cart_id": "c1"}),
        ToolUseBlock(id="checkout", name="checkout", input={}),
    ]
    assert message.text == ""
