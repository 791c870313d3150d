import json

import pytest
from google.genai import types

from storefront_chat_bridge.llm_core import ConversationTurn, ParseError, ToolResultBlock
from storefront_chat_bridge.llm_impl.gemini.history import contents_to_history, history_to_contents


class TestHistoryToContents:
    """Tests for translating canonical history into Gemini contents."""

    def test_plain_user_text(self):
        contents = history_to_contents([{"role": "user", "content": "hi"}])

        assert contents == [types.Content(role="user", parts=[types.Part(text="hi")])]

    def test_assistant_text_blocks_are_joined_and_non_text_skipped(self):
        history = [
            {
                "role": "assistant",
                "content": [
                    {"type": "text", "text": "a"},
                    {"type": "tool_result", "tool_use_id": "x", "content": "{}"},
                    {"type": "image", "source": {"type": "url", "url": "https://example.com/a.png"}},
                    {"type": "text", "text": "b"},
                ],
            }
        ]

        contents = history_to_contents(history)

        assert len(contents) == 1
        assert contents[0].role == "model"
        assert contents[0].parts == [types.Part(text="a\nb")]

    def test_user_text_blocks_use_same_concatenation(self):
        history = [{"role": "user", "content": [{"type": "text", "text": "first"}, {"type": "text", "text": "second"}]}]

        contents = history_to_contents(history)

        assert contents[0].parts[0].text == "first\nsecond"

    def test_assistant_tool_calls_become_function_calls(self):
        history = [
            {
                "role": "assistant",
                "content": "",
                "tool_calls": [
                    {"id": "search_shop_catalog", "name": "search_shop_catalog", "arguments": {"query": "mugs"}},
                    {"id": "get_cart", "function": {"name": "get_cart", "arguments": {"cart_id": "c-1"}}},
                ],
            }
        ]

        contents = history_to_contents(history)

        assert contents[0].role == "model"
        calls = [part.function_call for part in contents[0].parts]
        assert [c.name for c in calls] == ["search_shop_catalog", "get_cart"]
        assert calls[0].args == {"query": "mugs"}
        assert calls[1].args == {"cart_id": "c-1"}

    def test_tool_arguments_pass_through_untransformed(self):
        arguments = {"filters": {"price": {"max": 20.5}, "tags": ["red", None]}, "limit": 3}
        history = [{"role": "assistant", "tool_calls": [{"id": "s", "name": "s", "arguments": arguments}]}]

        contents = history_to_contents(history)

        assert contents[0].parts[0].function_call.args == arguments

    def test_tool_result_becomes_function_response_named_by_invocation_id(self):
        history = [
            {
                "role": "user",
                "content": [
                    {
                        "type": "tool_result",
                        "tool_use_id": "call_42",
                        "content": [{"type": "text", "text": '{"products": [{"id": 1}]}'}],
                    }
                ],
            }
        ]

        contents = history_to_contents(history)

        assert contents[0].role == "function"
        response = contents[0].parts[0].function_response
        assert response.name == "call_42"
        assert response.response == {"products": [{"id": 1}]}

    def test_tool_result_string_content_is_parsed(self):
        block = ToolResultBlock(tool_use_id="get_cart", content='{"items": []}')
        contents = history_to_contents([ConversationTurn(role="user", content=[block])])

        assert contents[0].parts[0].function_response.response == {"items": []}

    def test_every_tool_result_of_the_turn_is_translated(self):
        history = [
            {
                "role": "user",
                "content": [
                    {"type": "tool_result", "tool_use_id": "a", "content": '{"n": 1}'},
                    {"type": "tool_result", "tool_use_id": "b", "content": '{"n": 2}'},
                ],
            }
        ]

        contents = history_to_contents(history)

        assert [p.function_response.name for p in contents[0].parts] == ["a", "b"]

    def test_non_object_payload_is_wrapped(self):
        history = [{"role": "user", "content": [{"type": "tool_result", "tool_use_id": "count", "content": "3"}]}]

        contents = history_to_contents(history)

        assert contents[0].parts[0].function_response.response == {"output": 3}

    def test_malformed_tool_result_raises_parse_error(self):
        history = [{"role": "user", "content": [{"type": "tool_result", "tool_use_id": "x", "content": "not json"}]}]

        with pytest.raises(ParseError):
            history_to_contents(history)

    def test_tool_turn_string_payload_is_parsed(self):
        history = [{"role": "tool", "tool_call_id": "get_order", "name": "get_order", "content": '{"status": "shipped"}'}]

        contents = history_to_contents(history)

        assert contents[0].role == "function"
        response = contents[0].parts[0].function_response
        assert response.name == "get_order"
        assert response.response == {"status": "shipped"}

    def test_tool_turn_object_payload_passes_through(self):
        history = [{"role": "tool", "name": "get_order", "content": {"status": "pending", "total": 12}}]

        contents = history_to_contents(history)

        assert contents[0].parts[0].function_response.name == "get_order"
        assert contents[0].parts[0].function_response.response == {"status": "pending", "total": 12}

    def test_tool_turn_array_payload_is_wrapped(self):
        history = [{"role": "tool", "tool_call_id": "list_variants", "content": [{"sku": "MUG-1"}, {"sku": "MUG-2"}]}]

        contents = history_to_contents(history)

        response = contents[0].parts[0].function_response
        assert response.name == "list_variants"
        assert response.response == {"output": [{"sku": "MUG-1"}, {"sku": "MUG-2"}]}

    def test_tool_turn_text_blocks_are_parsed(self):
        history = [{"role": "tool", "name": "get_cart", "content": [{"type": "text", "text": '{"lines": 2}'}]}]

        contents = history_to_contents(history)

        assert contents[0].parts[0].function_response.response == {"lines": 2}

    def test_malformed_tool_turn_raises_parse_error(self):
        with pytest.raises(ParseError):
            history_to_contents([{"role": "tool", "name": "get_order", "content": "{oops"}])

    def test_unknown_roles_are_dropped_without_gaps(self):
        history = [
            {"role": "system", "content": "be nice"},
            {"role": "user", "content": "one"},
            {"role": "developer", "content": "ignored"},
            {"role": "assistant", "content": "two"},
        ]

        contents = history_to_contents(history)

        assert [c.role for c in contents] == ["user", "model"]
        assert [c.parts[0].text for c in contents] == ["one", "two"]


class TestRoundTrip:
    """Tests that invocation ids survive canonical -> Gemini -> canonical."""

    def test_tool_linkage_round_trip(self):
        history = [
            {"role": "user", "content": "find mugs"},
            {
                "role": "assistant",
                "tool_calls": [{"id": "search_shop_catalog", "name": "search_shop_catalog", "arguments": {"q": "mug"}}],
            },
            {
                "role": "user",
                "content": [
                    {
                        "type": "tool_result",
                        "tool_use_id": "search_shop_catalog",
                        "content": [{"type": "text", "text": '{"count": 2}'}],
                    }
                ],
            },
        ]

        contents = history_to_contents(history)
        assert contents[2].parts[0].function_response.name == "search_shop_catalog"

        restored = contents_to_history(contents)

        assert [t.role for t in restored] == ["user", "assistant", "user"]
        assert restored[0].content == "find mugs"
        call = restored[1].tool_calls[0]
        assert (call.id, call.name, call.arguments) == ("search_shop_catalog", "search_shop_catalog", {"q": "mug"})
        result = restored[2].content[0]
        assert isinstance(result, ToolResultBlock)
        assert result.tool_use_id == call.id
        assert json.loads(result.payload_text()) == {"count": 2}

    def test_restored_history_translates_to_the_same_contents(self):
        history = [
            {"role": "assistant", "tool_calls": [{"id": "get_cart", "name": "get_cart", "arguments": {}}]},
            {"role": "user", "content": [{"type": "tool_result", "tool_use_id": "get_cart", "content": '{"a": 1}'}]},
            {"role": "assistant", "content": [{"type": "text", "text": "Your cart has one item."}]},
        ]

        contents = history_to_contents(history)

        assert history_to_contents(contents_to_history(contents)) == contents
