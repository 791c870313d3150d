import os
from typing import Any, AsyncIterator, Callable, Iterable, Optional, Sequence, Tuple
from unittest.mock import AsyncMock, MagicMock

import pytest
from dotenv import load_dotenv, find_dotenv
from google.genai import types

from storefront_chat_bridge import BridgeSettings, PromptCatalog

# Load environment variables from .env file
env_file = find_dotenv(usecwd=True)
if env_file:
    load_dotenv(env_file)

ChunkFactory = Callable[..., types.GenerateContentResponse]


def build_chunk(
    text: Optional[str] = None,
    function_calls: Sequence[Tuple[str, dict]] = (),
    finish_reason: Optional[str] = None,
) -> types.GenerateContentResponse:
    parts = []
    if text is not None:
        parts.append(types.Part(text=text))
    for name, args in function_calls:
        parts.append(types.Part(function_call=types.FunctionCall(name=name, args=args)))
    return types.GenerateContentResponse(
        candidates=[
            types.Candidate(
                content=types.Content(role="model", parts=parts),
                finish_reason=finish_reason,
            )
        ]
    )


async def stream_of(chunks: Iterable[Any]) -> AsyncIterator[Any]:
    for chunk in chunks:
        yield chunk


@pytest.fixture
def make_chunk() -> ChunkFactory:
    return build_chunk


@pytest.fixture
def make_stream() -> Callable[[Iterable[Any]], AsyncIterator[Any]]:
    return stream_of


@pytest.fixture
def mock_aclient() -> MagicMock:
    """A stand-in for ``genai.Client(...).aio`` whose stream call is an AsyncMock."""
    aclient = MagicMock()
    aclient.models.generate_content_stream = AsyncMock()
    return aclient


@pytest.fixture
def prompts() -> PromptCatalog:
    return PromptCatalog(
        {"standardAssistant": "You are a store assistant.", "terse": "Answer in one line."},
        default_key="standardAssistant",
    )


@pytest.fixture
def settings() -> BridgeSettings:
    return BridgeSettings(gemini_api_key="dummy_key", model_name="gemini-test", max_output_tokens=256)


@pytest.fixture(scope="session")
def vcr_config() -> dict[str, Any]:
    return {
        "cassette_library_dir": "tests/cassettes",
        "record_mode": os.getenv("VCR_RECORD_MODE", "once"),
        "match_on": ["method", "path", "query"],
        "filter_headers": ["authorization", "x-goog-api-key", "x-api-key", "api-key"],
        "filter_query_parameters": ["key", "api_key", "access_token"],
        "decode_compressed_response": True,
    }
