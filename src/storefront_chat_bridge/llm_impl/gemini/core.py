from typing import Any, Dict, List, Optional, Sequence

from google import genai
from google.genai import types
from google.genai.client import AsyncClient
from pydantic import ValidationError

from storefront_chat_bridge.config import DEFAULT_GEMINI_MODEL, BridgeSettings
from storefront_chat_bridge.llm_core import (
    AssistantMessage,
    ConfigurationError,
    ConversationRequest,
    ConversationService,
    PromptCatalog,
    SchemaError,
    StreamHandlers,
    ToolDeclaration,
    get_logger,
)
from .history import history_to_contents
from .schema_sanitizer import normalize_tools
from .stream import StreamEmulator

logger = get_logger(__name__)


class GeminiConversationService(ConversationService):
    """
    Runs canonical (Claude-format) conversations on Google's Gemini models.

    Translates history and tool declarations to Gemini's format, streams the
    answer, and replays it through the canonical ``on_text`` / ``on_tool_use`` /
    ``on_message`` callbacks. Tool execution stays with the caller.
    """

    def __init__(
        self,
        aclient: AsyncClient,
        model_name: str = DEFAULT_GEMINI_MODEL,
        prompts: Optional[PromptCatalog] = None,
        max_output_tokens: Optional[int] = None,
    ):
        """
        Initializes the Gemini conversation adapter.

        Args:
            aclient: The initialized Google GenAI async client.
            model_name: The identifier for the Gemini model to use (e.g., 'gemini-2.5-pro').
            prompts: Catalog resolving prompt keys to system instructions. Defaults to the bundled prompts.
            max_output_tokens: The maximum number of tokens to generate per response.
        """
        self.client: AsyncClient = aclient
        self.model: str = model_name
        self.prompts = prompts or PromptCatalog.bundled()
        self.max_output_tokens = max_output_tokens
        logger.info(f"Initialized GeminiConversationService with model='{model_name}'")

    def get_system_prompt(self, prompt_key: Optional[str] = None) -> str:
        return self.prompts.get(prompt_key)

    def build_config(
        self, system_instruction: str, tools: Sequence[ToolDeclaration] = ()
    ) -> types.GenerateContentConfig:
        """
        Builds the generation config for one request.

        Args:
            system_instruction: The resolved system prompt.
            tools: Canonical tool declarations; omitted from the config when empty.

        Returns:
            The Gemini generation config.

        Raises:
            SchemaError: If a tool schema uses keywords Gemini's schema language cannot express.
        """
        tools_config: Optional[List[types.Tool]] = None
        if tools:
            declarations = [_function_declaration(d) for d in normalize_tools(tools)]
            tools_config = [types.Tool(function_declarations=declarations)]

        return types.GenerateContentConfig(
            system_instruction=system_instruction,
            tools=tools_config,
            max_output_tokens=self.max_output_tokens,
        )

    async def stream_conversation(
        self, request: ConversationRequest, handlers: Optional[StreamHandlers] = None
    ) -> AssistantMessage:
        """
        Runs one conversation turn on Gemini.

        Args:
            request: History, prompt key and tools for this turn.
            handlers: Optional callbacks for streamed text, tool uses and the final message.

        Returns:
            The canonical assistant message, identical to the one passed to ``on_message``.

        Raises:
            ParseError: If a tool result in the history is not valid JSON.
            SchemaError: If a tool schema cannot be expressed as a Gemini function declaration.
            TransportCompatibilityError: If the Gemini stream has an incompatible shape.
            MissingCandidateError: If Gemini returned no candidate.
        """
        config = self.build_config(self.get_system_prompt(request.prompt_key), request.tools)
        contents = history_to_contents(request.history)

        logger.info(
            f"Streaming Gemini response (model={self.model}, turns={len(contents)}, tools={len(request.tools)})."
        )

        emulator = StreamEmulator(handlers, model=self.model)

        async def open_stream():
            return await self.client.models.generate_content_stream(
                model=self.model,
                contents=contents,  # type: ignore[arg-type]
                config=config,
            )

        message = await emulator.run(open_stream)
        logger.debug(f"Gemini response finished with stop_reason='{message.stop_reason}'.")
        return message


def _function_declaration(declaration: Dict[str, Any]) -> types.FunctionDeclaration:
    try:
        return types.FunctionDeclaration.model_validate(declaration)
    except ValidationError as e:
        error = e.errors()[0]
        location = ".".join(str(part) for part in error["loc"])
        msg = f"Tool '{declaration.get('name')}' cannot be sent to Gemini: {location}: {error['msg']}"
        logger.error(msg)
        raise SchemaError(msg) from e


def create_gemini_service(
    api_key: Optional[str] = None,
    *,
    settings: Optional[BridgeSettings] = None,
    prompts: Optional[PromptCatalog] = None,
    aclient: Optional[AsyncClient] = None,
) -> GeminiConversationService:
    """
    Creates a Gemini conversation adapter.

    Args:
        api_key: Gemini API key. Overrides ``settings.gemini_api_key``.
        settings: Bridge settings. Read from the environment when omitted.
        prompts: Prompt catalog. Loaded from ``settings.prompts_path`` or the bundled prompts when omitted.
        aclient: A ready async client, e.g. a test double. Skips credential handling.

    Returns:
        A configured ``GeminiConversationService``.

    Raises:
        ConfigurationError: If no API key is available and no client was given.
    """
    settings = settings or BridgeSettings.from_env()

    if aclient is None:
        key = api_key or settings.gemini_api_key
        if not key:
            msg = "GEMINI_API_KEY is not set."
            logger.error(msg)
            raise ConfigurationError(msg)
        aclient = genai.Client(api_key=key).aio

    if prompts is None:
        if settings.prompts_path:
            prompts = PromptCatalog.from_file(settings.prompts_path, default_key=settings.default_prompt_key)
        else:
            prompts = PromptCatalog.bundled(default_key=settings.default_prompt_key)

    return GeminiConversationService(
        aclient,
        model_name=settings.model_name,
        prompts=prompts,
        max_output_tokens=settings.max_output_tokens,
    )
