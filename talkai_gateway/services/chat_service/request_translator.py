"""
Request Translator Module

Turns an OpenAI-style chat completion payload into the TalkAI backend
request.

The backend has no system role, so the system prompt is folded into the
trailing user turn; user and assistant turns become ``you``/``assistant``
history entries in their original order. Model, temperature and stream mode
are resolved here once against the gateway defaults.
"""

import uuid
from dataclasses import dataclass
from typing import Any, Optional, List

from pydantic import ValidationError

from ...core.config_manager import ConfigManager, DEFAULT_TEMPERATURE
from ...core.error_handling import ErrorHandler, ErrorContext
from ...core.logging import logger
from ...schemas import (
    ChatCompletionRequest,
    BackendMessage,
    BackendRequest,
    BackendSettings,
)
from ...schemas.backend import BACKEND_FROM_USER, BACKEND_FROM_ASSISTANT


SYSTEM_PROMPT_SEPARATOR = "\n\n"


@dataclass(frozen=True)
class TranslatedRequest:
    """Resolved call parameters plus the payload for the backend."""
    model: str
    stream: bool
    backend_request: BackendRequest


class RequestTranslator:
    """
    Validates inbound chat completion requests and builds BackendRequest.

    Attributes:
        config_manager (ConfigManager): Source of the default model,
            temperature and stream flag
    """

    def __init__(self, config_manager: ConfigManager):
        self.config_manager = config_manager

    def parse(self, payload: Any, context: Optional[ErrorContext] = None) -> ChatCompletionRequest:
        """
        Validate a decoded JSON payload.

        Raises:
            HTTPException: 400 ``Invalid request body`` when the payload does
                not have the chat completion shape, 400 ``Messages required``
                when the message list is empty.
        """
        context = context or ErrorContext()
        try:
            chat_request = ChatCompletionRequest.model_validate(payload)
        except ValidationError as e:
            raise ErrorHandler.handle_invalid_request_body(context, e)

        if not chat_request.messages:
            raise ErrorHandler.handle_messages_required(context)
        return chat_request

    def resolve_stream(self, body_stream: Optional[bool], stream_query: Optional[str]) -> bool:
        """
        Effective stream mode.

        Only the presence of the ``stream`` query parameter matters, never
        its value: a false body flag falls back to the configured default
        unless the parameter is present.
        """
        if not body_stream and not stream_query:
            return self.config_manager.get_config().default_stream
        return bool(body_stream)

    @staticmethod
    def build_history(chat_request: ChatCompletionRequest) -> List[BackendMessage]:
        history: List[BackendMessage] = []
        system_prompt = ""

        for message in chat_request.messages:
            if message.role == "system":
                system_prompt = message.content
            elif message.role in ("user", "assistant"):
                history.append(BackendMessage(
                    id=str(uuid.uuid4()),
                    from_=BACKEND_FROM_USER if message.role == "user" else BACKEND_FROM_ASSISTANT,
                    content=message.content,
                ))
            else:
                logger.debug(f"Dropping message with unsupported role '{message.role}'")

        if system_prompt and history and history[-1].from_ == BACKEND_FROM_USER:
            last = history[-1]
            history[-1] = last.model_copy(
                update={"content": f"{system_prompt}{SYSTEM_PROMPT_SEPARATOR}{last.content}"}
            )

        return history

    def translate(self, chat_request: ChatCompletionRequest, stream_query: Optional[str] = None) -> TranslatedRequest:
        config = self.config_manager.get_config()

        model = chat_request.model or config.default_model
        temperature = chat_request.temperature
        if temperature is None:
            temperature = config.default_temperature
        if temperature is None:
            temperature = DEFAULT_TEMPERATURE

        backend_request = BackendRequest(
            history=self.build_history(chat_request),
            settings=BackendSettings(model=model, temperature=temperature),
        )

        return TranslatedRequest(
            model=model,
            stream=self.resolve_stream(chat_request.stream, stream_query),
            backend_request=backend_request,
        )
