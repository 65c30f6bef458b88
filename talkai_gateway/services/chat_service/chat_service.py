"""
Chat Service Module

This module provides the ChatService class that coordinates chat completion
requests from the inbound OpenAI-style call to the TalkAI backend and back.

The ChatService handles the complete lifecycle of a chat request:
- Authentication against the configured key set
- Request validation and translation to the backend shape
- The outbound backend call
- Streaming (reframed SSE) or non-streaming (aggregated JSON) responses
- Recording every outcome, success or failure, into the request statistics
  and the live request log

Streamed backend responses are closed as soon as the client stream ends,
including when the client disconnects mid-stream.
"""

import json
import time
from typing import Any, AsyncIterator, Awaitable, Callable

import anyio
import httpx
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse, StreamingResponse

from ...core.auth import AccessGate
from ...core.config_manager import ConfigManager
from ...core.error_handling import ErrorHandler, ErrorContext
from ...core.logging import logger
from ...providers import TalkAIProvider
from ..monitoring import StatisticsCollector, LiveRequestLog, LiveRequestRecord
from .request_translator import RequestTranslator, TranslatedRequest
from .stream_processor import StreamProcessor


STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


class BackendStreamingResponse(StreamingResponse):
    """
    StreamingResponse that runs a cleanup callback exactly once when the ASGI
    call ends.

    The callback runs whether the body was sent completely, the client went
    away before the first chunk was pulled, or the task was cancelled.
    """

    def __init__(self, content: AsyncIterator[bytes], on_finish: Callable[[], Awaitable[None]], **kwargs):
        super().__init__(content, **kwargs)
        self._on_finish = on_finish
        self._finished = False

    async def finish(self):
        if self._finished:
            return
        self._finished = True
        with anyio.CancelScope(shield=True):
            await self.body_iterator.aclose()
            await self._on_finish()

    async def __call__(self, scope, receive, send):
        try:
            await super().__call__(scope, receive, send)
        finally:
            await self.finish()


class ChatService:
    """
    Main service for coordinating chat completion requests.

    Attributes:
        config_manager (ConfigManager): Gateway configuration
        access_gate (AccessGate): Bearer credential check
        provider (TalkAIProvider): Backend client
        translator (RequestTranslator): Inbound request validation/translation
        stream_processor (StreamProcessor): Backend stream reframing/aggregation
        statistics (StatisticsCollector): Process-wide request statistics
        live_requests (LiveRequestLog): Recent request outcomes
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        httpx_client: httpx.AsyncClient,
        access_gate: AccessGate,
        statistics: StatisticsCollector,
        live_requests: LiveRequestLog
    ):
        self.config_manager = config_manager
        self.access_gate = access_gate
        self.statistics = statistics
        self.live_requests = live_requests
        self.provider = TalkAIProvider(httpx_client, config_manager.get_config().timeout)
        self.translator = RequestTranslator(config_manager)
        self.stream_processor = StreamProcessor()

    def record_outcome(self, request: Request, start_time: float, status_code: int):
        """Record one finished call into the statistics and the live log."""
        duration = time.time() - start_time
        self.statistics.record(duration, status_code)
        self.live_requests.append(LiveRequestRecord(
            method=request.method,
            path=request.url.path,
            status=status_code,
            duration=int(duration * 1000),
            user_agent=request.headers.get("user-agent", "")
        ))

    async def _read_payload(self, request: Request, context: ErrorContext) -> Any:
        body = await request.body()
        try:
            return json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ErrorHandler.handle_invalid_request_body(context, e)

    async def _prepare(self, request: Request, context: ErrorContext, deadline: float):
        self.access_gate.authorize(request.headers.get("authorization"), context)

        payload = await self._read_payload(request, context)
        logger.debug_data(
            title="Chat Completion Request JSON",
            data=payload,
            request_id=context.request_id,
            component="chat_service",
            data_flow="incoming"
        )

        chat_request = self.translator.parse(payload, context)
        translated = self.translator.translate(chat_request, request.query_params.get("stream"))
        context.model_id = translated.model

        logger.request(
            operation="Chat Completion Request",
            request_id=context.request_id,
            model_id=translated.model,
            stream=translated.stream,
            history_length=len(translated.backend_request.history)
        )

        backend_response = await self.provider.open_stream(translated.backend_request, context, deadline)
        return translated, backend_response

    async def chat_completions(self, request: Request) -> Any:
        """
        Process one chat completion request.

        The configured timeout bounds the whole backend call, from sending
        the request to the last line read from the backend.

        Returns:
            BackendStreamingResponse: SSE chunks when the resolved mode is streaming
            JSONResponse: The aggregated completion otherwise

        Raises:
            HTTPException: 400 for invalid bodies, 401 for failed auth, the
                backend status for backend errors, 500 for anything else.
                The outcome is recorded before the exception propagates.
        """
        start_time = time.time()
        deadline = anyio.current_time() + self.config_manager.get_config().timeout
        request_id = getattr(request.state, "request_id", "unknown")
        context = ErrorContext(request_id=request_id, endpoint_path=request.url.path)

        try:
            translated, backend_response = await self._prepare(request, context, deadline)
        except HTTPException as e:
            self.record_outcome(request, start_time, e.status_code)
            raise
        except Exception as e:
            self.record_outcome(request, start_time, status.HTTP_500_INTERNAL_SERVER_ERROR)
            raise ErrorHandler.handle_internal_server_error(str(e), context, e)

        if translated.stream:
            return self._stream_response(request, start_time, translated, backend_response, deadline)
        return await self._aggregated_response(request, start_time, translated, backend_response, context, deadline)

    def _stream_response(
        self,
        request: Request,
        start_time: float,
        translated: TranslatedRequest,
        backend_response: httpx.Response,
        deadline: float
    ) -> BackendStreamingResponse:
        request_id = getattr(request.state, "request_id", "unknown")

        async def on_finish():
            self.record_outcome(request, start_time, status.HTTP_200_OK)
            await backend_response.aclose()

        return BackendStreamingResponse(
            self.stream_processor.reframe(backend_response.aiter_lines(), translated.model, request_id, deadline),
            on_finish=on_finish,
            media_type="text/event-stream",
            headers=STREAM_HEADERS
        )

    async def _aggregated_response(
        self,
        request: Request,
        start_time: float,
        translated: TranslatedRequest,
        backend_response: httpx.Response,
        context: ErrorContext,
        deadline: float
    ) -> JSONResponse:
        try:
            content = await self.stream_processor.aggregate(
                backend_response.aiter_lines(),
                context.request_id,
                is_disconnected=request.is_disconnected,
                deadline=deadline
            )
            completion = self.stream_processor.build_completion(content, translated.model)
        except Exception as e:
            self.record_outcome(request, start_time, status.HTTP_500_INTERNAL_SERVER_ERROR)
            raise ErrorHandler.handle_internal_server_error(str(e), context, e)
        finally:
            await backend_response.aclose()

        logger.debug_data(
            title="Chat Completion Response JSON",
            data=completion,
            request_id=context.request_id,
            component="chat_service",
            data_flow="outgoing"
        )

        self.record_outcome(request, start_time, status.HTTP_200_OK)
        return JSONResponse(content=completion)
