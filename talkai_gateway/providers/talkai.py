import time
import anyio
import httpx
from typing import Dict, Any, Optional

from ..schemas import BackendRequest
from ..core.error_handling import ErrorHandler, ErrorContext
from ..core.logging import logger


TALKAI_CHAT_URL = "https://claude.talkai.info/chat/send/"

TALKAI_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    "Accept": "application/json, text/event-stream",
    "Content-Type": "application/json",
}


class TalkAIProvider:
    """
    Issues the single outbound call to the TalkAI chat endpoint.

    The returned response is opened in streaming mode; the caller owns it and
    must close it (``await response.aclose()``). Failures are raised as
    HTTPException built by ErrorHandler. There are no retries.
    """

    def __init__(self, client: httpx.AsyncClient, timeout: float):
        self.client = client
        self.timeout = httpx.Timeout(timeout)
        self.headers: Dict[str, str] = dict(TALKAI_HEADERS)

    async def open_stream(
        self,
        backend_request: BackendRequest,
        context: Optional[ErrorContext] = None,
        deadline: Optional[float] = None
    ) -> httpx.Response:
        """
        Send the request and return the response with its body unread.

        deadline is an event loop time (``anyio.current_time()``); waiting
        for the response headers past it fails like a network error.
        """
        context = context or ErrorContext()
        request_id = context.request_id or "unknown"

        try:
            payload: Dict[str, Any] = backend_request.to_payload()
            http_request = self.client.build_request(
                "POST",
                TALKAI_CHAT_URL,
                headers=self.headers,
                json=payload,
                timeout=self.timeout
            )
        except (TypeError, ValueError) as e:
            raise ErrorHandler.handle_internal_server_error(
                f"Could not serialize backend request: {e}", context, e
            )

        logger.debug_data(
            title="TalkAI Request",
            data={
                "url": TALKAI_CHAT_URL,
                "headers": self.headers,
                "request_body": payload
            },
            request_id=request_id,
            component="talkai_provider",
            data_flow="to_provider"
        )

        start_time = time.time()
        remaining = None if deadline is None else max(deadline - anyio.current_time(), 0)
        try:
            with anyio.fail_after(remaining):
                response = await self.client.send(http_request, stream=True)
        except (httpx.RequestError, TimeoutError) as e:
            raise ErrorHandler.handle_backend_network_error(e, context)

        logger.performance(
            "TalkAI response headers",
            start_time,
            request_id,
            status_code=response.status_code
        )

        logger.debug_data(
            title="TalkAI Response Headers",
            data={
                "status_code": response.status_code,
                "headers": dict(response.headers)
            },
            request_id=request_id,
            component="talkai_provider",
            data_flow="from_provider"
        )

        if not response.is_success:
            try:
                await response.aread()
                response_text = response.text
            except httpx.HTTPError:
                response_text = "Unable to read error response from backend"
            finally:
                await response.aclose()
            raise ErrorHandler.handle_backend_http_error(response.status_code, response_text, context)

        return response
