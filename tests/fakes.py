"""
Stand-ins for the TalkAI backend used across the test suite.
"""

import anyio
import httpx
from typing import AsyncIterator, List, Optional


class FakeBackend:
    """Records outbound backend requests and answers with canned lines."""

    def __init__(self, lines: Optional[List[str]] = None, status_code: int = 200, body: Optional[bytes] = None):
        self.lines = lines if lines is not None else ["data: Hello", "data:  world"]
        self.status_code = status_code
        self.body = body
        self.requests: List[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.body is not None:
            return httpx.Response(self.status_code, content=self.body)
        content = "".join(f"{line}\n" for line in self.lines).encode("utf-8")
        return httpx.Response(self.status_code, content=content)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


class FailingBackend(FakeBackend):
    """Backend that cannot be reached."""

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        raise httpx.ConnectError("Connection refused", request=request)


class TrickleStream(httpx.AsyncByteStream):
    """Body that sends its first line at once and the rest after a pause."""

    def __init__(self, lines: List[str], pause: float):
        self.lines = lines
        self.pause = pause

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for index, line in enumerate(self.lines):
            if index:
                await anyio.sleep(self.pause)
            yield f"{line}\n".encode("utf-8")


class SlowBackend(FakeBackend):
    """Backend that is slow to answer (header_delay) or to stream (pause)."""

    def __init__(self, lines: Optional[List[str]] = None, header_delay: float = 0, pause: float = 0):
        super().__init__(lines=lines)
        self.header_delay = header_delay
        self.pause = pause

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.header_delay:
            await anyio.sleep(self.header_delay)
        return httpx.Response(self.status_code, stream=TrickleStream(self.lines, self.pause))
