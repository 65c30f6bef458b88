"""
Stream Processor Module

This module provides the StreamProcessor class that converts the TalkAI
backend's line-oriented event stream into OpenAI chat completion output.

The backend answers with lines such as ``data: Hello``; every non-empty
payload that is not the ``-1`` sentinel is a content fragment. Two consumers
share that filter:

- reframe(): emits one ``chat.completion.chunk`` SSE event per fragment, in
  backend order, framed by a role announcement and a ``stop`` chunk plus the
  ``[DONE]`` terminator
- aggregate(): concatenates every fragment into a single completion body

A transport error while reading the backend ends the stream the same way as
EOF, and so does running past the call deadline.
"""

import json
import time
import uuid
from typing import Any, AsyncIterator, AsyncGenerator, Awaitable, Callable, Dict, Optional

import anyio
import httpx

from ...core.logging import logger


BACKEND_EVENT_PREFIX = "data:"
BACKEND_SENTINEL = "-1"
DONE_EVENT = b"data: [DONE]\n\n"
FINISH_REASON_STOP = "stop"


def new_completion_id() -> str:
    return f"chatcmpl-{uuid.uuid4()}"


def extract_fragment(line: str) -> Optional[str]:
    """
    Return the content fragment carried by one backend line, or None.

    Lines without the ``data:`` prefix, blank payloads and the sentinel are
    all skipped.
    """
    if not line.startswith(BACKEND_EVENT_PREFIX):
        return None
    fragment = line[len(BACKEND_EVENT_PREFIX):].strip()
    if not fragment or fragment == BACKEND_SENTINEL:
        return None
    return fragment


class StreamProcessor:
    """
    Reframes and aggregates TalkAI backend streams.

    The processor keeps no per-request state, one instance serves every
    request.
    """

    async def iter_fragments(
        self,
        lines: AsyncIterator[str],
        request_id: str,
        deadline: Optional[float] = None
    ) -> AsyncGenerator[str, None]:
        """
        Yield content fragments from backend lines in arrival order.

        Args:
            lines: Backend body split into lines (``response.aiter_lines()``)
            request_id: Request identifier for logging
            deadline: Event loop time (``anyio.current_time()``) after which
                reading stops, as if the backend had closed the stream
        """
        line_count = 0
        iterator = lines.__aiter__()
        try:
            while True:
                if deadline is None:
                    line = await iterator.__anext__()
                else:
                    line = None
                    remaining = deadline - anyio.current_time()
                    if remaining > 0:
                        with anyio.move_on_after(remaining):
                            line = await iterator.__anext__()
                    if line is None:
                        logger.warning(
                            "Backend stream exceeded the call timeout",
                            request_id=request_id,
                            stream_processing={"lines_read": line_count}
                        )
                        return

                line_count += 1
                fragment = extract_fragment(line)
                if fragment is None:
                    continue
                yield fragment
        except StopAsyncIteration:
            return
        except httpx.HTTPError as e:
            logger.warning(
                f"Backend stream interrupted: {e}",
                request_id=request_id,
                stream_processing={
                    "lines_read": line_count,
                    "error_type": type(e).__name__
                }
            )

    @staticmethod
    def format_chunk(
        stream_id: str,
        created: int,
        model_id: str,
        delta: Dict[str, Any],
        finish_reason: Optional[str] = None
    ) -> bytes:
        """
        Format one ``chat.completion.chunk`` as an SSE event.

        Returns:
            bytes: ``data: <json>\\n\\n``
        """
        chunk = {
            "id": stream_id,
            "object": "chat.completion.chunk",
            "created": created,
            "model": model_id,
            "choices": [
                {
                    "delta": delta,
                    "index": 0,
                    "finish_reason": finish_reason
                }
            ]
        }
        return f"data: {json.dumps(chunk, ensure_ascii=False)}\n\n".encode("utf-8")

    async def reframe(
        self,
        lines: AsyncIterator[str],
        model_id: str,
        request_id: str,
        deadline: Optional[float] = None
    ) -> AsyncGenerator[bytes, None]:
        """
        Convert backend lines into OpenAI streaming events.

        Every event is yielded as soon as it is built; the web server flushes
        each one separately, so fragment boundaries match the backend's.

        Args:
            lines: Backend body split into lines
            model_id: Model reported in every chunk
            request_id: Request identifier for logging
            deadline: See iter_fragments

        Yields:
            bytes: SSE events, ending with ``data: [DONE]``
        """
        start_time = time.time()
        stream_id = new_completion_id()
        created = int(start_time)
        fragment_count = 0

        yield self.format_chunk(stream_id, created, model_id, {"role": "assistant", "content": ""})

        async for fragment in self.iter_fragments(lines, request_id, deadline):
            fragment_count += 1
            logger.debug(
                f"Forwarding fragment {fragment_count}",
                request_id=request_id,
                stream_processing={"fragment_number": fragment_count, "fragment_size": len(fragment)}
            )
            yield self.format_chunk(stream_id, created, model_id, {"content": fragment})

        yield self.format_chunk(stream_id, created, model_id, {}, FINISH_REASON_STOP)
        yield DONE_EVENT

        duration = time.time() - start_time
        logger.info(
            "Stream reframing completed",
            request_id=request_id,
            model_id=model_id,
            stream_processing={
                "stream_id": stream_id,
                "duration_seconds": round(duration, 3),
                "fragments": fragment_count
            }
        )

    async def aggregate(
        self,
        lines: AsyncIterator[str],
        request_id: str,
        is_disconnected: Optional[Callable[[], Awaitable[bool]]] = None,
        deadline: Optional[float] = None
    ) -> str:
        """
        Drain the backend stream into one string.

        Fragments are concatenated without a separator. When is_disconnected
        is given it is polled after each fragment and a disconnected client
        stops the drain early. Reaching deadline ends it like EOF.
        """
        parts = []
        async for fragment in self.iter_fragments(lines, request_id, deadline):
            parts.append(fragment)
            if is_disconnected is not None and await is_disconnected():
                logger.info(
                    "Client disconnected, stopping backend drain",
                    request_id=request_id,
                    stream_processing={"fragments": len(parts)}
                )
                break
        return "".join(parts)

    @staticmethod
    def build_completion(content: str, model_id: str) -> Dict[str, Any]:
        """Wrap aggregated content as a non-streaming chat completion."""
        # Token accounting is not implemented; usage is always zero
        return {
            "id": new_completion_id(),
            "object": "chat.completion",
            "created": int(time.time()),
            "model": model_id,
            "choices": [
                {
                    "message": {
                        "role": "assistant",
                        "content": content
                    },
                    "index": 0,
                    "finish_reason": FINISH_REASON_STOP
                }
            ],
            "usage": {
                "prompt_tokens": 0,
                "completion_tokens": 0,
                "total_tokens": 0
            }
        }
