"""
Chat Service Package

Modular components for handling chat completion requests in the TalkAI
Gateway, each with a single responsibility:

Modules:
- request_translator: validation and translation to the TalkAI request shape
- stream_processor: backend stream reframing and aggregation
- chat_service: request coordination and outcome recording

Usage:
    from talkai_gateway.services.chat_service import ChatService

    chat_service = ChatService(config_manager, httpx_client, access_gate,
                               statistics, live_requests)
"""

from .request_translator import RequestTranslator, TranslatedRequest
from .stream_processor import StreamProcessor
from .chat_service import ChatService

__all__ = [
    "RequestTranslator",
    "TranslatedRequest",
    "StreamProcessor",
    "ChatService"
]
