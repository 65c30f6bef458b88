from .chat import ChatMessage, ChatCompletionRequest
from .backend import BackendMessage, BackendSettings, BackendRequest

__all__ = [
    "ChatMessage",
    "ChatCompletionRequest",
    "BackendMessage",
    "BackendSettings",
    "BackendRequest",
]
