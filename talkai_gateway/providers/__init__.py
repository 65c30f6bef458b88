from .talkai import TalkAIProvider, TALKAI_CHAT_URL

__all__ = ["TalkAIProvider", "TALKAI_CHAT_URL"]
