"""
Request shape of the TalkAI chat backend.

The backend has no system role: history entries come only from the user
("you") or the assistant.
"""

from typing import Any, Dict, List, Literal

from pydantic import BaseModel, Field


BACKEND_FROM_USER = "you"
BACKEND_FROM_ASSISTANT = "assistant"


class BackendMessage(BaseModel):
    id: str
    from_: Literal["you", "assistant"] = Field(alias="from")
    content: str

    model_config = {"populate_by_name": True}


class BackendSettings(BaseModel):
    model: str
    temperature: float


class BackendRequest(BaseModel):
    type: Literal["chat"] = "chat"
    history: List[BackendMessage] = Field(default_factory=list, alias="messagesHistory")
    settings: BackendSettings

    model_config = {"populate_by_name": True}

    def to_payload(self) -> Dict[str, Any]:
        """JSON body as the backend expects it (``from``, ``messagesHistory``)."""
        return self.model_dump(by_alias=True)
