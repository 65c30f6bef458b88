from typing import List, Optional

from pydantic import BaseModel, Field, StrictBool, StrictFloat, field_validator


class ChatMessage(BaseModel):
    # Only system, user and assistant carry meaning; other roles are ignored
    role: Optional[str] = ""
    # null on assistant tool-call turns
    content: Optional[str] = ""

    @field_validator("role", "content", mode="before")
    @classmethod
    def null_as_empty(cls, value):
        return "" if value is None else value


class ChatCompletionRequest(BaseModel):
    model: Optional[str] = None
    # A missing list is reported as "Messages required", not as a shape error
    messages: List[ChatMessage] = Field(default_factory=list)
    stream: Optional[StrictBool] = False
    temperature: Optional[StrictFloat] = None
