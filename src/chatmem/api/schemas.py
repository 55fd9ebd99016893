from typing import List
from pydantic import BaseModel, Field, field_validator
from chatmem.models.message import MessageRole


class MessageRequest(BaseModel):
    message: str = Field(..., min_length=1, description="User message text")

    @field_validator("message")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Message cannot be empty.")
        return v


class ChatReply(BaseModel):
    message: str


class ConversationItem(BaseModel):
    id: str
    description: str


class TranscriptMessage(BaseModel):
    content: str
    role: MessageRole


class StartResponse(BaseModel):
    id: str
    reply: str
    description: str


class HealthResponse(BaseModel):
    ok: bool
    database: bool
