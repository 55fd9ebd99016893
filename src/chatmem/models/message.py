from datetime import datetime
from enum import Enum
from typing import Optional
from sqlmodel import Field, SQLModel
from chatmem.models.base import utcnow


class MessageRole(str, Enum):
    USER = "USER"
    ASSISTANT = "ASSISTANT"

    @property
    def model_role(self) -> str:
        """Role name as the chat completion API spells it."""
        return self.value.lower()


class Message(SQLModel, table=True):
    """Transcript entry. Append-only; ordered by (timestamp, id)."""
    __tablename__ = "chat_memory_message"

    id: Optional[int] = Field(default=None, primary_key=True)
    conversation_id: str = Field(foreign_key="chat_memory.conversation_id", index=True)

    role: MessageRole
    content: str
    timestamp: datetime = Field(default_factory=utcnow, nullable=False, index=True)

    def as_model_message(self) -> dict:
        return {"role": self.role.model_role, "content": self.content}
