import uuid
from typing import Optional
from sqlmodel import Field
from chatmem.models.base import CreatedAtMixin


def new_conversation_id() -> str:
    return str(uuid.uuid4())


class Conversation(CreatedAtMixin, table=True):
    """Directory entry: one row per conversation, written once at creation."""
    __tablename__ = "chat_memory"

    # Row id doubles as the creation-order tie-break when created_at collides
    id: Optional[int] = Field(default=None, primary_key=True)
    conversation_id: str = Field(default_factory=new_conversation_id, unique=True, index=True)
    owner_id: str = Field(index=True)
    description: str
