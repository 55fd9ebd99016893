from chatmem.models.conversation import Conversation
from chatmem.models.message import Message, MessageRole

__all__ = [
    "Conversation",
    "Message", "MessageRole",
]
