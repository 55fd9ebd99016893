"""Failure taxonomy shared by the service, HTTP and CLI layers."""


class ChatMemoryError(Exception):
    """Base class for errors raised by chatmem."""


class ConversationNotFound(ChatMemoryError):
    """The requested conversation id is not registered."""

    def __init__(self, conversation_id: str):
        self.conversation_id = conversation_id
        super().__init__(f"Conversation not found: {conversation_id}")


class ModelUnavailable(ChatMemoryError):
    """The language model failed or returned an unusable result."""


class StoreUnavailable(ChatMemoryError):
    """A read or write against the durable store failed."""
