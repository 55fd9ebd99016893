from chatmem.chat.simple import SimpleChatService
from chatmem.chat.service import (
    ConversationService,
    ConversationStart,
    ConversationSummary,
    DescriptionGenerator,
)

__all__ = [
    "SimpleChatService",
    "ConversationService",
    "ConversationStart",
    "ConversationSummary",
    "DescriptionGenerator",
]
