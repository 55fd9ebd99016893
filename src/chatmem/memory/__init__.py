from chatmem.memory.store import ConversationDirectory, TranscriptStore
from chatmem.memory.window import MemoryWindow, ConversationLocks, conversation_locks

__all__ = [
    "ConversationDirectory",
    "TranscriptStore",
    "MemoryWindow",
    "ConversationLocks",
    "conversation_locks",
]
