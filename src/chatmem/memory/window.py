"""
Memory window: bounded context in front of every conversational model call.

Pipeline per turn: load the last K messages, append the new user message,
call the model, then persist USER + ASSISTANT together. Older messages stay in
the transcript; the window only truncates what is read back.
"""
import threading
import weakref
from contextlib import nullcontext
from typing import Dict, List, Optional
from chatmem.config import settings
from chatmem.llm.openai_client import ModelClient, complete_with
from chatmem.logging import conversation_scope, logger
from chatmem.memory.store import TranscriptStore
from chatmem.models.conversation import Conversation
from chatmem.models.message import MessageRole


class ConversationLocks:
    """Process-wide mapping of conversation id -> lock.

    Entries are weak: a lock disappears once no turn holds a reference to it.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()

    def get(self, conversation_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(conversation_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[conversation_id] = lock
            return lock

    def __len__(self) -> int:
        return len(self._locks)


conversation_locks = ConversationLocks()


class MemoryWindow:
    def __init__(
        self,
        store: TranscriptStore,
        model: ModelClient,
        window_size: Optional[int] = None,
        locks: Optional[ConversationLocks] = None,
    ):
        self.store = store
        self.model = model
        self.window_size = window_size if window_size is not None else settings.MEMORY_WINDOW_SIZE
        if self.window_size < 1:
            raise ValueError("window_size must be at least 1")
        if locks is None and settings.SERIALIZE_CONVERSATION_TURNS:
            locks = conversation_locks
        self.locks = locks

    def context_for(self, conversation_id: str, user_message: str) -> List[Dict[str, str]]:
        """Last ``window_size`` stored messages, oldest first, then the new user message."""
        history = self.store.recent(conversation_id, self.window_size)
        context = [m.as_model_message() for m in history]
        context.append({"role": MessageRole.USER.model_role, "content": user_message})
        return context

    def dispatch(
        self,
        conversation_id: str,
        user_message: str,
        new_conversation: Optional[Conversation] = None,
    ) -> str:
        """
        Run one turn and return the assistant reply.

        If the model fails nothing is written and ModelUnavailable propagates.
        ``new_conversation`` is committed together with the turn.
        """
        guard = self.locks.get(conversation_id) if self.locks is not None else nullcontext()
        with conversation_scope(conversation_id), guard:
            context = self.context_for(conversation_id, user_message)
            logger.info(f"Dispatching turn with {len(context) - 1} prior message(s) in context")
            reply = complete_with(self.model, context)
            self.store.append_turn(conversation_id, user_message, reply, new_conversation=new_conversation)
        return reply
