"""
Conversation service: lifecycle of persistent, memory-backed chats.

Creation generates a short description from the first message, then runs the
first turn through the memory window. The conversation row is committed in the
same transaction as that first turn, so a failed model call leaves nothing
behind.
"""
from dataclasses import dataclass
from typing import List, Optional
from sqlmodel import Session
from chatmem.config import settings
from chatmem.errors import ConversationNotFound
from chatmem.llm.openai_client import ModelClient, complete_with
from chatmem.logging import logger
from chatmem.memory.store import ConversationDirectory, TranscriptStore
from chatmem.memory.window import ConversationLocks, MemoryWindow
from chatmem.models.conversation import Conversation
from chatmem.models.message import Message, MessageRole


DESCRIPTION_PROMPT = "Generate a chat description based on the message, limiting the description to {limit} characters: "

_QUOTES = "\"'`“”‘’"


@dataclass
class ConversationStart:
    conversation_id: str
    reply: str
    description: str


@dataclass
class ConversationSummary:
    id: str
    description: str


class DescriptionGenerator:
    """Asks the model for a short title. The length limit is a hint unless hard_truncate is set."""

    def __init__(self, model: ModelClient, max_chars: Optional[int] = None, hard_truncate: Optional[bool] = None):
        self.model = model
        self.max_chars = max_chars if max_chars is not None else settings.DESCRIPTION_MAX_CHARS
        self.hard_truncate = settings.DESCRIPTION_HARD_TRUNCATE if hard_truncate is None else hard_truncate

    def prompt(self, message: str) -> str:
        return DESCRIPTION_PROMPT.format(limit=self.max_chars) + message

    def generate(self, message: str) -> str:
        raw = complete_with(self.model, [{"role": MessageRole.USER.model_role, "content": self.prompt(message)}])
        description = raw.strip().strip(_QUOTES).strip() or raw.strip()
        if self.hard_truncate and len(description) > self.max_chars:
            description = description[:self.max_chars].rstrip()
        if len(description) > self.max_chars:
            logger.warning(f"Generated description exceeds {self.max_chars} chars ({len(description)})")
        return description


class ConversationService:
    def __init__(
        self,
        directory: ConversationDirectory,
        window: MemoryWindow,
        describer: DescriptionGenerator,
        owner_id: Optional[str] = None,
    ):
        self.directory = directory
        self.window = window
        self.describer = describer
        self.owner_id = owner_id or settings.DEFAULT_OWNER_ID

    @classmethod
    def from_session(
        cls,
        session: Session,
        model: ModelClient,
        owner_id: Optional[str] = None,
        window_size: Optional[int] = None,
        locks: Optional[ConversationLocks] = None,
    ) -> "ConversationService":
        """Wire the directory, transcript store and memory window onto one session."""
        store = TranscriptStore(session)
        return cls(
            directory=ConversationDirectory(session),
            window=MemoryWindow(store, model, window_size=window_size, locks=locks),
            describer=DescriptionGenerator(model),
            owner_id=owner_id,
        )

    @property
    def store(self) -> TranscriptStore:
        return self.window.store

    def create_conversation_with_first_message(
        self, message: str, owner_id: Optional[str] = None
    ) -> ConversationStart:
        owner = owner_id or self.owner_id
        description = self.describer.generate(message)

        conversation = self.directory.new(owner, description)
        reply = self.window.dispatch(conversation.conversation_id, message, new_conversation=conversation)

        logger.info(f"Started conversation {conversation.conversation_id} ({description!r}) for owner {owner}")
        return ConversationStart(
            conversation_id=conversation.conversation_id,
            reply=reply,
            description=description,
        )

    def list_conversations(self, owner_id: Optional[str] = None) -> List[ConversationSummary]:
        conversations = self.directory.list_for_owner(owner_id or self.owner_id)
        return [ConversationSummary(id=c.conversation_id, description=c.description) for c in conversations]

    def ensure_exists(self, conversation_id: str) -> None:
        if not self.directory.exists(conversation_id):
            logger.warning(f"Unknown conversation id: {conversation_id}")
            raise ConversationNotFound(conversation_id)

    def get_conversation(self, conversation_id: str) -> Conversation:
        conversation = self.directory.get(conversation_id)
        if conversation is None:
            raise ConversationNotFound(conversation_id)
        return conversation

    def message_count(self, conversation_id: str) -> int:
        return self.store.count(conversation_id)

    def get_transcript(self, conversation_id: str) -> List[Message]:
        self.ensure_exists(conversation_id)
        return self.store.messages(conversation_id)

    def send_message(self, conversation_id: str, message: str) -> str:
        self.ensure_exists(conversation_id)
        return self.window.dispatch(conversation_id, message)
