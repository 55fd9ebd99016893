"""
Durable access for conversations and their transcripts.

Both classes wrap the same SQLModel ``Session`` so that a conversation row and
its first turn can be committed together. Any SQLAlchemy failure rolls the
session back and surfaces as ``StoreUnavailable``.
"""
from contextlib import contextmanager
from datetime import datetime
from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select, func, desc
from chatmem.errors import StoreUnavailable
from chatmem.logging import logger
from chatmem.models.base import as_utc, utcnow
from chatmem.models.conversation import Conversation
from chatmem.models.message import Message, MessageRole


@contextmanager
def _store_errors(session: Session, action: str):
    try:
        yield
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Store failure while trying to {action}: {e}")
        raise StoreUnavailable(f"Could not {action}") from e


class ConversationDirectory:
    """Registry of conversation id -> owner + description."""

    def __init__(self, session: Session):
        self.session = session

    def new(self, owner_id: str, description: str) -> Conversation:
        """Unsaved conversation; pass it to TranscriptStore.append_turn to commit it with its first turn."""
        return Conversation(owner_id=owner_id, description=description)

    def register(self, owner_id: str, description: str) -> Conversation:
        """Commit a conversation on its own, without a first turn (seeding and admin use)."""
        conversation = self.new(owner_id, description)
        with _store_errors(self.session, "register conversation"):
            self.session.add(conversation)
            self.session.commit()
            self.session.refresh(conversation)
        logger.info(f"Registered conversation {conversation.conversation_id} for owner {owner_id}")
        return conversation

    def get(self, conversation_id: str) -> Optional[Conversation]:
        with _store_errors(self.session, "load conversation"):
            return self.session.exec(
                select(Conversation).where(Conversation.conversation_id == conversation_id)
            ).first()

    def exists(self, conversation_id: str) -> bool:
        with _store_errors(self.session, "check conversation"):
            count = self.session.exec(
                select(func.count(Conversation.id)).where(Conversation.conversation_id == conversation_id)
            ).one()
        return count > 0

    def list_for_owner(self, owner_id: str) -> List[Conversation]:
        """Most recently created first."""
        with _store_errors(self.session, "list conversations"):
            return list(self.session.exec(
                select(Conversation)
                .where(Conversation.owner_id == owner_id)
                .order_by(desc(Conversation.created_at), desc(Conversation.id))
            ).all())


class TranscriptStore:
    """Append-only message log, ordered by (timestamp, id) within a conversation."""

    def __init__(self, session: Session):
        self.session = session

    def _ordered(self, conversation_id: str):
        return select(Message).where(Message.conversation_id == conversation_id)

    def messages(self, conversation_id: str) -> List[Message]:
        with _store_errors(self.session, "load transcript"):
            return list(self.session.exec(
                self._ordered(conversation_id).order_by(Message.timestamp, Message.id)
            ).all())

    def recent(self, conversation_id: str, limit: int) -> List[Message]:
        """Last ``limit`` messages, oldest first."""
        if limit <= 0:
            return []
        with _store_errors(self.session, "load recent messages"):
            newest_first = self.session.exec(
                self._ordered(conversation_id)
                .order_by(desc(Message.timestamp), desc(Message.id))
                .limit(limit)
            ).all()
        return list(reversed(newest_first))

    def count(self, conversation_id: str) -> int:
        with _store_errors(self.session, "count messages"):
            return self.session.exec(
                select(func.count(Message.id)).where(Message.conversation_id == conversation_id)
            ).one()

    def latest_timestamp(self, conversation_id: str) -> Optional[datetime]:
        with _store_errors(self.session, "read latest timestamp"):
            return self.session.exec(
                select(func.max(Message.timestamp)).where(Message.conversation_id == conversation_id)
            ).one()

    def append_turn(
        self,
        conversation_id: str,
        user_content: str,
        assistant_content: str,
        new_conversation: Optional[Conversation] = None,
    ) -> List[Message]:
        """
        Persist one USER + ASSISTANT pair in a single transaction.

        ``new_conversation``, when given, is inserted in the same transaction so
        a conversation is never visible without its first turn.
        """
        with _store_errors(self.session, "append turn"):
            if new_conversation is not None:
                self.session.add(new_conversation)
                self.session.flush()

            # One timestamp per turn, never earlier than what is stored for this
            # conversation; row id orders USER before ASSISTANT and keeps the pair
            # adjacent when turns race
            turn_ts = utcnow()
            floor = self.latest_timestamp(conversation_id)
            if floor is not None and turn_ts < as_utc(floor):
                turn_ts = as_utc(floor)

            user_msg = Message(
                conversation_id=conversation_id,
                role=MessageRole.USER,
                content=user_content,
                timestamp=turn_ts,
            )
            self.session.add(user_msg)
            self.session.flush()

            assistant_msg = Message(
                conversation_id=conversation_id,
                role=MessageRole.ASSISTANT,
                content=assistant_content,
                timestamp=turn_ts,
            )
            self.session.add(assistant_msg)
            self.session.commit()

            self.session.refresh(user_msg)
            self.session.refresh(assistant_msg)
            if new_conversation is not None:
                self.session.refresh(new_conversation)
        return [user_msg, assistant_msg]
