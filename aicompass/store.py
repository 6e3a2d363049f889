from __future__ import annotations

from fastapi import Depends
from pydantic import BaseModel, Field
from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from aicompass.conversation.content import Message, now_ms
from aicompass.dbutils import get_db_session
from aicompass.exceptions import ConversationNotFound
from aicompass.orm import Conversation as ConversationRow
from aicompass.orm import ConversationMessage


class Conversation(BaseModel):
    conversation_id: str
    name: str
    created_at: int
    messages: list[Message] = Field(default_factory=list)


def get_conversation_store(session: AsyncSession = Depends(get_db_session)) -> ConversationStore:
    return ConversationStore(session)


class ConversationStore:
    """Per-user conversations and their message logs.

    Appending inserts a single message row, so concurrent appends to the same
    conversation never overwrite each other.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _get_row(self, user_id: str, conversation_id: str) -> ConversationRow:
        result = await self.session.execute(
            select(ConversationRow).where(
                ConversationRow.conversation_id == conversation_id,
                ConversationRow.user_id == user_id,
            )
        )
        row = result.scalars().one_or_none()
        if row is None:
            raise ConversationNotFound(conversation_id)
        return row

    async def _load_messages(self, conversation_id: str) -> list[Message]:
        result = await self.session.execute(
            select(ConversationMessage)
            .where(ConversationMessage.conversation_id == conversation_id)
            .order_by(ConversationMessage.id)
        )
        return [Message(role=m.role, text=m.text, timestamp=m.timestamp) for m in result.scalars().all()]

    async def count(self, user_id: str) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(ConversationRow).where(ConversationRow.user_id == user_id)
        )
        return result.scalar_one()

    async def create(self, user_id: str, name: str) -> str:
        row = ConversationRow(user_id=user_id, name=name, created_at=now_ms())
        self.session.add(row)
        await self.session.commit()
        await self.session.refresh(row)
        return row.conversation_id

    async def list(self, user_id: str) -> list[Conversation]:
        """Conversations of a user, newest first, without their messages."""
        result = await self.session.execute(
            select(ConversationRow)
            .where(ConversationRow.user_id == user_id)
            .order_by(ConversationRow.created_at.desc())
        )
        return [
            Conversation(conversation_id=row.conversation_id, name=row.name, created_at=row.created_at)
            for row in result.scalars().all()
        ]

    async def get(self, user_id: str, conversation_id: str) -> Conversation:
        row = await self._get_row(user_id, conversation_id)
        return Conversation(
            conversation_id=row.conversation_id,
            name=row.name,
            created_at=row.created_at,
            messages=await self._load_messages(conversation_id),
        )

    async def has_messages(self, user_id: str, conversation_id: str) -> bool:
        await self._get_row(user_id, conversation_id)
        result = await self.session.execute(
            select(ConversationMessage.id).where(ConversationMessage.conversation_id == conversation_id).limit(1)
        )
        return result.first() is not None

    async def append(self, user_id: str, conversation_id: str, message: Message) -> None:
        await self._get_row(user_id, conversation_id)
        self.session.add(
            ConversationMessage(
                conversation_id=conversation_id,
                role=message.role,
                text=message.text,
                timestamp=message.timestamp,
            )
        )
        await self.session.commit()

    async def rename(self, user_id: str, conversation_id: str, name: str) -> None:
        await self._get_row(user_id, conversation_id)
        await self.session.execute(
            update(ConversationRow).where(ConversationRow.conversation_id == conversation_id).values(name=name)
        )
        await self.session.commit()

    async def delete(self, user_id: str, conversation_id: str) -> None:
        await self._get_row(user_id, conversation_id)
        await self.session.execute(
            delete(ConversationMessage).where(ConversationMessage.conversation_id == conversation_id)
        )
        await self.session.execute(delete(ConversationRow).where(ConversationRow.conversation_id == conversation_id))
        await self.session.commit()
