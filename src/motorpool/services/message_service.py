"""Message service — posting messages and the last-message-per-sender feed."""

import uuid
from typing import Optional

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from motorpool.db.models import Message
from motorpool.errors import NotFound
from motorpool.services.credential_store import CredentialStore


class MessageService:
    """Business logic for messages."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def send(
        self,
        from_user_id: uuid.UUID,
        content: str,
        to_user_id: Optional[uuid.UUID] = None,
    ) -> Message:
        users = CredentialStore(self.db)
        if await users.get(from_user_id) is None:
            raise NotFound("Sender not found")
        if to_user_id is not None and await users.get(to_user_id) is None:
            raise NotFound("Recipient not found")

        message = Message(
            from_user_id=from_user_id, to_user_id=to_user_id, content=content
        )
        self.db.add(message)
        await self.db.commit()
        return message

    async def last_messages(self) -> list[Message]:
        """The most recent message of every sender.

        Learn: a grouped subquery finds each sender's latest date_time, and
        the join brings back the full rows. If a sender has two messages
        with the same latest timestamp, both are returned.
        """
        latest = (
            select(
                Message.from_user_id,
                func.max(Message.date_time).label("date_time"),
            )
            .group_by(Message.from_user_id)
            .subquery()
        )
        result = await self.db.execute(
            select(Message)
            .join(
                latest,
                and_(
                    Message.from_user_id == latest.c.from_user_id,
                    Message.date_time == latest.c.date_time,
                ),
            )
            .order_by(Message.date_time.desc(), Message.id)
        )
        return list(result.scalars().all())
