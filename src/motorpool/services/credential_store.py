"""Credential store — user identity rows.

Learn: the store only ever sees password HASHES. Hashing happens in the
route (auth.password), so nothing here can log or leak a plaintext.
Uniqueness of usernames is enforced by the database constraint, not by a
check-then-insert, so two concurrent registrations of the same name
cannot both succeed.
"""

import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, MultipleResultsFound, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from motorpool.db.models import User
from motorpool.errors import DuplicateIdentity, IntegrityFault, StorageError

logger = structlog.get_logger()


class CredentialStore:
    """Persists and looks up users through the request's session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def register(self, username: str, password_hash: str) -> uuid.UUID:
        """Insert a new user and return its id."""
        user = User(username=username, password_hash=password_hash)
        self.db.add(user)
        try:
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            raise DuplicateIdentity(detail={"username": username}) from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("auth.register_failed", error=str(e))
            raise StorageError() from e

        logger.info("auth.registered", user_id=str(user.id))
        return user.id

    async def find_by_username(self, username: str) -> User | None:
        result = await self.db.execute(select(User).where(User.username == username))
        try:
            return result.scalars().one_or_none()
        except MultipleResultsFound as e:
            logger.error("auth.duplicate_username_rows", username=username)
            raise IntegrityFault(f"Multiple users named {username!r}") from e

    async def get(self, user_id: uuid.UUID) -> User | None:
        return await self.db.get(User, user_id)
