"""Car service — CRUD with soft delete.

Learn: SoftDeleteRepository is the generic part. Any model with an `id`,
a `created_at` and a boolean `deleted_flag` gets:

- list():        rows with deleted_flag = false only
- create():      insert with deleted_flag = false
- update():      full replace of the business fields, deleted rows included
- soft_delete(): one atomic UPDATE setting deleted_flag = true

The flag goes false → true once and is never cleared, so soft_delete() is
idempotent: a second call matches the row and writes the same value.
update() and soft_delete() raise NotFound when the id matches nothing,
rather than reporting a silent no-op.
"""

import uuid
from typing import Any, ClassVar, Generic, TypeVar

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from motorpool.db.models import Base, Car
from motorpool.errors import NotFound, ValidationError

logger = structlog.get_logger()

ModelT = TypeVar("ModelT", bound=Base)


class SoftDeleteRepository(Generic[ModelT]):
    """Generic CRUD over a soft-deletable table."""

    model: ClassVar[type]
    fields: ClassVar[tuple[str, ...]]

    def __init__(self, db: AsyncSession):
        self.db = db

    def _check_fields(self, values: dict[str, Any]) -> dict[str, Any]:
        missing = [f for f in self.fields if values.get(f) is None]
        unknown = sorted(set(values) - set(self.fields))
        if missing or unknown:
            raise ValidationError(detail={"missing": missing, "unknown": unknown})
        return {f: values[f] for f in self.fields}

    async def list(self) -> list[ModelT]:
        result = await self.db.execute(
            select(self.model)
            .where(self.model.deleted_flag.is_(False))
            .order_by(self.model.created_at, self.model.id)
        )
        return list(result.scalars().all())

    async def get(self, id: uuid.UUID) -> ModelT | None:
        """Fetch by id, soft-deleted rows included."""
        return await self.db.get(self.model, id, populate_existing=True)

    async def create(self, **values: Any) -> ModelT:
        obj = self.model(**self._check_fields(values), deleted_flag=False)
        self.db.add(obj)
        await self.db.commit()
        return await self.get(obj.id)

    async def update(self, id: uuid.UUID, **values: Any) -> ModelT:
        result = await self.db.execute(
            update(self.model)
            .where(self.model.id == id)
            .values(**self._check_fields(values))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotFound(f"{self.model.__name__} {id} not found")
        await self.db.commit()
        return await self.get(id)

    async def soft_delete(self, id: uuid.UUID) -> ModelT:
        result = await self.db.execute(
            update(self.model)
            .where(self.model.id == id)
            .values(deleted_flag=True)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotFound(f"{self.model.__name__} {id} not found")
        await self.db.commit()
        logger.info("resource.soft_deleted", model=self.model.__name__, id=str(id))
        return await self.get(id)


class CarService(SoftDeleteRepository[Car]):
    """Business logic for cars."""

    model = Car
    fields = ("make", "model", "year")
