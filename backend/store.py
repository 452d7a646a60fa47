"""
Generic per-collection CRUD over the async session.

    store = Store(session, Offer)
    rows = await store.list(where={"is_featured": True}, order_by=("created_at", "asc"), limit=3)
    hits = await store.list(where={"title": {"contains": "карта"}}, limit=5)

Every write commits immediately: callers see the same durability they would
get from a remote document store. ``increment`` is the atomic counterpart of
read-modify-write for counters such as ``views``.
"""

from __future__ import annotations

import logging
from typing import Any, Generic, Mapping, Optional, Sequence, TypeVar, Union

from sqlalchemy import Boolean, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from backend.errors import NotFound, ValidationError
from backend.models import new_id

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")

OrderBy = Union[tuple, Mapping[str, str], str, None]

_TRUE = {"1", "true", "yes", "on"}


def to_bool(value: Any) -> bool:
    """Normalize 0/1, "0"/"1" and real booleans coming from forms or legacy rows."""
    if isinstance(value, str):
        return value.strip().lower() in _TRUE
    return bool(value)


class Store(Generic[ModelT]):
    """CRUD for one ORM model (one "collection")."""

    def __init__(self, session: AsyncSession, model: type[ModelT]):
        self.session = session
        self.model = model

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------

    def _column(self, name: str):
        column = self.model.__table__.columns.get(name)
        if column is None:
            raise ValidationError(f"Неизвестное поле: {name}")
        return getattr(self.model, name)

    def _coerce(self, name: str, value: Any) -> Any:
        column = self.model.__table__.columns[name]
        if isinstance(column.type, Boolean) and value is not None:
            return to_bool(value)
        return value

    def _where(self, stmt, where: Optional[Mapping[str, Any]]):
        for name, cond in (where or {}).items():
            col = self._column(name)
            if isinstance(cond, Mapping):
                if "contains" in cond:
                    stmt = stmt.where(col.contains(str(cond["contains"]), autoescape=True))
                if "in" in cond:
                    stmt = stmt.where(col.in_(list(cond["in"])))
                if "ne" in cond:
                    stmt = stmt.where(col != self._coerce(name, cond["ne"]))
            elif cond is None:
                stmt = stmt.where(col.is_(None))
            else:
                stmt = stmt.where(col == self._coerce(name, cond))
        return stmt

    def _order(self, stmt, order_by: OrderBy):
        if not order_by:
            return stmt
        if isinstance(order_by, str):
            pairs: Sequence[tuple] = [(order_by, "asc")]
        elif isinstance(order_by, Mapping):
            pairs = list(order_by.items())
        elif order_by and isinstance(order_by[0], (tuple, list)):
            pairs = list(order_by)
        else:
            pairs = [tuple(order_by)]

        for name, direction in pairs:
            col = self._column(name)
            direction = (direction or "asc").lower()
            if direction not in ("asc", "desc"):
                raise ValidationError(f"Неверное направление сортировки: {direction}")
            stmt = stmt.order_by(col.desc() if direction == "desc" else col.asc())
        return stmt

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list(
        self,
        where: Optional[Mapping[str, Any]] = None,
        order_by: OrderBy = None,
        limit: Optional[int] = None,
    ) -> list[ModelT]:
        stmt = self._order(self._where(select(self.model), where), order_by)
        if limit is not None:
            stmt = stmt.limit(int(limit))
        return list((await self.session.execute(stmt)).scalars().all())

    async def get(self, id: str) -> Optional[ModelT]:
        if not id:
            return None
        return await self.session.get(self.model, id)

    async def count(self, where: Optional[Mapping[str, Any]] = None) -> int:
        stmt = self._where(select(func.count()).select_from(self.model), where)
        return (await self.session.execute(stmt)).scalar() or 0

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _clean(self, fields: Mapping[str, Any], partial: bool = False) -> dict:
        """Validate column names; ``None`` never reaches a NOT NULL column.

        On create such a ``None`` is dropped so the column default applies;
        on update it is rejected.
        """
        data = {}
        for name, value in fields.items():
            self._column(name)
            column = self.model.__table__.columns[name]
            if value is None and not column.nullable:
                if partial:
                    raise ValidationError(f"Поле «{name}» не может быть пустым")
                if column.default is not None:
                    continue
            data[name] = self._coerce(name, value)
        return data

    async def _commit(self):
        try:
            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            logger.warning("⚠️ %s: откат транзакции: %s", self.model.__tablename__, e)
            raise

    async def create(self, **fields) -> ModelT:
        data = self._clean(fields)
        data.setdefault("id", new_id())
        obj = self.model(**data)
        self.session.add(obj)
        await self._commit()
        return obj

    async def update(self, id: str, **fields) -> ModelT:
        obj = await self.get(id)
        if obj is None:
            raise NotFound()
        for name, value in self._clean(fields, partial=True).items():
            if name == "id":
                continue
            setattr(obj, name, value)
        await self._commit()
        return obj

    async def upsert(self, **fields) -> ModelT:
        if not fields.get("id"):
            raise ValidationError("Для upsert нужен id")
        obj = await self.get(fields["id"])
        if obj is None:
            return await self.create(**fields)
        return await self.update(fields["id"], **fields)

    async def delete(self, id: str) -> None:
        obj = await self.get(id)
        if obj is None:
            raise NotFound()
        await self.session.delete(obj)
        await self._commit()

    async def increment(self, id: str, field: str, by: int = 1) -> int:
        """Atomic ``field = field + by``; returns the stored value."""
        col = self._column(field)
        result = await self.session.execute(
            update(self.model)
            .where(self.model.id == id)
            .values({field: func.coalesce(col, 0) + by})
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await self.session.rollback()
            raise NotFound()
        await self._commit()

        value = (
            await self.session.execute(select(col).where(self.model.id == id))
        ).scalar() or 0
        obj = await self.session.get(self.model, id)
        if obj is not None:
            set_committed_value(obj, field, value)
        return value
