"""Durable storage for the cart, the saved-for-later list, and recently viewed products.

Every operation is a coroutine. The SQLAlchemy-backed store runs its
blocking session work on a worker thread.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, Protocol, Type, TypeVar

from sqlalchemy import Column, DateTime, Integer, String, create_engine, delete, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from cart import CartLine
from catalog import Selection
from config import StorefrontConfig, config as default_config

logger = logging.getLogger(__name__)

T = TypeVar("T")

Base = declarative_base()


class CartStoreError(Exception):
    """Raised when the durable cart store cannot complete an operation."""


class ItemNotFoundError(CartStoreError):
    pass


class CartStore(Protocol):
    async def get_cart(self) -> List[CartLine]:
        ...

    async def add_to_cart(self, line: CartLine) -> int:
        ...

    async def update_cart_item(
        self, item_id: int, quantity: Optional[int] = None, selected_image: Optional[str] = None
    ) -> None:
        ...

    async def remove_from_cart(self, item_id: int) -> None:
        ...

    async def clear_cart(self) -> None:
        ...

    async def get_saved_for_later(self) -> List[CartLine]:
        ...

    async def save_for_later(self, line: CartLine) -> int:
        ...

    async def remove_from_saved_for_later(self, item_id: int) -> None:
        ...

    async def move_to_saved(self, item_id: int) -> int:
        ...

    async def move_to_cart(self, saved_id: int, merge_into: Optional[int] = None) -> int:
        ...

    async def add_recently_viewed(self, product_id: str) -> None:
        ...

    async def get_recently_viewed(self) -> List[str]:
        ...


class _LineColumns:
    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(String, nullable=False, index=True)
    color = Column(String, nullable=False)
    material = Column(String, nullable=False)
    size = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    added_at = Column(DateTime(timezone=True), nullable=False)
    selected_image = Column(String, nullable=True)


class CartItemRecord(_LineColumns, Base):
    __tablename__ = "cart_items"


class SavedItemRecord(_LineColumns, Base):
    __tablename__ = "saved_for_later"


class RecentlyViewedRecord(Base):
    __tablename__ = "recently_viewed"

    product_id = Column(String, primary_key=True)
    sequence = Column(Integer, nullable=False, index=True)
    viewed_at = Column(DateTime(timezone=True), nullable=False)


LineRecord = Type[_LineColumns]


def _to_record(record_type: LineRecord, line: CartLine) -> _LineColumns:
    return record_type(
        product_id=line.product_id,
        color=line.selection.color,
        material=line.selection.material,
        size=line.selection.size,
        quantity=line.quantity,
        added_at=line.added_at,
        selected_image=line.selected_image,
    )


def _to_line(record: _LineColumns) -> CartLine:
    added_at = record.added_at
    if added_at.tzinfo is None:
        # SQLite drops the offset; everything is written in UTC.
        added_at = added_at.replace(tzinfo=timezone.utc)
    return CartLine(
        id=record.id,
        product_id=record.product_id,
        selection=Selection(color=record.color, material=record.material, size=record.size),
        quantity=record.quantity,
        added_at=added_at,
        selected_image=record.selected_image,
    )


class SqlCartStore:
    """Cart store persisted through SQLAlchemy (SQLite by default)."""

    def __init__(self, engine: Optional[Engine] = None, settings: StorefrontConfig = default_config) -> None:
        if engine is None:
            engine = create_engine(settings.database_url, connect_args={"check_same_thread": False})
        self._engine = engine
        self._sessions = sessionmaker(bind=engine, autocommit=False, autoflush=False)
        self._recently_viewed_limit = settings.recently_viewed_limit
        Base.metadata.create_all(bind=engine)

    async def _run(self, work: Callable[[Session], T]) -> T:
        def in_session() -> T:
            with self._sessions() as session:
                try:
                    result = work(session)
                    session.commit()
                    return result
                except Exception:
                    session.rollback()
                    raise

        try:
            return await asyncio.to_thread(in_session)
        except SQLAlchemyError as exc:
            logger.error("Cart store operation failed: %s", exc)
            raise CartStoreError(str(exc)) from exc

    # Cart

    async def get_cart(self) -> List[CartLine]:
        return await self._run(lambda session: self._all_lines(session, CartItemRecord))

    async def add_to_cart(self, line: CartLine) -> int:
        return await self._run(lambda session: self._insert(session, CartItemRecord, line))

    async def update_cart_item(
        self, item_id: int, quantity: Optional[int] = None, selected_image: Optional[str] = None
    ) -> None:
        if quantity is not None and quantity <= 0:
            raise ValueError("Quantity must be positive")

        def update(session: Session) -> None:
            record = session.get(CartItemRecord, item_id)
            if record is None:
                raise ItemNotFoundError(f"Item not found: {item_id}")
            if quantity is not None:
                record.quantity = quantity
            if selected_image is not None:
                record.selected_image = selected_image

        await self._run(update)

    async def remove_from_cart(self, item_id: int) -> None:
        await self._run(lambda session: self._delete(session, CartItemRecord, item_id))

    async def clear_cart(self) -> None:
        await self._run(lambda session: session.execute(delete(CartItemRecord)))

    # Saved for later

    async def get_saved_for_later(self) -> List[CartLine]:
        return await self._run(lambda session: self._all_lines(session, SavedItemRecord))

    async def save_for_later(self, line: CartLine) -> int:
        return await self._run(lambda session: self._insert(session, SavedItemRecord, line))

    async def remove_from_saved_for_later(self, item_id: int) -> None:
        await self._run(lambda session: self._delete(session, SavedItemRecord, item_id))

    # Moves between the cart and the saved list run in one transaction

    async def move_to_saved(self, item_id: int) -> int:
        """Move a cart row to the saved list and return its new saved id."""

        def move(session: Session) -> int:
            record = session.get(CartItemRecord, item_id)
            if record is None:
                raise ItemNotFoundError(f"Item not found: {item_id}")
            line = _to_line(record)
            session.delete(record)
            return self._insert(session, SavedItemRecord, line)

        return await self._run(move)

    async def move_to_cart(self, saved_id: int, merge_into: Optional[int] = None) -> int:
        """Move a saved row into the cart and return the id of the cart row.

        With ``merge_into`` the saved quantity is added to that cart row
        instead of inserting a new one.
        """

        def move(session: Session) -> int:
            record = session.get(SavedItemRecord, saved_id)
            if record is None:
                raise ItemNotFoundError(f"Saved item not found: {saved_id}")
            line = _to_line(record)
            session.delete(record)
            if merge_into is None:
                return self._insert(session, CartItemRecord, line)

            target = session.get(CartItemRecord, merge_into)
            if target is None:
                raise ItemNotFoundError(f"Item not found: {merge_into}")
            target.quantity = target.quantity + line.quantity
            return target.id

        return await self._run(move)

    # Recently viewed

    async def add_recently_viewed(self, product_id: str) -> None:
        limit = self._recently_viewed_limit

        def touch(session: Session) -> None:
            latest = session.scalar(select(func.max(RecentlyViewedRecord.sequence))) or 0
            record = session.get(RecentlyViewedRecord, product_id)
            if record is None:
                record = RecentlyViewedRecord(product_id=product_id)
                session.add(record)
            record.sequence = latest + 1
            record.viewed_at = datetime.now(timezone.utc)
            session.flush()

            stale = session.scalars(
                select(RecentlyViewedRecord).order_by(RecentlyViewedRecord.sequence.desc()).offset(limit)
            ).all()
            for old in stale:
                session.delete(old)

        await self._run(touch)

    async def get_recently_viewed(self) -> List[str]:
        limit = self._recently_viewed_limit

        def recent(session: Session) -> List[str]:
            rows = session.scalars(
                select(RecentlyViewedRecord.product_id).order_by(RecentlyViewedRecord.sequence.desc()).limit(limit)
            )
            return list(rows)

        return await self._run(recent)

    # Helpers

    @staticmethod
    def _all_lines(session: Session, record_type: LineRecord) -> List[CartLine]:
        records = session.scalars(select(record_type).order_by(record_type.id)).all()
        return [_to_line(record) for record in records]

    @staticmethod
    def _insert(session: Session, record_type: LineRecord, line: CartLine) -> int:
        record = _to_record(record_type, line)
        session.add(record)
        session.flush()
        return record.id

    @staticmethod
    def _delete(session: Session, record_type: LineRecord, item_id: int) -> None:
        record = session.get(record_type, item_id)
        if record is not None:
            session.delete(record)
