"""
Document store backed by SQLAlchemy's async engine.

Records are schema-less JSON documents grouped into named collections, all
kept in a single ``documents`` table. Filters are equality matches on ``id``
or on top-level document fields. A document may also carry a ``unique_key``
which the database keeps unique within its collection.

The store is an explicit handle: ``open()`` at application startup creates
the engine and the table, ``close()`` at shutdown disposes of it. Every
operation runs in its own transaction under the configured timeout.
"""
import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional

from sqlalchemy import (
    Column, DateTime, JSON, MetaData, String, Table, UniqueConstraint, and_, delete, insert, select, update
)
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from carshop.exceptions import Conflict, StoreFailure, Timeout

logger = logging.getLogger("carshop.store")

Document = Dict[str, Any]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Metadata object for database tables
metadata = MetaData()

documents = Table(
    "documents", metadata,
    Column("id", String(32), primary_key=True),
    Column("collection", String(64), nullable=False, index=True),
    Column("data", JSON, nullable=False),
    Column("created_at", DateTime(timezone=True), default=_utcnow, nullable=False),
    # Optional per-collection unique value, e.g. a user's email
    Column("unique_key", String(320), nullable=True),
    UniqueConstraint("collection", "unique_key", name="uq_documents_collection_unique_key"),
)


def new_document_id() -> str:
    return uuid.uuid4().hex


def _to_document(row) -> Document:
    return {"id": row.id, **row.data}


def _strip_id(document: Document) -> Document:
    return {k: v for k, v in document.items() if k != "id"}


def build_filter(collection: str, filter: Optional[Document] = None):
    """Compile an equality filter into a WHERE clause for one collection."""
    clauses = [documents.c.collection == collection]
    for key, value in (filter or {}).items():
        if key == "id":
            clauses.append(documents.c.id == str(value))
            continue
        field = documents.c.data[key]
        # bool before int: bool is an int subclass
        if isinstance(value, bool):
            clauses.append(field.as_boolean() == value)
        elif isinstance(value, int):
            clauses.append(field.as_integer() == value)
        elif isinstance(value, float):
            clauses.append(field.as_float() == value)
        elif isinstance(value, str):
            clauses.append(field.as_string() == value)
        else:
            raise ValueError(f"Unsupported filter value for '{key}': {value!r}")
    return and_(*clauses)


class Collection:
    """CRUD operations over one named collection."""

    def __init__(self, store: "DocumentStore", name: str):
        self.store = store
        self.name = name

    async def find(self, filter: Optional[Document] = None, limit: Optional[int] = None) -> List[Document]:
        query = (
            select(documents)
            .where(build_filter(self.name, filter))
            .order_by(documents.c.created_at, documents.c.id)
        )
        if limit:
            query = query.limit(limit)

        async def operation(session: AsyncSession):
            result = await session.execute(query)
            return [_to_document(row) for row in result.fetchall()]

        return await self.store.run(operation, context=f"find {self.name}")

    async def find_one(self, filter: Document) -> Optional[Document]:
        query = select(documents).where(build_filter(self.name, filter)).limit(1)

        async def operation(session: AsyncSession):
            result = await session.execute(query)
            row = result.fetchone()
            return _to_document(row) if row is not None else None

        return await self.store.run(operation, context=f"find_one {self.name}")

    async def insert_one(self, document: Document, unique_key: Optional[str] = None) -> str:
        """
        Store ``document`` and return its new id.

        Raises:
            Conflict: If ``unique_key`` is already taken in this collection
        """
        document_id = new_document_id()
        stmt = insert(documents).values(
            id=document_id,
            collection=self.name,
            data=_strip_id(document),
            unique_key=unique_key,
        )

        async def operation(session: AsyncSession):
            await session.execute(stmt)
            return document_id

        return await self.store.run(operation, context=f"insert_one {self.name}")

    async def find_one_and_update(self, filter: Document, patch: Document) -> Optional[Document]:
        """Merge ``patch`` into the first match and return the updated document."""
        query = select(documents).where(build_filter(self.name, filter)).limit(1).with_for_update()
        patch = _strip_id(patch)

        async def operation(session: AsyncSession):
            result = await session.execute(query)
            row = result.fetchone()
            if row is None:
                return None
            data = {**row.data, **patch}
            await session.execute(
                update(documents).where(documents.c.id == row.id).values(data=data)
            )
            return {"id": row.id, **data}

        return await self.store.run(operation, context=f"find_one_and_update {self.name}")

    async def find_one_and_delete(self, filter: Document) -> Optional[Document]:
        """Delete the first match and return it as it was before deletion."""
        query = select(documents).where(build_filter(self.name, filter)).limit(1).with_for_update()

        async def operation(session: AsyncSession):
            result = await session.execute(query)
            row = result.fetchone()
            if row is None:
                return None
            await session.execute(delete(documents).where(documents.c.id == row.id))
            return _to_document(row)

        return await self.store.run(operation, context=f"find_one_and_delete {self.name}")


class DocumentStore:
    """
    Handle on the document database.

    Args:
        database_url: SQLAlchemy async URL (``postgresql+asyncpg://...`` or
            ``sqlite+aiosqlite:///...``)
        timeout: Seconds allowed for each store operation
    """

    def __init__(self, database_url: str, timeout: float = 5.0):
        self.database_url = database_url
        self.timeout = timeout
        self.engine = None
        self._session_factory = None

    @property
    def is_open(self) -> bool:
        return self.engine is not None

    async def open(self):
        if self.is_open:
            return
        self.engine = create_async_engine(self.database_url, echo=False)
        self._session_factory = sessionmaker(self.engine, class_=AsyncSession, expire_on_commit=False)
        async with self.engine.begin() as conn:
            await conn.run_sync(metadata.create_all)
        logger.info(f"Document store opened: {self.engine.url.render_as_string(hide_password=True)}")

    async def close(self):
        if not self.is_open:
            return
        await self.engine.dispose()
        self.engine = None
        self._session_factory = None
        logger.info("Document store closed")

    def collection(self, name: str) -> Collection:
        return Collection(self, name)

    async def ping(self):
        """Round-trip a trivial query; raises like any other store operation."""
        async def operation(session: AsyncSession):
            await session.execute(select(1))
            return True

        return await self.run(operation, context="ping")

    async def run(self, operation: Callable[[AsyncSession], Awaitable[Any]], context: str = ""):
        """
        Run ``operation`` inside a transaction, bounded by the store timeout.

        Raises:
            StoreFailure: If the store is closed or the operation fails
            Conflict: If a write violates a unique key
            Timeout: If the operation does not finish in time
        """
        if not self.is_open:
            raise StoreFailure("Document store is not open")
        try:
            return await asyncio.wait_for(self._transaction(operation), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.error(f"ERROR: store operation timed out | Context: {context}")
            raise Timeout() from e
        except IntegrityError as e:
            logger.warning(f"Unique key violation | Context: {context}")
            raise Conflict(reason=str(e)) from e
        except SQLAlchemyError as e:
            logger.error(f"ERROR: {str(e)} | Context: {context}")
            raise StoreFailure(str(e)) from e
        except Exception as e:
            # driver errors (refused connections, dropped sockets) are not SQLAlchemyErrors
            logger.error(f"ERROR: {e.__class__.__name__}: {str(e)} | Context: {context}")
            raise StoreFailure(str(e)) from e

    async def _transaction(self, operation):
        async with self._session_factory() as session:
            async with session.begin():
                return await operation(session)
