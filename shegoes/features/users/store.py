"""
Document stores for UserState.

Same contract for the in-memory and SQL backends:
- get(user_id) -> document | None
- put(user_id, document)            first creation, replaces nothing
- patch(user_id, fields)            shallow merge, last write wins

No compare-and-swap is offered; two concurrent patches race and the later one
wins field by field.
"""

import copy
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Protocol

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError

from shegoes.core.config import resolve_store_backend, settings
from shegoes.core.database import create_all_tables, get_engine, user_states
from shegoes.core.errors import ConflictError, NotFoundError

Document = Dict[str, Any]


class UserStateStore(Protocol):
    def get(self, user_id: str) -> Optional[Document]:
        ...

    def put(self, user_id: str, document: Document) -> None:
        ...

    def patch(self, user_id: str, fields: Document) -> None:
        ...


class InMemoryUserStateStore:
    """Process-local store used in development and tests."""

    def __init__(self):
        self._documents: Dict[str, Document] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> Optional[Document]:
        with self._lock:
            document = self._documents.get(user_id)
            return copy.deepcopy(document) if document is not None else None

    def put(self, user_id: str, document: Document) -> None:
        with self._lock:
            if user_id in self._documents:
                raise ConflictError(f"User state {user_id} already exists")
            self._documents[user_id] = copy.deepcopy(document)

    def patch(self, user_id: str, fields: Document) -> None:
        with self._lock:
            if user_id not in self._documents:
                raise NotFoundError(f"User state {user_id} not found")
            self._documents[user_id].update(copy.deepcopy(fields))

    def clear(self) -> None:
        with self._lock:
            self._documents.clear()


class SqlUserStateStore:
    """SQLAlchemy-backed store: one JSON document row per user."""

    def __init__(self, engine=None):
        self._engine = engine
        self._schema_ready = False

    @property
    def engine(self):
        return self._engine if self._engine is not None else get_engine()

    def _ensure_schema(self) -> None:
        if self._schema_ready:
            return
        create_all_tables(self.engine)
        self._schema_ready = True

    def get(self, user_id: str) -> Optional[Document]:
        self._ensure_schema()
        with self.engine.connect() as conn:
            row = conn.execute(
                select(user_states.c.document).where(user_states.c.user_id == user_id)
            ).first()
        return dict(row.document) if row else None

    def put(self, user_id: str, document: Document) -> None:
        self._ensure_schema()
        now = datetime.now(timezone.utc)
        try:
            with self.engine.begin() as conn:
                conn.execute(
                    insert(user_states).values(
                        user_id=user_id,
                        document=document,
                        created_at=now,
                        updated_at=now,
                    )
                )
        except IntegrityError as exc:
            raise ConflictError(f"User state {user_id} already exists") from exc

    def patch(self, user_id: str, fields: Document) -> None:
        # Read-merge-write without a row lock: last write wins.
        self._ensure_schema()
        with self.engine.begin() as conn:
            row = conn.execute(
                select(user_states.c.document).where(user_states.c.user_id == user_id)
            ).first()
            if row is None:
                raise NotFoundError(f"User state {user_id} not found")
            merged = dict(row.document)
            merged.update(fields)
            conn.execute(
                update(user_states)
                .where(user_states.c.user_id == user_id)
                .values(document=merged, updated_at=datetime.now(timezone.utc))
            )


def build_store(backend: Optional[str] = None) -> UserStateStore:
    kind = (backend or resolve_store_backend(settings)).lower()
    if kind == "sql":
        return SqlUserStateStore()
    if kind == "memory":
        return InMemoryUserStateStore()
    raise ValueError(f"Unknown STORE_BACKEND: {kind}")
