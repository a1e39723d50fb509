"""
Id sources for dreams and wins.

Business logic never generates ids itself; it asks an injected IdSource so
tests can pin ids down.
"""

import itertools
import threading
from typing import Protocol
from uuid import uuid4


class IdSource(Protocol):
    def new_id(self) -> str:
        ...


class UuidIdSource:
    """Random UUID4 ids rendered as 32 hex characters."""

    def new_id(self) -> str:
        return uuid4().hex


class SequenceIdSource:
    """Deterministic ids: ``<prefix>-1``, ``<prefix>-2``, ..."""

    def __init__(self, prefix: str = "id", start: int = 1):
        self._prefix = prefix
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def new_id(self) -> str:
        with self._lock:
            return f"{self._prefix}-{next(self._counter)}"


default_id_source = UuidIdSource()
