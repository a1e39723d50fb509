"""
UserState repository: a local cache mirrored to a remote document store.

Writes are optimistic. ``apply`` merges changes into the cache first and then
patches the remote document; a failed patch is logged and the cache keeps the
merged state (no rollback). ``reconcile`` is the explicit step that brings the
cache back in line with the remote copy.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from shegoes.core.errors import NotFoundError
from shegoes.core.logging import log_event
from shegoes.features.users.store import UserStateStore
from shegoes.models.user_state import (
    UserState,
    document_fields,
    field_alias,
    from_document,
    to_document,
)

logger = logging.getLogger("shegoes")


@dataclass(frozen=True)
class ApplyResult:
    state: UserState
    persisted: bool
    fields: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ReconcileReport:
    state: UserState
    diverged_fields: List[str] = field(default_factory=list)

    @property
    def in_sync(self) -> bool:
        return not self.diverged_fields


class UserStateRepository:
    def __init__(self, store: UserStateStore):
        self._store = store
        self._cache: Dict[str, UserState] = {}
        self._lock = threading.Lock()

    @property
    def store(self) -> UserStateStore:
        return self._store

    def cached(self, user_id: str) -> Optional[UserState]:
        with self._lock:
            return self._cache.get(user_id)

    def _remember(self, state: UserState) -> UserState:
        with self._lock:
            self._cache[state.uid] = state
        return state

    def load(self, user_id: str) -> Optional[UserState]:
        """Fetch the remote document and refresh the cache."""
        document = self._store.get(user_id)
        if document is None:
            return None
        return self._remember(from_document(document))

    def get(self, user_id: str) -> UserState:
        """Cached state, loading it on a miss."""
        state = self.cached(user_id) or self.load(user_id)
        if state is None:
            raise NotFoundError(f"User {user_id} not found")
        return state

    def create(self, state: UserState) -> UserState:
        self._store.put(state.uid, to_document(state))
        return self._remember(state)

    def save(self, state: UserState) -> ApplyResult:
        """Write every field of ``state``."""
        return self.apply(state.uid, dict(state), base=state)

    def apply(
        self,
        user_id: str,
        changes: Mapping[str, Any],
        *,
        base: Optional[UserState] = None,
    ) -> ApplyResult:
        """Merge ``changes`` (python field names) into the cache, then patch remote."""
        if not changes:
            return ApplyResult(state=base or self.get(user_id), persisted=True)

        current = base or self.get(user_id)
        merged = current.model_copy(update=dict(changes))
        self._remember(merged)

        names = sorted(changes)
        try:
            self._store.patch(user_id, document_fields(merged, names))
        except Exception as exc:
            log_event(
                "warning",
                "user_state.patch_failed",
                user_id=user_id,
                event_type="store.patch",
                persisted=False,
                error_code=type(exc).__name__,
                extra={"fields": ",".join(names), "error": exc},
            )
            return ApplyResult(state=merged, persisted=False, fields=names)

        return ApplyResult(state=merged, persisted=True, fields=names)

    def reconcile(self, user_id: str) -> ReconcileReport:
        """Adopt the remote document and report which cached fields differed."""
        document = self._store.get(user_id)
        if document is None:
            raise NotFoundError(f"User {user_id} not found")
        remote = from_document(document)
        local = self.cached(user_id)

        diverged: List[str] = []
        if local is not None:
            local_doc = to_document(local)
            remote_doc = to_document(remote)
            diverged = sorted(
                name
                for name in UserState.model_fields
                if local_doc.get(field_alias(name)) != remote_doc.get(field_alias(name))
            )
            if diverged:
                logger.warning(
                    "user_state.diverged",
                    extra={"user_id": user_id, "event_type": "store.reconcile", "fields": diverged},
                )

        self._remember(remote)
        return ReconcileReport(state=remote, diverged_fields=diverged)

    def forget(self, user_id: str) -> None:
        with self._lock:
            self._cache.pop(user_id, None)

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()
