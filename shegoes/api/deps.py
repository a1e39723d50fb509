"""
Service wiring for the HTTP layer.

Module-level singletons built lazily from settings; tests swap them through
``configure_services``.
"""

from datetime import date
from typing import Any, Optional

from fastapi import Header

from shegoes.core.clock import local_today
from shegoes.core.errors import AuthError
from shegoes.core.ids import IdSource, default_id_source
from shegoes.features.ai.service import TextGenerationService
from shegoes.features.auth.provider import IdentityProvider, LocalIdentityProvider
from shegoes.features.auth.service import AuthService
from shegoes.features.users.repository import UserStateRepository
from shegoes.features.users.service import UserService
from shegoes.features.users.store import UserStateStore, build_store

_user_service: Optional[UserService] = None
_auth_service: Optional[AuthService] = None


def configure_services(
    *,
    store: Optional[UserStateStore] = None,
    text_client: Any = None,
    text_service: Optional[TextGenerationService] = None,
    identity_provider: Optional[IdentityProvider] = None,
    id_source: IdSource = default_id_source,
) -> UserService:
    """(Re)build the service graph. Returns the user service."""
    global _user_service, _auth_service
    repository = UserStateRepository(store if store is not None else build_store())
    text = text_service or TextGenerationService(client=text_client)
    _user_service = UserService(repository, text, id_source=id_source)
    _auth_service = AuthService(identity_provider or LocalIdentityProvider(id_source=id_source))
    return _user_service


def get_user_service() -> UserService:
    if _user_service is None:
        configure_services()
    return _user_service


def get_auth_service() -> AuthService:
    if _auth_service is None:
        configure_services()
    return _auth_service


def current_user_id(x_user_id: Optional[str] = Header(default=None, alias="X-User-Id")) -> str:
    if not x_user_id or not x_user_id.strip():
        raise AuthError("Sign in to continue", code="unauthenticated")
    return x_user_id.strip()


def resolve_today(today: Optional[date]) -> date:
    return today or local_today()
