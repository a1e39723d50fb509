import logging
from typing import Optional

from shegoes.features.auth.errors import (
    AuthErrorKind,
    ProviderAuthError,
    classify,
    to_app_error,
)
from shegoes.features.auth.provider import IdentityProvider
from shegoes.models.identity import Identity

logger = logging.getLogger("shegoes")


class AuthService:
    """Calls the identity provider and maps its failures to AuthErrorKind."""

    def __init__(self, provider: IdentityProvider):
        self._provider = provider

    def sign_up(self, email: str, password: str, display_name: Optional[str] = None) -> Identity:
        try:
            return self._provider.sign_up(email, password, display_name)
        except ProviderAuthError as exc:
            raise self._translate(exc, "sign_up") from exc

    def sign_in(self, email: str, password: str) -> Identity:
        try:
            return self._provider.sign_in_with_password(email, password)
        except ProviderAuthError as exc:
            raise self._translate(exc, "sign_in") from exc

    def sign_in_as_guest(self) -> Identity:
        try:
            return self._provider.sign_in_anonymously()
        except ProviderAuthError as exc:
            raise self._translate(exc, "guest", default=AuthErrorKind.GUEST_FAILED) from exc

    @staticmethod
    def _translate(exc: ProviderAuthError, operation: str, default: AuthErrorKind = AuthErrorKind.UNKNOWN):
        kind = classify(exc.code, default)
        logger.info(
            "auth.failed",
            extra={"event_type": f"auth.{operation}", "error_code": kind.value},
        )
        return to_app_error(kind)
