"""
Closed set of authentication failure kinds and their user-facing messages.

Identity providers raise ProviderAuthError with their own codes; the
translation table below is the only place those codes are known.
"""

from enum import Enum
from typing import Dict, Optional

from shegoes.core.errors import AuthError


class AuthErrorKind(str, Enum):
    USER_NOT_FOUND = "user_not_found"
    WRONG_PASSWORD = "wrong_password"
    EMAIL_IN_USE = "email_in_use"
    WEAK_PASSWORD = "weak_password"
    PASSWORD_TOO_LONG = "password_too_long"
    POPUP_CLOSED = "popup_closed"
    GUEST_FAILED = "guest_failed"
    UNKNOWN = "unknown"


class ProviderAuthError(Exception):
    """Raised by an identity provider; ``code`` is provider-specific."""

    def __init__(self, code: str, message: Optional[str] = None):
        super().__init__(message or code)
        self.code = code


PROVIDER_CODES: Dict[str, AuthErrorKind] = {
    "auth/user-not-found": AuthErrorKind.USER_NOT_FOUND,
    "auth/wrong-password": AuthErrorKind.WRONG_PASSWORD,
    "auth/invalid-credential": AuthErrorKind.WRONG_PASSWORD,
    "auth/email-already-in-use": AuthErrorKind.EMAIL_IN_USE,
    "auth/weak-password": AuthErrorKind.WEAK_PASSWORD,
    "auth/password-too-long": AuthErrorKind.PASSWORD_TOO_LONG,
    "auth/popup-closed-by-user": AuthErrorKind.POPUP_CLOSED,
}

AUTH_ERROR_MESSAGES: Dict[AuthErrorKind, str] = {
    AuthErrorKind.USER_NOT_FOUND: "Account not found.",
    AuthErrorKind.WRONG_PASSWORD: "Incorrect password.",
    AuthErrorKind.EMAIL_IN_USE: "Email already in use.",
    AuthErrorKind.WEAK_PASSWORD: "Password should be at least 6 characters.",
    AuthErrorKind.PASSWORD_TOO_LONG: "Password is too long.",
    AuthErrorKind.POPUP_CLOSED: "Sign-in was cancelled.",
    AuthErrorKind.GUEST_FAILED: "Guest access failed. Please try again.",
    AuthErrorKind.UNKNOWN: "An error occurred during authentication.",
}

AUTH_ERROR_STATUS: Dict[AuthErrorKind, int] = {
    AuthErrorKind.EMAIL_IN_USE: 409,
    AuthErrorKind.WEAK_PASSWORD: 400,
    AuthErrorKind.PASSWORD_TOO_LONG: 400,
    AuthErrorKind.POPUP_CLOSED: 400,
}


def classify(code: Optional[str], default: AuthErrorKind = AuthErrorKind.UNKNOWN) -> AuthErrorKind:
    return PROVIDER_CODES.get(code or "", default)


def to_app_error(kind: AuthErrorKind) -> AuthError:
    return AuthError(
        AUTH_ERROR_MESSAGES[kind],
        code=kind.value,
        status_code=AUTH_ERROR_STATUS.get(kind, 401),
    )
