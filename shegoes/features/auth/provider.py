"""
Identity providers.

The rest of the system only needs a stable user id (plus optional profile
fields). LocalIdentityProvider is the development provider: accounts live in
process memory and passwords are bcrypt-hashed.
"""

import threading
from typing import Dict, Optional, Protocol

import bcrypt

from shegoes.core.ids import IdSource, default_id_source
from shegoes.features.auth.errors import ProviderAuthError
from shegoes.models.identity import Identity

MIN_PASSWORD_LENGTH = 6
# bcrypt rejects secrets longer than 72 bytes
MAX_PASSWORD_BYTES = 72


class IdentityProvider(Protocol):
    def sign_up(self, email: str, password: str, display_name: Optional[str] = None) -> Identity:
        ...

    def sign_in_with_password(self, email: str, password: str) -> Identity:
        ...

    def sign_in_anonymously(self) -> Identity:
        ...


class LocalIdentityProvider:
    def __init__(self, id_source: IdSource = default_id_source):
        self._id_source = id_source
        self._accounts: Dict[str, dict] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _normalize_email(email: str) -> str:
        return email.strip().lower()

    def sign_up(self, email: str, password: str, display_name: Optional[str] = None) -> Identity:
        key = self._normalize_email(email)
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ProviderAuthError("auth/weak-password")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ProviderAuthError("auth/password-too-long")
        with self._lock:
            if key in self._accounts:
                raise ProviderAuthError("auth/email-already-in-use")
            account = {
                "user_id": self._id_source.new_id(),
                "email": key,
                "display_name": display_name,
                "password_hash": bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8"),
            }
            self._accounts[key] = account
        return self._identity(account)

    def sign_in_with_password(self, email: str, password: str) -> Identity:
        with self._lock:
            account = self._accounts.get(self._normalize_email(email))
        if account is None:
            raise ProviderAuthError("auth/user-not-found")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ProviderAuthError("auth/wrong-password")
        if not bcrypt.checkpw(password.encode("utf-8"), account["password_hash"].encode("utf-8")):
            raise ProviderAuthError("auth/wrong-password")
        return self._identity(account)

    def sign_in_anonymously(self) -> Identity:
        return Identity(user_id=f"guest-{self._id_source.new_id()}", is_anonymous=True)

    @staticmethod
    def _identity(account: dict) -> Identity:
        return Identity(
            user_id=account["user_id"],
            email=account["email"],
            display_name=account["display_name"],
        )
