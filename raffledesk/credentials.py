"""Credential verification used by the login operations.

The session logic only talks to :class:`CredentialVerifier`. The default
:class:`PlaintextVerifier` reproduces the existing store contents, where the
``password_hash`` column holds the password itself; deployments that migrate
the column to salted hashes switch to :class:`Argon2Verifier` without touching
the session code.
"""

from __future__ import annotations

import hmac
import logging
from abc import ABC, abstractmethod

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

logger = logging.getLogger(__name__)


class CredentialVerifier(ABC):
    """Interface for turning passwords into stored values and checking them."""

    @abstractmethod
    def hash(self, password: str) -> str:
        ...

    @abstractmethod
    def verify(self, password: str, stored: str) -> bool:
        ...


class PlaintextVerifier(CredentialVerifier):
    """Exact string comparison against the stored value. No hashing."""

    def hash(self, password: str) -> str:
        return password

    def verify(self, password: str, stored: str) -> bool:
        if stored is None:
            return False
        return hmac.compare_digest(password.encode(), stored.encode())


class Argon2Verifier(CredentialVerifier):
    """Salted argon2 hashes via argon2-cffi."""

    def __init__(self, hasher: PasswordHasher | None = None):
        self._hasher = hasher or PasswordHasher()

    def hash(self, password: str) -> str:
        return self._hasher.hash(password)

    def verify(self, password: str, stored: str) -> bool:
        try:
            return self._hasher.verify(stored, password)
        except VerificationError:
            return False
        except InvalidHashError:
            # Never log the stored value itself
            logger.warning("Stored credential is not an argon2 hash")
            return False


__all__ = ["Argon2Verifier", "CredentialVerifier", "PlaintextVerifier"]
