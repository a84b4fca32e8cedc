"""Identity and selection state that survives restarts.

Three identities can be stored at once (super-admin flag, organizer record,
collaborator record); :meth:`SessionState.active_scope` decides which one the
data mirror follows and :attr:`SessionState.effective_organizer` which
organizer the screens act as.
"""

from __future__ import annotations

import json
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping, Optional

from dotenv import load_dotenv

from .sync import Scope

logger = logging.getLogger(__name__)

load_dotenv()

DEFAULT_SESSION_STATE_PATH = os.getenv("SESSION_STATE_PATH", ".raffledesk-session.json")

# Persisted keys; values are JSON-encoded strings like browser local storage.
ORGANIZER_KEY = "sorteio-organizer"
COLLABORATOR_KEY = "sorteio-collaborator"
SELECTED_EVENT_KEY = "sorteio-selectedEventId"
SELECTED_RAFFLE_KEY = "sorteio-selectedRaffleId"
SUPER_ADMIN_KEY = "sorteio-isSuperAdmin"
IMPERSONATING_KEY = "sorteio-impersonating"


@dataclass(frozen=True)
class SessionState:
    """Immutable snapshot of who is logged in and what is selected.

    Attributes
    ----------
    organizer : Optional[dict]
        Camel-cased organizer record of the organizer session, if any.
    collaborator : Optional[dict]
        Camel-cased collaborator record of the checked-in collaborator, if any.
    selected_event_id, selected_raffle_id : Optional[str]
        Current selections; resolved against the mirror by the context.
    is_super_admin : bool
        Whether the super-admin logged in.
    impersonating : bool
        Whether the organizer session was entered by an admin "view as".
    """

    organizer: Optional[dict[str, Any]] = None
    collaborator: Optional[dict[str, Any]] = None
    selected_event_id: Optional[str] = None
    selected_raffle_id: Optional[str] = None
    is_super_admin: bool = False
    impersonating: bool = False

    @property
    def effective_organizer(self) -> Optional[dict[str, Any]]:
        """Organizer the application acts as.

        Impersonation wins over the admin flag; otherwise a logged-in admin
        hides any stored organizer.
        """
        if self.impersonating:
            return self.organizer
        if self.is_super_admin:
            return None
        return self.organizer

    def active_scope(self) -> Scope:
        """Scope the mirror should be fetched for."""
        if self.is_super_admin and not self.impersonating:
            return Scope.admin()
        if self.organizer is not None:
            return Scope.organizer(self.organizer["id"])
        if self.collaborator is not None:
            return Scope.collaborator(self.collaborator["companyId"])
        return Scope.anonymous()

    def evolve(self, **changes: Any) -> "SessionState":
        return replace(self, **changes)

    def to_storage(self) -> dict[str, str]:
        return {
            ORGANIZER_KEY: json.dumps(self.organizer),
            COLLABORATOR_KEY: json.dumps(self.collaborator),
            SELECTED_EVENT_KEY: json.dumps(self.selected_event_id),
            SELECTED_RAFFLE_KEY: json.dumps(self.selected_raffle_id),
            SUPER_ADMIN_KEY: json.dumps(self.is_super_admin),
            IMPERSONATING_KEY: json.dumps(self.impersonating),
        }

    @classmethod
    def from_storage(cls, stored: Mapping[str, str]) -> "SessionState":
        """Rebuild the state; unreadable or missing values fall back to defaults."""
        return cls(
            organizer=_read(stored, ORGANIZER_KEY, None, dict),
            collaborator=_read(stored, COLLABORATOR_KEY, None, dict),
            selected_event_id=_read(stored, SELECTED_EVENT_KEY, None, str),
            selected_raffle_id=_read(stored, SELECTED_RAFFLE_KEY, None, str),
            is_super_admin=_read(stored, SUPER_ADMIN_KEY, False, bool),
            impersonating=_read(stored, IMPERSONATING_KEY, False, bool),
        )


def _read(stored: Mapping[str, str], key: str, default: Any, expected: type) -> Any:
    raw = stored.get(key)
    if raw is None:
        return default
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning(f"Error reading persisted key '{key}', using default")
        return default
    if value is None or isinstance(value, expected):
        return default if value is None else value
    logger.warning(f"Persisted key '{key}' has unexpected type, using default")
    return default


class SessionStore(ABC):
    """Where :class:`SessionState` is persisted between runs."""

    @abstractmethod
    def load(self) -> SessionState:
        ...

    @abstractmethod
    def save(self, state: SessionState) -> None:
        ...


class MemorySessionStore(SessionStore):
    def __init__(self, initial: Optional[Mapping[str, str]] = None):
        self.data: dict[str, str] = dict(initial or {})

    def load(self) -> SessionState:
        return SessionState.from_storage(self.data)

    def save(self, state: SessionState) -> None:
        self.data.update(state.to_storage())


class JsonFileSessionStore(SessionStore):
    """Keeps the persisted keys in one JSON object on disk."""

    def __init__(self, path: Optional[os.PathLike | str] = None):
        self.path = Path(path or DEFAULT_SESSION_STATE_PATH)

    def load(self) -> SessionState:
        if not self.path.exists():
            return SessionState()
        try:
            stored = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning(f"Could not read session file {self.path}: {exc}")
            return SessionState()
        if not isinstance(stored, dict):
            return SessionState()
        return SessionState.from_storage(stored)

    def save(self, state: SessionState) -> None:
        self.path.write_text(json.dumps(state.to_storage()), encoding="utf-8")


__all__ = [
    "JsonFileSessionStore",
    "MemorySessionStore",
    "SessionState",
    "SessionStore",
]
