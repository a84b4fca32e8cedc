"""The data-sync context: session state, the scoped mirror and every mutation.

:class:`DataContext` holds the in-memory mirror of the store rows visible to
the active identity, derives the views the screens need from it and exposes
the mutation operations. Every mutation writes through to the store first and
then re-fetches the current scope; the mirror is never updated optimistically.
All entry points report failures as :class:`OperationResult` values instead of
raising.
"""

from __future__ import annotations

import itertools
import logging
import random
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Callable, Optional, TypeVar, Union

from qrcode.exceptions import DataOverflowError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from . import exports, links, workflows
from .casing import to_camel
from .credentials import CredentialVerifier, PlaintextVerifier
from .db.utils import is_unique_violation, parse_dt
from .draw.engine import RaffleDrawEngine
from .draw.locks import RaffleLocks
from .draw.wheel import spin
from .errors import NotFoundError, RaffleDeskError
from .inputs import (
    CollaboratorInput,
    CompanyInput,
    CompanySettingsInput,
    EventInput,
    OrganizerInput,
    ParticipantInput,
    PrizeInput,
    WheelEntryInput,
    _MutationInput,
)
from .models import Collaborator, Company, Event, Organizer, Prize, Raffle
from .results import OperationResult
from .session_state import MemorySessionStore, SessionState, SessionStore
from .storage.api import StorageClient
from .sync import MirrorSnapshot, Scope, fetch_scope

logger = logging.getLogger(__name__)

Record = dict[str, Any]
_InputT = TypeVar("_InputT", bound=_MutationInput)
Payload = Union[Mapping[str, Any], _MutationInput]

STORE_FAILURE = "Could not save changes. Please try again."
DUPLICATE_VALUE = "A record with the same unique value already exists."


def _record(row: Any) -> Record:
    return to_camel(row.to_json())


def _coerce(cls: type[_InputT], payload: Payload, *, partial: bool) -> _InputT:
    if isinstance(payload, cls):
        return payload
    if isinstance(payload, _MutationInput):
        raise TypeError(f"expected {cls.__name__}, got {type(payload).__name__}")
    return cls.from_payload(payload, partial=partial)


def _event_sort_key(event: Record) -> datetime:
    return parse_dt(event.get("date")) or datetime.min.replace(tzinfo=timezone.utc)


class DataContext:
    """Mirror of the store scoped to the active identity, plus its operations.

    Parameters
    ----------
    session_factory : sessionmaker
        Factory for sessions against the relational store.
    session_store : Optional[SessionStore], default: None
        Where identity and selections persist; read once here and written on
        every change. Defaults to an in-memory store.
    storage : Optional[StorageClient], default: None
        Object storage for raw image uploads. Without it, payloads carrying an
        :class:`~raffledesk.inputs.ImageUpload` fail with an upload error.
    verifier : Optional[CredentialVerifier], default: None
        Credential check used by the logins; plaintext comparison by default.
    rng : Optional[random.Random], default: None
        Random source for draws and wheel spins.
    clock : Optional[Callable[[], datetime]], default: None
        Source of timestamps for draws and spins.
    base_url : Optional[str], default: None
        Public base URL for share links; ``PUBLIC_BASE_URL`` when omitted.
    autoload : bool, default: True
        Fetch the restored identity's scope immediately.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        *,
        session_store: Optional[SessionStore] = None,
        storage: Optional[StorageClient] = None,
        verifier: Optional[CredentialVerifier] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
        base_url: Optional[str] = None,
        autoload: bool = True,
    ) -> None:
        self._session_factory = session_factory
        self._session_store = session_store or MemorySessionStore()
        self._storage = storage
        self._verifier = verifier or PlaintextVerifier()
        self._rng = rng
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._base_url = base_url
        self._raffle_locks = RaffleLocks()
        self._mirror_lock = threading.Lock()
        self._tokens = itertools.count(1)
        self._applied_token = 0

        self.mirror = MirrorSnapshot()
        self.state: SessionState = self._session_store.load()
        if autoload:
            self.resynchronize()

    # -------- session state --------

    def _set_state(self, **changes: Any) -> None:
        previous = self.state
        self.state = previous.evolve(**changes)
        self._session_store.save(self.state)
        if _identity(self.state) != _identity(previous):
            self.resynchronize()

    def set_selected_event_id(self, event_id: Optional[str]) -> None:
        self._set_state(selected_event_id=event_id)

    def set_selected_raffle_id(self, raffle_id: Optional[str]) -> None:
        self._set_state(selected_raffle_id=raffle_id)

    @property
    def is_super_admin(self) -> bool:
        return self.state.is_super_admin

    @property
    def logged_in_organizer(self) -> Optional[Record]:
        """Effective organizer (impersonation and admin precedence applied)."""
        return self.state.effective_organizer

    @property
    def logged_in_collaborator(self) -> Optional[Record]:
        return self.state.collaborator

    # -------- synchronization --------

    def resynchronize(self, scope: Optional[Scope] = None) -> bool:
        """Fetch ``scope`` (default: the active one) and replace the mirror.

        A sequence token is taken before the fetch; the snapshot is dropped if
        a fetch that started later has already been applied. Returns whether
        the mirror was replaced with fetched data.

        When the fetch fails the mirror is kept only if it already belongs to
        ``scope``; otherwise it is emptied so no rows of the previous identity
        remain visible.
        """
        target = scope or self.state.active_scope()
        with self._mirror_lock:
            token = next(self._tokens)
        try:
            with self._session_factory() as session:
                snapshot = fetch_scope(session, target)
        except SQLAlchemyError:
            logger.exception(f"Fetching the {target.kind} scope failed")
            if target != self.mirror.scope:
                self._apply_snapshot(token, MirrorSnapshot(scope=target))
            return False
        return self._apply_snapshot(token, snapshot)

    def _apply_snapshot(self, token: int, snapshot: MirrorSnapshot) -> bool:
        with self._mirror_lock:
            if token < self._applied_token:
                logger.debug(
                    f"Dropping stale {snapshot.scope.kind} snapshot "
                    f"(token {token} < {self._applied_token})"
                )
                return False
            self._applied_token = token
            self.mirror = snapshot
        pinned = snapshot.pinned_event_id
        if pinned is not None and pinned != self.state.selected_event_id:
            self._set_state(selected_event_id=pinned)
        return True

    def _run(
        self,
        action: Callable[[Session], Any],
        message: Union[str, Callable[[Any], str]],
        *,
        resync: bool = True,
    ) -> OperationResult:
        """Run ``action`` in one transaction and turn its outcome into a result."""
        try:
            with self._session_factory.begin() as session:
                data = action(session)
        except RaffleDeskError as exc:
            logger.info(f"Operation rejected: {exc.message}")
            return OperationResult.fail(exc.message)
        except IntegrityError as exc:
            if is_unique_violation(exc):
                logger.warning(f"Store rejected write: {exc.orig}")
                return OperationResult.fail(DUPLICATE_VALUE)
            logger.error(f"Store rejected write: {exc.orig}")
            return OperationResult.fail(STORE_FAILURE)
        except SQLAlchemyError as exc:
            logger.error(f"Store write failed: {exc}")
            return OperationResult.fail(STORE_FAILURE)
        if resync:
            self.resynchronize()
        text = message(data) if callable(message) else message
        return OperationResult.ok(text, data)

    # -------- derived views --------

    def _find(self, records: list[Record], record_id: Optional[str]) -> Optional[Record]:
        if record_id is None:
            return None
        return next((r for r in records if r["id"] == record_id), None)

    @property
    def organizers(self) -> list[Record]:
        return self.mirror.organizers

    @property
    def events(self) -> list[Record]:
        return self.mirror.events

    @property
    def raffles(self) -> list[Record]:
        return self.mirror.raffles

    @property
    def companies(self) -> list[Record]:
        return self.mirror.companies

    @property
    def participants(self) -> list[Record]:
        return self.mirror.participants

    @property
    def selected_event(self) -> Optional[Record]:
        return self._find(self.mirror.events, self.state.selected_event_id)

    @property
    def selected_raffle(self) -> Optional[Record]:
        return self._find(self.mirror.raffles, self.state.selected_raffle_id)

    @property
    def organizer_events(self) -> list[Record]:
        """Mirrored events, most recent date first."""
        return sorted(self.mirror.events, key=_event_sort_key, reverse=True)

    @property
    def selected_event_raffles(self) -> list[Record]:
        event = self.selected_event
        if event is None:
            return []
        return [r for r in self.mirror.raffles if r["eventId"] == event["id"]]

    @property
    def event_companies(self) -> list[Record]:
        event = self.selected_event
        if event is None:
            return []
        return [c for c in self.mirror.companies if c["eventId"] == event["id"]]

    @property
    def winners(self) -> list[Record]:
        return [p for p in self.mirror.participants if p["isWinner"]]

    def eligible_participant_count(self) -> int:
        """Not-yet-won participants of the selected raffle.

        Counted over the mirror, so it is only as fresh as the last fetch.
        """
        raffle = self.selected_raffle
        if raffle is None:
            return 0
        return sum(
            1
            for p in self.mirror.participants
            if p["raffleId"] == raffle["id"] and not p["isWinner"]
        )

    @property
    def collaborator_company(self) -> Optional[Record]:
        collaborator = self.state.collaborator
        if collaborator is None:
            return None
        return self._find(self.mirror.companies, collaborator["companyId"])

    def company_collaborators(self, company_id: str) -> list[Record]:
        return [c for c in self.mirror.collaborators if c["companyId"] == company_id]

    def company_prizes(self, company_id: str) -> list[Record]:
        return [p for p in self.mirror.prizes if p["companyId"] == company_id]

    def company_wheel_entries(self, company_id: str) -> list[Record]:
        return [e for e in self.mirror.wheel_entries if e["companyId"] == company_id]

    # -------- authentication --------

    def login(self, email: str, password: str) -> OperationResult:
        """Organizer login. Any lookup failure yields the generic message."""
        try:
            with self._session_factory() as session:
                organizer = workflows.authenticate_organizer(
                    session, email, password, self._verifier
                )
                record = _record(organizer)
        except RaffleDeskError as exc:
            logger.warning("Organizer login rejected")
            return OperationResult.fail(exc.message)
        except SQLAlchemyError as exc:
            logger.error(f"Organizer lookup failed: {exc}")
            return OperationResult.fail(workflows.INVALID_LOGIN)
        self._set_state(organizer=record)
        logger.info(f"Organizer {record['id']} logged in")
        return OperationResult.ok("Login successful!", record)

    def login_super_admin(self, email: str, password: str) -> OperationResult:
        try:
            with self._session_factory() as session:
                workflows.authenticate_admin(session, email, password, self._verifier)
        except RaffleDeskError as exc:
            logger.warning("Admin login rejected")
            return OperationResult.fail(exc.message)
        except SQLAlchemyError as exc:
            logger.error(f"Admin lookup failed: {exc}")
            return OperationResult.fail(workflows.INVALID_ADMIN_LOGIN)
        self._set_state(is_super_admin=True)
        logger.info("Super-admin logged in")
        return OperationResult.ok("Admin login successful!")

    def logout(self) -> None:
        self._set_state(organizer=None, selected_event_id=None, selected_raffle_id=None)

    def logout_super_admin(self) -> None:
        self._set_state(is_super_admin=False)

    def logout_collaborator(self) -> None:
        self._set_state(collaborator=None)

    def view_as_organizer(self, organizer_id: str, event_id: str) -> OperationResult:
        """Admin-only: act as ``organizer_id`` with ``event_id`` pre-selected."""
        if not self.state.is_super_admin:
            return OperationResult.fail("Only the super-admin can view as an organizer.")
        try:
            with self._session_factory() as session:
                organizer = session.get(Organizer, organizer_id)
                record = _record(organizer) if organizer is not None else None
        except SQLAlchemyError as exc:
            logger.error(f"Organizer lookup failed: {exc}")
            return OperationResult.fail("Organizer not found.")
        if record is None:
            return OperationResult.fail("Organizer not found.")
        self._set_state(
            impersonating=True,
            organizer=record,
            selected_event_id=event_id,
            selected_raffle_id=None,
        )
        logger.info(f"Super-admin viewing as organizer {organizer_id}")
        return OperationResult.ok(f"Viewing as {record['name']}.", record)

    def stop_impersonating(self) -> None:
        """Leave the organizer view and return to the admin session."""
        self._set_state(
            impersonating=False,
            organizer=None,
            selected_event_id=None,
            selected_raffle_id=None,
        )

    def validate_collaborator(self, company_code: str, personal_code: str) -> OperationResult:
        """Collaborator check-in with the booth code and a personal code."""
        try:
            with self._session_factory() as session:
                collaborator = workflows.check_in_collaborator(
                    session, company_code, personal_code
                )
                record = _record(collaborator)
        except RaffleDeskError as exc:
            logger.warning(f"Collaborator check-in rejected: {exc.message}")
            return OperationResult.fail(exc.message)
        except SQLAlchemyError as exc:
            logger.error(f"Collaborator lookup failed: {exc}")
            return OperationResult.fail("Invalid company / booth code.")
        self._set_state(collaborator=record)
        return OperationResult.ok(f"Check-in successful, {record['name']}!", record)

    # -------- raffles, participants, draws --------

    def add_participant(
        self,
        raffle_id: str,
        name: str,
        email: str,
        phone: Optional[str] = None,
    ) -> OperationResult:
        """Register ``email`` in ``raffle_id`` (one registration per email)."""
        try:
            data = ParticipantInput.from_payload(
                {"raffleId": raffle_id, "name": name, "email": email, "phone": phone}
            )
        except RaffleDeskError as exc:
            return OperationResult.fail(exc.message)
        with self._raffle_locks.hold(raffle_id):
            return self._run(
                lambda session: _record(workflows.register_participant(session, data)),
                "Registration completed successfully!",
            )

    def draw_winner(self) -> Optional[Record]:
        """Draw one winner of the selected raffle; ``None`` if nobody is eligible."""
        raffle = self.selected_raffle
        if raffle is None:
            return None
        with self._raffle_locks.hold(raffle["id"]):
            try:
                with self._session_factory.begin() as session:
                    engine = RaffleDrawEngine(session, rng=self._rng, clock=self._clock)
                    outcome = engine.draw(raffle["id"])
                    winner = _record(outcome.participant) if outcome else None
            except SQLAlchemyError as exc:
                logger.error(f"Draw for raffle {raffle['id']} failed: {exc}")
                return None
        if winner is None:
            return None
        logger.info(f"Raffle {raffle['id']} drew participant {winner['id']}")
        self.resynchronize()
        return winner

    def find_raffle_by_code(self, code: str) -> Optional[Record]:
        """Raffle with its parent event under ``"event"``, for public registration."""
        try:
            with self._session_factory() as session:
                raffle = workflows.find_raffle_by_code(session, code)
                if raffle is None:
                    return None
                return to_camel({**raffle.to_json(), "event": raffle.event.to_json()})
        except SQLAlchemyError as exc:
            logger.error(f"Raffle lookup failed: {exc}")
            return None

    def create_event_with_raffle(
        self,
        event_name: str,
        raffle_name: str,
        quantity: int,
        code_suffix: str,
    ) -> OperationResult:
        """Add a raffle to the selected event, or to a new event when none is selected."""
        organizer = self.state.effective_organizer
        if organizer is None:
            return OperationResult.fail("Organizer is not logged in.")
        selected = self.selected_event
        event_id = selected["id"] if selected else None

        def action(session: Session) -> Record:
            owner = session.get(Organizer, organizer["id"])
            if owner is None:
                raise NotFoundError("Organizer not found.")
            raffle = workflows.create_event_with_raffle(
                session,
                owner,
                event_id=event_id,
                event_name=event_name,
                raffle_name=raffle_name,
                quantity=quantity,
                code_suffix=code_suffix,
                now=self._clock(),
            )
            return _record(raffle)

        return self._run(action, f'Raffle "{raffle_name}" added!')

    def delete_raffle(self, raffle_id: str) -> OperationResult:
        """Delete a raffle together with its participants."""
        with self._raffle_locks.hold(raffle_id):
            return self._run(
                lambda session: workflows.delete_row(session, Raffle, raffle_id),
                "Raffle deleted.",
            )

    # -------- admin: organizers and events --------

    def save_organizer(
        self, payload: Payload, organizer_id: Optional[str] = None
    ) -> OperationResult:
        def action(session: Session) -> Record:
            data = _coerce(OrganizerInput, payload, partial=organizer_id is not None)
            organizer = workflows.save_organizer(
                session,
                data,
                organizer_id,
                verifier=self._verifier,
                storage=self._storage,
            )
            return _record(organizer)

        verb = "updated" if organizer_id else "created"
        return self._run(action, f"Organizer {verb} successfully!")

    def delete_organizer(self, organizer_id: str) -> OperationResult:
        return self._run(
            lambda session: workflows.delete_row(session, Organizer, organizer_id),
            "Organizer and their events were deleted.",
        )

    def save_event(
        self,
        payload: Payload,
        event_id: Optional[str] = None,
        *,
        new_organizer: Optional[Payload] = None,
    ) -> OperationResult:
        """Create or update an event; on creation a new organizer may be created first."""

        def action(session: Session) -> Record:
            data = _coerce(EventInput, payload, partial=event_id is not None)
            if event_id is None and new_organizer is not None:
                organizer = workflows.save_organizer(
                    session,
                    _coerce(OrganizerInput, new_organizer, partial=False),
                    verifier=self._verifier,
                    storage=self._storage,
                )
                data = replace(data, organizer_id=organizer.id)
            event = workflows.save_event(session, data, event_id, storage=self._storage)
            return _record(event)

        verb = "updated" if event_id else "created"
        return self._run(action, f"Event {verb} successfully!")

    def delete_event(self, event_id: str) -> OperationResult:
        return self._run(
            lambda session: workflows.delete_row(session, Event, event_id),
            "Event deleted.",
        )

    # -------- companies, collaborators, prizes --------

    def save_company(self, payload: Payload, company_id: Optional[str] = None) -> OperationResult:
        """Create a company in the selected event, or update ``company_id``."""
        event = self.selected_event
        if company_id is None and event is None:
            return OperationResult.fail("Select an event first.")

        def action(session: Session) -> Record:
            data = _coerce(CompanyInput, payload, partial=company_id is not None)
            company = workflows.save_company(
                session,
                event["id"] if event else "",
                data,
                company_id,
                storage=self._storage,
            )
            return _record(company)

        verb = "updated" if company_id else "created"
        return self._run(action, f"Company {verb} successfully!")

    def update_company_settings(self, company_id: str, settings: Payload) -> OperationResult:
        def action(session: Session) -> Record:
            data = _coerce(CompanySettingsInput, settings, partial=False)
            return _record(workflows.update_company_settings(session, company_id, data))

        return self._run(action, "Colors saved successfully!")

    def delete_company(self, company_id: str) -> OperationResult:
        return self._run(
            lambda session: workflows.delete_row(session, Company, company_id),
            "Company deleted.",
        )

    def add_collaborator(self, company_id: str, payload: Payload) -> OperationResult:
        def action(session: Session) -> Record:
            data = _coerce(CollaboratorInput, payload, partial=False)
            return _record(
                workflows.save_collaborator(
                    session, company_id, data, storage=self._storage
                )
            )

        return self._run(action, "Collaborator added successfully!")

    def update_collaborator(self, collaborator_id: str, payload: Payload) -> OperationResult:
        def action(session: Session) -> Record:
            data = _coerce(CollaboratorInput, payload, partial=True)
            return _record(
                workflows.save_collaborator(
                    session, None, data, collaborator_id, storage=self._storage
                )
            )

        return self._run(action, "Collaborator updated successfully!")

    def delete_collaborator(self, collaborator_id: str) -> OperationResult:
        return self._run(
            lambda session: workflows.delete_row(session, Collaborator, collaborator_id),
            "Collaborator deleted.",
        )

    def save_prize(
        self, company_id: str, payload: Payload, prize_id: Optional[str] = None
    ) -> OperationResult:
        def action(session: Session) -> Record:
            data = _coerce(PrizeInput, payload, partial=prize_id is not None)
            return _record(workflows.save_prize(session, company_id, data, prize_id))

        verb = "updated" if prize_id else "added"
        return self._run(action, f"Prize {verb} successfully!")

    def delete_prize(self, prize_id: str) -> OperationResult:
        return self._run(
            lambda session: workflows.delete_row(session, Prize, prize_id),
            "Prize deleted successfully!",
        )

    # -------- prize wheel --------

    def load_public_wheel(self, company_id: str) -> OperationResult:
        """Company (with its wheel colours) and prizes for the public wheel page."""
        try:
            with self._session_factory() as session:
                company = session.get(Company, company_id)
                if company is None:
                    return OperationResult.fail("Company not found.")
                data = {
                    "company": _record(company),
                    "prizes": [_record(p) for p in Prize.for_company(session, company_id)],
                }
        except SQLAlchemyError as exc:
            logger.error(f"Public wheel lookup failed: {exc}")
            return OperationResult.fail("Company not found.")
        return OperationResult.ok("Wheel loaded.", data)

    def register_wheel_entry(self, company_id: str, payload: Payload) -> OperationResult:
        def action(session: Session) -> Record:
            data = _coerce(WheelEntryInput, payload, partial=False)
            return _record(workflows.register_wheel_entry(session, company_id, data))

        return self._run(action, "Registration completed, spin the wheel!")

    def spin_wheel(self, company_id: str, entry_id: Optional[str] = None) -> OperationResult:
        """Public spin over the company's stored prizes, stamped on ``entry_id`` if given."""

        def action(session: Session) -> dict[str, Any]:
            prize, entry = workflows.spin_company_wheel(
                session,
                company_id,
                entry_id=entry_id,
                rng=self._rng,
                now=self._clock(),
            )
            return {
                "prize": _record(prize),
                "entry": _record(entry) if entry is not None else None,
            }

        return self._run(
            action,
            lambda data: f"You won: {data['prize']['name']}!",
            resync=entry_id is not None,
        )

    def spin_company_wheel(self) -> OperationResult:
        """Collaborator-side spin over the mirrored prizes of their company."""
        company = self.collaborator_company
        if company is None:
            return OperationResult.fail("No company is checked in.")
        try:
            prize = spin(self.company_prizes(company["id"]), self._rng)
        except RaffleDeskError as exc:
            return OperationResult.fail(exc.message)
        return OperationResult.ok(f"Prize: {prize['name']}!", prize)

    # -------- exports and share links --------

    def export_wheel_entries(self, view: str, fmt: str = "csv") -> OperationResult:
        """Export the checked-in company's wheel participants (``fmt`` is csv or pdf)."""
        company = self.collaborator_company
        if company is None:
            return OperationResult.fail("No company is checked in.")
        if view not in exports.VIEWS or fmt not in ("csv", "pdf"):
            return OperationResult.fail("Unsupported export.")
        spun, registered = exports.split_wheel_entries(
            self.company_wheel_entries(company["id"])
        )
        entries = spun if view == exports.SPUN else registered
        if not entries:
            return OperationResult.fail("No data to export.")
        if fmt == "csv":
            content = exports.wheel_entries_csv(entries, view)
            content_type = "text/csv;charset=utf-8"
        else:
            content = exports.wheel_entries_pdf(entries, view)
            content_type = "application/pdf"
        return OperationResult.ok(
            "Export ready.",
            {
                "filename": exports.export_filename(view, company["name"], fmt),
                "content": content,
                "contentType": content_type,
            },
        )

    def company_wheel_qr(self, company_id: Optional[str] = None) -> OperationResult:
        """Share link (and QR PNG) of a company's public wheel."""
        if company_id is None:
            company = self.collaborator_company
            if company is None:
                return OperationResult.fail("No company is checked in.")
            company_id = company["id"]
        return self._qr(links.company_wheel_link(company_id, self._base_url))

    def raffle_qr(self, code: str) -> OperationResult:
        """Share link (and QR PNG) of a raffle's registration page."""
        return self._qr(links.raffle_registration_link(code, self._base_url))

    def _qr(self, url: str) -> OperationResult:
        try:
            png = links.qr_png(url)
        except (DataOverflowError, ValueError) as exc:
            logger.error(f"Failed to generate QR code: {exc}")
            return OperationResult.fail("Failed to generate QR code.")
        return OperationResult.ok("QR code ready.", {"url": url, "png": png})


def _identity(state: SessionState) -> tuple:
    return (
        state.is_super_admin,
        state.impersonating,
        state.organizer,
        state.collaborator,
    )


_current_context: ContextVar[Optional[DataContext]] = ContextVar(
    "raffledesk_data_context", default=None
)


@contextmanager
def provide_data_context(context: DataContext) -> Iterator[DataContext]:
    """Make ``context`` available to :func:`use_data` inside the block."""
    token = _current_context.set(context)
    try:
        yield context
    finally:
        _current_context.reset(token)


def use_data() -> DataContext:
    """Return the provided context.

    Raises
    ------
    RuntimeError
        If called outside :func:`provide_data_context`.
    """
    context = _current_context.get()
    if context is None:
        raise RuntimeError("use_data must be used within provide_data_context")
    return context


__all__ = ["DataContext", "provide_data_context", "use_data"]
