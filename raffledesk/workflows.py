"""Store-side operations behind every context mutation.

Each function works inside the caller's SQLAlchemy session, flushes its writes
and raises a :mod:`raffledesk.errors` exception when a business rule rejects
the request. Committing, re-fetching and converting errors into user-facing
results is left to :class:`raffledesk.context.DataContext`.
"""

from __future__ import annotations

import logging
import random
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .credentials import CredentialVerifier
from .db.utils import is_unique_violation, parse_dt
from .draw.codes import compose_raffle_code, normalize_code
from .draw.wheel import spin
from .errors import ConflictError, InvalidInputError, NotFoundError
from .inputs import (
    CollaboratorInput,
    CompanyInput,
    CompanySettingsInput,
    EventInput,
    OrganizerInput,
    ParticipantInput,
    PrizeInput,
    WheelEntryInput,
)
from .models import (
    Admin,
    Collaborator,
    Company,
    Event,
    Organizer,
    Participant,
    Prize,
    Raffle,
    WheelEntry,
)
from .storage.utils import resolve_image

if TYPE_CHECKING:
    from .storage.api import StorageClient

logger = logging.getLogger(__name__)

INVALID_LOGIN = "Invalid email or password."
INVALID_ADMIN_LOGIN = "Invalid admin credentials."


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# -------- authentication --------


def authenticate_organizer(
    session: Session, email: str, password: str, verifier: CredentialVerifier
) -> Organizer:
    """Return the organizer whose email and password match.

    The email match is case-insensitive; the password is checked by
    ``verifier`` against the stored credential.

    Raises
    ------
    ConflictError
        With a generic message for an unknown email or a wrong password.
    """
    organizer = Organizer.get_by_email(session, email)
    if organizer is None or not verifier.verify(password, organizer.password_hash):
        raise ConflictError(INVALID_LOGIN)
    return organizer


def authenticate_admin(
    session: Session, email: str, password: str, verifier: CredentialVerifier
) -> Admin:
    """Same check as :func:`authenticate_organizer` against the admin table."""
    admin = Admin.get_by_email(session, email)
    if admin is None or not verifier.verify(password, admin.password_hash):
        raise ConflictError(INVALID_ADMIN_LOGIN)
    return admin


def check_in_collaborator(
    session: Session, company_code: str, personal_code: str
) -> Collaborator:
    """Resolve a collaborator from the booth code and their personal code.

    Both codes are matched case-insensitively.

    Raises
    ------
    NotFoundError
        With a distinct message for an unknown company code and for a personal
        code that does not belong to that company.
    """
    company = Company.get_by_code(session, company_code or "")
    if company is None:
        raise NotFoundError("Invalid company / booth code.")
    collaborator = Collaborator.get_by_company_and_code(
        session, company.id, personal_code or ""
    )
    if collaborator is None:
        raise NotFoundError("Your personal code is not valid for this company.")
    return collaborator


# -------- raffles and participants --------


def register_participant(session: Session, data: ParticipantInput) -> Participant:
    """Insert a participant after checking the raffle's registration rules.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session.
    data : ParticipantInput
        Validated registration payload.

    Returns
    -------
    Participant
        The new participant, with ``is_winner`` false.

    Raises
    ------
    NotFoundError
        If the raffle does not exist.
    ConflictError
        If the email is already registered for the raffle, or if the raffle
        already has as many winners as its target quantity.
    """
    raffle = session.get(Raffle, data.raffle_id)
    if raffle is None:
        raise NotFoundError("Raffle not found.")

    email = (data.email or "").strip().lower()
    if Participant.get_by_raffle_and_email(session, raffle.id, email) is not None:
        raise ConflictError("This email is already registered in this raffle.")

    if raffle.winner_count(session) >= raffle.quantity:
        raise ConflictError(
            f'The raffle "{raffle.name}" has already reached its winner limit.'
        )

    participant = Participant(
        name=data.name,
        email=email,
        phone=data.phone,
        raffle_id=raffle.id,
        is_winner=False,
    )
    session.add(participant)
    try:
        session.flush()
    except IntegrityError as exc:
        if not is_unique_violation(exc):
            raise
        # the unique (raffle_id, email) constraint caught a concurrent signup
        raise ConflictError(
            "This email is already registered in this raffle."
        ) from exc
    return participant


def find_raffle_by_code(session: Session, code: str) -> Optional[Raffle]:
    """Public lookup by code (upper-cased); ``None`` if the raffle or its event is missing."""
    try:
        normalized = normalize_code(code)
    except (TypeError, ValueError):
        return None
    raffle = Raffle.get_by_code(session, normalized, with_event=True)
    if raffle is None or raffle.event is None:
        return None
    return raffle


def create_event_with_raffle(
    session: Session,
    organizer: Organizer,
    *,
    event_id: Optional[str],
    event_name: str,
    raffle_name: str,
    quantity: int,
    code_suffix: str,
    now: Optional[datetime] = None,
) -> Raffle:
    """Create a raffle, creating its event first when none is selected.

    The raffle code is ``organizer.organizer_code`` followed by the upper-cased
    ``code_suffix``.

    Raises
    ------
    InvalidInputError
        If a name, the suffix or a positive quantity is missing.
    NotFoundError
        If ``event_id`` does not name an event of ``organizer``.
    ConflictError
        If the composed code is already used by any raffle.
    """
    if not raffle_name or not code_suffix or (event_id is None and not event_name):
        raise InvalidInputError("Please fill in all required fields.")
    if not isinstance(quantity, int) or quantity < 1:
        raise InvalidInputError("Please fill in all required fields.")

    try:
        full_code = compose_raffle_code(organizer.organizer_code, code_suffix)
    except ValueError as exc:
        raise InvalidInputError("Please fill in all required fields.") from exc
    if Raffle.get_by_code(session, full_code) is not None:
        raise ConflictError("This raffle code is already in use.")

    if event_id is None:
        event = Event(
            name=event_name,
            date=now or _utcnow(),
            organizer_id=organizer.id,
        )
        session.add(event)
        session.flush()
    else:
        event = session.get(Event, event_id)
        if event is None or event.organizer_id != organizer.id:
            raise NotFoundError("Event not found.")

    raffle = Raffle(
        name=raffle_name,
        quantity=quantity,
        code=full_code,
        event_id=event.id,
    )
    session.add(raffle)
    try:
        session.flush()
    except IntegrityError as exc:
        if not is_unique_violation(exc):
            raise
        raise ConflictError("This raffle code is already in use.") from exc
    return raffle


# -------- admin: organizers and events --------


def save_organizer(
    session: Session,
    data: OrganizerInput,
    organizer_id: Optional[str] = None,
    *,
    verifier: CredentialVerifier,
    storage: Optional["StorageClient"] = None,
) -> Organizer:
    """Create or update an organizer.

    The photo is uploaded before anything is written. On update, an omitted
    password keeps the stored credential.
    """
    creating = organizer_id is None
    organizer: Optional[Organizer]
    if creating:
        organizer = Organizer()
    else:
        organizer = session.get(Organizer, organizer_id)
        if organizer is None:
            raise NotFoundError("Organizer not found.")

    photo_url = resolve_image(storage, data.photo_url, creating=creating)
    for column, value in data.changes().items():
        if column == "photo_url":
            continue
        setattr(organizer, column, value)
    if photo_url is not None:
        organizer.photo_url = photo_url
    if data.password:
        organizer.password_hash = verifier.hash(data.password)
    if creating and organizer.organizer_code is None:
        organizer.organizer_code = ""

    session.add(organizer)
    session.flush()
    return organizer


def save_event(
    session: Session,
    data: EventInput,
    event_id: Optional[str] = None,
    *,
    storage: Optional["StorageClient"] = None,
) -> Event:
    """Create or update an event. Creation requires an ``organizer_id``."""
    creating = event_id is None
    event: Optional[Event]
    if creating:
        if not data.organizer_id:
            raise InvalidInputError("An organizer is required to create an event.")
        event = Event()
    else:
        event = session.get(Event, event_id)
        if event is None:
            raise NotFoundError("Event not found.")

    if data.organizer_id and session.get(Organizer, data.organizer_id) is None:
        raise NotFoundError("Organizer not found.")

    try:
        date = parse_dt(data.date)
    except ValueError as exc:
        raise InvalidInputError("Invalid event date.") from exc

    banner_url = resolve_image(storage, data.banner_url, creating=creating)
    for column, value in data.changes().items():
        if column in ("banner_url", "date"):
            continue
        setattr(event, column, value)
    if banner_url is not None:
        event.banner_url = banner_url
    if date is not None:
        event.date = date
    elif creating:
        event.date = _utcnow()

    session.add(event)
    session.flush()
    return event


def delete_row(session: Session, model: type, row_id: str) -> None:
    """Delete one row by id; dependants go with it through ORM cascades."""
    row = session.get(model, row_id)
    if row is None:
        raise NotFoundError(f"{model.__name__} not found.")
    session.delete(row)
    session.flush()


# -------- companies, collaborators, prizes --------


def save_company(
    session: Session,
    event_id: str,
    data: CompanyInput,
    company_id: Optional[str] = None,
    *,
    storage: Optional["StorageClient"] = None,
) -> Company:
    """Create or update a company of ``event_id``."""
    creating = company_id is None
    company: Optional[Company]
    if creating:
        if session.get(Event, event_id) is None:
            raise NotFoundError("Event not found.")
        company = Company(event_id=event_id)
    else:
        company = session.get(Company, company_id)
        if company is None:
            raise NotFoundError("Company not found.")

    logo_url = resolve_image(storage, data.logo_url, creating=creating)
    for column, value in data.changes().items():
        if column == "logo_url":
            continue
        setattr(company, column, value)
    if logo_url is not None:
        company.logo_url = logo_url

    session.add(company)
    try:
        session.flush()
    except IntegrityError as exc:
        if not is_unique_violation(exc):
            raise
        raise ConflictError("This company code is already in use.") from exc
    return company


def update_company_settings(
    session: Session, company_id: str, data: CompanySettingsInput
) -> Company:
    company = session.get(Company, company_id)
    if company is None:
        raise NotFoundError("Company not found.")
    company.wheel_colors = list(data.wheel_colors or [])
    session.flush()
    return company


def save_collaborator(
    session: Session,
    company_id: Optional[str],
    data: CollaboratorInput,
    collaborator_id: Optional[str] = None,
    *,
    storage: Optional["StorageClient"] = None,
) -> Collaborator:
    """Create a collaborator of ``company_id`` or update an existing one."""
    creating = collaborator_id is None
    collaborator: Optional[Collaborator]
    if creating:
        if company_id is None or session.get(Company, company_id) is None:
            raise NotFoundError("Company not found.")
        collaborator = Collaborator(company_id=company_id)
    else:
        collaborator = session.get(Collaborator, collaborator_id)
        if collaborator is None:
            raise NotFoundError("Collaborator not found.")

    photo_url = resolve_image(storage, data.photo_url, creating=creating)
    for column, value in data.changes().items():
        if column == "photo_url":
            continue
        setattr(collaborator, column, value)
    if photo_url is not None:
        collaborator.photo_url = photo_url

    session.add(collaborator)
    try:
        session.flush()
    except IntegrityError as exc:
        if not is_unique_violation(exc):
            raise
        raise ConflictError(
            "This personal code is already used in this company."
        ) from exc
    return collaborator


def save_prize(
    session: Session,
    company_id: str,
    data: PrizeInput,
    prize_id: Optional[str] = None,
) -> Prize:
    if prize_id is None:
        if session.get(Company, company_id) is None:
            raise NotFoundError("Company not found.")
        prize = Prize(company_id=company_id, name=data.name)
        session.add(prize)
    else:
        existing = session.get(Prize, prize_id)
        if existing is None:
            raise NotFoundError("Prize not found.")
        prize = existing
        if data.name is not None:
            prize.name = data.name
    session.flush()
    return prize


# -------- public prize wheel --------


def register_wheel_entry(
    session: Session, company_id: str, data: WheelEntryInput
) -> WheelEntry:
    if session.get(Company, company_id) is None:
        raise NotFoundError("Company not found.")
    entry = WheelEntry(
        company_id=company_id,
        name=data.name,
        email=data.email,
        phone=data.phone,
    )
    session.add(entry)
    session.flush()
    return entry


def spin_company_wheel(
    session: Session,
    company_id: str,
    *,
    entry_id: Optional[str] = None,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> tuple[Prize, Optional[WheelEntry]]:
    """Spin the wheel of ``company_id`` over its stored prizes.

    When ``entry_id`` is given the chosen prize is stamped on that wheel entry,
    which may spin only once.

    Raises
    ------
    NotFoundError
        If the company or the entry does not exist.
    ConflictError
        If the entry has already spun.
    WheelUnavailableError
        If fewer than two prizes are configured.
    """
    if session.get(Company, company_id) is None:
        raise NotFoundError("Company not found.")

    entry: Optional[WheelEntry] = None
    if entry_id is not None:
        entry = session.get(WheelEntry, entry_id)
        if entry is None or entry.company_id != company_id:
            raise NotFoundError("Registration not found.")
        if entry.has_spun:
            raise ConflictError("This registration has already spun the wheel.")

    prize = spin(Prize.for_company(session, company_id), rng)
    if entry is not None:
        entry.prize_id = prize.id
        entry.prize_name = prize.name
        entry.spun_at = now or _utcnow()
        session.flush()
    return prize, entry
