"""Scoped fetches that build the in-memory mirror of store rows.

Every fetch returns a complete :class:`MirrorSnapshot`; collections that do not
belong to the scope are empty, so switching identity never leaves rows of the
previous identity behind.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from .casing import to_camel
from .models import (
    Collaborator,
    Company,
    Event,
    Organizer,
    Participant,
    Prize,
    Raffle,
    WheelEntry,
)

ANONYMOUS = "anonymous"
ADMIN = "admin"
ORGANIZER = "organizer"
COLLABORATOR = "collaborator"


@dataclass(frozen=True)
class Scope:
    """Which slice of the store the mirror follows.

    ``subject_id`` is the organizer id for organizer scope and the company id
    for collaborator scope.
    """

    kind: str
    subject_id: Optional[str] = None

    @classmethod
    def anonymous(cls) -> "Scope":
        return cls(ANONYMOUS)

    @classmethod
    def admin(cls) -> "Scope":
        return cls(ADMIN)

    @classmethod
    def organizer(cls, organizer_id: str) -> "Scope":
        return cls(ORGANIZER, organizer_id)

    @classmethod
    def collaborator(cls, company_id: str) -> "Scope":
        return cls(COLLABORATOR, company_id)


Record = dict[str, Any]


@dataclass(frozen=True)
class MirrorSnapshot:
    """Camel-cased records of one scoped fetch."""

    scope: Scope = field(default_factory=Scope.anonymous)
    organizers: list[Record] = field(default_factory=list)
    events: list[Record] = field(default_factory=list)
    raffles: list[Record] = field(default_factory=list)
    participants: list[Record] = field(default_factory=list)
    companies: list[Record] = field(default_factory=list)
    collaborators: list[Record] = field(default_factory=list)
    prizes: list[Record] = field(default_factory=list)
    wheel_entries: list[Record] = field(default_factory=list)
    pinned_event_id: Optional[str] = None
    """Event a collaborator scope selects automatically."""


def _records(rows: Sequence[Any]) -> list[Record]:
    return [to_camel(row.to_json()) for row in rows]


def _ids(rows: Sequence[Any]) -> list[str]:
    return [row.id for row in rows]


def fetch_admin_scope(session: Session) -> MirrorSnapshot:
    """All organizers and all events."""
    organizers = session.scalars(select(Organizer).order_by(Organizer.name)).all()
    events = session.scalars(select(Event)).all()
    return MirrorSnapshot(
        scope=Scope.admin(),
        organizers=_records(organizers),
        events=_records(events),
    )


def fetch_organizer_scope(session: Session, organizer_id: str) -> MirrorSnapshot:
    """Everything reachable from the organizer's events.

    A level is only queried when its parent id set is non-empty; an empty
    ``IN ()`` filter is never sent.
    """
    events = session.scalars(select(Event).where(Event.organizer_id == organizer_id)).all()
    event_ids = _ids(events)
    if not event_ids:
        return MirrorSnapshot(scope=Scope.organizer(organizer_id))

    raffles = session.scalars(select(Raffle).where(Raffle.event_id.in_(event_ids))).all()
    companies = session.scalars(
        select(Company).where(Company.event_id.in_(event_ids))
    ).all()

    participants: Sequence[Participant] = []
    raffle_ids = _ids(raffles)
    if raffle_ids:
        participants = session.scalars(
            select(Participant)
            .where(Participant.raffle_id.in_(raffle_ids))
            .order_by(Participant.created_at.asc())
        ).all()

    collaborators: Sequence[Collaborator] = []
    prizes: Sequence[Prize] = []
    company_ids = _ids(companies)
    if company_ids:
        collaborators = session.scalars(
            select(Collaborator).where(Collaborator.company_id.in_(company_ids))
        ).all()
        prizes = session.scalars(
            select(Prize)
            .where(Prize.company_id.in_(company_ids))
            .order_by(Prize.created_at.asc(), Prize.id.asc())
        ).all()

    return MirrorSnapshot(
        scope=Scope.organizer(organizer_id),
        events=_records(events),
        raffles=_records(raffles),
        participants=_records(participants),
        companies=_records(companies),
        collaborators=_records(collaborators),
        prizes=_records(prizes),
    )


def fetch_collaborator_scope(session: Session, company_id: str) -> MirrorSnapshot:
    """The collaborator's company, its event, that event's raffles and their participants."""
    company = Company.get_with_event(session, company_id)
    if company is None:
        return MirrorSnapshot(scope=Scope.collaborator(company_id))

    prizes = Prize.for_company(session, company.id)
    entries = session.scalars(
        select(WheelEntry)
        .where(WheelEntry.company_id == company.id)
        .order_by(WheelEntry.created_at.desc())
    ).all()
    event = company.event
    if event is None:
        return MirrorSnapshot(
            scope=Scope.collaborator(company_id),
            companies=_records([company]),
            prizes=_records(prizes),
            wheel_entries=_records(entries),
        )

    raffles = session.scalars(select(Raffle).where(Raffle.event_id == event.id)).all()
    participants: Sequence[Participant] = []
    raffle_ids = _ids(raffles)
    if raffle_ids:
        participants = session.scalars(
            select(Participant)
            .where(Participant.raffle_id.in_(raffle_ids))
            .order_by(Participant.created_at.asc())
        ).all()

    return MirrorSnapshot(
        scope=Scope.collaborator(company_id),
        events=_records([event]),
        raffles=_records(raffles),
        participants=_records(participants),
        companies=_records([company]),
        prizes=_records(prizes),
        wheel_entries=_records(entries),
        pinned_event_id=event.id,
    )


def fetch_scope(session: Session, scope: Scope) -> MirrorSnapshot:
    if scope.kind == ADMIN:
        return fetch_admin_scope(session)
    if scope.kind == ORGANIZER and scope.subject_id:
        return fetch_organizer_scope(session, scope.subject_id)
    if scope.kind == COLLABORATOR and scope.subject_id:
        return fetch_collaborator_scope(session, scope.subject_id)
    return MirrorSnapshot(scope=scope)


__all__ = [
    "MirrorSnapshot",
    "Scope",
    "fetch_admin_scope",
    "fetch_collaborator_scope",
    "fetch_organizer_scope",
    "fetch_scope",
]
