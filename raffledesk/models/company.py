"""Exhibitor companies and the people and prizes attached to them."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import (
    JSON,
    DateTime,
    ForeignKey,
    String,
    UniqueConstraint,
    select,
)
from sqlalchemy.orm import Mapped, Session, joinedload, mapped_column, relationship, validates

from ..db.utils import dt_iso
from .base import Base
from .id_type import ID_TYPE, new_id

if TYPE_CHECKING:
    from .event import Event
    from .wheel_entry import WheelEntry

DEFAULT_WHEEL_COLORS = ["#00D1FF", "#FFFFFF"]


class Company(Base):
    """An exhibitor/booth within an event, running its own prize wheel."""

    __tablename__ = "companies"

    id: Mapped[str] = mapped_column(ID_TYPE, primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    logo_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    code: Mapped[str] = mapped_column(String(40), unique=True, index=True, nullable=False)
    """Company-entry code typed by collaborators at check-in."""
    wheel_colors: Mapped[list[str]] = mapped_column(
        JSON, nullable=False, default=lambda: list(DEFAULT_WHEEL_COLORS)
    )
    """Segment colours of the prize wheel, cycled over the prizes."""
    event_id: Mapped[str] = mapped_column(
        ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    event: Mapped["Event"] = relationship(back_populates="companies")
    collaborators: Mapped[list["Collaborator"]] = relationship(
        back_populates="company", cascade="all, delete-orphan"
    )
    prizes: Mapped[list["Prize"]] = relationship(
        back_populates="company", cascade="all, delete-orphan"
    )
    wheel_entries: Mapped[list["WheelEntry"]] = relationship(
        back_populates="company", cascade="all, delete-orphan"
    )

    @validates("code")
    def _normalize_code(self, _key: str, value: str) -> str:
        return value.strip().upper()

    def __repr__(self) -> str:
        return f"<Company(id={self.id}, name='{self.name}', code='{self.code}')>"

    @classmethod
    def get_by_code(cls, session: Session, code: str) -> Optional["Company"]:
        """Case-insensitive lookup of a company by its entry code."""
        return session.scalar(select(cls).where(cls.code == code.strip().upper()))

    @classmethod
    def get_with_event(cls, session: Session, company_id: str) -> Optional["Company"]:
        """Fetch a company together with its parent event in one round trip."""
        return session.scalar(
            select(cls).where(cls.id == company_id).options(joinedload(cls.event))
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "logo_url": self.logo_url,
            "code": self.code,
            "wheel_colors": list(self.wheel_colors or DEFAULT_WHEEL_COLORS),
            "event_id": self.event_id,
            "created_at": dt_iso(self.created_at),
        }


class Collaborator(Base):
    """Staff account scoped to one company."""

    __tablename__ = "collaborators"

    id: Mapped[str] = mapped_column(ID_TYPE, primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    photo_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    code: Mapped[str] = mapped_column(String(40), nullable=False)
    company_id: Mapped[str] = mapped_column(
        ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    company: Mapped["Company"] = relationship(back_populates="collaborators")

    __table_args__ = (
        UniqueConstraint("company_id", "code", name="uq_collaborators_company_code"),
    )

    @validates("code")
    def _normalize_code(self, _key: str, value: str) -> str:
        return value.strip().upper()

    def __repr__(self) -> str:
        return f"<Collaborator(id={self.id}, company_id={self.company_id}, code='{self.code}')>"

    @classmethod
    def get_by_company_and_code(
        cls, session: Session, company_id: str, code: str
    ) -> Optional["Collaborator"]:
        return session.scalar(
            select(cls).where(
                cls.company_id == company_id, cls.code == code.strip().upper()
            )
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "photo_url": self.photo_url,
            "code": self.code,
            "company_id": self.company_id,
            "created_at": dt_iso(self.created_at),
        }


class Prize(Base):
    """A wheel segment offered by a company."""

    __tablename__ = "prizes"

    id: Mapped[str] = mapped_column(ID_TYPE, primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    company_id: Mapped[str] = mapped_column(
        ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    company: Mapped["Company"] = relationship(back_populates="prizes")

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return f"<Prize(id={self.id}, name='{self.name}')>"

    @classmethod
    def for_company(cls, session: Session, company_id: str) -> list["Prize"]:
        """Prizes of a company in creation order, which is the wheel's segment order."""
        return list(
            session.scalars(
                select(cls)
                .where(cls.company_id == company_id)
                .order_by(cls.created_at.asc(), cls.id.asc())
            ).all()
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "company_id": self.company_id,
            "created_at": dt_iso(self.created_at),
        }
