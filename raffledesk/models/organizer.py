from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import DateTime, String, select
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship, validates

from ..db.utils import dt_iso
from .base import Base
from .id_type import ID_TYPE, new_id

if TYPE_CHECKING:
    from .event import Event


class Organizer(Base):
    """Account that owns events and raffles."""

    __tablename__ = "organizers"

    id: Mapped[str] = mapped_column(ID_TYPE, primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    responsible_name: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    email: Mapped[str] = mapped_column(String(100), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    photo_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    organizer_code: Mapped[str] = mapped_column(String(20), nullable=False, default="")
    """Short prefix that namespaces the codes of this organizer's raffles."""
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    events: Mapped[list["Event"]] = relationship(
        back_populates="organizer",
        cascade="all, delete-orphan",
    )

    @validates("email")
    def _normalize_email(self, _key: str, value: str) -> str:
        return value.strip().lower()

    def __repr__(self) -> str:
        return (
            f"<Organizer(id={self.id}, name='{self.name}', "
            f"organizer_code='{self.organizer_code}')>"
        )

    @classmethod
    def get_by_email(cls, session: Session, email: str) -> Optional["Organizer"]:
        """Retrieve an organizer by email address (case-insensitive)."""
        return session.scalar(select(cls).where(cls.email == email.strip().lower()))

    def to_json(self) -> dict[str, Any]:
        """Return a JSON-serializable dict. The stored credential is never included."""
        return {
            "id": self.id,
            "name": self.name,
            "responsible_name": self.responsible_name,
            "email": self.email,
            "phone": self.phone,
            "photo_url": self.photo_url,
            "organizer_code": self.organizer_code,
            "created_at": dt_iso(self.created_at),
        }
