from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..db.utils import dt_iso
from .base import Base
from .id_type import ID_TYPE, new_id

if TYPE_CHECKING:
    from .company import Company
    from .organizer import Organizer
    from .raffle import Raffle


class Event(Base):
    """Container for raffles and exhibitor companies."""

    __tablename__ = "events"

    id: Mapped[str] = mapped_column(ID_TYPE, primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    details: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    banner_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    organizer_id: Mapped[str] = mapped_column(
        ForeignKey("organizers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    organizer: Mapped["Organizer"] = relationship(back_populates="events")
    raffles: Mapped[list["Raffle"]] = relationship(
        back_populates="event", cascade="all, delete-orphan"
    )
    companies: Mapped[list["Company"]] = relationship(
        back_populates="event", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, name='{self.name}', date={dt_iso(self.date)})>"

    def to_json(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "date": dt_iso(self.date),
            "details": self.details,
            "banner_url": self.banner_url,
            "organizer_id": self.organizer_id,
            "created_at": dt_iso(self.created_at),
        }
