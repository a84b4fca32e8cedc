from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    String,
    UniqueConstraint,
    select,
    text,
)
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship, validates

from ..db.utils import dt_iso
from .base import Base
from .id_type import ID_TYPE, new_id

if TYPE_CHECKING:
    from .raffle import Raffle


class Participant(Base):
    """A registration in exactly one raffle."""

    __tablename__ = "participants"

    id: Mapped[str] = mapped_column(ID_TYPE, primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    raffle_id: Mapped[str] = mapped_column(
        ForeignKey("raffles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    is_winner: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    drawn_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    raffle: Mapped["Raffle"] = relationship(back_populates="participants")

    # one registration per email and raffle, even when two signups race
    __table_args__ = (
        UniqueConstraint("raffle_id", "email", name="uq_participants_raffle_email"),
    )

    @validates("email")
    def _normalize_email(self, _key: str, value: str) -> str:
        return value.strip().lower()

    def __repr__(self) -> str:
        return (
            f"<Participant(id={self.id}, raffle_id={self.raffle_id}, "
            f"email='{self.email}', is_winner={self.is_winner})>"
        )

    @classmethod
    def get_by_raffle_and_email(
        cls, session: Session, raffle_id: str, email: str
    ) -> Optional["Participant"]:
        return session.scalar(
            select(cls).where(
                cls.raffle_id == raffle_id, cls.email == email.strip().lower()
            )
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "raffle_id": self.raffle_id,
            "is_winner": self.is_winner,
            "drawn_at": dt_iso(self.drawn_at),
            "created_at": dt_iso(self.created_at),
        }
