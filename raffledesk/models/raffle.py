from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    func,
    select,
)
from sqlalchemy.orm import Mapped, Session, joinedload, mapped_column, relationship

from ..db.utils import dt_iso
from .base import Base
from .id_type import ID_TYPE, new_id

if TYPE_CHECKING:
    from .event import Event
    from .participant import Participant


class Raffle(Base):
    """A drawable prize pool with a target winner count and a unique code."""

    __tablename__ = "raffles"

    id: Mapped[str] = mapped_column(ID_TYPE, primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    """Target number of winners."""
    code: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    """Organizer code followed by the upper-cased suffix chosen at creation."""
    event_id: Mapped[str] = mapped_column(
        ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    event: Mapped["Event"] = relationship(back_populates="raffles")
    participants: Mapped[list["Participant"]] = relationship(
        back_populates="raffle", cascade="all, delete-orphan"
    )

    __table_args__ = (CheckConstraint("quantity >= 1", name="quantity_positive"),)

    def __repr__(self) -> str:
        return f"<Raffle(id={self.id}, code='{self.code}', quantity={self.quantity})>"

    @classmethod
    def get_by_code(
        cls, session: Session, code: str, *, with_event: bool = False
    ) -> Optional["Raffle"]:
        """Exact, case-sensitive code lookup, optionally loading the parent event."""
        stmt = select(cls).where(cls.code == code)
        if with_event:
            stmt = stmt.options(joinedload(cls.event))
        return session.scalar(stmt)

    def winner_count(self, session: Session) -> int:
        """Count participants of this raffle already flagged as winners."""
        from .participant import Participant

        return session.scalar(
            select(func.count(Participant.id)).where(
                Participant.raffle_id == self.id,
                Participant.is_winner.is_(True),
            )
        ) or 0

    def to_json(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "quantity": self.quantity,
            "code": self.code,
            "event_id": self.event_id,
            "created_at": dt_iso(self.created_at),
        }
