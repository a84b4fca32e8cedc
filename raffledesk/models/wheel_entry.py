from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from ..db.utils import dt_iso
from .base import Base
from .id_type import ID_TYPE, new_id

if TYPE_CHECKING:
    from .company import Company


class WheelEntry(Base):
    """A visitor registered at a company's public prize wheel.

    ``prize_name`` is copied at spin time so exports keep the label even if
    the prize is later renamed or removed.
    """

    __tablename__ = "wheel_entries"

    id: Mapped[str] = mapped_column(ID_TYPE, primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    company_id: Mapped[str] = mapped_column(
        ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True
    )
    prize_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("prizes.id", ondelete="SET NULL"), nullable=True
    )
    prize_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    spun_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    company: Mapped["Company"] = relationship(back_populates="wheel_entries")

    @validates("email")
    def _normalize_email(self, _key: str, value: str) -> str:
        return value.strip().lower()

    @property
    def has_spun(self) -> bool:
        return self.spun_at is not None

    def to_json(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "company_id": self.company_id,
            "prize_id": self.prize_id,
            "prize_name": self.prize_name,
            "spun_at": dt_iso(self.spun_at),
            "created_at": dt_iso(self.created_at),
        }
