from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import DateTime, String, select
from sqlalchemy.orm import Mapped, Session, mapped_column, validates

from ..db.utils import dt_iso
from .base import Base
from .id_type import ID_TYPE, new_id


class Admin(Base):
    """Super-admin account. Only used for the login check."""

    __tablename__ = "admins"

    id: Mapped[str] = mapped_column(ID_TYPE, primary_key=True, default=new_id)
    email: Mapped[str] = mapped_column(String(100), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    @validates("email")
    def _normalize_email(self, _key: str, value: str) -> str:
        return value.strip().lower()

    def __repr__(self) -> str:
        return f"<Admin(id={self.id}, email='{self.email}')>"

    @classmethod
    def get_by_email(cls, session: Session, email: str) -> Optional["Admin"]:
        """Get admin by email address (case-insensitive)."""
        return session.scalar(select(cls).where(cls.email == email.strip().lower()))

    def to_json(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "created_at": dt_iso(self.created_at),
        }
