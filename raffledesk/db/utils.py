from pathlib import Path
from datetime import datetime, timezone
from typing import Optional, Union

from sqlalchemy.exc import IntegrityError


def resolve_sqlite_url(url: str, project_root: Path) -> str:
    """Resolve 'sqlite:///./relative/path' to an absolute sqlite:/// URL.

    Keeps other URL forms unchanged.
    """
    prefix = "sqlite:///./"
    if not url.startswith(prefix):
        return url
    rel = url[len(prefix) :]
    return f"sqlite:///{(project_root / rel).resolve()}"


def as_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo) and convert aware ones."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def dt_iso(dt: Optional[datetime]) -> Optional[str]:
    """Convert a datetime to an ISO 8601 string in UTC, or return None."""
    if dt is None:
        return None
    return as_utc(dt).isoformat()


def parse_dt(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse an ISO 8601 string (``Z`` suffix allowed) into an aware UTC datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return as_utc(datetime.fromisoformat(text))


def is_unique_violation(exc: IntegrityError) -> bool:
    """Whether ``exc`` was raised by a unique constraint (not a foreign key or check)."""
    orig = exc.orig
    if "23505" in (getattr(orig, "pgcode", None), getattr(orig, "sqlstate", None)):
        return True
    text = str(orig).lower()
    return "unique" in text or "duplicate" in text
