"""Engine and session factories for the configured ``DB_URL``."""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import sessionmaker

from .utils import resolve_sqlite_url

load_dotenv()

ROOT_DIR = Path(__file__).resolve().parents[2]
DEFAULT_SQLITE_URL = resolve_sqlite_url(
    os.getenv("DB_URL", "sqlite:///./raffledesk.db"), ROOT_DIR
)


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


def make_engine(database_url: Optional[str] = None, echo: bool = False) -> Engine:
    """Create an engine for ``database_url`` (``DB_URL`` by default).

    SQLite connections get foreign-key enforcement so the ``ON DELETE`` rules
    apply; other backends ping pooled connections before reuse.
    """
    url = database_url or DEFAULT_SQLITE_URL
    is_sqlite = url.startswith("sqlite")
    engine = create_engine(url, echo=echo, pool_pre_ping=not is_sqlite)
    if is_sqlite:
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def get_sessionmaker(engine: Engine) -> sessionmaker:
    # mirror records are serialized after commit
    return sessionmaker(bind=engine, expire_on_commit=False)
