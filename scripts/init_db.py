from __future__ import annotations

import argparse
import logging
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import inspect

from raffledesk.db.engine import make_engine

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def upgrade_db(target_revision: str = "head") -> None:
    """Apply Alembic migrations up to ``target_revision``."""
    alembic_cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    command.upgrade(alembic_cfg, target_revision)


def table_names() -> list[str]:
    engine = make_engine()
    try:
        return sorted(inspect(engine).get_table_names())
    finally:
        engine.dispose()


def main() -> None:
    """Migrate the configured database (``DB_URL``) and list its tables."""
    parser = argparse.ArgumentParser(description=main.__doc__)
    parser.add_argument("revision", nargs="?", default="head")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    upgrade_db(args.revision)
    print("Current tables:", ", ".join(table_names()))


if __name__ == "__main__":
    main()
