"""Bring the database up to the schema the order and webhook flows rely on.

SQLite (tests, local runs) gets the tables straight from the models; every
other backend goes through Alembic. Either way the result is checked before
the app starts serving: webhook reconciliation looks orders up by
payment_reference_id and depends on that column being unique.
"""

import logging
import time
from pathlib import Path

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError

from storefront.config import settings
from storefront.models.database import Base, _normalize_database_url, engine
from storefront.models import Order, Product, User  # noqa: F401 - register models

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent
REQUIRED_TABLES = (User.__tablename__, Product.__tablename__, Order.__tablename__)


def _ping() -> None:
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))


def wait_for_db(retries: int, retry_delay_seconds: int) -> None:
    attempts = max(retries, 1)
    for attempt in range(1, attempts + 1):
        try:
            _ping()
        except OperationalError as exc:
            if attempt == attempts:
                raise RuntimeError(
                    f"Database unreachable after {attempts} attempt(s); check DATABASE_URL and the DB server"
                ) from exc
            logger.warning("Database not ready (%s/%s): %s", attempt, attempts, exc)
            time.sleep(retry_delay_seconds)
        else:
            logger.info("Database reachable (attempt %s)", attempt)
            return


def _has_unique_payment_reference(inspector) -> bool:
    column = ["payment_reference_id"]
    if any(ix.get("unique") and ix.get("column_names") == column for ix in inspector.get_indexes("orders")):
        return True
    return any(uc.get("column_names") == column for uc in inspector.get_unique_constraints("orders"))


def check_schema(bind: Engine | None = None) -> None:
    """Raise RuntimeError if the order tables or the payment reference index are missing."""
    inspector = inspect(bind if bind is not None else engine)
    existing = set(inspector.get_table_names())
    missing = [name for name in REQUIRED_TABLES if name not in existing]
    if missing:
        raise RuntimeError(f"Database schema is incomplete, missing tables: {', '.join(missing)}")
    if not _has_unique_payment_reference(inspector):
        raise RuntimeError("orders.payment_reference_id must be unique; run the latest migration")


def run_migrations() -> None:
    from alembic import command
    from alembic.config import Config

    alembic_ini = PROJECT_ROOT / "alembic.ini"
    if not alembic_ini.exists():
        raise RuntimeError(f"alembic.ini not found at {alembic_ini}")

    config = Config(str(alembic_ini))
    config.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    config.set_main_option("sqlalchemy.url", _normalize_database_url(settings.DATABASE_URL))
    command.upgrade(config, "head")


def init_db() -> None:
    wait_for_db(settings.DB_CONNECT_RETRIES, settings.DB_CONNECT_RETRY_DELAY_SECONDS)
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)
    else:
        run_migrations()
    check_schema()
    logger.info("Database schema ready (%s)", ", ".join(REQUIRED_TABLES))
