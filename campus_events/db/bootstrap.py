# campus_events/db/bootstrap.py
import os
import structlog
from alembic import command
from alembic.config import Config

from campus_events.core.config import settings
from campus_events.db.session import SessionLocal, SQLALCHEMY_DATABASE_URL
from campus_events.db.init_db import init_db

BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))

logger = structlog.get_logger(__name__)

def alembic_config() -> Config:
    # point explicitly at alembic.ini and migrations/
    cfg = Config(os.path.join(BASE_DIR, "alembic.ini"))
    cfg.set_main_option("script_location", os.path.join(BASE_DIR, "migrations"))
    cfg.set_main_option("sqlalchemy.url", SQLALCHEMY_DATABASE_URL)
    return cfg

def run_migrations_and_seed() -> None:
    command.upgrade(alembic_config(), "head")
    logger.info("db.migrated", url=SQLALCHEMY_DATABASE_URL.split("@")[-1])

    if settings.SEED_DEMO_DATA:
        with SessionLocal() as db:
            init_db(db)
