# campus_events/db/base.py
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy import MetaData

naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=naming_convention)

# import every model here so Base.metadata (and alembic) sees the tables
from campus_events.models.event import Event  # noqa: E402,F401
from campus_events.models.registration import Registration  # noqa: E402,F401
from campus_events.models.audit import AuditLog  # noqa: E402,F401
