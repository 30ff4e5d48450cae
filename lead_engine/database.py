"""
SQLAlchemy engine + session factory shared by the batch runners, the HTTP
read helpers and Alembic.

DATABASE_URL points at the CRM's Postgres in production. Local runs and the
test suite use SQLite; an in-memory URL gets one shared connection so every
session sees the same tables.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from sqlalchemy.pool import StaticPool

from lead_engine.config import DATABASE_URL


class Base(DeclarativeBase):
    pass


def normalize_url(raw: str) -> str:
    """SQLAlchemy 2.x only accepts the postgresql:// scheme."""
    if raw.startswith('postgres://'):
        return 'postgresql://' + raw[len('postgres://'):]
    return raw


def make_engine(db_url: str):
    if db_url.startswith('sqlite'):
        kwargs = {'connect_args': {'check_same_thread': False}}
        if db_url in ('sqlite://', 'sqlite:///:memory:'):
            kwargs['poolclass'] = StaticPool
        return create_engine(db_url, **kwargs)
    return create_engine(db_url, pool_pre_ping=True, pool_size=5, max_overflow=10)


url = normalize_url(DATABASE_URL)
engine = make_engine(url)
SessionLocal = sessionmaker(bind=engine)


def get_session():
    return SessionLocal()
