from __future__ import annotations

from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


@lru_cache(maxsize=4)
def get_engine(dsn: str):
    return create_engine(dsn, future=True, pool_pre_ping=True)


def create_schema(engine) -> None:
    # Registers the tables on Base.metadata.
    from blog_auth.infrastructure.db.models import accounts  # noqa: F401

    Base.metadata.create_all(engine)
