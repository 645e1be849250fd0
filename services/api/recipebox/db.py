from __future__ import annotations

from typing import Iterator

from fastapi import Request
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker


class Base(DeclarativeBase):
    pass


class Database:
    """Engine plus session factory, built once per process and passed around."""

    def __init__(self, database_url: str | None = None, *, engine: Engine | None = None):
        if engine is None:
            if not database_url:
                raise ValueError("database_url or engine is required")
            kwargs = {"pool_pre_ping": True}
            if database_url.startswith("sqlite"):
                kwargs["connect_args"] = {"check_same_thread": False}
            engine = create_engine(database_url, **kwargs)
        self.engine = engine
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def create_all(self) -> None:
        # Import so the tables register on Base.metadata
        from . import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Session:
        return self.SessionLocal()

    def dispose(self) -> None:
        self.engine.dispose()


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.container.database.session()
    try:
        yield db
    finally:
        db.close()
