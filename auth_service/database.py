# auth_service/database.py
import os
from datetime import datetime, timezone

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

# Base class which all database models inherit from
Base = declarative_base()


def utcnow():
    # Naive UTC, the form SQLite hands back for DateTime columns
    return datetime.now(timezone.utc).replace(tzinfo=None)


def create_session_factory(database_url):
    """Build the engine and session factory for one application.

    SQLite needs ``check_same_thread`` disabled because FastAPI serves
    requests from a thread pool; an in-memory database additionally needs a
    single shared connection, otherwise every session sees an empty schema.
    """
    connect_args = {}
    engine_kwargs = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            engine_kwargs["poolclass"] = StaticPool
        else:
            path = database_url.replace("sqlite:///", "", 1)
            directory = os.path.dirname(path)
            if directory:
                os.makedirs(directory, exist_ok=True)

    from . import models  # noqa: F401  (registers tables on Base.metadata)

    engine = create_engine(database_url, connect_args=connect_args, **engine_kwargs)
    Base.metadata.create_all(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Dependency to get the database session (used in FastAPI routes)
def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
