from typing import Iterator, Optional, Union

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Connection, Engine, make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from app.core.config import Settings

DEFAULT_SQLITE_URL = "sqlite:///./database.db"


class Base(DeclarativeBase):
    pass


def build_database_url(settings: Settings) -> URL:
    """
    Resolve the store URL from settings.
    DATABASE_URL wins; otherwise DB_HOST selects MySQL; otherwise local SQLite.
    """
    if settings.DATABASE_URL:
        return make_url(settings.DATABASE_URL)

    if settings.DB_HOST:
        return URL.create(
            "mysql+pymysql",
            username=settings.DB_USER,
            password=settings.DB_PASSWORD or None,
            host=settings.DB_HOST,
            port=settings.DB_PORT,
            database=settings.DB_NAME,
        )

    return make_url(DEFAULT_SQLITE_URL)


def create_db_engine(settings: Settings, url: Optional[URL] = None, **engine_kwargs) -> Engine:
    url = url or build_database_url(settings)

    if url.get_backend_name() == "sqlite":
        # handlers run in a worker thread pool
        return create_engine(
            url, connect_args={"check_same_thread": False}, **engine_kwargs
        )

    # excess checkouts wait in the pool queue instead of opening more connections
    return create_engine(
        url,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=0,
        **engine_kwargs,
    )


def create_session_factory(bind: Union[Engine, Connection]) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=bind)


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
