from typing import Generator, Optional

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

# Base class for ORM models declared via SQLAlchemy's declarative API
Base = declarative_base()


class Database:
    """
    Explicitly owned storage handle.

    Constructed once by create_app(), opened on startup and closed on shutdown.
    Components receive sessions from it instead of importing a global engine.
    """

    def __init__(self, url: str) -> None:
        self.url = url
        self.engine: Optional[Engine] = None
        self._sessionmaker: Optional[sessionmaker] = None

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    def open(self) -> None:
        if self.engine is not None:
            return
        # - SQLite (dev/local): allow cross-thread access since handlers run in a threadpool.
        # - Server DBs: enable safe pooling to avoid stale or dropped connections under load.
        if self.is_sqlite:
            self.engine = create_engine(self.url, connect_args={"check_same_thread": False})
        else:
            self.engine = create_engine(
                self.url,
                pool_pre_ping=True,
                pool_recycle=280,
                pool_size=10,
                max_overflow=20,
            )
        # autocommit and autoflush disabled for explicit transaction control
        self._sessionmaker = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def close(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
        self.engine = None
        self._sessionmaker = None

    def create_all(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    def drop_all(self) -> None:
        Base.metadata.drop_all(bind=self.engine)

    def session(self) -> Session:
        if self._sessionmaker is None:
            raise RuntimeError("Database is not open")
        return self._sessionmaker()


def get_db(request: Request) -> Generator:
    """
    FastAPI dependency.

    Yields a session from the application's Database handle for the lifetime of the
    request and guarantees it is closed afterwards, even if an exception is raised.
    """
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
