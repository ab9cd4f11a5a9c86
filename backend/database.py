import logging
from collections.abc import Iterator

from fastapi import HTTPException, Request, status
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker


logger = logging.getLogger(__name__)

Base = declarative_base()

DATABASE_UNAVAILABLE_DETAIL = 'Database unavailable. Set DATABASE_URL to enable persistence.'


class Database:
    """Engine and session factory for one configured database URL."""

    def __init__(self, url: str, **engine_kwargs) -> None:
        if url.startswith('sqlite'):
            connect_args = engine_kwargs.pop('connect_args', {})
            connect_args.setdefault('check_same_thread', False)
            engine_kwargs['connect_args'] = connect_args

        self.url = url
        self.engine = create_engine(url, **engine_kwargs)
        self.session_factory = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine,
        )

    def create_all(self) -> None:
        # Model modules must be imported so their tables are registered on Base.metadata.
        from backend import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def drop_all(self) -> None:
        Base.metadata.drop_all(bind=self.engine)

    def session(self) -> Session:
        return self.session_factory()

    def dispose(self) -> None:
        self.engine.dispose()


def get_db(request: Request) -> Iterator[Session]:
    database: Database | None = request.app.state.database
    if database is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        )

    db = database.session()
    try:
        yield db
    finally:
        db.close()
