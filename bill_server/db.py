from collections.abc import Iterator
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .config import settings
from .models import Base


def _connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.database_url, connect_args=_connect_args(settings.database_url)
)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def database_path(bind: Engine | None = None) -> Path | None:
    """Return the SQLite file behind ``bind``, or ``None`` for other backends."""
    url = (bind or engine).url
    if url.get_backend_name() != "sqlite" or not url.database:
        return None
    if url.database == ":memory:":
        return None
    return Path(url.database)


def init_db(bind: Engine | None = None) -> None:
    bind = bind or engine
    path = database_path(bind)
    if path is not None:
        path.parent.mkdir(parents=True, exist_ok=True)
    Base.metadata.create_all(bind)
