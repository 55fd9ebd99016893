from typing import Optional, Union
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import URL, make_url
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session
from pathlib import Path
from chatmem.config import settings
from chatmem.logging import logger


def database_dir(url: Optional[Union[str, URL]] = None) -> Optional[Path]:
    """Directory holding the SQLite file for ``url``; None for in-memory or server databases."""
    parsed = make_url(url if url is not None else settings.DATABASE_URL)
    if parsed.get_backend_name() != "sqlite":
        return None
    if not parsed.database or parsed.database == ":memory:":
        return None
    return Path(parsed.database).parent


def make_engine(url: str) -> Engine:
    """Create an engine that can be shared by request-handling threads."""
    if not url.startswith("sqlite"):
        return create_engine(url, echo=False, pool_pre_ping=True)

    connect_args = {"check_same_thread": False}
    if database_dir(url) is None:
        # One shared connection, otherwise every checkout sees an empty database
        return create_engine(url, echo=False, connect_args=connect_args, poolclass=StaticPool)
    return create_engine(url, echo=False, connect_args=connect_args)


engine = make_engine(settings.DATABASE_URL)


def init_db(target: Engine | None = None):
    target = target or engine
    data_dir = database_dir(target.url)
    if data_dir is not None:
        data_dir.mkdir(parents=True, exist_ok=True)

    # Import all models here so SQLModel knows about them
    from chatmem.models import conversation, message  # noqa: F401

    logger.info(f"Initializing database at {target.url.render_as_string(hide_password=True)}")
    SQLModel.metadata.create_all(target)


def get_session():
    with Session(engine) as session:
        yield session
