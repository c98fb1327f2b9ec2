import logging
from collections.abc import Generator
from pathlib import Path

from alembic import command
from alembic.config import Config
from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


Base = declarative_base()


class Database:
    """Owns the engine and its bounded connection pool.

    Built once per application and handed to request handlers through
    ``get_session``. Connections beyond ``pool_size`` are never opened: a
    borrower waits up to ``pool_timeout`` seconds and then gets
    ``sqlalchemy.exc.TimeoutError``.
    """

    def __init__(self, url: str, pool_size: int = 5, pool_timeout: float = 30.0):
        connect_args = {}
        if make_url(url).get_backend_name() == "sqlite":
            # Sync handlers run on worker threads.
            connect_args["check_same_thread"] = False

        self.url = url
        self.engine: Engine = create_engine(
            url,
            pool_size=pool_size,
            max_overflow=0,
            pool_timeout=pool_timeout,
            pool_pre_ping=True,
            connect_args=connect_args,
        )
        self.session_factory = sessionmaker(
            bind=self.engine, autoflush=False, autocommit=False, expire_on_commit=False
        )

    def session(self) -> Session:
        return self.session_factory()

    def dispose(self) -> None:
        self.engine.dispose()


def get_session(request: Request) -> Generator[Session, None, None]:
    database: Database = request.app.state.database
    session = database.session()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def alembic_config(database_url: str) -> Config:
    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    # ConfigParser interpolation would choke on percent-encoded passwords.
    cfg.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))
    return cfg


def run_migrations(database_url: str) -> None:
    logger.info("migrations.upgrade", extra={"revision": "head"})
    command.upgrade(alembic_config(database_url), "head")
