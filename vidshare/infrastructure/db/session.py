# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, scoped_session, sessionmaker

from vidshare.shared.config import load_config
from vidshare.shared.logging import logger

_config = load_config()


class Base(DeclarativeBase):
    pass


def create_db_engine(url: str) -> Engine:
    kwargs: dict[str, object] = {"echo": False, "future": True, "pool_pre_ping": True}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {
            "check_same_thread": False,
            "timeout": int(_config.database.pool_timeout),
        }
    else:
        kwargs.update(
            pool_size=_config.database.pool_size,
            max_overflow=_config.database.max_overflow,
            pool_timeout=_config.database.pool_timeout,
        )
    return create_engine(url, **kwargs)


ENGINE: Engine = create_db_engine(_config.database.url)


SessionLocal = scoped_session(
    sessionmaker(bind=ENGINE, autoflush=False, autocommit=False, expire_on_commit=False)
)


def bind_engine(engine: Engine) -> None:
    """Point the session factory at another engine (tests, CLI tools)."""

    global ENGINE
    SessionLocal.remove()
    SessionLocal.configure(bind=engine)
    ENGINE = engine
    logger.info(f"db.session: bound engine {engine.url.render_as_string(hide_password=True)}")


def get_engine() -> Engine:
    return ENGINE


@contextmanager
def session_scope(factory: Callable[[], Session] | None = None) -> Iterator[Session]:
    session = (factory or SessionLocal)()
    logger.debug("db.session: opened scoped session")
    try:
        yield session
        session.commit()
        logger.debug("db.session: committed scoped session")
    except Exception as exc:
        logger.warning(f"db.session: {type(exc).__name__}, rolling back")
        session.rollback()
        raise
    finally:
        session.close()
        if factory is None:
            SessionLocal.remove()
        logger.debug("db.session: closed scoped session")


def init_db() -> None:
    from vidshare.infrastructure.db import models  # noqa: F401

    Base.metadata.create_all(bind=ENGINE)
    logger.info("Database schema ensured")
