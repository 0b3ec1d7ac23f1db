# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool

from cashcontrol.shared.config import DatabaseConfig, load_config
from cashcontrol.shared.logging import logger


class Base(DeclarativeBase):
    pass


def build_engine(database: DatabaseConfig) -> Engine:
    url = database.url
    if url.startswith("sqlite") and (url.endswith(":memory:") or url in ("sqlite://", "sqlite:///")):
        # One shared connection, or every session would see its own empty database.
        return create_engine(
            url,
            future=True,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )

    connect_args: dict[str, object] = {}
    if url.startswith("sqlite"):
        connect_args = {
            "check_same_thread": False,
            "timeout": int(database.pool_timeout),
        }

    return create_engine(
        url,
        echo=False,
        future=True,
        pool_pre_ping=True,
        pool_size=database.pool_size,
        max_overflow=database.max_overflow,
        pool_timeout=database.pool_timeout,
        connect_args=connect_args,
    )


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


ENGINE: Engine = build_engine(load_config().database)

SessionLocal = scoped_session(build_session_factory(ENGINE))


def init_db(engine: Engine | None = None) -> None:
    # Models must be imported so their tables are registered on Base.metadata.
    from cashcontrol.infrastructure.db import models  # noqa: F401

    Base.metadata.create_all(bind=engine or ENGINE)
    logger.info("Database schema ensured")
