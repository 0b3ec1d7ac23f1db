# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from cashcontrol.domain.users.entities import User as DomainUser
from cashcontrol.domain.users.exceptions import (
    PlatformIdentityConflictError,
    StoreUnavailableError,
)
from cashcontrol.domain.users.repositories import UserStore
from cashcontrol.infrastructure.db.models import User
from cashcontrol.infrastructure.unit_of_work import unit_of_work_scope
from cashcontrol.shared.logging import logger


def _to_domain(row: User) -> DomainUser:
    return DomainUser(
        id=row.id,
        telegram_id=row.telegram_id,
        telegram_chat_id=row.telegram_chat_id,
        email=row.email,
        username=row.username,
        password_hash=row.password_hash,
        created_at=row.created_at,
    )


class SqlAlchemyUserStore(UserStore):
    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def find_by_platform_id(self, telegram_id: int) -> DomainUser | None:
        try:
            with unit_of_work_scope(self._session_factory) as session:
                row = session.query(User).filter(User.telegram_id == telegram_id).first()
                return _to_domain(row) if row else None
        except SQLAlchemyError as exc:
            logger.warning(f"users.store: lookup failed ({type(exc).__name__})")
            raise StoreUnavailableError("find_by_platform_id") from exc

    def create(self, user: DomainUser) -> DomainUser:
        try:
            with unit_of_work_scope(self._session_factory) as session:
                row = User(
                    telegram_id=user.telegram_id,
                    telegram_chat_id=user.telegram_chat_id,
                    email=user.email,
                    username=user.username,
                    password_hash=user.password_hash,
                )
                session.add(row)
                session.flush()
                session.refresh(row)
                return _to_domain(row)
        except IntegrityError as exc:
            if user.telegram_id is None:
                raise StoreUnavailableError("create") from exc
            logger.info(f"users.store: telegram_id={user.telegram_id} already exists")
            raise PlatformIdentityConflictError(user.telegram_id) from exc
        except SQLAlchemyError as exc:
            logger.warning(f"users.store: create failed ({type(exc).__name__})")
            raise StoreUnavailableError("create") from exc

    def update(self, user: DomainUser) -> DomainUser:
        try:
            with unit_of_work_scope(self._session_factory) as session:
                row = session.get(User, user.id)
                if row is None:
                    raise StoreUnavailableError("update")
                row.telegram_id = user.telegram_id
                row.telegram_chat_id = user.telegram_chat_id
                row.email = user.email
                row.username = user.username
                row.password_hash = user.password_hash
                session.flush()
                return _to_domain(row)
        except SQLAlchemyError as exc:
            logger.warning(f"users.store: update failed ({type(exc).__name__})")
            raise StoreUnavailableError("update") from exc
