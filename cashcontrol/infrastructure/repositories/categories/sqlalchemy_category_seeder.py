# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cashcontrol.domain.categories import DEFAULT_CATEGORIES, DefaultCategory
from cashcontrol.domain.users.exceptions import CategorySeedingFailedError
from cashcontrol.domain.users.repositories import CategorySeeder
from cashcontrol.infrastructure.db.models import Category
from cashcontrol.infrastructure.unit_of_work import unit_of_work_scope
from cashcontrol.shared.logging import logger


class SqlAlchemyCategorySeeder(CategorySeeder):
    def __init__(
        self,
        session_factory: Callable[[], Session],
        defaults: Sequence[DefaultCategory] = DEFAULT_CATEGORIES,
    ):
        self._session_factory = session_factory
        self._defaults = tuple(defaults)

    def create_defaults(self, user_id: int) -> None:
        try:
            with unit_of_work_scope(self._session_factory) as session:
                session.add_all(
                    Category(
                        user_id=user_id,
                        name=item.name,
                        color=item.color,
                        icon=item.icon,
                        is_default=True,
                    )
                    for item in self._defaults
                )
        except SQLAlchemyError as exc:
            raise CategorySeedingFailedError(user_id) from exc
        logger.debug(f"categories.seed: {len(self._defaults)} defaults for user_id={user_id}")
