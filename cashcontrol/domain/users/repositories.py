# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from .entities import User


class UserStore(Protocol):
    def find_by_platform_id(self, telegram_id: int) -> User | None: ...

    def create(self, user: User) -> User:
        """Persist ``user`` and return it with its assigned id.

        Raises ``PlatformIdentityConflictError`` when the Telegram id is taken
        and ``StoreUnavailableError`` on any other store failure.
        """
        ...

    def update(self, user: User) -> User: ...


class CategorySeeder(Protocol):
    def create_defaults(self, user_id: int) -> None: ...


class Clock(Protocol):
    def now(self) -> datetime: ...
