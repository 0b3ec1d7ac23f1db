# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import replace

from cashcontrol.domain.users.entities import User, VerifiedIdentity
from cashcontrol.domain.users.exceptions import (
    PlatformIdentityConflictError,
    StoreUnavailableError,
)
from cashcontrol.domain.users.repositories import CategorySeeder, UserStore
from cashcontrol.shared.logging import logger

from .best_effort import BestEffortTask


class AccountProvisioner:
    """Maps a verified Telegram identity onto exactly one local user.

    Uniqueness of ``telegram_id`` is owned by the store. A concurrent first
    login that loses the insert race sees ``PlatformIdentityConflictError``
    and falls back to reading the winner's row.
    """

    def __init__(self, *, users: UserStore, categories: CategorySeeder) -> None:
        self._users = users
        self._categories = categories

    def resolve(self, identity: VerifiedIdentity) -> User:
        telegram_id = identity.platform_user_id

        existing = self._users.find_by_platform_id(telegram_id)
        if existing is not None:
            return self._backfill_chat_id(existing)

        try:
            created = self._users.create(User.from_telegram(telegram_id))
        except PlatformIdentityConflictError:
            logger.info(f"auth.provision: concurrent create for telegram_id={telegram_id}, re-reading")
            winner = self._users.find_by_platform_id(telegram_id)
            if winner is None:
                raise StoreUnavailableError("find_by_platform_id") from None
            return self._backfill_chat_id(winner)

        logger.info(f"auth.provision: created user_id={created.id}")
        BestEffortTask(
            name=f"auth.provision: default categories user_id={created.id}",
            action=lambda: self._categories.create_defaults(created.id),
            level="ERROR",
        ).run()
        return created

    def _backfill_chat_id(self, user: User) -> User:
        if user.telegram_chat_id is not None or user.telegram_id is None:
            return user

        patched = replace(user, telegram_chat_id=user.telegram_id)
        outcome = BestEffortTask(
            name=f"auth.provision: chat id backfill user_id={user.id}",
            action=lambda: self._users.update(patched),
        ).run()
        if outcome.ok and outcome.value is not None:
            return outcome.value
        return user
