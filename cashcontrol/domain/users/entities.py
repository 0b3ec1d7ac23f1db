# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from cashcontrol.domain.exceptions import InvariantViolation


@dataclass(slots=True, frozen=True)
class User:
    """A local account.

    Every identity anchor is optional on its own, but an account with none of
    them could never be logged into again, so at least one is required.
    ``id`` is ``0`` until the store assigns one.
    """

    id: int
    telegram_id: int | None = None
    telegram_chat_id: int | None = None
    email: str | None = None
    username: str | None = None
    password_hash: str | None = None
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        anchors = (self.telegram_id, self.telegram_chat_id, self.email, self.password_hash)
        if all(anchor is None for anchor in anchors):
            raise InvariantViolation("user must have at least one identity anchor")

    @classmethod
    def from_telegram(cls, telegram_id: int) -> User:
        # Mini-app launches conflate the user id and the private chat id.
        return cls(id=0, telegram_id=telegram_id, telegram_chat_id=telegram_id)


@dataclass(slots=True, frozen=True)
class VerifiedIdentity:
    """Identity proven by a mini-app credential; consumed once by provisioning.

    ``issued_at`` is the signed ``auth_date`` in Unix seconds.
    """

    platform_user_id: int
    issued_at: int


@dataclass(slots=True, frozen=True)
class SessionToken:

    user_id: int
    token: str
    expires_at: datetime


@dataclass(slots=True, frozen=True)
class LoginResult:

    token: str
    user: User
