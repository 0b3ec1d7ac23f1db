from __future__ import annotations

import hashlib
import hmac
import itertools
import os
import tempfile
import threading
from dataclasses import replace
from datetime import UTC, datetime
from urllib.parse import urlencode

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("LOG_FILE", os.path.join(tempfile.gettempdir(), "cashcontrol-tests.log"))
os.environ.setdefault("ENABLE_RATE_LIMIT", "false")
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "123456:TEST-BOT-TOKEN")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-with-at-least-32-bytes!!")

import pytest
from loguru import logger

from cashcontrol.domain.users.entities import User
from cashcontrol.domain.users.exceptions import (
    CategorySeedingFailedError,
    PlatformIdentityConflictError,
    StoreUnavailableError,
)

BOT_TOKEN = "BOTTOKEN"
NOW = datetime(2025, 3, 1, 12, 0, 0, tzinfo=UTC)


def sign_fields(fields: list[tuple[str, str]], bot_token: str = BOT_TOKEN) -> str:
    """Return the hex signature Telegram would attach to ``fields``."""

    first: dict[str, str] = {}
    for key, value in fields:
        first.setdefault(key, value)
    check = "\n".join(sorted(f"{k}={v}" for k, v in first.items()))
    secret = hmac.new(b"WebAppData", bot_token.encode(), hashlib.sha256).digest()
    return hmac.new(secret, check.encode(), hashlib.sha256).hexdigest()


def build_init_data(
    fields: list[tuple[str, str]],
    bot_token: str = BOT_TOKEN,
    *,
    hash_first: bool = False,
) -> str:
    signature = sign_fields(fields, bot_token)
    if hash_first:
        return urlencode([("hash", signature), *fields])
    return urlencode([*fields, ("hash", signature)])


class FixedClock:
    def __init__(self, now: datetime = NOW) -> None:
        self.current = now

    def now(self) -> datetime:
        return self.current


class InMemoryUserStore:
    """Thread-safe store enforcing unique ``telegram_id`` like the real table."""

    def __init__(self) -> None:
        self._rows: dict[int, User] = {}
        self._seq = itertools.count(1)
        self._lock = threading.Lock()
        self.fail_lookups = False
        self.fail_creates = False
        self.fail_updates = False
        self.update_calls = 0

    def find_by_platform_id(self, telegram_id: int) -> User | None:
        if self.fail_lookups:
            raise StoreUnavailableError("find_by_platform_id")
        with self._lock:
            for user in self._rows.values():
                if user.telegram_id == telegram_id:
                    return user
        return None

    def create(self, user: User) -> User:
        if self.fail_creates:
            raise StoreUnavailableError("create")
        with self._lock:
            if any(row.telegram_id == user.telegram_id for row in self._rows.values()):
                raise PlatformIdentityConflictError(user.telegram_id)
            stored = replace(user, id=next(self._seq), created_at=NOW)
            self._rows[stored.id] = stored
            return stored

    def update(self, user: User) -> User:
        self.update_calls += 1
        if self.fail_updates:
            raise StoreUnavailableError("update")
        with self._lock:
            self._rows[user.id] = user
        return user

    def insert(self, user: User) -> User:
        with self._lock:
            stored = replace(user, id=next(self._seq))
            self._rows[stored.id] = stored
            return stored

    def all(self) -> list[User]:
        with self._lock:
            return list(self._rows.values())


class RecordingSeeder:
    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[int] = []
        self._lock = threading.Lock()

    def create_defaults(self, user_id: int) -> None:
        with self._lock:
            self.calls.append(user_id)
        if self.fail:
            raise CategorySeedingFailedError(user_id)


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture()
def user_store() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture()
def seeder() -> RecordingSeeder:
    return RecordingSeeder()


@pytest.fixture()
def log_records():
    """Capture ``(level, message)`` pairs emitted through loguru."""

    records: list[tuple[str, str]] = []
    handler_id = logger.add(
        lambda message: records.append((message.record["level"].name, message.record["message"])),
        level="DEBUG",
    )
    yield records
    logger.remove(handler_id)
