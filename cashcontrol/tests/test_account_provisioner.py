from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from cashcontrol.application.services.account_provisioner import AccountProvisioner
from cashcontrol.domain.users.entities import User, VerifiedIdentity
from cashcontrol.domain.users.exceptions import (
    PlatformIdentityConflictError,
    StoreUnavailableError,
)
from conftest import NOW, InMemoryUserStore, RecordingSeeder


def _identity(telegram_id: int = 12345) -> VerifiedIdentity:
    return VerifiedIdentity(platform_user_id=telegram_id, issued_at=int(NOW.timestamp()))


class RacingUserStore(InMemoryUserStore):
    """Every thread's first lookup misses, then all of them try to create."""

    def __init__(self, parties: int) -> None:
        super().__init__()
        self._barrier = threading.Barrier(parties)
        self._local = threading.local()

    def find_by_platform_id(self, telegram_id: int) -> User | None:
        found = super().find_by_platform_id(telegram_id)
        if not getattr(self._local, "raced", False):
            self._local.raced = True
            self._barrier.wait(timeout=5)
        return found


class VanishingUserStore(InMemoryUserStore):
    """Reports a conflict on create but never finds the winning row."""

    def create(self, user: User) -> User:
        raise PlatformIdentityConflictError(user.telegram_id)


def test_first_login_creates_user_and_seeds_categories(
    user_store: InMemoryUserStore, seeder: RecordingSeeder
) -> None:
    provisioner = AccountProvisioner(users=user_store, categories=seeder)

    user = provisioner.resolve(_identity())

    assert user.id == 1
    assert user.telegram_id == 12345
    assert user.telegram_chat_id == 12345
    assert seeder.calls == [1]


def test_resolve_is_idempotent(user_store: InMemoryUserStore, seeder: RecordingSeeder) -> None:
    provisioner = AccountProvisioner(users=user_store, categories=seeder)

    first = provisioner.resolve(_identity())
    second = provisioner.resolve(_identity())

    assert first.id == second.id
    assert len(user_store.all()) == 1
    assert seeder.calls == [first.id]
    assert user_store.update_calls == 0


def test_existing_user_without_chat_id_is_backfilled(
    user_store: InMemoryUserStore, seeder: RecordingSeeder
) -> None:
    stored = user_store.insert(User(id=0, telegram_id=777, email="a@example.com"))
    provisioner = AccountProvisioner(users=user_store, categories=seeder)

    user = provisioner.resolve(_identity(777))

    assert user.id == stored.id
    assert user.telegram_chat_id == 777
    assert user_store.find_by_platform_id(777).telegram_chat_id == 777
    assert seeder.calls == []

    provisioner.resolve(_identity(777))
    assert user_store.update_calls == 1


def test_backfill_failure_does_not_fail_login(
    user_store: InMemoryUserStore, seeder: RecordingSeeder, log_records: list[tuple[str, str]]
) -> None:
    stored = user_store.insert(User(id=0, telegram_id=777, email="a@example.com"))
    user_store.fail_updates = True
    provisioner = AccountProvisioner(users=user_store, categories=seeder)

    user = provisioner.resolve(_identity(777))

    assert user == stored
    assert user.telegram_chat_id is None
    assert any(level == "WARNING" and "chat id backfill" in message for level, message in log_records)


def test_category_seeding_failure_is_swallowed(
    user_store: InMemoryUserStore, log_records: list[tuple[str, str]]
) -> None:
    seeder = RecordingSeeder(fail=True)
    provisioner = AccountProvisioner(users=user_store, categories=seeder)

    user = provisioner.resolve(_identity())

    assert user.telegram_id == 12345
    assert seeder.calls == [user.id]
    expected = f"auth.provision: default categories user_id={user.id}: failed reason=category_seeding_failed"
    assert ("ERROR", expected) in log_records


def test_store_outage_on_lookup_is_surfaced(
    user_store: InMemoryUserStore, seeder: RecordingSeeder
) -> None:
    user_store.fail_lookups = True
    provisioner = AccountProvisioner(users=user_store, categories=seeder)

    with pytest.raises(StoreUnavailableError):
        provisioner.resolve(_identity())


def test_store_outage_on_create_is_surfaced(
    user_store: InMemoryUserStore, seeder: RecordingSeeder
) -> None:
    user_store.fail_creates = True
    provisioner = AccountProvisioner(users=user_store, categories=seeder)

    with pytest.raises(StoreUnavailableError):
        provisioner.resolve(_identity())
    assert seeder.calls == []


def test_conflict_without_refetch_result_is_surfaced(seeder: RecordingSeeder) -> None:
    provisioner = AccountProvisioner(users=VanishingUserStore(), categories=seeder)

    with pytest.raises(StoreUnavailableError):
        provisioner.resolve(_identity())


def test_concurrent_first_logins_create_exactly_one_user() -> None:
    parties = 8
    store = RacingUserStore(parties)
    seeder = RecordingSeeder()
    provisioner = AccountProvisioner(users=store, categories=seeder)

    with ThreadPoolExecutor(max_workers=parties) as pool:
        users = list(pool.map(lambda _: provisioner.resolve(_identity(555)), range(parties)))

    assert len(store.all()) == 1
    assert {user.id for user in users} == {store.all()[0].id}
    assert len(seeder.calls) == 1
