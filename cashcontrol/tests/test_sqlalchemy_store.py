from __future__ import annotations

import pytest
from sqlalchemy import select

from cashcontrol.application.services.account_provisioner import AccountProvisioner
from cashcontrol.domain.users.entities import User, VerifiedIdentity
from cashcontrol.domain.users.exceptions import (
    CategorySeedingFailedError,
    PlatformIdentityConflictError,
    StoreUnavailableError,
)
from cashcontrol.infrastructure.db import Base, build_engine, build_session_factory, init_db
from cashcontrol.infrastructure.db.models import Category
from cashcontrol.infrastructure.repositories.categories import SqlAlchemyCategorySeeder
from cashcontrol.infrastructure.repositories.users import SqlAlchemyUserStore
from cashcontrol.shared.config import DatabaseConfig
from conftest import NOW


@pytest.fixture()
def engine():
    engine = build_engine(DatabaseConfig(url="sqlite:///:memory:"))
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return build_session_factory(engine)


class StaleFirstReadStore(SqlAlchemyUserStore):
    """Misses on the first lookup, as a request racing another insert would."""

    def __init__(self, session_factory) -> None:
        super().__init__(session_factory)
        self._missed = False

    def find_by_platform_id(self, telegram_id: int) -> User | None:
        if not self._missed:
            self._missed = True
            return None
        return super().find_by_platform_id(telegram_id)


def test_create_and_find(session_factory) -> None:
    store = SqlAlchemyUserStore(session_factory)

    created = store.create(User.from_telegram(12345))
    found = store.find_by_platform_id(12345)

    assert created.id > 0
    assert found == created
    assert found.telegram_chat_id == 12345
    assert store.find_by_platform_id(1) is None


def test_duplicate_telegram_id_is_a_conflict(session_factory) -> None:
    store = SqlAlchemyUserStore(session_factory)
    store.create(User.from_telegram(12345))

    with pytest.raises(PlatformIdentityConflictError) as excinfo:
        store.create(User.from_telegram(12345))

    assert excinfo.value.context == {"telegram_id": 12345}


def test_update_backfills_chat_id(session_factory) -> None:
    store = SqlAlchemyUserStore(session_factory)
    created = store.create(User(id=0, telegram_id=9, email="a@example.com"))

    updated = store.update(User(id=created.id, telegram_id=9, telegram_chat_id=9, email="a@example.com"))

    assert updated.telegram_chat_id == 9
    assert store.find_by_platform_id(9).telegram_chat_id == 9


def test_missing_tables_surface_as_store_unavailable(engine, session_factory) -> None:
    Base.metadata.drop_all(bind=engine)
    store = SqlAlchemyUserStore(session_factory)

    with pytest.raises(StoreUnavailableError):
        store.find_by_platform_id(1)
    with pytest.raises(StoreUnavailableError):
        store.create(User.from_telegram(1))


def test_seeder_inserts_default_categories(session_factory) -> None:
    user = SqlAlchemyUserStore(session_factory).create(User.from_telegram(5))

    SqlAlchemyCategorySeeder(session_factory).create_defaults(user.id)

    with session_factory() as session:
        rows = session.scalars(select(Category).where(Category.user_id == user.id)).all()
    assert sorted(row.name for row in rows) == sorted(["Еда", "Транспорт", "Дом", "Подписки"])
    assert all(row.is_default for row in rows)


def test_seeder_failure_is_typed(engine, session_factory) -> None:
    Category.__table__.drop(bind=engine)

    with pytest.raises(CategorySeedingFailedError):
        SqlAlchemyCategorySeeder(session_factory).create_defaults(1)


def test_lost_insert_race_resolves_to_existing_row(session_factory) -> None:
    winner = SqlAlchemyUserStore(session_factory).create(User.from_telegram(321))
    provisioner = AccountProvisioner(
        users=StaleFirstReadStore(session_factory),
        categories=SqlAlchemyCategorySeeder(session_factory),
    )

    user = provisioner.resolve(VerifiedIdentity(platform_user_id=321, issued_at=int(NOW.timestamp())))

    assert user.id == winner.id
    with session_factory() as session:
        assert session.scalars(select(Category)).all() == []
