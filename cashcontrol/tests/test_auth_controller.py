from __future__ import annotations

import time

import jwt
import pytest
from flask import Flask
from sqlalchemy import func, select

from cashcontrol.app import create_app
from cashcontrol.container import Container
from cashcontrol.infrastructure.db import build_engine
from cashcontrol.infrastructure.db.models import Category, User
from cashcontrol.shared.config import AppConfig, DatabaseConfig
from conftest import InMemoryUserStore, build_init_data


@pytest.fixture()
def container() -> Container:
    engine = build_engine(DatabaseConfig(url="sqlite:///:memory:"))
    return Container(AppConfig(), engine=engine)


@pytest.fixture()
def app(container: Container) -> Flask:
    return create_app(container)


def _init_data(container: Container, telegram_id: str = "12345", *, age: int = 0) -> str:
    auth_date = str(int(time.time()) - age)
    return build_init_data(
        [("auth_date", auth_date), ("id", telegram_id)],
        bot_token=container.config.telegram.bot_token,
    )


def test_telegram_login_returns_token_and_user(app: Flask, container: Container) -> None:
    with app.test_client() as client:
        response = client.post("/api/auth/telegram", json={"init_data": _init_data(container)})

    assert response.status_code == 200
    payload = response.get_json()
    assert payload["user"]["telegram_id"] == 12345
    assert "password_hash" not in payload["user"]
    claims = jwt.decode(
        payload["token"], container.config.session.jwt_secret, algorithms=["HS256"]
    )
    assert claims["user_id"] == payload["user"]["id"]

    with container.session_factory() as session:
        assert session.scalar(select(func.count()).select_from(User)) == 1
        assert session.scalar(select(func.count()).select_from(Category)) == 4


def test_second_login_does_not_duplicate(app: Flask, container: Container) -> None:
    with app.test_client() as client:
        first = client.post("/api/auth/telegram", json={"init_data": _init_data(container)})
        second = client.post("/api/auth/telegram", json={"init_data": _init_data(container)})

    assert first.get_json()["user"]["id"] == second.get_json()["user"]["id"]
    with container.session_factory() as session:
        assert session.scalar(select(func.count()).select_from(Category)) == 4


def test_bad_signature_is_unauthorized(app: Flask, container: Container) -> None:
    raw = _init_data(container).replace("12345", "99999")

    with app.test_client() as client:
        response = client.post("/api/auth/telegram", json={"init_data": raw})

    assert response.status_code == 401
    assert response.get_json() == {"error": "invalid_signature"}


def test_expired_init_data_is_unauthorized(app: Flask, container: Container) -> None:
    with app.test_client() as client:
        response = client.post(
            "/api/auth/telegram", json={"init_data": _init_data(container, age=2 * 86_400)}
        )

    assert response.status_code == 401
    assert response.get_json() == {"error": "credential_expired"}


def test_missing_init_data_returns_422(app: Flask) -> None:
    with app.test_client() as client:
        response = client.post("/api/auth/telegram", json={})

    assert response.status_code == 422
    payload = response.get_json()
    assert payload["error"] == "validation_error"
    assert payload["context"]["fields"] == ["init_data"]


def test_store_outage_is_service_unavailable(container: Container) -> None:
    store = InMemoryUserStore()
    store.fail_lookups = True
    container.user_store = store
    app = create_app(container)

    with app.test_client() as client:
        response = client.post("/api/auth/telegram", json={"init_data": _init_data(container)})

    assert response.status_code == 503
    assert response.get_json()["error"] == "store_unavailable"
