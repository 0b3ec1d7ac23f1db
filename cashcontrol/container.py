"""Application dependency container."""

from __future__ import annotations

from collections.abc import Callable
from datetime import timedelta
from functools import cached_property

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from cashcontrol.application.services.account_provisioner import AccountProvisioner
from cashcontrol.application.services.session_issuer import JwtSessionIssuer
from cashcontrol.application.services.telegram_init_data import InitDataVerifier
from cashcontrol.application.use_cases.users.login_with_telegram import LoginWithTelegramUseCase
from cashcontrol.domain.users.repositories import CategorySeeder, Clock, UserStore
from cashcontrol.infrastructure.clock import SystemClock
from cashcontrol.infrastructure.db import ENGINE, SessionLocal, build_session_factory
from cashcontrol.infrastructure.repositories.categories import SqlAlchemyCategorySeeder
from cashcontrol.infrastructure.repositories.users import SqlAlchemyUserStore
from cashcontrol.interfaces.http.controllers.auth_controller import AuthController
from cashcontrol.shared.config import AppConfig, load_config


class Container:
    """Builds every collaborator once, from an explicit config value.

    Secrets are handed to the components that need them here and nowhere
    else. Tests override a collaborator by assigning the attribute before
    first use, e.g. ``container.clock = FixedClock(...)``.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        engine: Engine | None = None,
    ) -> None:
        self.config = config or load_config()
        self._engine = engine

    @cached_property
    def engine(self) -> Engine:
        return self._engine if self._engine is not None else ENGINE

    @cached_property
    def session_factory(self) -> Callable[[], Session]:
        if self._engine is None:
            return SessionLocal
        return build_session_factory(self._engine)

    @cached_property
    def clock(self) -> Clock:
        return SystemClock()

    @cached_property
    def user_store(self) -> UserStore:
        return SqlAlchemyUserStore(self.session_factory)

    @cached_property
    def category_seeder(self) -> CategorySeeder:
        return SqlAlchemyCategorySeeder(self.session_factory)

    @cached_property
    def init_data_verifier(self) -> InitDataVerifier:
        return InitDataVerifier(
            bot_token=self.config.telegram.bot_token,
            clock=self.clock,
            max_age=timedelta(seconds=self.config.telegram.auth_max_age),
        )

    @cached_property
    def account_provisioner(self) -> AccountProvisioner:
        return AccountProvisioner(users=self.user_store, categories=self.category_seeder)

    @cached_property
    def session_issuer(self) -> JwtSessionIssuer:
        return JwtSessionIssuer(
            secret=self.config.session.jwt_secret,
            clock=self.clock,
            ttl=timedelta(seconds=self.config.session.ttl_seconds),
        )

    @cached_property
    def telegram_login_use_case(self) -> LoginWithTelegramUseCase:
        return LoginWithTelegramUseCase(
            verifier=self.init_data_verifier,
            provisioner=self.account_provisioner,
            issuer=self.session_issuer,
        )

    @cached_property
    def auth_controller(self) -> AuthController:
        return AuthController(telegram_login_use_case=self.telegram_login_use_case)
