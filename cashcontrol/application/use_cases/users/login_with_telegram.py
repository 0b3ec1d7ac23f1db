# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Protocol

from cashcontrol.domain.users.entities import LoginResult, SessionToken, User, VerifiedIdentity
from cashcontrol.domain.users.exceptions import VerificationError
from cashcontrol.shared.logging import logger


class CredentialVerifier(Protocol):
    def verify(self, raw: str) -> VerifiedIdentity: ...


class UserProvisioner(Protocol):
    def resolve(self, identity: VerifiedIdentity) -> User: ...


class SessionIssuer(Protocol):
    def issue(self, user_id: int) -> SessionToken: ...


class LoginWithTelegramUseCase:
    """Turns raw mini-app init data into a local user and a session token."""

    def __init__(
        self,
        *,
        verifier: CredentialVerifier,
        provisioner: UserProvisioner,
        issuer: SessionIssuer,
    ) -> None:
        self._verifier = verifier
        self._provisioner = provisioner
        self._issuer = issuer

    def execute(self, init_data: str) -> LoginResult:
        try:
            identity = self._verifier.verify(init_data)
        except VerificationError as exc:
            logger.warning(f"auth.telegram: verification failed reason={exc.code}")
            raise

        user = self._provisioner.resolve(identity)
        token = self._issuer.issue(user.id)

        logger.info(f"auth.telegram: ok user_id={user.id}")
        return LoginResult(token=token.token, user=user)
