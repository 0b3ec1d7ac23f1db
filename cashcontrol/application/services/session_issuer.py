# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Stateless session tokens (HS256 JWT)."""

from __future__ import annotations

from datetime import timedelta

import jwt  # PyJWT

from cashcontrol.domain.users.entities import SessionToken
from cashcontrol.domain.users.exceptions import SigningFailedError
from cashcontrol.domain.users.repositories import Clock
from cashcontrol.shared.logging import logger

SESSION_ALGORITHM = "HS256"
DEFAULT_SESSION_TTL = timedelta(hours=24)


class JwtSessionIssuer:
    def __init__(
        self,
        *,
        secret: str,
        clock: Clock,
        ttl: timedelta = DEFAULT_SESSION_TTL,
    ) -> None:
        self._secret = secret
        self._clock = clock
        self._ttl = ttl

    def issue(self, user_id: int) -> SessionToken:
        if not self._secret:
            logger.error("auth.session: signing secret is not configured")
            raise SigningFailedError()

        expires_at = self._clock.now() + self._ttl
        claims = {"user_id": user_id, "exp": int(expires_at.timestamp())}
        try:
            token = jwt.encode(claims, self._secret, algorithm=SESSION_ALGORITHM)
        except (jwt.PyJWTError, TypeError, ValueError) as exc:
            logger.error(f"auth.session: failed to sign token ({type(exc).__name__})")
            raise SigningFailedError() from exc
        return SessionToken(user_id=user_id, token=token, expires_at=expires_at)
