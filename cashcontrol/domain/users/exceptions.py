# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from cashcontrol.shared.errors.base import (
    DomainError,
    InfrastructureError,
    ServiceUnavailableError,
)


class VerificationError(DomainError):
    """Client-supplied init data was rejected. Never retried."""

    code = "telegram_auth_failed"
    status = HTTPStatus.UNAUTHORIZED


class MalformedCredentialError(VerificationError):
    code = "malformed_credential"


class MissingSignatureError(VerificationError):
    code = "missing_signature"


class MissingTimestampError(VerificationError):
    code = "missing_timestamp"


class CredentialExpiredError(VerificationError):
    code = "credential_expired"


class InvalidSignatureError(VerificationError):
    code = "invalid_signature"


class MissingIdentityError(VerificationError):
    code = "missing_identity"


class PlatformIdentityConflictError(DomainError):
    """The store already holds a user with this Telegram id."""

    code = "platform_identity_conflict"
    status = HTTPStatus.CONFLICT

    def __init__(self, telegram_id: int) -> None:
        super().__init__(context={"telegram_id": telegram_id})


class StoreUnavailableError(ServiceUnavailableError):
    def __init__(self, operation: str) -> None:
        super().__init__("store_unavailable", context={"operation": operation})


class CategorySeedingFailedError(InfrastructureError):
    def __init__(self, user_id: int) -> None:
        super().__init__("category_seeding_failed", context={"user_id": user_id})


class SigningFailedError(InfrastructureError):
    def __init__(self) -> None:
        super().__init__("signing_failed")
