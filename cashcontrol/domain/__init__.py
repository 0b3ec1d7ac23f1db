# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .categories import DEFAULT_CATEGORIES, DefaultCategory
from .exceptions import InvariantViolation
from .users.entities import LoginResult, SessionToken, User, VerifiedIdentity

__all__ = [
    "DEFAULT_CATEGORIES",
    "DefaultCategory",
    "InvariantViolation",
    "LoginResult",
    "SessionToken",
    "User",
    "VerifiedIdentity",
]
