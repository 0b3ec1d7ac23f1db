# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .services import (
    AccountProvisioner,
    BestEffortTask,
    InitDataVerifier,
    JwtSessionIssuer,
)
from .use_cases.users import LoginWithTelegramUseCase

__all__ = [
    "AccountProvisioner",
    "BestEffortTask",
    "InitDataVerifier",
    "JwtSessionIssuer",
    "LoginWithTelegramUseCase",
]
