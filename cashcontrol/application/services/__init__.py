# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .account_provisioner import AccountProvisioner
from .best_effort import BestEffortOutcome, BestEffortTask
from .session_issuer import JwtSessionIssuer
from .telegram_init_data import InitDataVerifier, verify_init_data

__all__ = [
    "AccountProvisioner",
    "BestEffortOutcome",
    "BestEffortTask",
    "InitDataVerifier",
    "JwtSessionIssuer",
    "verify_init_data",
]
