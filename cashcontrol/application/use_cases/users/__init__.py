# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .login_with_telegram import LoginWithTelegramUseCase

__all__ = ["LoginWithTelegramUseCase"]
