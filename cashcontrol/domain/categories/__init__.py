# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .entities import DEFAULT_CATEGORIES, DefaultCategory

__all__ = ["DEFAULT_CATEGORIES", "DefaultCategory"]
