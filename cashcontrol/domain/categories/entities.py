# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import re
from dataclasses import dataclass

from cashcontrol.domain.exceptions import InvariantViolation

_COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")


@dataclass(slots=True, frozen=True)
class DefaultCategory:
    """Starter category template copied into every new account."""

    name: str
    color: str
    icon: str

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise InvariantViolation("category name must not be empty", field="name")
        if not _COLOR_RE.match(self.color):
            raise InvariantViolation("color must be a #RRGGBB hex value", field="color")


DEFAULT_CATEGORIES: tuple[DefaultCategory, ...] = (
    DefaultCategory(name="Еда", color="#F97316", icon="🍔"),
    DefaultCategory(name="Транспорт", color="#0EA5E9", icon="🚕"),
    DefaultCategory(name="Дом", color="#22C55E", icon="🏠"),
    DefaultCategory(name="Подписки", color="#8B5CF6", icon="📱"),
)
