# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .sqlalchemy_category_seeder import SqlAlchemyCategorySeeder

__all__ = ["SqlAlchemyCategorySeeder"]
