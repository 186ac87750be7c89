# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Category catalog domain."""

from src.domains.catalog.service import (
    CatalogConfigError,
    CatalogServiceError,
    CategoryCatalog,
    UnknownCategoryError,
    get_catalog,
    load_catalog,
)

__all__ = [
    "CatalogConfigError",
    "CatalogServiceError",
    "CategoryCatalog",
    "UnknownCategoryError",
    "get_catalog",
    "load_catalog",
]
