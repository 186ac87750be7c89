# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Category catalog API endpoints.

- GET /categories - Categories offered to a stage/section profile
"""

import logging

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_category_catalog, require_auth
from src.api.middleware.auth import CurrentUser
from src.domains.catalog.service import CategoryCatalog
from src.models.catalog import CategoryDefinition

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/categories",
    response_model=list[CategoryDefinition],
    summary="List categories",
    description="List the categories offered to a stage/section, or all categories.",
)
async def list_categories(
    stage: str | None = Query(None, description="Student stage"),
    section: str | None = Query(None, description="Student section"),
    current_user: CurrentUser = Depends(require_auth),
    catalog: CategoryCatalog = Depends(get_category_catalog),
) -> list[CategoryDefinition]:
    """List offered categories.

    Without a stage every category is returned.
    """
    if stage is None:
        return catalog.all_categories()
    return catalog.categories_for(stage, section)
