# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Subscription API endpoints.

Administrator endpoints:
- POST /activate - Activate categories for a student
- POST /deactivate - Deactivate categories for a student
- GET / - List active subscriptions by stage/grade/section

Student endpoints (own records, or any record for admins):
- GET /students/{student_id} - List a student's subscriptions
- GET /students/{student_id}/categories - Category status for a student
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import (
    get_category_catalog,
    get_db,
    require_admin,
    require_auth,
    require_self_or_admin,
)
from src.api.middleware.auth import CurrentUser
from src.domains.catalog.service import CategoryCatalog, UnknownCategoryError
from src.domains.subscription.ledger import InvalidEndDateError
from src.domains.subscription.service import (
    CategoryNotOfferedError,
    StudentNotFoundError,
    SubscriptionService,
)
from src.infrastructure.database.connection import StorageUnavailableError
from src.models.common import Grade, Section, Stage
from src.models.subscription import (
    ActivateCategoriesRequest,
    ActivationResponse,
    CategoryStatus,
    DeactivateCategoriesRequest,
    DeactivationResponse,
    SubscriptionListResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession, catalog: CategoryCatalog) -> SubscriptionService:
    """Get subscription service instance."""
    return SubscriptionService(db, catalog)


@router.post(
    "/activate",
    response_model=ActivationResponse,
    summary="Activate categories",
    description="Create or renew the subscriptions of every subject in the given categories.",
)
async def activate_categories(
    data: ActivateCategoriesRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    catalog: CategoryCatalog = Depends(get_category_catalog),
) -> ActivationResponse:
    """Activate categories for a student.

    A partially applied activation is returned with status 200 and
    ``partial`` results; the caller can re-run the same request.
    """
    service = _get_service(db, catalog)
    try:
        results = await service.activate_categories(
            student_id=data.student_id,
            categories=list(data.categories),
            duration_days=data.duration_days,
            custom_end_date=data.custom_end_date,
            created_by=current_user.id,
            teacher_id=data.teacher_id,
        )
    except (StudentNotFoundError, UnknownCategoryError) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InvalidEndDateError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except CategoryNotOfferedError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except StorageUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    return ActivationResponse(student_id=data.student_id, results=results)


@router.post(
    "/deactivate",
    response_model=DeactivationResponse,
    summary="Deactivate categories",
)
async def deactivate_categories(
    data: DeactivateCategoriesRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    catalog: CategoryCatalog = Depends(get_category_catalog),
) -> DeactivationResponse:
    """Deactivate every subscription in the given categories."""
    service = _get_service(db, catalog)
    try:
        changed = await service.deactivate_categories(data.student_id, list(data.categories))
    except (StudentNotFoundError, UnknownCategoryError) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StorageUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    logger.info(
        "Deactivated categories for %s by %s: %d rows",
        data.student_id,
        current_user.id,
        changed,
    )
    return DeactivationResponse(student_id=data.student_id, deactivated=changed)


@router.get(
    "",
    response_model=SubscriptionListResponse,
    summary="List active subscriptions",
)
async def list_subscriptions(
    stage: Stage | None = Query(None),
    grade: Grade | None = Query(None),
    section: Section | None = Query(None),
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    catalog: CategoryCatalog = Depends(get_category_catalog),
) -> SubscriptionListResponse:
    """List active subscriptions for subjects matching the filters."""
    service = _get_service(db, catalog)
    try:
        items = await service.list_subscriptions(stage=stage, grade=grade, section=section)
    except StorageUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    return SubscriptionListResponse(items=items, total=len(items))


@router.get(
    "/students/{student_id}",
    response_model=SubscriptionListResponse,
    summary="List a student's subscriptions",
)
async def list_student_subscriptions(
    student_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    catalog: CategoryCatalog = Depends(get_category_catalog),
) -> SubscriptionListResponse:
    """List every subscription row of a student."""
    require_self_or_admin(current_user, student_id)
    service = _get_service(db, catalog)
    try:
        items = await service.list_student_subscriptions(student_id)
    except StorageUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    return SubscriptionListResponse(items=items, total=len(items))


@router.get(
    "/students/{student_id}/categories",
    response_model=list[CategoryStatus],
    summary="Category status for a student",
)
async def get_category_statuses(
    student_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    catalog: CategoryCatalog = Depends(get_category_catalog),
) -> list[CategoryStatus]:
    """Get the status of every category offered to a student."""
    require_self_or_admin(current_user, student_id)
    service = _get_service(db, catalog)
    try:
        return await service.category_statuses(student_id)
    except StudentNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StorageUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
