# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Subject administration API endpoints.

- GET / - List subjects with filtering
- POST / - Create a subject (admin)
- DELETE /{subject_id} - Deactivate a subject (admin)
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_category_catalog, get_db, require_admin, require_auth
from src.api.middleware.auth import CurrentUser
from src.domains.catalog.service import CategoryCatalog
from src.domains.subject.service import (
    InvalidSubjectError,
    SubjectDirectory,
    SubjectNotFoundError,
)
from src.infrastructure.database.connection import StorageUnavailableError
from src.models.common import CategoryKey, Grade, Section, Stage
from src.models.subject import SubjectCreateRequest, SubjectListResponse, SubjectResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession, catalog: CategoryCatalog) -> SubjectDirectory:
    """Get subject directory instance."""
    return SubjectDirectory(db, catalog)


@router.get(
    "",
    response_model=SubjectListResponse,
    summary="List subjects",
)
async def list_subjects(
    stage: Stage | None = Query(None),
    grade: Grade | None = Query(None),
    section: Section | None = Query(None),
    category: CategoryKey | None = Query(None),
    include_inactive: bool = Query(False, description="Include deactivated subjects"),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    catalog: CategoryCatalog = Depends(get_category_catalog),
) -> SubjectListResponse:
    """List subjects. Only admins may include deactivated subjects."""
    service = _get_service(db, catalog)
    try:
        subjects = await service.list_subjects(
            stage=stage,
            grade=grade,
            section=section,
            category=category,
            active_only=not (include_inactive and current_user.is_admin),
        )
    except StorageUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    items = [SubjectResponse.model_validate(subject) for subject in subjects]
    return SubjectListResponse(items=items, total=len(items))


@router.post(
    "",
    response_model=SubjectResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create subject",
)
async def create_subject(
    data: SubjectCreateRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    catalog: CategoryCatalog = Depends(get_category_catalog),
) -> SubjectResponse:
    """Create a subject."""
    service = _get_service(db, catalog)
    try:
        subject = await service.create_subject(data)
    except InvalidSubjectError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StorageUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    logger.info("Subject created: %s by %s", subject.id, current_user.id)
    return SubjectResponse.model_validate(subject)


@router.delete(
    "/{subject_id}",
    response_model=SubjectResponse,
    summary="Deactivate subject",
)
async def deactivate_subject(
    subject_id: str,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    catalog: CategoryCatalog = Depends(get_category_catalog),
) -> SubjectResponse:
    """Soft-delete a subject."""
    service = _get_service(db, catalog)
    try:
        subject = await service.deactivate_subject(subject_id)
    except SubjectNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StorageUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    logger.info("Subject deactivated: %s by %s", subject_id, current_user.id)
    return SubjectResponse.model_validate(subject)
