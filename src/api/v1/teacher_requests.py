# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Teacher request API endpoints.

- POST /{request_id}/approve - Approve a request (admin)
- POST /{request_id}/reject - Reject a request (admin)
- GET /me/subjects - Subjects the calling teacher may manage
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_category_catalog, get_db, require_admin, require_teacher
from src.api.middleware.auth import CurrentUser
from src.domains.catalog.service import CategoryCatalog
from src.domains.teacher.service import (
    InvalidRequestStateError,
    TeacherRequestNotFoundError,
    TeacherRequestService,
)
from src.infrastructure.database.connection import StorageUnavailableError
from src.models.subject import SubjectListResponse, SubjectResponse
from src.models.teacher import (
    ApprovalResponse,
    RejectRequest,
    TeacherAssignmentResponse,
    TeacherRequestResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession, catalog: CategoryCatalog) -> TeacherRequestService:
    """Get teacher request service instance."""
    return TeacherRequestService(db, catalog)


@router.post(
    "/{request_id}/approve",
    response_model=ApprovalResponse,
    summary="Approve teacher request",
)
async def approve_request(
    request_id: str,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    catalog: CategoryCatalog = Depends(get_category_catalog),
) -> ApprovalResponse:
    """Approve a teacher request and materialize its assignments."""
    service = _get_service(db, catalog)
    try:
        request, assignments = await service.approve(request_id, reviewed_by=current_user.id)
    except TeacherRequestNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InvalidRequestStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except StorageUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    return ApprovalResponse(
        request=TeacherRequestResponse.model_validate(request),
        assignments=[TeacherAssignmentResponse.model_validate(a) for a in assignments],
    )


@router.post(
    "/{request_id}/reject",
    response_model=TeacherRequestResponse,
    summary="Reject teacher request",
)
async def reject_request(
    request_id: str,
    data: RejectRequest | None = None,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    catalog: CategoryCatalog = Depends(get_category_catalog),
) -> TeacherRequestResponse:
    """Reject a teacher request."""
    service = _get_service(db, catalog)
    try:
        request = await service.reject(
            request_id,
            reviewed_by=current_user.id,
            reason=data.reason if data else None,
        )
    except TeacherRequestNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InvalidRequestStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except StorageUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    return TeacherRequestResponse.model_validate(request)


@router.get(
    "/me/subjects",
    response_model=SubjectListResponse,
    summary="My manageable subjects",
)
async def my_subjects(
    current_user: CurrentUser = Depends(require_teacher),
    db: AsyncSession = Depends(get_db),
    catalog: CategoryCatalog = Depends(get_category_catalog),
) -> SubjectListResponse:
    """List the subjects the calling teacher may manage."""
    service = _get_service(db, catalog)
    try:
        subjects = await service.manageable_subjects(current_user.id)
    except StorageUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    items = [SubjectResponse.model_validate(subject) for subject in subjects]
    return SubjectListResponse(items=items, total=len(items))
