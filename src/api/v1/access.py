# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Access check API endpoints.

- GET /students/{student_id}/subjects/{subject_id} - May the student read the subject
- GET /teachers/{teacher_id}/subjects/{subject_id} - May the teacher manage the subject

A denial is returned as ``allowed: false`` with status 200. Both checks are
read-only, so a StorageUnavailableError is retried once before answering 503.
"""

import logging
from typing import Awaitable, Callable

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_category_catalog, get_db, require_auth, require_self_or_admin
from src.api.middleware.auth import CurrentUser
from src.domains.access.service import AccessAuthorizer
from src.domains.catalog.service import CategoryCatalog
from src.domains.subject.service import SubjectNotFoundError
from src.domains.teacher.service import TeacherRequestNotFoundError
from src.infrastructure.database.connection import StorageUnavailableError
from src.models.access import AccessDecision
from src.models.common import UserRole

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession, catalog: CategoryCatalog) -> AccessAuthorizer:
    """Get access authorizer instance."""
    return AccessAuthorizer(db, catalog)


async def _check_with_retry(
    db: AsyncSession,
    check: Callable[[], Awaitable[bool]],
) -> bool:
    """Run a read-only check, retrying once on storage failure.

    Raises:
        HTTPException: 503 if the retry fails too.
    """
    try:
        return await check()
    except StorageUnavailableError as e:
        logger.warning("Access check failed, retrying once: %s", str(e))
        await db.rollback()

    try:
        return await check()
    except StorageUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))


@router.get(
    "/students/{student_id}/subjects/{subject_id}",
    response_model=AccessDecision,
    summary="Check student access",
)
async def check_student_access(
    student_id: str,
    subject_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    catalog: CategoryCatalog = Depends(get_category_catalog),
) -> AccessDecision:
    """Check whether a student may read a subject's content."""
    require_self_or_admin(current_user, student_id)
    service = _get_service(db, catalog)

    try:
        allowed = await _check_with_retry(
            db, lambda: service.can_student_access(student_id, subject_id)
        )
    except SubjectNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return AccessDecision(
        actor_id=student_id,
        actor_role=UserRole.STUDENT,
        subject_id=subject_id,
        allowed=allowed,
    )


@router.get(
    "/teachers/{teacher_id}/subjects/{subject_id}",
    response_model=AccessDecision,
    summary="Check teacher access",
)
async def check_teacher_access(
    teacher_id: str,
    subject_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    catalog: CategoryCatalog = Depends(get_category_catalog),
) -> AccessDecision:
    """Check whether a teacher may manage a subject's content."""
    require_self_or_admin(current_user, teacher_id)
    service = _get_service(db, catalog)

    try:
        allowed = await _check_with_retry(
            db, lambda: service.can_teacher_manage(teacher_id, subject_id)
        )
    except (SubjectNotFoundError, TeacherRequestNotFoundError) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return AccessDecision(
        actor_id=teacher_id,
        actor_role=UserRole.TEACHER,
        subject_id=subject_id,
        allowed=allowed,
    )
