# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Teacher request service.

This module provides the TeacherRequestService class for:
- Approving a teacher registration request and materializing its
  TeacherAssignments
- Rejecting a request
- Looking up a teacher's latest request and assignments
- Listing the subjects an approved teacher may manage
"""

import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.catalog.service import CategoryCatalog, get_catalog
from src.domains.teacher.matcher import ManageableScope, TeacherAssignmentMatcher
from src.infrastructure.database.connection import StorageUnavailableError, storage_errors
from src.infrastructure.database.models.subject import Subject
from src.infrastructure.database.models.teacher import TeacherAssignment, TeacherRequest
from src.models.common import ApprovalStatus
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)

DEFAULT_REJECTION_REASON = "لم يستوفِ الشروط المطلوبة"


class TeacherServiceError(Exception):
    """Base exception for teacher request errors."""

    pass


class TeacherRequestNotFoundError(TeacherServiceError):
    """Raised when a teacher request is not found."""

    pass


class InvalidRequestStateError(TeacherServiceError):
    """Raised when a request is already in the target state."""

    pass


class TeacherRequestService:
    """Service for teacher request review and teacher scope lookups.

    Attributes:
        db: Async database session.
        catalog: Category catalog.
        matcher: Teacher assignment matcher.
    """

    def __init__(self, db: AsyncSession, catalog: CategoryCatalog | None = None) -> None:
        """Initialize teacher request service.

        Args:
            db: Async database session.
            catalog: Category catalog, defaults to the configured one.
        """
        self.db = db
        self.catalog = catalog or get_catalog()
        self.matcher = TeacherAssignmentMatcher(self.catalog)

    async def get_request(self, request_id: str) -> TeacherRequest:
        """Get a teacher request by ID.

        Raises:
            TeacherRequestNotFoundError: If the request does not exist.
        """
        with storage_errors("teacher requests unavailable"):
            result = await self.db.execute(
                select(TeacherRequest).where(TeacherRequest.id == request_id)
            )
            request = result.scalar_one_or_none()

        if request is None:
            raise TeacherRequestNotFoundError(f"Teacher request {request_id} not found")
        return request

    async def latest_request(self, teacher_id: str) -> TeacherRequest | None:
        """Get a teacher's most recent approved request.

        Falls back to the most recent request of any status so pending and
        rejected teachers are still found (and denied by the matcher).

        Args:
            teacher_id: Teacher user ID.

        Returns:
            The request, or None if the teacher never registered.
        """
        base = (
            select(TeacherRequest)
            .where(TeacherRequest.user_id == teacher_id)
            .order_by(TeacherRequest.created_at.desc())
            .limit(1)
        )

        with storage_errors("teacher requests unavailable"):
            result = await self.db.execute(
                base.where(TeacherRequest.status == ApprovalStatus.APPROVED.value)
            )
            request = result.scalar_one_or_none()
            if request is None:
                result = await self.db.execute(base)
                request = result.scalar_one_or_none()
        return request

    async def approve(
        self,
        request_id: str,
        reviewed_by: str,
    ) -> tuple[TeacherRequest, list[TeacherAssignment]]:
        """Approve a teacher request.

        Replaces the teacher's assignments for (primary stage, category)
        with one row per declared grade. A request that declares no grades
        gets no rows; the matcher then allows every grade. A request whose
        stage or category does not resolve is approved without rows.

        Args:
            request_id: Teacher request ID.
            reviewed_by: Administrator user ID.

        Returns:
            Tuple of (approved request, materialized assignments).

        Raises:
            TeacherRequestNotFoundError: If the request does not exist.
            InvalidRequestStateError: If the request is already approved.
        """
        request = await self.get_request(request_id)
        if request.status == ApprovalStatus.APPROVED:
            raise InvalidRequestStateError(f"Teacher request {request_id} is already approved")

        request.status = ApprovalStatus.APPROVED.value
        request.reviewed_at = utc_now()
        request.reviewed_by = reviewed_by
        request.rejection_reason = None

        assignments: list[TeacherAssignment] = []
        scope = self.matcher.manageable_filter(request)

        try:
            if scope is None:
                logger.warning(
                    "Approved teacher request without assignments: id=%s, category=%r, stages=%s",
                    request.id,
                    request.assigned_category,
                    request.assigned_stages,
                )
            else:
                await self._delete_assignments(request.user_id, scope)
                for grade in sorted(scope.grades or ()):
                    assignment = TeacherAssignment(
                        teacher_id=request.user_id,
                        stage=scope.stage.value,
                        grade=grade.value,
                        category=scope.selection.category.value,
                    )
                    self.db.add(assignment)
                    assignments.append(assignment)

            await self.db.commit()
            await self.db.refresh(request)
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StorageUnavailableError("teacher requests unavailable", e) from e

        logger.info(
            "Approved teacher request: id=%s, teacher=%s, assignments=%d, by=%s",
            request.id,
            request.user_id,
            len(assignments),
            reviewed_by,
        )
        return request, assignments

    async def reject(
        self,
        request_id: str,
        reviewed_by: str,
        reason: str | None = None,
    ) -> TeacherRequest:
        """Reject a teacher request.

        Rejecting a previously approved request also removes the
        assignments it materialized for (primary stage, category).

        Args:
            request_id: Teacher request ID.
            reviewed_by: Administrator user ID.
            reason: Rejection reason shown to the teacher.

        Returns:
            The rejected request.

        Raises:
            TeacherRequestNotFoundError: If the request does not exist.
            InvalidRequestStateError: If the request is already rejected.
        """
        request = await self.get_request(request_id)
        if request.status == ApprovalStatus.REJECTED:
            raise InvalidRequestStateError(f"Teacher request {request_id} is already rejected")
        was_approved = request.status == ApprovalStatus.APPROVED

        request.status = ApprovalStatus.REJECTED.value
        request.rejection_reason = (reason or "").strip() or DEFAULT_REJECTION_REASON
        request.reviewed_at = utc_now()
        request.reviewed_by = reviewed_by

        try:
            scope = self.matcher.manageable_filter(request) if was_approved else None
            if scope is not None:
                await self._delete_assignments(request.user_id, scope)
            await self.db.commit()
            await self.db.refresh(request)
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StorageUnavailableError("teacher requests unavailable", e) from e

        logger.info(
            "Rejected teacher request: id=%s, teacher=%s, revoked=%s, by=%s",
            request.id,
            request.user_id,
            was_approved,
            reviewed_by,
        )
        return request

    async def _delete_assignments(self, teacher_id: str, scope: ManageableScope) -> None:
        await self.db.execute(
            delete(TeacherAssignment).where(
                TeacherAssignment.teacher_id == teacher_id,
                TeacherAssignment.stage == scope.stage.value,
                TeacherAssignment.category == scope.selection.category.value,
            )
        )

    async def list_assignments(self, teacher_id: str) -> list[TeacherAssignment]:
        """List a teacher's materialized assignments."""
        with storage_errors("teacher requests unavailable"):
            result = await self.db.execute(
                select(TeacherAssignment)
                .where(TeacherAssignment.teacher_id == teacher_id)
                .order_by(TeacherAssignment.stage, TeacherAssignment.grade)
            )
            return list(result.scalars().all())

    async def manageable_subjects(self, teacher_id: str) -> list[Subject]:
        """List the active subjects a teacher may manage.

        Args:
            teacher_id: Teacher user ID.

        Returns:
            Subjects ordered by grade and name. Empty for teachers that are
            not approved or whose scope does not resolve.
        """
        request = await self.latest_request(teacher_id)
        if request is None or request.status != ApprovalStatus.APPROVED:
            return []

        scope = self.matcher.manageable_filter(request)
        if scope is None:
            return []

        query = select(Subject).where(
            Subject.stage == scope.stage.value,
            Subject.category == scope.selection.category.value,
            Subject.is_active.is_(True),
        )
        if scope.selection.subject_name is not None:
            query = query.where(Subject.name == scope.selection.subject_name)
        if scope.grades is not None:
            query = query.where(Subject.grade.in_([grade.value for grade in scope.grades]))

        with storage_errors("directory unavailable"):
            result = await self.db.execute(query.order_by(Subject.grade, Subject.name))
            subjects = result.scalars().all()

        return [subject for subject in subjects if self.matcher.can_manage(request, subject)]
