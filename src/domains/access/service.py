# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Access authorization.

AccessAuthorizer answers "may this actor act on this subject" for the two
paths the portal has:

- Students read a subject's content while they hold a currently valid
  subscription to that exact subject. Subscriptions to sibling subjects
  of the same category do not matter.
- Teachers manage a subject's content when their latest request matches
  the subject (see TeacherAssignmentMatcher).

A denial is a normal ``False``. Both checks are read-only and may be
repeated safely.
"""

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.catalog.service import CategoryCatalog, get_catalog
from src.domains.subject.service import SubjectDirectory
from src.domains.subscription.ledger import SubscriptionLedger, is_currently_valid
from src.domains.teacher.matcher import TeacherAssignmentMatcher
from src.domains.teacher.service import TeacherRequestNotFoundError, TeacherRequestService

logger = logging.getLogger(__name__)


class AccessAuthorizer:
    """Authorization facade over the subscription and teacher domains.

    Attributes:
        directory: Subject directory.
        ledger: Subscription ledger.
        requests: Teacher request service.
        matcher: Teacher assignment matcher.
    """

    def __init__(self, db: AsyncSession, catalog: CategoryCatalog | None = None) -> None:
        """Initialize the authorizer.

        Args:
            db: Async database session.
            catalog: Category catalog, defaults to the configured one.
        """
        catalog = catalog or get_catalog()
        self.directory = SubjectDirectory(db, catalog)
        self.ledger = SubscriptionLedger(db)
        self.requests = TeacherRequestService(db, catalog)
        self.matcher = TeacherAssignmentMatcher(catalog)

    async def can_student_access(
        self,
        student_id: str,
        subject_id: str,
        now: datetime | None = None,
    ) -> bool:
        """Check whether a student may read a subject's content.

        Args:
            student_id: Student user ID.
            subject_id: Subject ID.
            now: Reference time, defaults to the current UTC time.

        Returns:
            True if the student holds a currently valid subscription.

        Raises:
            SubjectNotFoundError: If the subject does not exist.
            StorageUnavailableError: If storage cannot be read.
        """
        subject = await self.directory.get_subject(subject_id)
        subscription = await self.ledger.get(student_id, subject_id)

        allowed = is_currently_valid(subscription, now, subject)
        if not allowed:
            logger.debug("Student access denied: student=%s, subject=%s", student_id, subject_id)
        return allowed

    async def can_teacher_manage(self, teacher_id: str, subject_id: str) -> bool:
        """Check whether a teacher may manage a subject's content.

        Args:
            teacher_id: Teacher user ID.
            subject_id: Subject ID.

        Returns:
            True if the teacher's latest request matches the subject.

        Raises:
            SubjectNotFoundError: If the subject does not exist.
            TeacherRequestNotFoundError: If the teacher has no request.
            StorageUnavailableError: If storage cannot be read.
        """
        subject = await self.directory.get_subject(subject_id)
        request = await self.requests.latest_request(teacher_id)
        if request is None:
            raise TeacherRequestNotFoundError(f"No teacher request for {teacher_id}")

        allowed = self.matcher.can_manage(request, subject)
        if not allowed:
            logger.debug(
                "Teacher manage denied: teacher=%s, subject=%s, request=%s, status=%s",
                teacher_id,
                subject_id,
                request.id,
                request.status,
            )
        return allowed
