# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Subscription service for the administrator activation flow.

This module provides the SubscriptionService class for:
- Activating categories for a student (fan-out to per-subject rows)
- Deactivating categories for a student
- Listing a student's subscriptions and category statuses
- Listing active subscriptions by stage/grade/section

Activation writes one subject at a time and commits after each one. A
storage failure part way through leaves the written rows in place. The
category in progress is reported as ``partial`` with its untouched subjects
listed, or as ``skipped`` when its subjects could not be read. Every later
category is reported as ``skipped``.
"""

import logging
from datetime import date, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config.settings import SubscriptionSettings
from src.domains.catalog.service import CategoryCatalog, get_catalog
from src.domains.subject.service import SubjectDirectory
from src.domains.subscription.ledger import (
    SubscriptionLedger,
    SubscriptionServiceError,
    is_currently_valid,
)
from src.domains.subscription.view import CategorySubscriptionView
from src.infrastructure.database.connection import StorageUnavailableError, storage_errors
from src.infrastructure.database.models.student import StudentProfile
from src.infrastructure.database.models.subject import Subject
from src.infrastructure.database.models.subscription import Subscription
from src.models.common import StudentProfileSummary
from src.models.subscription import (
    ActivationResult,
    ActivationStatus,
    CategoryStatus,
    SubscriptionResponse,
)
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class StudentNotFoundError(SubscriptionServiceError):
    """Raised when a student profile is not found."""

    pass


class CategoryNotOfferedError(SubscriptionServiceError):
    """Raised when a category is not offered to the student's profile."""

    pass


class SubscriptionService:
    """Service for category activation and subscription listings.

    Attributes:
        db: Async database session.
        catalog: Category catalog.
        directory: Subject directory.
        ledger: Subscription ledger.
        view: Category status view.
    """

    def __init__(
        self,
        db: AsyncSession,
        catalog: CategoryCatalog | None = None,
        settings: SubscriptionSettings | None = None,
    ) -> None:
        """Initialize subscription service.

        Args:
            db: Async database session.
            catalog: Category catalog, defaults to the configured one.
            settings: Subscription settings, defaults to the configured ones.
        """
        self.db = db
        self.catalog = catalog or get_catalog()
        self.directory = SubjectDirectory(db, self.catalog)
        self.ledger = SubscriptionLedger(db, settings)
        self.view = CategorySubscriptionView(self.catalog, self.directory, self.ledger)

    async def activate_categories(
        self,
        student_id: str,
        categories: list[str],
        duration_days: int | None = None,
        custom_end_date: date | None = None,
        created_by: str | None = None,
        teacher_id: str | None = None,
        now: datetime | None = None,
    ) -> list[ActivationResult]:
        """Activate categories for a student.

        Every subject of each category's fan-out gets its subscription
        created or renewed with the same end date.

        Args:
            student_id: Student user ID.
            categories: Category keys to activate.
            duration_days: Preset duration in days.
            custom_end_date: Calendar end date (midnight UTC).
            created_by: Administrator performing the activation.
            teacher_id: Teacher linked to the subscriptions.
            now: Reference time, defaults to the current UTC time.

        Returns:
            One result per distinct category, in request order. After a
            storage failure the remaining categories are ``skipped``.

        Raises:
            StudentNotFoundError: If the student profile does not exist.
            InvalidEndDateError: If the end date is invalid.
            UnknownCategoryError: If a category is not in the catalog.
            CategoryNotOfferedError: If a category is not offered to the
                student. Raised before anything is written.
            StorageUnavailableError: If storage fails before any row was
                written.
        """
        now = now or utc_now()
        student = await self._get_student(student_id)
        end_date = self.ledger.compute_end_date(duration_days, custom_end_date, now)
        self._check_offered(categories, student)

        results: list[ActivationResult] = []
        written = 0
        stopped = False

        for category in dict.fromkeys(categories):
            if stopped:
                results.append(
                    ActivationResult(
                        category=category,
                        status=ActivationStatus.SKIPPED,
                        end_date=end_date,
                    )
                )
                continue

            activated: list[str] = []
            subject_ids: list[str] | None = None
            try:
                subjects = await self.directory.subjects_for_category(
                    category, student.stage, student.grade, student.section
                )
                subject_ids = [subject.id for subject in subjects]
                for subject_id in subject_ids:
                    await self.ledger.upsert(
                        student.id,
                        subject_id,
                        end_date,
                        teacher_id=teacher_id,
                        created_by=created_by,
                        now=now,
                    )
                    activated.append(subject_id)
                    written += 1
            except StorageUnavailableError:
                if written == 0:
                    raise
                stopped = True
                results.append(self._stopped_result(category, subject_ids, activated, end_date))
                logger.warning(
                    "Activation stopped: student=%s, category=%s, activated=%d, status=%s",
                    student.id,
                    category,
                    len(activated),
                    results[-1].status,
                    exc_info=True,
                )
                continue

            if not subject_ids:
                logger.info(
                    "Category has no subjects for profile: student=%s, category=%s, stage=%s, grade=%s, section=%s",
                    student.id,
                    category,
                    student.stage,
                    student.grade,
                    student.section,
                )
            status = ActivationStatus.ACTIVATED if subject_ids else ActivationStatus.EMPTY
            results.append(
                ActivationResult(
                    category=category,
                    status=status,
                    total_subjects=len(subject_ids),
                    activated_subject_ids=activated,
                    end_date=end_date,
                )
            )

        logger.info(
            "Activated categories: student=%s, categories=%s, subjects=%d, end_date=%s, by=%s, stopped=%s",
            student.id,
            ",".join(categories),
            written,
            end_date.isoformat(),
            created_by,
            stopped,
        )
        return results

    async def deactivate_categories(self, student_id: str, categories: list[str]) -> int:
        """Deactivate every subscription in the given categories.

        Args:
            student_id: Student user ID.
            categories: Category keys to deactivate.

        Returns:
            Number of subscription rows changed.

        Raises:
            StudentNotFoundError: If the student profile does not exist.
            UnknownCategoryError: If a category is not in the catalog.
        """
        student = await self._get_student(student_id)

        subject_ids: list[str] = []
        for category in dict.fromkeys(categories):
            self.catalog.get_category(category)
            subjects = await self.directory.subjects_for_category(
                category, student.stage, student.grade, student.section
            )
            subject_ids.extend(subject.id for subject in subjects)

        return await self.ledger.deactivate(student.id, subject_ids)

    async def list_student_subscriptions(
        self,
        student_id: str,
        now: datetime | None = None,
    ) -> list[SubscriptionResponse]:
        """List every subscription row of a student with its subject.

        Args:
            student_id: Student user ID.
            now: Reference time for ``currently_valid``.

        Returns:
            Subscriptions ordered by end date.
        """
        now = now or utc_now()
        query = (
            select(Subscription, Subject)
            .join(Subject, Subject.id == Subscription.subject_id)
            .where(Subscription.student_id == student_id)
            .order_by(Subscription.end_date)
        )

        with storage_errors("ledger unavailable"):
            result = await self.db.execute(query)
            rows = result.all()

        return [self._to_response(subscription, subject, now) for subscription, subject in rows]

    async def list_subscriptions(
        self,
        stage: str | None = None,
        grade: str | None = None,
        section: str | None = None,
        now: datetime | None = None,
    ) -> list[SubscriptionResponse]:
        """List active subscriptions for subjects matching the filters.

        Args:
            stage: Filter by subject stage.
            grade: Filter by subject grade.
            section: Filter by subject section.
            now: Reference time for ``currently_valid``.

        Returns:
            Active subscriptions ordered by end date.
        """
        now = now or utc_now()
        subjects = await self.directory.list_subjects(
            stage=stage, grade=grade, section=section, active_only=False
        )
        by_id = {subject.id: subject for subject in subjects}
        subscriptions = await self.ledger.list_active_for_subjects(list(by_id))

        return [
            self._to_response(subscription, by_id[subscription.subject_id], now)
            for subscription in subscriptions
        ]

    async def category_statuses(
        self,
        student_id: str,
        now: datetime | None = None,
    ) -> list[CategoryStatus]:
        """Get the status of every category offered to a student.

        Raises:
            StudentNotFoundError: If the student profile does not exist.
        """
        student = await self._get_student(student_id)
        return await self.view.statuses_for(student, now)

    @staticmethod
    def _stopped_result(
        category: str,
        subject_ids: list[str] | None,
        activated: list[str],
        end_date: datetime,
    ) -> ActivationResult:
        if subject_ids is None:
            return ActivationResult(
                category=category,
                status=ActivationStatus.SKIPPED,
                end_date=end_date,
            )
        return ActivationResult(
            category=category,
            status=ActivationStatus.PARTIAL,
            total_subjects=len(subject_ids),
            activated_subject_ids=activated,
            remaining_subject_ids=[sid for sid in subject_ids if sid not in activated],
            end_date=end_date,
        )

    def _check_offered(self, categories: list[str], student: StudentProfileSummary) -> None:
        offered = {item.id for item in self.catalog.categories_for(student.stage, student.section)}
        for category in categories:
            self.catalog.get_category(category)
            if category not in offered:
                raise CategoryNotOfferedError(
                    f"Category {category} is not offered to {student.stage}/{student.section}"
                )

    async def _get_student(self, student_id: str) -> StudentProfileSummary:
        with storage_errors("student profiles unavailable"):
            result = await self.db.execute(
                select(StudentProfile).where(StudentProfile.id == student_id)
            )
            profile = result.scalar_one_or_none()

        if profile is None:
            raise StudentNotFoundError(f"Student {student_id} not found")
        return StudentProfileSummary.model_validate(profile)

    @staticmethod
    def _to_response(
        subscription: Subscription,
        subject: Subject,
        now: datetime,
    ) -> SubscriptionResponse:
        return SubscriptionResponse(
            id=subscription.id,
            student_id=subscription.student_id,
            subject_id=subscription.subject_id,
            subject_name=subject.name,
            category=subject.category,
            start_date=subscription.start_date,
            end_date=subscription.end_date,
            is_active=subscription.is_active,
            renewal_count=subscription.renewal_count,
            teacher_id=subscription.teacher_id,
            currently_valid=is_currently_valid(subscription, now, subject),
        )
