# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Category-level subscription status.

A category is fully active for a student only when every subject of its
fan-out has a currently valid subscription. ``earliest_expiry`` is reported
only for fully active categories; a partially active category has no
"active until" date.
"""

import logging
from datetime import datetime

from src.domains.catalog.service import CategoryCatalog
from src.domains.subject.service import SubjectDirectory
from src.domains.subscription.ledger import SubscriptionLedger, is_currently_valid
from src.models.common import StudentProfileSummary
from src.models.subscription import CategoryStatus
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class CategorySubscriptionView:
    """Derives per-category status from per-subject subscriptions.

    Attributes:
        catalog: Category catalog.
        directory: Subject directory used for the fan-out.
        ledger: Subscription ledger.
    """

    def __init__(
        self,
        catalog: CategoryCatalog,
        directory: SubjectDirectory,
        ledger: SubscriptionLedger,
    ) -> None:
        self.catalog = catalog
        self.directory = directory
        self.ledger = ledger

    async def status_for(
        self,
        category: str,
        student: StudentProfileSummary,
        now: datetime | None = None,
    ) -> CategoryStatus:
        """Derive the status of one category for one student.

        Args:
            category: Category key.
            student: Student profile.
            now: Reference time, defaults to the current UTC time.

        Returns:
            Category status. An empty fan-out is never fully active.

        Raises:
            UnknownCategoryError: If the category is not in the catalog.
            StorageUnavailableError: If subjects or subscriptions cannot be read.
        """
        definition = self.catalog.get_category(category)
        now = now or utc_now()

        subjects = await self.directory.subjects_for_category(
            definition.id,
            student.stage,
            student.grade,
            student.section,
        )
        subscriptions = await self.ledger.list_for_student(
            student.id,
            [subject.id for subject in subjects],
        )
        by_subject = {subscription.subject_id: subscription for subscription in subscriptions}

        valid_end_dates = [
            by_subject[subject.id].end_date
            for subject in subjects
            if is_currently_valid(by_subject.get(subject.id), now, subject)
        ]

        fully_active = bool(subjects) and len(valid_end_dates) == len(subjects)

        return CategoryStatus(
            category=definition.id,
            name=definition.name,
            fully_active=fully_active,
            earliest_expiry=min(valid_end_dates) if fully_active else None,
            total_subjects=len(subjects),
            valid_subjects=len(valid_end_dates),
        )

    async def statuses_for(
        self,
        student: StudentProfileSummary,
        now: datetime | None = None,
    ) -> list[CategoryStatus]:
        """Derive the status of every category offered to a student."""
        now = now or utc_now()
        return [
            await self.status_for(definition.id, student, now)
            for definition in self.catalog.categories_for(student.stage, student.section)
        ]
