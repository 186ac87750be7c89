# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Subscription ledger.

This module owns the lifecycle of the one subscription row kept per
(student, subject): creation, renewal, end date computation and
deactivation. It also hosts ``is_currently_valid``, the only validity
predicate in the code base.

Renewal semantics:
    Re-activating an existing row overwrites ``end_date`` with the new
    value (it may move earlier), sets ``is_active`` and increments
    ``renewal_count``. Rows are never deleted.
"""

import logging
from collections.abc import Sequence
from datetime import date, datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config.settings import SubscriptionSettings, get_settings
from src.infrastructure.database.connection import StorageUnavailableError, storage_errors
from src.infrastructure.database.models.subject import Subject
from src.infrastructure.database.models.subscription import Subscription
from src.utils.datetime import days_from_now, ensure_utc, utc_midnight, utc_now

logger = logging.getLogger(__name__)


class SubscriptionServiceError(Exception):
    """Base exception for subscription errors."""

    pass


class InvalidEndDateError(SubscriptionServiceError):
    """Raised when a subscription end date cannot be computed or is in the past."""

    pass


class SubscriptionLedger:
    """Per-(student, subject) subscription records.

    Attributes:
        db: Async database session.
        settings: Subscription settings (duration presets).
    """

    def __init__(
        self,
        db: AsyncSession,
        settings: SubscriptionSettings | None = None,
    ) -> None:
        """Initialize the ledger.

        Args:
            db: Async database session.
            settings: Subscription settings, defaults to the configured ones.
        """
        self.db = db
        self.settings = settings or get_settings().subscription

    @staticmethod
    def is_currently_valid(
        subscription: Subscription | None,
        now: datetime | None = None,
        subject: Subject | None = None,
    ) -> bool:
        """Check whether a subscription grants access right now.

        A subscription is valid when it is active and its end date lies
        strictly after ``now``. When the subject row is given, an inactive
        subject or a subject that is not the subscription's own is an
        invariant violation: it is logged and reported as not valid.

        Args:
            subscription: Subscription row, or None if there is none.
            now: Reference time, defaults to the current UTC time.
            subject: Subject row the subscription is checked against.

        Returns:
            True if access is granted.
        """
        if subscription is None:
            return False

        if subject is not None:
            if subject.id != subscription.subject_id:
                logger.warning(
                    "Invariant violation: subscription %s checked against subject %s",
                    subscription.id,
                    subject.id,
                )
                return False
            if not subject.is_active:
                logger.warning(
                    "Invariant violation: subscription %s refers to inactive subject %s",
                    subscription.id,
                    subject.id,
                )
                return False

        reference = ensure_utc(now) if now is not None else utc_now()
        return bool(subscription.is_active) and ensure_utc(subscription.end_date) > reference

    def compute_end_date(
        self,
        duration_days: int | None = None,
        custom_end_date: date | None = None,
        now: datetime | None = None,
    ) -> datetime:
        """Compute a subscription end date.

        A preset is a whole number of days from ``now``. A custom date is
        midnight UTC of that calendar date.

        Args:
            duration_days: One of the configured duration presets.
            custom_end_date: Calendar date chosen by the administrator.
            now: Reference time, defaults to the current UTC time.

        Returns:
            Timezone-aware UTC end date.

        Raises:
            InvalidEndDateError: If both or neither input is given, the
                duration is not a positive preset, or the end date is not
                after ``now``.
        """
        if (duration_days is None) == (custom_end_date is None):
            raise InvalidEndDateError("Provide exactly one of duration_days or custom_end_date")

        reference = ensure_utc(now) if now is not None else utc_now()

        if duration_days is not None:
            if duration_days <= 0:
                raise InvalidEndDateError(f"Duration must be positive, got {duration_days}")
            if duration_days not in self.settings.duration_presets:
                raise InvalidEndDateError(
                    f"Duration {duration_days} is not one of {self.settings.duration_presets}"
                )
            return days_from_now(duration_days, reference)

        if isinstance(custom_end_date, datetime):
            custom_end_date = custom_end_date.date()
        end_date = utc_midnight(custom_end_date)
        if end_date <= reference:
            raise InvalidEndDateError(f"End date {end_date.date()} is not in the future")
        return end_date

    async def get(self, student_id: str, subject_id: str) -> Subscription | None:
        """Get the subscription row for a (student, subject) pair.

        Raises:
            StorageUnavailableError: If the ledger cannot be read.
        """
        with storage_errors("ledger unavailable"):
            result = await self.db.execute(
                select(Subscription).where(
                    Subscription.student_id == student_id,
                    Subscription.subject_id == subject_id,
                )
            )
            return result.scalar_one_or_none()

    async def upsert(
        self,
        student_id: str,
        subject_id: str,
        end_date: datetime,
        teacher_id: str | None = None,
        created_by: str | None = None,
        now: datetime | None = None,
    ) -> Subscription:
        """Create or renew the subscription for a (student, subject) pair.

        Commits before returning. A concurrent insert of the same pair is
        resolved by applying the renewal to the row that won.

        Args:
            student_id: Student user ID.
            subject_id: Subject ID.
            end_date: New end date, written as given.
            teacher_id: Linked teacher, replaced only when provided.
            created_by: Administrator performing the activation.
            now: Start date for new rows, defaults to the current UTC time.

        Returns:
            The created or renewed subscription.

        Raises:
            StorageUnavailableError: If the write fails.
        """
        end_date = ensure_utc(end_date)
        try:
            existing = await self.get(student_id, subject_id)
            if existing is not None:
                subscription = self._renew(existing, end_date, teacher_id)
                await self.db.commit()
            else:
                subscription = Subscription(
                    student_id=student_id,
                    subject_id=subject_id,
                    start_date=ensure_utc(now) if now is not None else utc_now(),
                    end_date=end_date,
                    is_active=True,
                    renewal_count=0,
                    teacher_id=teacher_id,
                    created_by=created_by,
                )
                self.db.add(subscription)
                try:
                    await self.db.commit()
                except IntegrityError:
                    await self.db.rollback()
                    winner = await self.get(student_id, subject_id)
                    if winner is None:
                        raise
                    subscription = self._renew(winner, end_date, teacher_id)
                    await self.db.commit()
            await self.db.refresh(subscription)
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StorageUnavailableError("ledger unavailable", e) from e
        except StorageUnavailableError:
            await self.db.rollback()
            raise

        logger.info(
            "Upserted subscription: student=%s, subject=%s, end_date=%s, renewals=%d",
            student_id,
            subject_id,
            subscription.end_date.isoformat(),
            subscription.renewal_count,
        )
        return subscription

    @staticmethod
    def _renew(
        subscription: Subscription,
        end_date: datetime,
        teacher_id: str | None,
    ) -> Subscription:
        subscription.end_date = end_date
        subscription.is_active = True
        subscription.renewal_count = (subscription.renewal_count or 0) + 1
        if teacher_id:
            subscription.teacher_id = teacher_id
        return subscription

    async def deactivate(self, student_id: str, subject_ids: Sequence[str]) -> int:
        """Deactivate a student's subscriptions to the given subjects.

        End dates are left untouched.

        Args:
            student_id: Student user ID.
            subject_ids: Subjects whose subscriptions are deactivated.

        Returns:
            Number of rows changed.

        Raises:
            StorageUnavailableError: If the write fails.
        """
        if not subject_ids:
            return 0

        try:
            result = await self.db.execute(
                select(Subscription).where(
                    Subscription.student_id == student_id,
                    Subscription.subject_id.in_(list(subject_ids)),
                    Subscription.is_active.is_(True),
                )
            )
            subscriptions = list(result.scalars().all())
            for subscription in subscriptions:
                subscription.is_active = False
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StorageUnavailableError("ledger unavailable", e) from e

        changed = len(subscriptions)
        logger.info(
            "Deactivated subscriptions: student=%s, subjects=%d, changed=%d",
            student_id,
            len(subject_ids),
            changed,
        )
        return changed

    async def list_for_student(
        self,
        student_id: str,
        subject_ids: Sequence[str] | None = None,
    ) -> list[Subscription]:
        """List a student's subscription rows, optionally for some subjects.

        Raises:
            StorageUnavailableError: If the ledger cannot be read.
        """
        query = select(Subscription).where(Subscription.student_id == student_id)
        if subject_ids is not None:
            if not subject_ids:
                return []
            query = query.where(Subscription.subject_id.in_(list(subject_ids)))

        with storage_errors("ledger unavailable"):
            result = await self.db.execute(query.order_by(Subscription.end_date))
            return list(result.scalars().all())

    async def list_active_for_subjects(self, subject_ids: Sequence[str]) -> list[Subscription]:
        """List active subscription rows for a set of subjects.

        Raises:
            StorageUnavailableError: If the ledger cannot be read.
        """
        if not subject_ids:
            return []

        with storage_errors("ledger unavailable"):
            result = await self.db.execute(
                select(Subscription)
                .where(
                    Subscription.subject_id.in_(list(subject_ids)),
                    Subscription.is_active.is_(True),
                )
                .order_by(Subscription.end_date)
            )
            return list(result.scalars().all())

    async def find_expiring(
        self,
        window_start: datetime,
        window_end: datetime,
    ) -> list[Subscription]:
        """List active subscriptions whose end date falls in a window.

        Args:
            window_start: Inclusive lower bound.
            window_end: Inclusive upper bound.

        Raises:
            StorageUnavailableError: If the ledger cannot be read.
        """
        with storage_errors("ledger unavailable"):
            result = await self.db.execute(
                select(Subscription)
                .where(
                    Subscription.is_active.is_(True),
                    Subscription.end_date >= ensure_utc(window_start),
                    Subscription.end_date <= ensure_utc(window_end),
                )
                .order_by(Subscription.end_date)
            )
            return list(result.scalars().all())


is_currently_valid = SubscriptionLedger.is_currently_valid
