# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Subscription expiry notifications.

The sweep looks for active subscriptions ending between six and seven days
from now and writes one in-app notification per subscription. Students
who already received the expiry notice today (UTC) are skipped, so the
sweep can run several times a day.
"""

import logging
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config.settings import SubscriptionSettings, get_settings
from src.domains.subscription.ledger import SubscriptionLedger
from src.infrastructure.database.connection import StorageUnavailableError, storage_errors
from src.infrastructure.database.models.notification import Notification
from src.infrastructure.database.models.student import StudentProfile
from src.infrastructure.database.models.subject import Subject
from src.models.notification import ExpirySweepResult
from src.utils.datetime import ensure_utc, utc_day_bounds, utc_now

logger = logging.getLogger(__name__)

_MESSAGE_TEMPLATE = (
    'مرحباً {name}، اشتراكك في مادة "{subject}" سينتهي في {end_date}. '
    "قم بالتجديد للاستمرار في الوصول للمحتوى."
)


class ExpiryNotifier:
    """Writes "your subscription ends soon" notifications.

    Attributes:
        db: Async database session.
        settings: Subscription settings (notice window and title).
        ledger: Subscription ledger.
    """

    def __init__(self, db: AsyncSession, settings: SubscriptionSettings | None = None) -> None:
        self.db = db
        self.settings = settings or get_settings().subscription
        self.ledger = SubscriptionLedger(db, self.settings)

    async def notify_expiring(self, now: datetime | None = None) -> ExpirySweepResult:
        """Run one expiry sweep.

        Args:
            now: Reference time, defaults to the current UTC time.

        Returns:
            Counts of subscriptions checked, notifications sent and skipped.

        Raises:
            StorageUnavailableError: If storage cannot be read or written.
        """
        now = ensure_utc(now) if now is not None else utc_now()
        notice = timedelta(days=self.settings.expiry_notice_days)
        window_start = now + notice - timedelta(days=1)
        window_end = now + notice

        expiring = await self.ledger.find_expiring(window_start, window_end)
        if not expiring:
            logger.info("Expiry sweep: no subscriptions ending in %d days", notice.days)
            return ExpirySweepResult()

        already_notified = await self._notified_today(now)
        student_ids = {subscription.student_id for subscription in expiring}
        subject_ids = {subscription.subject_id for subscription in expiring}

        with storage_errors("notification sweep unavailable"):
            names = await self._full_names(student_ids)
            subjects = await self._subject_names(subject_ids)

        sent = 0
        skipped = 0
        for subscription in expiring:
            if subscription.student_id in already_notified:
                skipped += 1
                continue
            self.db.add(
                Notification(
                    user_id=subscription.student_id,
                    title=self.settings.expiry_notice_title,
                    message=_MESSAGE_TEMPLATE.format(
                        name=names.get(subscription.student_id) or "",
                        subject=subjects.get(subscription.subject_id) or "المادة",
                        end_date=ensure_utc(subscription.end_date).date().isoformat(),
                    ),
                    is_read=False,
                    created_at=now,
                )
            )
            sent += 1

        if sent:
            try:
                await self.db.commit()
            except SQLAlchemyError as e:
                await self.db.rollback()
                raise StorageUnavailableError("notification sweep unavailable", e) from e

        logger.info(
            "Expiry sweep: checked=%d, sent=%d, skipped=%d",
            len(expiring),
            sent,
            skipped,
        )
        return ExpirySweepResult(checked=len(expiring), sent=sent, skipped=skipped)

    async def _notified_today(self, now: datetime) -> set[str]:
        start, end = utc_day_bounds(now)
        with storage_errors("notification sweep unavailable"):
            result = await self.db.execute(
                select(Notification.user_id).where(
                    Notification.title == self.settings.expiry_notice_title,
                    Notification.created_at >= start,
                    Notification.created_at < end,
                )
            )
            return set(result.scalars().all())

    async def _full_names(self, student_ids: set[str]) -> dict[str, str | None]:
        result = await self.db.execute(
            select(StudentProfile.id, StudentProfile.full_name).where(
                StudentProfile.id.in_(student_ids)
            )
        )
        return {row.id: row.full_name for row in result.all()}

    async def _subject_names(self, subject_ids: set[str]) -> dict[str, str]:
        result = await self.db.execute(
            select(Subject.id, Subject.name).where(Subject.id.in_(subject_ids))
        )
        return {row.id: row.name for row in result.all()}
