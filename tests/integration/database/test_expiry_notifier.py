# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for the subscription expiry sweep."""

from datetime import datetime, timedelta

import pytest
from sqlalchemy import select

from src.domains.notification import ExpiryNotifier
from src.domains.subscription import SubscriptionLedger
from src.infrastructure.database.models import Notification


@pytest.fixture
def notifier(db_session, subscription_settings) -> ExpiryNotifier:
    """Create notifier over the test session."""
    return ExpiryNotifier(db_session, subscription_settings)


async def _notifications(db_session) -> list[Notification]:
    result = await db_session.execute(select(Notification).order_by(Notification.user_id))
    return list(result.scalars().all())


class TestNotifyExpiring:
    """Tests for notify_expiring."""

    @pytest.mark.asyncio
    async def test_notifies_inside_window_only(
        self,
        notifier: ExpiryNotifier,
        db_session,
        make_student,
        make_subject,
        fixed_now: datetime,
    ) -> None:
        subject = await make_subject("النحو", "arabic")
        await make_student("student-1", full_name="أحمد علي")
        await make_student("student-2", full_name="سارة محمود")
        await make_student("student-3", full_name="منى حسن")
        ledger = SubscriptionLedger(db_session)
        await ledger.upsert("student-1", subject.id, fixed_now + timedelta(days=6, hours=12))
        await ledger.upsert("student-2", subject.id, fixed_now + timedelta(days=3))
        await ledger.upsert("student-3", subject.id, fixed_now + timedelta(days=30))

        result = await notifier.notify_expiring(now=fixed_now)

        assert result.checked == 1
        assert result.sent == 1
        assert result.skipped == 0

        notifications = await _notifications(db_session)
        assert len(notifications) == 1
        assert notifications[0].user_id == "student-1"
        assert notifications[0].title == notifier.settings.expiry_notice_title
        assert "أحمد علي" in notifications[0].message
        assert '"النحو"' in notifications[0].message
        assert "2025-03-16" in notifications[0].message

    @pytest.mark.asyncio
    async def test_second_run_same_day_is_skipped(
        self,
        notifier: ExpiryNotifier,
        db_session,
        make_student,
        make_subject,
        fixed_now: datetime,
    ) -> None:
        subject = await make_subject("النحو", "arabic")
        await make_student("student-1")
        await SubscriptionLedger(db_session).upsert("student-1", subject.id, fixed_now + timedelta(days=6, hours=12))

        await notifier.notify_expiring(now=fixed_now)
        result = await notifier.notify_expiring(now=fixed_now + timedelta(hours=2))

        assert result.sent == 0
        assert result.skipped == 1
        assert len(await _notifications(db_session)) == 1

    @pytest.mark.asyncio
    async def test_next_day_notifies_again(
        self,
        notifier: ExpiryNotifier,
        db_session,
        make_student,
        make_subject,
        fixed_now: datetime,
    ) -> None:
        subject = await make_subject("النحو", "arabic")
        await make_student("student-1")
        await SubscriptionLedger(db_session).upsert("student-1", subject.id, fixed_now + timedelta(days=6, hours=20))

        await notifier.notify_expiring(now=fixed_now)
        result = await notifier.notify_expiring(now=fixed_now + timedelta(hours=16))

        assert result.sent == 1
        assert len(await _notifications(db_session)) == 2

    @pytest.mark.asyncio
    async def test_inactive_subscription_ignored(
        self,
        notifier: ExpiryNotifier,
        db_session,
        make_student,
        make_subject,
        fixed_now: datetime,
    ) -> None:
        subject = await make_subject("النحو", "arabic")
        await make_student("student-1")
        ledger = SubscriptionLedger(db_session)
        await ledger.upsert("student-1", subject.id, fixed_now + timedelta(days=6, hours=12))
        await ledger.deactivate("student-1", [subject.id])

        result = await notifier.notify_expiring(now=fixed_now)

        assert result.checked == 0
        assert result.sent == 0

    @pytest.mark.asyncio
    async def test_nothing_expiring(self, notifier: ExpiryNotifier, fixed_now: datetime) -> None:
        result = await notifier.notify_expiring(now=fixed_now)

        assert (result.checked, result.sent, result.skipped) == (0, 0, 0)
