# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for category activation against SQLite."""

from datetime import date, datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from src.domains.catalog.service import UnknownCategoryError
from src.domains.subject import SubjectDirectory
from src.domains.subscription import (
    CategoryNotOfferedError,
    StudentNotFoundError,
    SubscriptionLedger,
    SubscriptionService,
)
from src.domains.subscription.ledger import InvalidEndDateError
from src.infrastructure.database.connection import StorageUnavailableError
from src.infrastructure.database.models import Subscription
from src.models.subscription import ActivationStatus

STUDENT_ID = "student-1"


@pytest.fixture
def service(db_session, catalog, subscription_settings) -> SubscriptionService:
    """Create subscription service over the test session."""
    return SubscriptionService(db_session, catalog, subscription_settings)


async def _count(db_session) -> int:
    result = await db_session.execute(select(func.count()).select_from(Subscription))
    return result.scalar_one()


class TestActivateCategories:
    """Tests for the activation fan-out."""

    @pytest.mark.asyncio
    async def test_activates_every_subject_of_category(
        self,
        service: SubscriptionService,
        make_student,
        arabic_literary_subjects,
        fixed_now: datetime,
    ) -> None:
        """Test that a 30 day arabic activation covers all seven subjects."""
        await make_student(STUDENT_ID)

        results = await service.activate_categories(
            STUDENT_ID, ["arabic"], duration_days=30, created_by="admin-1", now=fixed_now
        )

        assert len(results) == 1
        assert results[0].status == ActivationStatus.ACTIVATED
        assert results[0].total_subjects == 7
        assert sorted(results[0].activated_subject_ids) == sorted(s.id for s in arabic_literary_subjects)

        rows = await service.ledger.list_for_student(STUDENT_ID)
        assert len(rows) == 7
        assert {row.end_date for row in rows} == {fixed_now + timedelta(days=30)}
        assert all(row.is_active and row.created_by == "admin-1" for row in rows)

        statuses = await service.category_statuses(STUDENT_ID, now=fixed_now)
        arabic = next(status for status in statuses if status.category == "arabic")
        assert arabic.fully_active is True
        assert arabic.earliest_expiry == fixed_now + timedelta(days=30)
        assert arabic.valid_subjects == 7

    @pytest.mark.asyncio
    async def test_reactivation_renews_without_duplicates(
        self,
        service: SubscriptionService,
        db_session,
        make_student,
        arabic_literary_subjects,
        fixed_now: datetime,
    ) -> None:
        await make_student(STUDENT_ID)

        await service.activate_categories(STUDENT_ID, ["arabic"], duration_days=90, now=fixed_now)
        await service.activate_categories(STUDENT_ID, ["arabic"], duration_days=30, now=fixed_now)

        assert await _count(db_session) == 7
        rows = await service.ledger.list_for_student(STUDENT_ID)
        assert {row.renewal_count for row in rows} == {1}
        # The newer, earlier end date wins.
        assert {row.end_date for row in rows} == {fixed_now + timedelta(days=30)}

    @pytest.mark.asyncio
    async def test_custom_end_date(
        self,
        service: SubscriptionService,
        make_student,
        make_subject,
        fixed_now: datetime,
    ) -> None:
        await make_student(STUDENT_ID)
        await make_subject("اللغة الفرنسية", "french")

        results = await service.activate_categories(
            STUDENT_ID, ["french"], custom_end_date=date(2025, 9, 1), now=fixed_now
        )

        assert results[0].end_date == datetime(2025, 9, 1, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_empty_category(
        self,
        service: SubscriptionService,
        db_session,
        make_student,
        fixed_now: datetime,
    ) -> None:
        """Test that a category without subjects reports empty and writes nothing."""
        await make_student(STUDENT_ID)

        results = await service.activate_categories(STUDENT_ID, ["french"], duration_days=30, now=fixed_now)

        assert results[0].status == ActivationStatus.EMPTY
        assert results[0].total_subjects == 0
        assert await _count(db_session) == 0

        statuses = await service.category_statuses(STUDENT_ID, now=fixed_now)
        french = next(status for status in statuses if status.category == "french")
        assert french.fully_active is False
        assert french.earliest_expiry is None

    @pytest.mark.asyncio
    async def test_category_not_offered(
        self,
        service: SubscriptionService,
        db_session,
        make_student,
        arabic_literary_subjects,
        fixed_now: datetime,
    ) -> None:
        """Test that nothing is written when any category is not offered."""
        await make_student(STUDENT_ID)

        with pytest.raises(CategoryNotOfferedError):
            await service.activate_categories(
                STUDENT_ID, ["arabic", "scientific"], duration_days=30, now=fixed_now
            )

        assert await _count(db_session) == 0

    @pytest.mark.asyncio
    async def test_unknown_category(self, service: SubscriptionService, make_student, fixed_now: datetime) -> None:
        await make_student(STUDENT_ID)

        with pytest.raises(UnknownCategoryError):
            await service.activate_categories(STUDENT_ID, ["astronomy"], duration_days=30, now=fixed_now)

    @pytest.mark.asyncio
    async def test_unknown_student(self, service: SubscriptionService, fixed_now: datetime) -> None:
        with pytest.raises(StudentNotFoundError):
            await service.activate_categories("nobody", ["arabic"], duration_days=30, now=fixed_now)

    @pytest.mark.asyncio
    async def test_invalid_duration(self, service: SubscriptionService, make_student, fixed_now: datetime) -> None:
        await make_student(STUDENT_ID)

        with pytest.raises(InvalidEndDateError):
            await service.activate_categories(STUDENT_ID, ["arabic"], duration_days=45, now=fixed_now)

    @pytest.mark.asyncio
    async def test_duplicate_categories_collapsed(
        self,
        service: SubscriptionService,
        make_student,
        arabic_literary_subjects,
        fixed_now: datetime,
    ) -> None:
        await make_student(STUDENT_ID)

        results = await service.activate_categories(
            STUDENT_ID, ["arabic", "arabic"], duration_days=30, now=fixed_now
        )

        assert len(results) == 1
        rows = await service.ledger.list_for_student(STUDENT_ID)
        assert {row.renewal_count for row in rows} == {0}

    @pytest.mark.asyncio
    async def test_partial_activation(
        self,
        service: SubscriptionService,
        make_student,
        arabic_literary_subjects,
        fixed_now: datetime,
    ) -> None:
        """Test that a failure after some writes is reported, not rolled back."""
        await make_student(STUDENT_ID)
        original_upsert = SubscriptionLedger.upsert
        calls = 0

        async def flaky_upsert(self, *args, **kwargs):
            nonlocal calls
            calls += 1
            if calls == 4:
                raise StorageUnavailableError(
                    "ledger unavailable",
                    OperationalError("INSERT", {}, Exception("connection reset")),
                )
            return await original_upsert(self, *args, **kwargs)

        with patch.object(SubscriptionLedger, "upsert", flaky_upsert):
            results = await service.activate_categories(STUDENT_ID, ["arabic"], duration_days=30, now=fixed_now)

        assert results[0].status == ActivationStatus.PARTIAL
        assert len(results[0].activated_subject_ids) == 3
        assert len(results[0].remaining_subject_ids) == 4
        assert len(await service.ledger.list_for_student(STUDENT_ID)) == 3

        # Re-running the same request completes the category.
        retry = await service.activate_categories(STUDENT_ID, ["arabic"], duration_days=30, now=fixed_now)
        assert retry[0].status == ActivationStatus.ACTIVATED
        assert len(await service.ledger.list_for_student(STUDENT_ID)) == 7

    @pytest.mark.asyncio
    async def test_failure_before_any_write_propagates(
        self,
        service: SubscriptionService,
        make_student,
        arabic_literary_subjects,
        fixed_now: datetime,
    ) -> None:
        await make_student(STUDENT_ID)

        async def failing_upsert(self, *args, **kwargs):
            raise StorageUnavailableError("ledger unavailable")

        with patch.object(SubscriptionLedger, "upsert", failing_upsert):
            with pytest.raises(StorageUnavailableError):
                await service.activate_categories(STUDENT_ID, ["arabic"], duration_days=30, now=fixed_now)

    @pytest.mark.asyncio
    async def test_failure_in_middle_category_reports_every_category(
        self,
        service: SubscriptionService,
        db_session,
        make_student,
        make_subject,
        fixed_now: datetime,
    ) -> None:
        """Test that categories after a failed write are reported as skipped."""
        await make_student(STUDENT_ID)
        await make_subject("النحو", "arabic")
        await make_subject("التفسير", "religious")
        await make_subject("الفقه", "religious")
        await make_subject("اللغة الإنجليزية", "english")
        original_upsert = SubscriptionLedger.upsert
        calls = 0

        async def flaky_upsert(self, *args, **kwargs):
            nonlocal calls
            calls += 1
            if calls == 3:
                raise StorageUnavailableError("ledger unavailable")
            return await original_upsert(self, *args, **kwargs)

        with patch.object(SubscriptionLedger, "upsert", flaky_upsert):
            results = await service.activate_categories(
                STUDENT_ID, ["arabic", "religious", "english"], duration_days=30, now=fixed_now
            )

        assert [result.category for result in results] == ["arabic", "religious", "english"]
        assert [result.status for result in results] == [
            ActivationStatus.ACTIVATED,
            ActivationStatus.PARTIAL,
            ActivationStatus.SKIPPED,
        ]
        assert results[1].total_subjects == 2
        assert len(results[1].activated_subject_ids) == 1
        assert len(results[1].remaining_subject_ids) == 1
        assert results[2].total_subjects is None
        assert results[2].activated_subject_ids == []
        assert await _count(db_session) == 2

    @pytest.mark.asyncio
    async def test_directory_failure_after_write_skips_category(
        self,
        service: SubscriptionService,
        db_session,
        make_student,
        make_subject,
        fixed_now: datetime,
    ) -> None:
        """Test that a category whose subjects could not be read is skipped, not 0 of 0."""
        await make_student(STUDENT_ID)
        await make_subject("النحو", "arabic")
        await make_subject("الفقه", "religious")
        await make_subject("اللغة الإنجليزية", "english")
        original_fan_out = SubjectDirectory.subjects_for_category
        calls = 0

        async def flaky_fan_out(self, *args, **kwargs):
            nonlocal calls
            calls += 1
            if calls == 2:
                raise StorageUnavailableError("directory unavailable")
            return await original_fan_out(self, *args, **kwargs)

        with patch.object(SubjectDirectory, "subjects_for_category", flaky_fan_out):
            results = await service.activate_categories(
                STUDENT_ID, ["arabic", "religious", "english"], duration_days=30, now=fixed_now
            )

        assert [result.status for result in results] == [
            ActivationStatus.ACTIVATED,
            ActivationStatus.SKIPPED,
            ActivationStatus.SKIPPED,
        ]
        assert results[1].total_subjects is None
        assert await _count(db_session) == 1


class TestDeactivateCategories:
    """Tests for category deactivation."""

    @pytest.mark.asyncio
    async def test_deactivate_category(
        self,
        service: SubscriptionService,
        make_student,
        arabic_literary_subjects,
        fixed_now: datetime,
    ) -> None:
        await make_student(STUDENT_ID)
        await service.activate_categories(STUDENT_ID, ["arabic"], duration_days=30, now=fixed_now)

        changed = await service.deactivate_categories(STUDENT_ID, ["arabic"])

        assert changed == 7
        rows = await service.ledger.list_for_student(STUDENT_ID)
        assert not any(row.is_active for row in rows)
        assert {row.end_date for row in rows} == {fixed_now + timedelta(days=30)}

    @pytest.mark.asyncio
    async def test_one_subject_deactivated_breaks_category(
        self,
        service: SubscriptionService,
        make_student,
        arabic_literary_subjects,
        fixed_now: datetime,
    ) -> None:
        """Test that one missing subject makes the category partially active."""
        await make_student(STUDENT_ID)
        await service.activate_categories(STUDENT_ID, ["arabic"], duration_days=30, now=fixed_now)

        await service.ledger.deactivate(STUDENT_ID, [arabic_literary_subjects[0].id])

        statuses = await service.category_statuses(STUDENT_ID, now=fixed_now)
        arabic = next(status for status in statuses if status.category == "arabic")
        assert arabic.fully_active is False
        assert arabic.earliest_expiry is None
        assert arabic.valid_subjects == 6

    @pytest.mark.asyncio
    async def test_deactivate_then_reactivate_restores_category(
        self,
        service: SubscriptionService,
        db_session,
        make_student,
        arabic_literary_subjects,
        fixed_now: datetime,
    ) -> None:
        await make_student(STUDENT_ID)
        await service.activate_categories(STUDENT_ID, ["arabic"], duration_days=30, now=fixed_now)
        await service.deactivate_categories(STUDENT_ID, ["arabic"])

        statuses = await service.category_statuses(STUDENT_ID, now=fixed_now)
        assert next(s for s in statuses if s.category == "arabic").fully_active is False

        await service.activate_categories(STUDENT_ID, ["arabic"], duration_days=60, now=fixed_now)

        statuses = await service.category_statuses(STUDENT_ID, now=fixed_now)
        arabic = next(s for s in statuses if s.category == "arabic")
        assert arabic.fully_active is True
        assert arabic.earliest_expiry == fixed_now + timedelta(days=60)
        rows = await service.ledger.list_for_student(STUDENT_ID)
        assert {row.renewal_count for row in rows} == {1}
        assert all(row.is_active for row in rows)
        assert await _count(db_session) == 7


class TestLedgerRenewal:
    """Tests for repeated upserts of the same pair."""

    @pytest.mark.asyncio
    async def test_consecutive_renewals_never_shorten(
        self,
        db_session,
        subscription_settings,
        make_student,
        make_subject,
        fixed_now: datetime,
    ) -> None:
        await make_student(STUDENT_ID)
        subject = await make_subject("النحو", "arabic")
        ledger = SubscriptionLedger(db_session, subscription_settings)
        end_dates = [fixed_now + timedelta(days=days) for days in (30, 60, 90)]

        seen = []
        for end_date in end_dates:
            row = await ledger.upsert(STUDENT_ID, subject.id, end_date, now=fixed_now)
            seen.append((row.end_date, row.renewal_count))

        assert [renewals for _, renewals in seen] == [0, 1, 2]
        assert [end for end, _ in seen] == end_dates
        assert all(earlier <= later for (earlier, _), (later, _) in zip(seen, seen[1:]))
        assert await _count(db_session) == 1
        stored = await ledger.get(STUDENT_ID, subject.id)
        assert stored.renewal_count == 2
        assert stored.start_date == fixed_now


class TestListings:
    """Tests for subscription listings."""

    @pytest.mark.asyncio
    async def test_list_student_subscriptions(
        self,
        service: SubscriptionService,
        make_student,
        make_subject,
        fixed_now: datetime,
    ) -> None:
        await make_student(STUDENT_ID)
        subject = await make_subject("اللغة الإنجليزية", "english")
        await service.activate_categories(STUDENT_ID, ["english"], duration_days=60, now=fixed_now)

        items = await service.list_student_subscriptions(STUDENT_ID, now=fixed_now)

        assert len(items) == 1
        assert items[0].subject_id == subject.id
        assert items[0].subject_name == "اللغة الإنجليزية"
        assert items[0].currently_valid is True
        assert items[0].end_date == fixed_now + timedelta(days=60)

    @pytest.mark.asyncio
    async def test_list_subscriptions_filters_by_profile(
        self,
        service: SubscriptionService,
        make_student,
        make_subject,
        fixed_now: datetime,
    ) -> None:
        await make_student(STUDENT_ID)
        await make_student("student-2", stage="preparatory", grade="first", section=None)
        await make_subject("اللغة الإنجليزية", "english")
        await make_subject("English", "english", stage="preparatory", grade="first", section=None)
        await service.activate_categories(STUDENT_ID, ["english"], duration_days=30, now=fixed_now)
        await service.activate_categories("student-2", ["english"], duration_days=30, now=fixed_now)

        secondary = await service.list_subscriptions(stage="secondary", now=fixed_now)
        everything = await service.list_subscriptions(now=fixed_now)

        assert [item.student_id for item in secondary] == [STUDENT_ID]
        assert len(everything) == 2

    @pytest.mark.asyncio
    async def test_statuses_follow_offer_rules(
        self,
        service: SubscriptionService,
        make_student,
        fixed_now: datetime,
    ) -> None:
        await make_student(STUDENT_ID, section="scientific")

        statuses = await service.category_statuses(STUDENT_ID, now=fixed_now)

        assert [status.category for status in statuses] == [
            "arabic",
            "religious",
            "scientific",
            "math",
            "english",
        ]
