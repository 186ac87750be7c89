# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Subscription API models.

This module defines the models for the administrator category activation
flow, per-subject subscription listings and derived category status.
"""

from datetime import date, datetime
from enum import StrEnum
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.models.common import CategoryKey


class ActivationStatus(StrEnum):
    """Outcome of activating one category for a student."""

    ACTIVATED = "activated"
    PARTIAL = "partial"
    EMPTY = "empty"
    SKIPPED = "skipped"


class ActivateCategoriesRequest(BaseModel):
    """Request to activate categories for a student.

    Exactly one of ``duration_days`` or ``custom_end_date`` must be given.
    """

    student_id: str = Field(..., min_length=1, description="Student user ID")
    categories: list[CategoryKey] = Field(..., min_length=1, description="Categories to activate")
    duration_days: int | None = Field(None, description="Preset duration in whole days")
    custom_end_date: date | None = Field(None, description="End date, midnight UTC")
    teacher_id: str | None = Field(None, description="Teacher linked to the subscriptions")

    @model_validator(mode="after")
    def validate_end(self) -> Self:
        """Require exactly one way of expressing the end date."""
        if (self.duration_days is None) == (self.custom_end_date is None):
            raise ValueError("provide exactly one of duration_days or custom_end_date")
        return self


class DeactivateCategoriesRequest(BaseModel):
    """Request to deactivate categories for a student."""

    student_id: str = Field(..., min_length=1, description="Student user ID")
    categories: list[CategoryKey] = Field(..., min_length=1, description="Categories to deactivate")


class ActivationResult(BaseModel):
    """Per-category result of an activation fan-out.

    Attributes:
        category: Category that was activated.
        status: activated, partial, empty or skipped. A skipped category
            came after a storage failure and nothing was written for it.
        total_subjects: Size of the fan-out, None when it was never read.
        activated_subject_ids: Subjects whose subscription was written.
        remaining_subject_ids: Subjects left untouched after a failure.
        end_date: End date written to every activated row.
    """

    category: CategoryKey
    status: ActivationStatus
    total_subjects: int | None = None
    activated_subject_ids: list[str] = Field(default_factory=list)
    remaining_subject_ids: list[str] = Field(default_factory=list)
    end_date: datetime


class ActivationResponse(BaseModel):
    """Response for the activation endpoint."""

    student_id: str
    results: list[ActivationResult]


class DeactivationResponse(BaseModel):
    """Response for the deactivation endpoint."""

    student_id: str
    deactivated: int


class SubscriptionResponse(BaseModel):
    """Per-subject subscription row."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    subject_id: str
    subject_name: str | None = None
    category: CategoryKey | None = None
    start_date: datetime
    end_date: datetime
    is_active: bool
    renewal_count: int
    teacher_id: str | None = None
    currently_valid: bool = False


class SubscriptionListResponse(BaseModel):
    """List of subscriptions."""

    items: list[SubscriptionResponse]
    total: int


class CategoryStatus(BaseModel):
    """Derived status of one category for one student.

    Attributes:
        category: Category key.
        name: Category display name.
        fully_active: Every subject in the fan-out has a valid subscription.
        earliest_expiry: Soonest end date, set only when fully active.
        total_subjects: Size of the fan-out.
        valid_subjects: Subjects with a currently valid subscription.
    """

    category: CategoryKey
    name: str
    fully_active: bool
    earliest_expiry: datetime | None = None
    total_subjects: int
    valid_subjects: int
