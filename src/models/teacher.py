# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Teacher request and assignment API models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.models.common import ApprovalStatus, CategoryKey, Grade, Section, Stage


class RejectRequest(BaseModel):
    """Request to reject a teacher registration."""

    reason: str | None = Field(None, max_length=1000, description="Rejection reason")


class TeacherRequestResponse(BaseModel):
    """Teacher registration request."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    full_name: str
    email: str | None = None
    assigned_category: str | None = None
    assigned_stages: list[str] = Field(default_factory=list)
    assigned_grades: list[str] = Field(default_factory=list)
    status: ApprovalStatus
    rejection_reason: str | None = None
    reviewed_at: datetime | None = None
    reviewed_by: str | None = None
    created_at: datetime | None = None


class TeacherAssignmentResponse(BaseModel):
    """Materialized teacher assignment."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    teacher_id: str
    stage: Stage
    grade: Grade
    category: CategoryKey
    section: Section | None = None
    created_at: datetime | None = None


class ApprovalResponse(BaseModel):
    """Response for an approved request."""

    request: TeacherRequestResponse
    assignments: list[TeacherAssignmentResponse]
