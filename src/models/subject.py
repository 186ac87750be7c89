# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Subject API models.

This module defines request and response models for subject
administration endpoints.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.models.common import CategoryKey, Grade, Section, Stage


class SubjectCreateRequest(BaseModel):
    """Request to create a subject."""

    name: str = Field(..., min_length=1, max_length=200, description="Subject name")
    description: str | None = Field(None, max_length=2000, description="Subject description")
    stage: Stage = Field(..., description="Schooling stage")
    grade: Grade = Field(..., description="Grade within the stage")
    section: Section | None = Field(None, description="Section, secondary stage only")
    category: CategoryKey = Field(..., description="Catalog category key")


class SubjectResponse(BaseModel):
    """Subject response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str | None = None
    stage: Stage
    grade: Grade
    section: Section | None = None
    category: CategoryKey
    is_active: bool
    created_at: datetime | None = None


class SubjectListResponse(BaseModel):
    """List of subjects."""

    items: list[SubjectResponse]
    total: int
