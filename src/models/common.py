# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Closed enumerations shared across domains.

Stages, grades, sections, categories, approval states and roles are closed
sets. Values coming from storage or configuration are parsed into these
enums so an unknown key is rejected where it enters the system.
"""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class Stage(StrEnum):
    """Top-level schooling phase."""

    PREPARATORY = "preparatory"
    SECONDARY = "secondary"


class Grade(StrEnum):
    """Year within a stage."""

    FIRST = "first"
    SECOND = "second"
    THIRD = "third"


class Section(StrEnum):
    """Branch within the secondary stage."""

    SCIENTIFIC = "scientific"
    LITERARY = "literary"


class CategoryKey(StrEnum):
    """Purchasable subject grouping, as stored in ``subjects.category``."""

    ARABIC = "arabic"
    RELIGIOUS = "religious"
    SCIENCE = "science"
    SOCIAL = "social"
    ENGLISH = "english"
    FRENCH = "french"
    SCIENTIFIC = "scientific"
    LITERARY = "literary"
    MATH = "math"


class ApprovalStatus(StrEnum):
    """Teacher registration request state."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class UserRole(StrEnum):
    """Role asserted by the auth gateway."""

    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


class StudentProfileSummary(BaseModel):
    """Stage/grade/section profile used to resolve a student's fan-out."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    full_name: str | None = None
    stage: Stage
    grade: Grade
    section: Section | None = None
