# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student profile model.

The row id is the auth user id. Profiles are written by the surrounding
portal; this service only reads stage, grade and section from them.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.models.base import Base, TimestampMixin


class StudentProfile(Base, TimestampMixin):
    """Stage/grade/section profile of a student."""

    __tablename__ = "student_profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    full_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    student_code: Mapped[str | None] = mapped_column(String(50), nullable=True, unique=True)
    stage: Mapped[str] = mapped_column(String(20), nullable=False)
    grade: Mapped[str] = mapped_column(String(20), nullable=False)
    section: Mapped[str | None] = mapped_column(String(20), nullable=True)
