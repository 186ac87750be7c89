# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Teacher request and assignment models."""

from datetime import datetime

from sqlalchemy import JSON, Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.models.base import Base, IdMixin, TimestampMixin, UTCDateTime
from src.models.common import ApprovalStatus
from src.utils.datetime import utc_now

JSONList = JSON().with_variant(JSONB(), "postgresql")


class TeacherRequest(Base, IdMixin, TimestampMixin):
    """Teacher registration request.

    ``assigned_category`` holds the selection as entered at sign-up (a key
    or an Arabic label). The first element of ``assigned_stages`` is the
    primary stage. ``assigned_grades`` holds human-readable grade labels.
    """

    __tablename__ = "teacher_requests"
    __table_args__ = (
        Index("ix_teacher_requests_user_status", "user_id", "status"),
    )

    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    assigned_category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    assigned_stages: Mapped[list[str]] = mapped_column(JSONList, nullable=False, default=list)
    assigned_grades: Mapped[list[str]] = mapped_column(JSONList, nullable=False, default=list)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ApprovalStatus.PENDING.value,
    )
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    reviewed_by: Mapped[str | None] = mapped_column(String(36), nullable=True)

    def __repr__(self) -> str:
        return f"<TeacherRequest(id={self.id}, user_id={self.user_id}, status={self.status})>"


class TeacherAssignment(Base, IdMixin):
    """Authorization tuple materialized from an approved request."""

    __tablename__ = "teacher_assignments"
    __table_args__ = (
        Index("ix_teacher_assignments_scope", "teacher_id", "stage", "category"),
    )

    teacher_id: Mapped[str] = mapped_column(String(36), nullable=False)
    stage: Mapped[str] = mapped_column(String(20), nullable=False)
    grade: Mapped[str] = mapped_column(String(20), nullable=False)
    category: Mapped[str] = mapped_column(String(30), nullable=False)
    section: Mapped[str | None] = mapped_column(String(20), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utc_now)
