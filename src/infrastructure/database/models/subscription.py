# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Subscription model.

One row per (student, subject). Rows are deactivated, never deleted, so
renewal history survives.
"""

from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.models.base import Base, IdMixin, TimestampMixin, UTCDateTime


class Subscription(Base, IdMixin, TimestampMixin):
    """Per-student, per-subject entitlement with a validity window."""

    __tablename__ = "subscriptions"
    __table_args__ = (
        UniqueConstraint("student_id", "subject_id", name="uq_subscriptions_student_subject"),
        Index("ix_subscriptions_active_end", "is_active", "end_date"),
    )

    student_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    subject_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("subjects.id"),
        nullable=False,
        index=True,
    )
    start_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    end_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    renewal_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    teacher_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    created_by: Mapped[str | None] = mapped_column(String(36), nullable=True)

    def __repr__(self) -> str:
        return (
            f"<Subscription(student_id={self.student_id}, subject_id={self.subject_id}, "
            f"end_date={self.end_date}, is_active={self.is_active})>"
        )
