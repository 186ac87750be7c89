# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Subject model.

A subject is one course offered to a stage/grade/section. Its ``category``
is a catalog key. Subjects are soft-deleted only.
"""

from sqlalchemy import Boolean, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.models.base import Base, IdMixin, TimestampMixin


class Subject(Base, IdMixin, TimestampMixin):
    """Course record used for category fan-out and content scoping."""

    __tablename__ = "subjects"
    __table_args__ = (
        Index("ix_subjects_fanout", "category", "stage", "grade", "section"),
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    stage: Mapped[str] = mapped_column(String(20), nullable=False)
    grade: Mapped[str] = mapped_column(String(20), nullable=False)
    section: Mapped[str | None] = mapped_column(String(20), nullable=True)
    category: Mapped[str] = mapped_column(String(30), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<Subject(id={self.id}, name={self.name}, category={self.category})>"
