# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Subject directory.

This module provides the SubjectDirectory class for:
- Expanding a category into the concrete subjects of a stage/grade/section
- Subject lookup
- Subject administration (create, list, soft delete)

A storage failure is always raised as StorageUnavailableError and never
reported as an empty list.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.catalog.service import CategoryCatalog, get_catalog
from src.infrastructure.database.connection import StorageUnavailableError, storage_errors
from src.infrastructure.database.models.subject import Subject
from src.models.common import Stage
from src.models.subject import SubjectCreateRequest

logger = logging.getLogger(__name__)


class SubjectServiceError(Exception):
    """Base exception for subject directory errors."""

    pass


class SubjectNotFoundError(SubjectServiceError):
    """Raised when a subject is not found."""

    pass


class InvalidSubjectError(SubjectServiceError):
    """Raised when subject data is inconsistent."""

    pass


class SubjectDirectory:
    """Read-through accessor over the subject table.

    Attributes:
        db: Async database session.
        catalog: Category catalog used to validate category keys.
    """

    def __init__(self, db: AsyncSession, catalog: CategoryCatalog | None = None) -> None:
        """Initialize the directory.

        Args:
            db: Async database session.
            catalog: Category catalog, defaults to the configured one.
        """
        self.db = db
        self.catalog = catalog or get_catalog()

    async def subjects_for_category(
        self,
        category: str,
        stage: str,
        grade: str,
        section: str | None = None,
    ) -> list[Subject]:
        """Expand a category into its active subjects for a profile.

        The section must match exactly: a NULL section only matches
        subjects without a section.

        Args:
            category: Category key.
            stage: Student stage.
            grade: Student grade.
            section: Student section, if any.

        Returns:
            Active subjects ordered by name. Empty if the category has no
            subjects for this profile.

        Raises:
            StorageUnavailableError: If the directory cannot be read.
        """
        query = select(Subject).where(
            Subject.category == category,
            Subject.stage == stage,
            Subject.grade == grade,
            Subject.is_active.is_(True),
        )
        if section is None:
            query = query.where(Subject.section.is_(None))
        else:
            query = query.where(Subject.section == section)

        with storage_errors("directory unavailable"):
            result = await self.db.execute(query.order_by(Subject.name))
            return list(result.scalars().all())

    async def find_subject(self, subject_id: str) -> Subject | None:
        """Get a subject by ID, or None if it does not exist.

        Raises:
            StorageUnavailableError: If the directory cannot be read.
        """
        with storage_errors("directory unavailable"):
            result = await self.db.execute(select(Subject).where(Subject.id == subject_id))
            return result.scalar_one_or_none()

    async def get_subject(self, subject_id: str) -> Subject:
        """Get a subject by ID.

        Raises:
            SubjectNotFoundError: If the subject does not exist.
            StorageUnavailableError: If the directory cannot be read.
        """
        subject = await self.find_subject(subject_id)
        if subject is None:
            raise SubjectNotFoundError(f"Subject {subject_id} not found")
        return subject

    async def list_subjects(
        self,
        stage: str | None = None,
        grade: str | None = None,
        section: str | None = None,
        category: str | None = None,
        active_only: bool = True,
    ) -> list[Subject]:
        """List subjects with optional filters.

        Args:
            stage: Filter by stage.
            grade: Filter by grade.
            section: Filter by section.
            category: Filter by category key.
            active_only: Exclude soft-deleted subjects.

        Returns:
            Subjects ordered by stage, grade and name.
        """
        query = select(Subject)
        if stage:
            query = query.where(Subject.stage == stage)
        if grade:
            query = query.where(Subject.grade == grade)
        if section:
            query = query.where(Subject.section == section)
        if category:
            query = query.where(Subject.category == category)
        if active_only:
            query = query.where(Subject.is_active.is_(True))

        query = query.order_by(Subject.stage, Subject.grade, Subject.name)

        with storage_errors("directory unavailable"):
            result = await self.db.execute(query)
            return list(result.scalars().all())

    async def create_subject(self, request: SubjectCreateRequest) -> Subject:
        """Create a subject.

        Args:
            request: Subject data.

        Returns:
            The created subject.

        Raises:
            InvalidSubjectError: If the section does not fit the stage or the
                category is not in the catalog.
            StorageUnavailableError: If the write fails. The session is
                rolled back first.
        """
        if request.stage == Stage.SECONDARY and request.section is None:
            raise InvalidSubjectError("Secondary subjects require a section")
        if request.stage != Stage.SECONDARY and request.section is not None:
            raise InvalidSubjectError("Only secondary subjects have a section")
        if request.category not in self.catalog.category_keys():
            raise InvalidSubjectError(f"Unknown category: {request.category}")

        subject = Subject(
            name=request.name.strip(),
            description=request.description,
            stage=request.stage.value,
            grade=request.grade.value,
            section=request.section.value if request.section else None,
            category=request.category.value,
            is_active=True,
        )

        try:
            self.db.add(subject)
            await self.db.commit()
            await self.db.refresh(subject)
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StorageUnavailableError("directory unavailable", e) from e

        logger.info(
            "Created subject: id=%s, name=%s, category=%s, stage=%s, grade=%s",
            subject.id,
            subject.name,
            subject.category,
            subject.stage,
            subject.grade,
        )
        return subject

    async def deactivate_subject(self, subject_id: str) -> Subject:
        """Soft-delete a subject.

        Subscriptions to the subject stay in place and stop being valid.

        Raises:
            SubjectNotFoundError: If the subject does not exist.
            StorageUnavailableError: If the write fails.
        """
        subject = await self.get_subject(subject_id)
        subject.is_active = False

        try:
            await self.db.commit()
            await self.db.refresh(subject)
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StorageUnavailableError("directory unavailable", e) from e

        logger.info("Deactivated subject: id=%s", subject_id)
        return subject
