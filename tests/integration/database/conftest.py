# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest fixtures for database integration tests.

Provides an in-memory SQLite engine and session, plus factories for the
rows the services read (subjects, student profiles, teacher requests).
"""

from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any, AsyncGenerator

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.infrastructure.database.models import (
    StudentProfile,
    Subject,
    TeacherRequest,
)
from src.infrastructure.database.models.base import Base


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create async engine for an in-memory database."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create async session for database tests."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def make_subject(db_session: AsyncSession) -> Callable[..., Awaitable[Subject]]:
    """Factory that inserts a subject."""

    async def _make(
        name: str,
        category: str,
        stage: str = "secondary",
        grade: str = "second",
        section: str | None = "literary",
        is_active: bool = True,
    ) -> Subject:
        subject = Subject(
            name=name,
            category=category,
            stage=stage,
            grade=grade,
            section=section,
            is_active=is_active,
        )
        db_session.add(subject)
        await db_session.commit()
        return subject

    return _make


@pytest_asyncio.fixture
async def make_student(db_session: AsyncSession) -> Callable[..., Awaitable[StudentProfile]]:
    """Factory that inserts a student profile."""

    async def _make(
        student_id: str,
        stage: str = "secondary",
        grade: str = "second",
        section: str | None = "literary",
        full_name: str = "أحمد علي",
    ) -> StudentProfile:
        profile = StudentProfile(
            id=student_id,
            full_name=full_name,
            stage=stage,
            grade=grade,
            section=section,
        )
        db_session.add(profile)
        await db_session.commit()
        return profile

    return _make


@pytest_asyncio.fixture
async def make_teacher_request(
    db_session: AsyncSession,
) -> Callable[..., Awaitable[TeacherRequest]]:
    """Factory that inserts a teacher request."""

    async def _make(
        user_id: str,
        category: str | None,
        stages: list[str],
        grades: list[str],
        status: str = "pending",
        created_at: datetime | None = None,
    ) -> TeacherRequest:
        values: dict[str, Any] = {
            "user_id": user_id,
            "full_name": "محمد حسن",
            "assigned_category": category,
            "assigned_stages": stages,
            "assigned_grades": grades,
            "status": status,
        }
        if created_at is not None:
            values["created_at"] = created_at
        request = TeacherRequest(**values)
        db_session.add(request)
        await db_session.commit()
        return request

    return _make


@pytest_asyncio.fixture
async def arabic_literary_subjects(make_subject) -> list[Subject]:
    """Insert the seven arabic subjects of secondary/second/literary."""
    names = (
        "النحو",
        "الصرف",
        "البلاغة",
        "الأدب",
        "النصوص",
        "المطالعة",
        "الإنشاء",
    )
    return [await make_subject(name, "arabic") for name in names]
