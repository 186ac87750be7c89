# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

This package contains all v1 API endpoint definitions.
Each module provides a FastAPI router for a specific domain.

Modules:
    catalog: Offered categories per stage/section.
    subjects: Subject administration.
    subscriptions: Category activation and subscription listings.
    teacher_requests: Teacher request review and teacher subject listing.
    access: Student and teacher access checks.
    notifications: Subscription expiry sweep.
"""

from fastapi import APIRouter

from src.api.v1 import access, catalog, notifications, subjects, subscriptions, teacher_requests

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

# Include domain routers
router.include_router(catalog.router, prefix="/catalog", tags=["Catalog"])
router.include_router(subjects.router, prefix="/subjects", tags=["Subjects"])
router.include_router(subscriptions.router, prefix="/subscriptions", tags=["Subscriptions"])
router.include_router(teacher_requests.router, prefix="/teacher-requests", tags=["Teacher Requests"])
router.include_router(access.router, prefix="/access", tags=["Access"])
router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])

__all__ = ["router"]
