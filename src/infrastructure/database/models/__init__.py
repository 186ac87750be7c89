# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy ORM models for the portal's record store.

Importing this package registers every table on ``Base.metadata``.
"""

from src.infrastructure.database.models.base import Base, UTCDateTime
from src.infrastructure.database.models.notification import Notification
from src.infrastructure.database.models.student import StudentProfile
from src.infrastructure.database.models.subject import Subject
from src.infrastructure.database.models.subscription import Subscription
from src.infrastructure.database.models.teacher import TeacherAssignment, TeacherRequest

__all__ = [
    "Base",
    "UTCDateTime",
    "Notification",
    "StudentProfile",
    "Subject",
    "Subscription",
    "TeacherAssignment",
    "TeacherRequest",
]
