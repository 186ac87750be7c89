# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Teacher domain package.

- matcher: Decides whether an approved teacher may manage a subject
- service: Request approval/rejection and teacher scope lookups
"""

from src.domains.teacher.matcher import ManageableScope, TeacherAssignmentMatcher
from src.domains.teacher.service import (
    DEFAULT_REJECTION_REASON,
    InvalidRequestStateError,
    TeacherRequestNotFoundError,
    TeacherRequestService,
    TeacherServiceError,
)

__all__ = [
    "DEFAULT_REJECTION_REASON",
    "InvalidRequestStateError",
    "ManageableScope",
    "TeacherAssignmentMatcher",
    "TeacherRequestNotFoundError",
    "TeacherRequestService",
    "TeacherServiceError",
]
