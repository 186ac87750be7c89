# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Subject directory domain."""

from src.domains.subject.service import (
    InvalidSubjectError,
    SubjectDirectory,
    SubjectNotFoundError,
    SubjectServiceError,
)

__all__ = [
    "InvalidSubjectError",
    "SubjectDirectory",
    "SubjectNotFoundError",
    "SubjectServiceError",
]
