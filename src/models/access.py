# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Access check API models."""

from pydantic import BaseModel

from src.models.common import UserRole


class AccessDecision(BaseModel):
    """Outcome of an authorization check.

    A denial is a normal outcome, not an error.
    """

    actor_id: str
    actor_role: UserRole
    subject_id: str
    allowed: bool
