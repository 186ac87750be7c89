# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification API models."""

from pydantic import BaseModel


class ExpirySweepResult(BaseModel):
    """Counts reported by an expiry notification sweep.

    Attributes:
        checked: Subscriptions found inside the notice window.
        sent: Notifications written.
        skipped: Subscriptions whose student was already notified today.
    """

    checked: int = 0
    sent: int = 0
    skipped: int = 0
