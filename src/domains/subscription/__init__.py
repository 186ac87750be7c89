# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Subscription domain.

- ledger: Per-(student, subject) subscription rows and the validity predicate
- view: Category-level status derived from subject subscriptions
- service: Administrator activation flow and listings
"""

from src.domains.subscription.ledger import (
    InvalidEndDateError,
    SubscriptionLedger,
    SubscriptionServiceError,
    is_currently_valid,
)
from src.domains.subscription.service import (
    CategoryNotOfferedError,
    StudentNotFoundError,
    SubscriptionService,
)
from src.domains.subscription.view import CategorySubscriptionView

__all__ = [
    "CategoryNotOfferedError",
    "CategorySubscriptionView",
    "InvalidEndDateError",
    "StudentNotFoundError",
    "SubscriptionLedger",
    "SubscriptionService",
    "SubscriptionServiceError",
    "is_currently_valid",
]
