# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification domain: subscription expiry sweep."""

from src.domains.notification.service import ExpiryNotifier

__all__ = ["ExpiryNotifier"]
