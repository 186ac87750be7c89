# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API middleware package.

- auth: Caller identity from auth gateway headers
"""

from src.api.middleware.auth import CurrentUser, GatewayAuthMiddleware, get_current_user

__all__ = ["CurrentUser", "GatewayAuthMiddleware", "get_current_user"]
