# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Gateway identity middleware.

Authentication is done by the auth gateway in front of this service. The
gateway forwards the caller's identity in two headers, which this
middleware turns into request.state.user.

Example:
    GET /api/v1/subscriptions/students/abc
    X-User-Id: 7f0c9e4a-...
    X-User-Role: admin
"""

import logging
from typing import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from src.models.common import UserRole
from src.utils.logging import bind_context, clear_context

logger = logging.getLogger(__name__)

USER_ID_HEADER = "X-User-Id"
USER_ROLE_HEADER = "X-User-Role"


class CurrentUser:
    """Caller identity asserted by the gateway.

    Attributes:
        id: User ID.
        role: User role.
    """

    def __init__(self, user_id: str, role: UserRole) -> None:
        self.id = user_id
        self.role = role

    @property
    def is_admin(self) -> bool:
        """Check if user is an admin."""
        return self.role == UserRole.ADMIN

    @property
    def is_teacher(self) -> bool:
        """Check if user is a teacher."""
        return self.role == UserRole.TEACHER

    @property
    def is_student(self) -> bool:
        """Check if user is a student."""
        return self.role == UserRole.STUDENT

    def __repr__(self) -> str:
        return f"<CurrentUser(id={self.id}, role={self.role})>"


def user_from_headers(request: Request) -> CurrentUser | None:
    """Read the gateway identity headers.

    Args:
        request: HTTP request.

    Returns:
        CurrentUser, or None if a header is missing or the role is unknown.
    """
    user_id = (request.headers.get(USER_ID_HEADER) or "").strip()
    raw_role = (request.headers.get(USER_ROLE_HEADER) or "").strip().lower()
    if not user_id or not raw_role:
        return None

    try:
        role = UserRole(raw_role)
    except ValueError:
        logger.debug("Unknown role header: %s", raw_role)
        return None

    return CurrentUser(user_id, role)


class GatewayAuthMiddleware(BaseHTTPMiddleware):
    """Populates request.state.user from gateway headers.

    Requests without identity continue with request.state.user = None and
    the endpoint dependencies decide whether that is allowed.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Process the request and attach the caller identity.

        Args:
            request: Incoming HTTP request.
            call_next: Next middleware/handler.

        Returns:
            HTTP response.
        """
        user = user_from_headers(request)
        request.state.user = user

        if user is not None:
            bind_context(user_id=user.id, role=user.role.value)
        try:
            return await call_next(request)
        finally:
            clear_context()


def get_current_user(request: Request) -> CurrentUser | None:
    """Get current user from request state.

    Falls back to reading the headers when the middleware is not installed.

    Args:
        request: HTTP request with state.

    Returns:
        CurrentUser or None if no identity was forwarded.
    """
    if hasattr(request.state, "user"):
        return request.state.user
    return user_from_headers(request)
