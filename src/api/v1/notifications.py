# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification API endpoints.

- POST /expiry-sweep - Write expiry notices for subscriptions ending soon (admin)

The sweep is meant to be triggered by an external scheduler.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db, require_admin
from src.api.middleware.auth import CurrentUser
from src.core.config import get_settings
from src.domains.notification.service import ExpiryNotifier
from src.infrastructure.database.connection import StorageUnavailableError
from src.models.notification import ExpirySweepResult

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/expiry-sweep",
    response_model=ExpirySweepResult,
    summary="Run expiry notification sweep",
)
async def run_expiry_sweep(
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ExpirySweepResult:
    """Write expiry notices for subscriptions ending in the notice window."""
    notifier = ExpiryNotifier(db, get_settings().subscription)
    try:
        result = await notifier.notify_expiring()
    except StorageUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    logger.info("Expiry sweep triggered by %s: sent=%d", current_user.id, result.sent)
    return result
