# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database infrastructure for the portal's record store.

Example:
    from src.infrastructure.database import get_session

    async with get_session() as session:
        result = await session.execute(select(Subject))
"""

from src.infrastructure.database.connection import (
    DatabaseError,
    StorageUnavailableError,
    build_engine,
    check_database_connection,
    close_database,
    get_engine,
    get_session,
    get_sessionmaker,
    init_database,
    storage_errors,
)

__all__ = [
    "DatabaseError",
    "StorageUnavailableError",
    "build_engine",
    "check_database_connection",
    "close_database",
    "get_engine",
    "get_session",
    "get_sessionmaker",
    "init_database",
    "storage_errors",
]
