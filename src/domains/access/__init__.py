# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Access authorization domain."""

from src.domains.access.service import AccessAuthorizer

__all__ = ["AccessAuthorizer"]
