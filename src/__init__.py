"""Azhari portal access engine.

Subscription and content-access authorization engine for a tutoring portal:
category catalog, subscription ledger, category status view, teacher
assignment matching and the access authorizer facade.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
