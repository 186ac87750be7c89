# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for the Azhari portal access engine.

This package contains domain services that encapsulate business logic.
Each domain module provides services over the record store session.

Domains:
    catalog: Categories, offer rules and teacher selection mapping.
    subject: Subject directory and category fan-out.
    subscription: Subscription ledger, category status and activation.
    teacher: Teacher request review and assignment matching.
    access: Student and teacher authorization checks.
    notification: Subscription expiry notices.
"""
