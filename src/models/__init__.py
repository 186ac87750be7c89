# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pydantic models for configuration and the HTTP surface.

Submodules:
- common: Closed enumerations and the student profile summary
- catalog: Category catalog configuration
- subject, subscription, teacher, access, notification: API models
"""
