# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Category catalog configuration schemas.

The catalog is one configuration object: category definitions, the rule
sets deciding which categories are offered per stage/section, and the
mapping from a teacher's declared selection to subject rows.
"""

from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.models.common import CategoryKey, Section, Stage


class CategoryDefinition(BaseModel):
    """A purchasable category.

    Attributes:
        id: Category key, equal to ``subjects.category`` of its rows.
        name: Display name.
        includes: Human-readable description of the subjects it covers.
    """

    model_config = ConfigDict(frozen=True)

    id: CategoryKey
    name: str
    includes: str = ""


class OfferRule(BaseModel):
    """Categories offered to students with a given stage and section."""

    model_config = ConfigDict(frozen=True)

    stage: Stage
    section: Section | None = None
    categories: list[CategoryKey] = Field(min_length=1)


class TeacherSelection(BaseModel):
    """Resolved teacher selection.

    Attributes:
        category: Category whose subjects the teacher manages.
        subject_name: When set, only the subject with this exact name.
    """

    model_config = ConfigDict(frozen=True)

    category: CategoryKey
    subject_name: str | None = None


class TeacherSelectionRule(TeacherSelection):
    """A teacher selection together with every key/label that denotes it."""

    keys: list[str] = Field(min_length=1)


class CatalogConfig(BaseModel):
    """Full catalog definition loaded from ``config/catalog.yaml``."""

    categories: list[CategoryDefinition] = Field(min_length=1)
    offers: list[OfferRule] = Field(default_factory=list)
    teacher_selections: list[TeacherSelectionRule] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_references(self) -> Self:
        """Reject duplicate ids and rules referring to undefined categories.

        Raises:
            ValueError: If the configuration is inconsistent.
        """
        defined = [category.id for category in self.categories]
        if len(defined) != len(set(defined)):
            raise ValueError("category ids must be unique")

        known = set(defined)
        seen_profiles: set[tuple[Stage, Section | None]] = set()
        for rule in self.offers:
            profile = (rule.stage, rule.section)
            if profile in seen_profiles:
                raise ValueError(f"duplicate offer rule for {rule.stage}/{rule.section}")
            seen_profiles.add(profile)
            missing = [key for key in rule.categories if key not in known]
            if missing:
                raise ValueError(f"offer rule references undefined categories: {missing}")

        seen_keys: set[str] = set()
        for selection in self.teacher_selections:
            if selection.category not in known:
                raise ValueError(
                    f"teacher selection references undefined category: {selection.category}"
                )
            for key in selection.keys:
                normalized = key.strip()
                if normalized in seen_keys:
                    raise ValueError(f"teacher selection key declared twice: {normalized}")
                seen_keys.add(normalized)

        return self
