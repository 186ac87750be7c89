# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Category catalog.

This module provides the CategoryCatalog class for:
- Listing the categories offered to a stage/section profile
- Looking up category definitions by key
- Resolving a teacher's declared selection to a category filter
- Parsing grade labels into grade keys

The catalog is built from one CatalogConfig object. Nothing here touches
storage.
"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import ValidationError

from src.core.config.settings import get_settings
from src.core.config.yaml_loader import YAMLLoadError, load_yaml
from src.models.catalog import CatalogConfig, CategoryDefinition, TeacherSelection
from src.models.common import CategoryKey, Grade, Section, Stage

logger = logging.getLogger(__name__)

# Ordinal words used in Arabic grade labels, e.g. "الصف الثاني الثانوي".
_GRADE_ORDINALS: tuple[tuple[str, Grade], ...] = (
    ("الأول", Grade.FIRST),
    ("الثاني", Grade.SECOND),
    ("الثالث", Grade.THIRD),
)


class CatalogServiceError(Exception):
    """Base exception for catalog errors."""

    pass


class UnknownCategoryError(CatalogServiceError):
    """Raised when a category key is not defined in the catalog."""

    pass


class CatalogConfigError(CatalogServiceError):
    """Raised when the catalog definition cannot be loaded or is invalid."""

    pass


def _normalize_selection(value: str) -> str:
    return " ".join(value.split()).casefold()


class CategoryCatalog:
    """Static category and offer-rule lookup.

    Attributes:
        config: The catalog definition this instance was built from.
    """

    def __init__(self, config: CatalogConfig) -> None:
        """Initialize the catalog.

        Args:
            config: Validated catalog definition.
        """
        self.config = config
        self._categories: dict[CategoryKey, CategoryDefinition] = {
            category.id: category for category in config.categories
        }
        self._offers: dict[tuple[Stage, Section | None], list[CategoryKey]] = {
            (rule.stage, rule.section): list(rule.categories) for rule in config.offers
        }

        self._selections: dict[str, TeacherSelection] = {}
        for rule in config.teacher_selections:
            selection = TeacherSelection(category=rule.category, subject_name=rule.subject_name)
            for key in rule.keys:
                self._selections[_normalize_selection(key)] = selection
        # A bare category key always denotes the whole category.
        for key in self._categories:
            self._selections.setdefault(_normalize_selection(key.value), TeacherSelection(category=key))

    def category_keys(self) -> tuple[CategoryKey, ...]:
        """Get every category key in catalog order."""
        return tuple(self._categories)

    def all_categories(self) -> list[CategoryDefinition]:
        """Get every category definition in catalog order."""
        return list(self._categories.values())

    def get_category(self, key: str) -> CategoryDefinition:
        """Get a category definition.

        Args:
            key: Category key.

        Returns:
            The category definition.

        Raises:
            UnknownCategoryError: If the key is not in the catalog.
        """
        try:
            return self._categories[CategoryKey(key)]
        except (ValueError, KeyError) as e:
            raise UnknownCategoryError(f"Unknown category: {key}") from e

    def categories_for(
        self,
        stage: str | None,
        section: str | None = None,
    ) -> list[CategoryDefinition]:
        """Get the categories offered to a stage/section profile.

        A stage whose rule set has no section (preparatory) ignores the
        section. A profile no rule set covers gets every category.

        Args:
            stage: Student stage.
            section: Student section, if any.

        Returns:
            Category definitions in rule order.
        """
        keys = self._offers.get((stage, section))
        if keys is None:
            keys = self._offers.get((stage, None))

        if keys is None:
            logger.debug(
                "No offer rule for stage=%s section=%s, offering all categories",
                stage,
                section,
            )
            return self.all_categories()

        return [self._categories[key] for key in keys]

    def is_offered(self, category: str, stage: str | None, section: str | None = None) -> bool:
        """Check whether a category is offered to a stage/section profile."""
        return any(item.id == category for item in self.categories_for(stage, section))

    def resolve_teacher_selection(self, selection: str | None) -> TeacherSelection | None:
        """Map a teacher's declared selection to a category filter.

        The selection may be a category key, a selection key such as
        ``physics`` or an Arabic label such as ``فيزياء``.

        Args:
            selection: Declared selection as stored on the teacher request.

        Returns:
            The category (and optional exact subject name) the selection
            denotes, or None if it is blank or unknown.
        """
        if not selection or not selection.strip():
            return None
        return self._selections.get(_normalize_selection(selection))

    @staticmethod
    def grade_key_from_label(label: str | None) -> Grade | None:
        """Parse a grade key or Arabic grade label.

        Args:
            label: ``first``/``second``/``third`` or a label containing the
                Arabic ordinal word.

        Returns:
            The grade, or None if the label cannot be parsed.
        """
        value = (label or "").strip()
        if not value:
            return None

        try:
            return Grade(value.lower())
        except ValueError:
            pass

        for ordinal, grade in _GRADE_ORDINALS:
            if ordinal in value:
                return grade
        return None


def load_catalog(path: Path) -> CategoryCatalog:
    """Build a catalog from a YAML definition.

    Args:
        path: Path to the catalog YAML file.

    Returns:
        A new CategoryCatalog.

    Raises:
        CatalogConfigError: If the file cannot be read or fails validation.
    """
    try:
        raw = load_yaml(path)
        config = CatalogConfig.model_validate(raw)
    except YAMLLoadError as e:
        raise CatalogConfigError(str(e)) from e
    except ValidationError as e:
        raise CatalogConfigError(f"Invalid catalog definition in '{path}': {e}") from e

    logger.info(
        "Loaded catalog: path=%s, categories=%d, offers=%d",
        path,
        len(config.categories),
        len(config.offers),
    )
    return CategoryCatalog(config)


@lru_cache(maxsize=1)
def get_catalog() -> CategoryCatalog:
    """Get the cached catalog for the configured path.

    Call get_catalog.cache_clear() to reload.
    """
    return load_catalog(get_settings().catalog.path)
