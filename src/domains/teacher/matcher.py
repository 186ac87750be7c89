# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Teacher assignment matching.

Decides whether a teacher may manage a subject from the teacher's latest
registration request. All of the following must hold:

1. The request is approved.
2. The primary declared stage (first element) equals the subject's stage.
   No declared stage never matches.
3. The subject's grade is among the declared grades. Grade matching is
   fail-open: no declared grades means every grade. Labels that cannot be
   parsed are dropped, and if none of the declared labels parse the match
   fails.
4. The declared category resolves through the catalog to the subject's
   category, and to the subject's name when the selection names one
   subject. Category matching is fail-closed: an unresolved selection
   never matches.
"""

import logging
from dataclasses import dataclass

from src.domains.catalog.service import CategoryCatalog
from src.infrastructure.database.models.subject import Subject
from src.infrastructure.database.models.teacher import TeacherRequest
from src.models.catalog import TeacherSelection
from src.models.common import ApprovalStatus, Grade, Stage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ManageableScope:
    """Resolved scope of a teacher request.

    Attributes:
        stage: Primary declared stage.
        grades: Declared grades, or None when every grade is allowed.
        selection: Resolved category and optional subject name.
    """

    stage: Stage
    grades: frozenset[Grade] | None
    selection: TeacherSelection

    def allows_grade(self, grade: str) -> bool:
        """Check a grade against the scope."""
        return self.grades is None or grade in self.grades


class TeacherAssignmentMatcher:
    """Pure decision "may this teacher manage this subject".

    Attributes:
        catalog: Category catalog used to resolve selections and grades.
    """

    def __init__(self, catalog: CategoryCatalog) -> None:
        self.catalog = catalog

    def manageable_filter(self, request: TeacherRequest) -> ManageableScope | None:
        """Resolve the scope a request covers, ignoring its status.

        Args:
            request: Teacher registration request.

        Returns:
            The resolved scope, or None when the stage, the grades or the
            category cannot be resolved.
        """
        stages = request.assigned_stages or []
        if not stages:
            logger.debug("Teacher request %s declares no stage", request.id)
            return None
        try:
            stage = Stage(str(stages[0]).strip())
        except ValueError:
            logger.info("Teacher request %s has unknown stage %r", request.id, stages[0])
            return None

        grades = self._resolve_grades(request)
        if grades is not None and not grades:
            return None

        selection = self.catalog.resolve_teacher_selection(request.assigned_category)
        if selection is None:
            logger.info(
                "Teacher request %s has unresolvable category %r",
                request.id,
                request.assigned_category,
            )
            return None

        return ManageableScope(stage=stage, grades=grades, selection=selection)

    def can_manage(self, request: TeacherRequest | None, subject: Subject) -> bool:
        """Decide whether a teacher request covers a subject.

        Args:
            request: Teacher's latest registration request.
            subject: Subject the teacher wants to act on.

        Returns:
            True if the teacher may manage the subject's content.
        """
        if request is None or request.status != ApprovalStatus.APPROVED:
            return False

        scope = self.manageable_filter(request)
        if scope is None:
            return False

        if subject.stage != scope.stage:
            return False
        if not scope.allows_grade(subject.grade):
            return False
        if subject.category != scope.selection.category:
            return False
        if scope.selection.subject_name is not None and subject.name != scope.selection.subject_name:
            return False
        return True

    def _resolve_grades(self, request: TeacherRequest) -> frozenset[Grade] | None:
        labels = [label for label in (request.assigned_grades or []) if str(label).strip()]
        if not labels:
            return None

        grades: set[Grade] = set()
        for label in labels:
            grade = self.catalog.grade_key_from_label(str(label))
            if grade is None:
                logger.info("Teacher request %s: dropping unparsed grade %r", request.id, label)
                continue
            grades.add(grade)
        return frozenset(grades)
