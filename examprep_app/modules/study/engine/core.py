# File: examprep_app/modules/study/engine/core.py
# StudyEngine - question browsing and viewed-question progress

from __future__ import annotations

import datetime
import uuid
from typing import Iterable, List, Optional

from examprep_app.modules.catalog.schemas import ExamCatalog, Question
from examprep_app.modules.shared.utils.rounding import percentage
from examprep_app.modules.shared.utils.time_utils import utcnow
from ..schemas import ALL_SECTIONS, StudyProgress, StudySession, StudyTotals


class StudyEngine:
    """Pure study-mode logic over the catalog; sessions are mutated in place."""

    @staticmethod
    def get_study_questions(catalog: ExamCatalog, section_number: int) -> List[Question]:
        if section_number == ALL_SECTIONS:
            return list(catalog.all_questions)
        section = catalog.get_section(section_number)
        return list(section.questions) if section else []

    @staticmethod
    def create_study_session(
        catalog: ExamCatalog,
        section_number: int,
        user_id: str,
        now: Optional[datetime.datetime] = None
    ) -> StudySession:
        now = now or utcnow()
        return StudySession(
            id=uuid.uuid4().hex,
            user_id=user_id,
            section_number=section_number,
            questions=StudyEngine.get_study_questions(catalog, section_number),
            current_section_number=1 if section_number == ALL_SECTIONS else section_number,
            started_at=now,
            last_active_at=now,
        )

    @staticmethod
    def mark_question_viewed(session: StudySession, question_id: str,
                             now: Optional[datetime.datetime] = None) -> None:
        session.viewed_questions.add(question_id)
        session.last_active_at = now or utcnow()

    @staticmethod
    def get_study_section_questions(session: StudySession, catalog: ExamCatalog,
                                    section_number: int) -> List[Question]:
        section = catalog.get_section(section_number)
        if section is None:
            return []
        section_ids = section.question_ids
        return [q for q in session.questions if q.id in section_ids]

    @staticmethod
    def get_study_progress(session: StudySession, catalog: ExamCatalog) -> List[StudyProgress]:
        """One entry per catalog section, including sections outside the session (0 of 0)."""
        progress = []
        for section in catalog.sections:
            questions = StudyEngine.get_study_section_questions(session, catalog, section.section_number)
            viewed = sum(1 for q in questions if q.id in session.viewed_questions)
            progress.append(StudyProgress(
                section_number=section.section_number,
                section_title=section.title,
                total_questions=len(questions),
                viewed_questions=viewed,
                percentage=percentage(viewed, len(questions)),
            ))
        return progress

    @staticmethod
    def get_total_study_progress(session: StudySession) -> StudyTotals:
        viewed = sum(1 for q in session.questions if q.id in session.viewed_questions)
        total = len(session.questions)
        return StudyTotals(viewed=viewed, total=total, percentage=percentage(viewed, total))

    @staticmethod
    def switch_study_section(session: StudySession, section_number: int,
                             now: Optional[datetime.datetime] = None) -> None:
        session.current_section_number = section_number
        session.last_active_at = now or utcnow()

    @staticmethod
    def load_viewed_questions(session: StudySession, question_ids: Iterable[str]) -> None:
        session.viewed_questions.update(question_ids)
