# File: examprep_app/modules/exam/engine/core.py
# ExamEngine - question selection, answer recording and scoring

from __future__ import annotations

import datetime
import logging
import random
import uuid
from typing import Dict, List, Optional, Sequence

from examprep_app.modules.catalog.schemas import ExamCatalog, Question, Section
from examprep_app.modules.shared.utils.rounding import percentage
from examprep_app.modules.shared.utils.time_utils import utcnow
from ..config import ExamDefaultConfig
from ..exceptions import QuestionNotFoundError
from ..schemas import (
    ExamConfig,
    ExamProgress,
    ExamResult,
    ExamSession,
    SectionResult,
    UserAnswer,
)

logger = logging.getLogger(__name__)


class ExamEngine:
    """
    Pure exam logic: no database, no Flask context.
    Randomness comes from an injectable ``random.Random`` so tests can seed it.
    """

    @staticmethod
    def generate_id() -> str:
        return uuid.uuid4().hex

    @staticmethod
    def shuffle_array(items: Sequence, rng: Optional[random.Random] = None) -> list:
        """Return a uniformly shuffled copy; the input is left untouched."""
        shuffled = list(items)
        (rng or random).shuffle(shuffled)
        return shuffled

    @staticmethod
    def select_random_questions(
        questions: Sequence[Question],
        count: int,
        rng: Optional[random.Random] = None
    ) -> List[Question]:
        """Draw ``count`` questions without replacement; the whole list when count >= available."""
        if count <= 0:
            return []
        if count >= len(questions):
            return ExamEngine.shuffle_array(questions, rng)
        return (rng or random).sample(list(questions), count)

    @staticmethod
    def build_exam_questions(
        catalog: ExamCatalog,
        config: ExamConfig,
        rng: Optional[random.Random] = None
    ) -> List[Question]:
        selected: List[Question] = []
        for section in catalog.sections:
            wanted = config.wanted(section.section_number)
            if wanted > 0:
                selected.extend(ExamEngine.select_random_questions(section.questions, wanted, rng))

        if config.shuffle_questions:
            return ExamEngine.shuffle_array(selected, rng)
        return selected

    @staticmethod
    def create_exam_session(
        catalog: ExamCatalog,
        config: ExamConfig,
        user_id: str,
        now: Optional[datetime.datetime] = None,
        rng: Optional[random.Random] = None
    ) -> ExamSession:
        if not catalog.sections:
            logger.warning("Creating exam session for %s from an empty catalog", user_id)
        questions = ExamEngine.build_exam_questions(catalog, config, rng)
        session = ExamSession(
            id=ExamEngine.generate_id(),
            user_id=user_id,
            config=config,
            questions=questions,
            answers={},
            started_at=now or utcnow(),
            completed_at=None,
        )
        logger.debug("Exam session %s created with %d questions", session.id, len(questions))
        return session

    @staticmethod
    def check_answer(question: Question, selected_answer: Optional[str]) -> bool:
        return selected_answer is not None and question.correct_answer == selected_answer

    @staticmethod
    def record_answer(
        session: ExamSession,
        question_id: str,
        selected_answer: Optional[str],
        now: Optional[datetime.datetime] = None
    ) -> UserAnswer:
        """Store (or overwrite) the answer for one question. ``None`` records an explicit skip."""
        question = session.find_question(question_id)
        if question is None:
            logger.error("Answer for unknown question %s in session %s", question_id, session.id)
            raise QuestionNotFoundError(question_id, session.id)

        answer = UserAnswer(
            question_id=question_id,
            selected_answer=selected_answer,
            is_correct=ExamEngine.check_answer(question, selected_answer),
            answered_at=now or utcnow(),
        )
        session.answers[question_id] = answer
        return answer

    @staticmethod
    def calculate_score(total_questions: int, correct_answers: int) -> int:
        return percentage(correct_answers, total_questions)

    @staticmethod
    def is_passed(score: int) -> bool:
        return score >= ExamDefaultConfig.PASS_THRESHOLD

    @staticmethod
    def calculate_section_result(
        section: Section,
        session_questions: Sequence[Question],
        answers: Dict[str, UserAnswer]
    ) -> SectionResult:
        section_ids = section.question_ids
        in_exam = [q for q in session_questions if q.id in section_ids]
        correct = sum(1 for q in in_exam if answers.get(q.id) is not None and answers[q.id].is_correct)
        return SectionResult(
            section_number=section.section_number,
            section_title=section.title,
            total_questions=len(in_exam),
            correct_answers=correct,
            score=ExamEngine.calculate_score(len(in_exam), correct),
        )

    @staticmethod
    def complete_exam(
        session: ExamSession,
        catalog: ExamCatalog,
        now: Optional[datetime.datetime] = None
    ) -> ExamResult:
        """Score the session. Completing twice re-scores and moves the timestamp."""
        session.completed_at = now or utcnow()

        correct = wrong = unanswered = 0
        for question in session.questions:
            answer = session.answers.get(question.id)
            # an explicit skip and an untouched question score the same
            if answer is None or answer.selected_answer is None:
                unanswered += 1
            elif answer.is_correct:
                correct += 1
            else:
                wrong += 1

        total = len(session.questions)
        score = ExamEngine.calculate_score(total, correct)

        section_results = [
            result for result in (
                ExamEngine.calculate_section_result(section, session.questions, session.answers)
                for section in catalog.sections
            )
            if result.total_questions > 0
        ]

        result = ExamResult(
            session_id=session.id,
            user_id=session.user_id,
            total_questions=total,
            correct_answers=correct,
            wrong_answers=wrong,
            unanswered=unanswered,
            score=score,
            passed=ExamEngine.is_passed(score),
            completed_at=session.completed_at,
            section_results=section_results,
        )
        logger.info(
            "Exam %s completed: %d/%d correct, score %d%% (%s)",
            session.id, correct, total, score, 'passed' if result.passed else 'failed'
        )
        return result

    @staticmethod
    def get_exam_progress(session: ExamSession) -> ExamProgress:
        answered = len(session.answers)
        total = len(session.questions)
        return ExamProgress(
            answered=answered,
            total=total,
            percentage=ExamEngine.calculate_score(total, answered),
        )

    @staticmethod
    def get_unanswered_questions(session: ExamSession) -> List[Question]:
        return [q for q in session.questions if q.id not in session.answers]

    @staticmethod
    def get_questions_by_section(session: ExamSession, catalog: ExamCatalog) -> Dict[int, List[Question]]:
        grouped: Dict[int, List[Question]] = {}
        for section in catalog.sections:
            section_ids = section.question_ids
            in_section = [q for q in session.questions if q.id in section_ids]
            if in_section:
                grouped[section.section_number] = in_section
        return grouped
