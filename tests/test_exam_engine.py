"""
Tests for ExamEngine - practice exam assembly and scoring

Tests cover:
- Stratified question selection per section quota
- Answer recording (overwrite, unknown question)
- Score, pass threshold and section breakdown
"""

import random
from collections import Counter

import pytest

from examprep_app.modules.catalog.schemas import ExamCatalog
from examprep_app.modules.exam.engine.core import ExamEngine
from examprep_app.modules.exam.exceptions import QuestionNotFoundError
from examprep_app.modules.exam.schemas import ExamConfig


def _section_of(question_id):
    return int(question_id.split('-')[0][1:])


class TestQuestionSelection:

    def test_counts_match_quota_without_duplicates(self, catalog):
        config = ExamConfig(questions_per_section={1: 3, 2: 2, 3: 1})
        questions = ExamEngine.build_exam_questions(catalog, config, random.Random(7))

        ids = [q.id for q in questions]
        assert len(ids) == 6
        assert len(set(ids)) == 6
        assert Counter(_section_of(qid) for qid in ids) == {1: 3, 2: 2, 3: 1}

    def test_quota_above_available_uses_whole_section(self, catalog):
        config = ExamConfig(questions_per_section={2: 50})
        questions = ExamEngine.build_exam_questions(catalog, config, random.Random(1))

        assert sorted(q.id for q in questions) == ['s2-q1', 's2-q2', 's2-q3']

    def test_all_zero_quota_gives_empty_exam(self, catalog):
        config = ExamConfig(questions_per_section={1: 0, 2: 0, 3: 0})
        assert ExamEngine.build_exam_questions(catalog, config) == []

    def test_unshuffled_exam_keeps_section_order(self, catalog):
        config = ExamConfig(questions_per_section={1: 2, 2: 2, 3: 2}, shuffle_questions=False)
        questions = ExamEngine.build_exam_questions(catalog, config, random.Random(3))

        assert [_section_of(q.id) for q in questions] == [1, 1, 2, 2, 3, 3]

    def test_shuffle_array_returns_copy(self):
        items = [1, 2, 3, 4, 5]
        shuffled = ExamEngine.shuffle_array(items, random.Random(42))

        assert items == [1, 2, 3, 4, 5]
        assert sorted(shuffled) == items

    def test_select_random_questions_non_positive_count(self, catalog):
        assert ExamEngine.select_random_questions(catalog.sections[0].questions, 0) == []
        assert ExamEngine.select_random_questions(catalog.sections[0].questions, -2) == []

    def test_empty_catalog_gives_zero_question_session(self):
        session = ExamEngine.create_exam_session(ExamCatalog(), ExamConfig({1: 5}), 'learner')

        assert session.questions == []
        assert session.answers == {}
        assert session.completed_at is None


class TestAnswers:

    @pytest.fixture
    def session(self, catalog, now):
        config = ExamConfig(questions_per_section={1: 2, 2: 1, 3: 1}, shuffle_questions=False)
        return ExamEngine.create_exam_session(catalog, config, 'learner', now=now, rng=random.Random(5))

    def test_record_correct_answer(self, session, now):
        question = session.questions[0]
        answer = ExamEngine.record_answer(session, question.id, question.correct_answer, now)

        assert answer.is_correct is True
        assert session.answers[question.id] is answer

    def test_re_answering_overwrites(self, session):
        question = session.questions[0]
        ExamEngine.record_answer(session, question.id, 'Г')
        ExamEngine.record_answer(session, question.id, question.correct_answer)

        assert len(session.answers) == 1
        assert session.answers[question.id].is_correct is True

    def test_skip_is_recorded_as_incorrect(self, session):
        answer = ExamEngine.record_answer(session, session.questions[0].id, None)
        assert answer.selected_answer is None
        assert answer.is_correct is False

    def test_unknown_question_raises(self, session):
        with pytest.raises(QuestionNotFoundError) as exc_info:
            ExamEngine.record_answer(session, 'not-in-session', 'А')
        assert exc_info.value.status_code == 404
        assert exc_info.value.question_id == 'not-in-session'
        assert session.answers == {}


class TestScoring:

    @pytest.mark.parametrize('total, correct, expected', [
        (0, 0, 0),
        (40, 40, 100),
        (40, 30, 75),
        (3, 1, 33),
        (3, 2, 67),
        (8, 1, 13),   # 12.5 rounds up
        (40, 0, 0),
    ])
    def test_calculate_score(self, total, correct, expected):
        assert ExamEngine.calculate_score(total, correct) == expected

    @pytest.mark.parametrize('score, passed', [(0, False), (74, False), (75, True), (100, True)])
    def test_is_passed(self, score, passed):
        assert ExamEngine.is_passed(score) is passed

    def test_all_correct(self, catalog, now):
        session = ExamEngine.create_exam_session(catalog, ExamConfig({1: 5, 2: 3, 3: 2}), 'learner', now=now)
        for question in session.questions:
            ExamEngine.record_answer(session, question.id, question.correct_answer, now)

        result = ExamEngine.complete_exam(session, catalog, now)

        assert result.total_questions == 10
        assert result.correct_answers == 10
        assert result.score == 100
        assert result.passed is True
        assert result.unanswered == 0
        assert result.completed_at == now

    def test_no_answers(self, catalog):
        session = ExamEngine.create_exam_session(catalog, ExamConfig({1: 5, 2: 3}), 'learner')
        result = ExamEngine.complete_exam(session, catalog)

        assert result.unanswered == result.total_questions == 8
        assert result.correct_answers == 0
        assert result.wrong_answers == 0
        assert result.score == 0
        assert result.passed is False

    def test_skip_and_untouched_score_the_same(self, catalog):
        config = ExamConfig({1: 4}, shuffle_questions=False)
        session = ExamEngine.create_exam_session(catalog, config, 'learner', rng=random.Random(0))
        q1, q2, q3, _ = session.questions
        ExamEngine.record_answer(session, q1.id, q1.correct_answer)
        ExamEngine.record_answer(session, q2.id, 'Г')
        ExamEngine.record_answer(session, q3.id, None)

        result = ExamEngine.complete_exam(session, catalog)

        assert (result.correct_answers, result.wrong_answers, result.unanswered) == (1, 1, 2)
        assert result.score == 25

    def test_section_results_skip_sections_without_questions(self, catalog):
        session = ExamEngine.create_exam_session(catalog, ExamConfig({1: 2, 3: 2}), 'learner')
        for question in session.questions:
            if question.id.startswith('s3'):
                ExamEngine.record_answer(session, question.id, question.correct_answer)

        result = ExamEngine.complete_exam(session, catalog)

        by_number = {r.section_number: r for r in result.section_results}
        assert sorted(by_number) == [1, 3]
        assert by_number[1].score == 0
        assert by_number[3].correct_answers == 2
        assert by_number[3].score == 100

    def test_completing_twice_rescoring_moves_timestamp(self, catalog, now):
        session = ExamEngine.create_exam_session(catalog, ExamConfig({1: 1}), 'learner')
        first = ExamEngine.complete_exam(session, catalog, now)
        later = now.replace(hour=13)
        second = ExamEngine.complete_exam(session, catalog, later)

        assert first.score == second.score
        assert session.completed_at == later


class TestProgressHelpers:

    def test_progress_and_unanswered(self, catalog):
        session = ExamEngine.create_exam_session(catalog, ExamConfig({1: 2, 2: 2}), 'learner')
        answered = session.questions[0]
        ExamEngine.record_answer(session, answered.id, 'А')

        progress = ExamEngine.get_exam_progress(session)
        assert (progress.answered, progress.total, progress.percentage) == (1, 4, 25)

        unanswered = ExamEngine.get_unanswered_questions(session)
        assert len(unanswered) == 3
        assert answered not in unanswered

    def test_questions_by_section(self, catalog):
        session = ExamEngine.create_exam_session(catalog, ExamConfig({1: 2, 3: 1}), 'learner')
        grouped = ExamEngine.get_questions_by_section(session, catalog)

        assert sorted(grouped) == [1, 3]
        assert len(grouped[1]) == 2
        assert len(grouped[3]) == 1

    def test_generated_ids_are_unique(self):
        assert len({ExamEngine.generate_id() for _ in range(50)}) == 50
