"""
Tests for FSRSEngine - card state machine, exam-date capping and queue helpers.
"""

import datetime

import pytest

from examprep_app.modules.fsrs.config import FSRSDefaultConfig
from examprep_app.modules.fsrs.engine.core import FSRSEngine, calculate_review, get_scheduling_preview
from examprep_app.modules.fsrs.exceptions import InvalidRatingError
from examprep_app.modules.fsrs.schemas import CardState, MemoryCard, Rating, ReviewSource, SchedulerConfig

DAY = datetime.timedelta(days=1)
MINUTE = datetime.timedelta(minutes=1)


def review_card(now, **overrides):
    values = dict(
        profile_id='p1',
        question_id='q1',
        due=now,
        state=CardState.Review,
        stability=5.0,
        difficulty=5.0,
        reps=3,
        lapses=0,
        last_review=now - 5 * DAY,
        scheduled_days=5,
    )
    values.update(overrides)
    return MemoryCard(**values)


@pytest.fixture
def engine():
    return FSRSEngine()


@pytest.fixture
def long_engine():
    return FSRSEngine(SchedulerConfig(maximum_interval=36500))


class TestNewCards:

    def test_create_new_card(self, now):
        card = FSRSEngine.create_new_card('p1', 'q7', now)
        assert card.id == 'p1_q7'
        assert card.state == CardState.New
        assert card.due == now
        assert (card.stability, card.difficulty, card.reps, card.lapses) == (0.0, 0.0, 0, 0)
        assert card.last_review is None

    def test_again_goes_to_learning_in_one_minute(self, engine, now):
        card = engine.calculate_review(FSRSEngine.create_new_card('p1', 'q1', now), Rating.Again, now)

        assert card.state == CardState.Learning
        assert card.due == now + FSRSDefaultConfig.NEW_STEPS_MINUTES['again'] * MINUTE
        assert card.reps == 1
        assert card.lapses == 0
        assert card.scheduled_days == 0
        assert card.last_review == now

    def test_good_goes_to_learning_in_ten_minutes(self, engine, now):
        card = engine.calculate_review(FSRSEngine.create_new_card('p1', 'q1', now), Rating.Good, now)

        assert card.state == CardState.Learning
        assert card.due == now + 10 * MINUTE
        assert card.stability == pytest.approx(engine.algorithm.init_stability(Rating.Good))

    def test_easy_skips_learning(self, engine, now):
        card = engine.calculate_review(FSRSEngine.create_new_card('p1', 'q1', now), Rating.Easy, now)

        assert card.state == CardState.Review
        assert 1 <= card.scheduled_days <= engine.config.maximum_interval
        assert card.due == now + card.scheduled_days * DAY

    def test_without_short_term_first_success_reaches_review(self, now):
        engine = FSRSEngine(SchedulerConfig(enable_short_term=False))
        new = FSRSEngine.create_new_card('p1', 'q1', now)

        good = engine.calculate_review(new, Rating.Good, now)
        again = engine.calculate_review(new, Rating.Again, now)

        assert good.state == CardState.Review
        assert good.scheduled_days >= 1
        assert again.state == CardState.Learning
        assert again.due == now + FSRSDefaultConfig.LONG_TERM_AGAIN_DAYS * DAY

    def test_elapsed_days_zero_without_prior_review(self, engine, now):
        card = engine.calculate_review(FSRSEngine.create_new_card('p1', 'q1', now), Rating.Hard, now)
        assert card.elapsed_days == 0


class TestLearningCards:

    def test_good_graduates_to_review(self, engine, now):
        card = engine.calculate_review(FSRSEngine.create_new_card('p1', 'q1', now), Rating.Good, now)
        later = now + 10 * MINUTE
        card = engine.calculate_review(card, Rating.Good, later)

        assert card.state == CardState.Review
        assert card.scheduled_days >= 1
        assert card.reps == 2

    def test_hard_and_again_stay_in_learning(self, engine, now):
        card = engine.calculate_review(FSRSEngine.create_new_card('p1', 'q1', now), Rating.Good, now)

        hard = engine.calculate_review(card, Rating.Hard, now + 10 * MINUTE)
        again = engine.calculate_review(card, Rating.Again, now + 10 * MINUTE)

        assert hard.state == CardState.Learning
        assert hard.due == now + 20 * MINUTE
        assert again.state == CardState.Learning
        assert again.due == now + 15 * MINUTE
        assert again.lapses == 0


class TestReviewCards:

    def test_again_lapses_into_relearning(self, engine, now):
        card = review_card(now)
        result = engine.calculate_review(card, Rating.Again, now)

        assert result.state == CardState.Relearning
        assert result.lapses == card.lapses + 1
        assert result.reps == card.reps + 1
        assert result.stability < card.stability
        assert result.difficulty > card.difficulty
        assert result.elapsed_days == 5

    def test_relearning_good_returns_to_review(self, engine, now):
        lapsed = engine.calculate_review(review_card(now), Rating.Again, now)
        result = engine.calculate_review(lapsed, Rating.Good, now + 5 * MINUTE)

        assert result.state == CardState.Review
        assert result.lapses == 1

    def test_intervals_ordered_by_rating(self, long_engine, now):
        card = review_card(now)
        hard, good, easy = (long_engine.calculate_review(card, r, now) for r in (Rating.Hard, Rating.Good, Rating.Easy))

        assert {hard.state, good.state, easy.state} == {CardState.Review}
        assert hard.scheduled_days <= good.scheduled_days < easy.scheduled_days

    def test_intervals_capped_by_maximum_interval(self, engine, now):
        result = engine.calculate_review(review_card(now, stability=50.0, last_review=now - 40 * DAY), Rating.Easy, now)
        assert result.scheduled_days == engine.config.maximum_interval

    def test_card_without_memory_state_restarts_as_new(self, engine, now):
        legacy = review_card(now, stability=0.0, difficulty=0.0, lapses=2)
        result = engine.calculate_review(legacy, Rating.Again, now)

        assert result.state == CardState.Learning
        assert result.lapses == 2


class TestDeterminismAndBounds:

    def test_same_inputs_same_card(self, now):
        engine = FSRSEngine(SchedulerConfig(maximum_interval=36500, enable_fuzz=True))
        card = review_card(now, stability=20.0, last_review=now - 20 * DAY)
        for rating in Rating:
            assert engine.calculate_review(card, rating, now) == engine.calculate_review(card, rating, now)

    def test_fuzz_stays_near_unfuzzed_interval(self, now):
        plain = FSRSEngine(SchedulerConfig(maximum_interval=36500))
        fuzzed = FSRSEngine(SchedulerConfig(maximum_interval=36500, enable_fuzz=True))
        card = review_card(now, stability=20.0, last_review=now - 20 * DAY)

        base = plain.calculate_review(card, Rating.Good, now).scheduled_days
        value = fuzzed.calculate_review(card, Rating.Good, now).scheduled_days
        assert abs(value - base) <= max(2, base * 0.2)

    @pytest.mark.parametrize('state', list(CardState))
    def test_due_between_now_and_exam_date(self, state, now):
        exam_date = now + 3 * DAY
        engine = FSRSEngine(SchedulerConfig(maximum_interval=36500, exam_date=exam_date))
        if state == CardState.New:
            card = FSRSEngine.create_new_card('p1', 'q1', now)
        else:
            card = review_card(now, state=state, stability=30.0, last_review=now - 30 * DAY)

        for rating in Rating:
            result = engine.calculate_review(card, rating, now)
            assert now <= result.due <= exam_date

    def test_exam_date_caps_due_and_scheduled_days(self, now):
        exam_date = now + datetime.timedelta(days=2, hours=12)
        engine = FSRSEngine(SchedulerConfig(maximum_interval=36500, exam_date=exam_date))

        result = engine.calculate_review(review_card(now, stability=30.0, last_review=now - 30 * DAY), Rating.Good, now)

        assert result.due == exam_date
        assert result.scheduled_days == 2

    def test_past_exam_date_clamps_to_now(self, now):
        engine = FSRSEngine(SchedulerConfig(exam_date=now - DAY))
        result = engine.calculate_review(FSRSEngine.create_new_card('p1', 'q1', now), Rating.Again, now)

        assert result.due == now
        assert result.scheduled_days == 0

    def test_short_steps_before_exam_are_not_capped(self, now):
        engine = FSRSEngine(SchedulerConfig(exam_date=now + DAY))
        result = engine.calculate_review(FSRSEngine.create_new_card('p1', 'q1', now), Rating.Good, now)
        assert result.due == now + 10 * MINUTE

    def test_input_card_is_not_modified(self, engine, now):
        card = review_card(now)
        engine.calculate_review(card, Rating.Again, now)
        assert card == review_card(now)

    @pytest.mark.parametrize('rating', [0, 5, 'bad', '3', None, True, 2.7, 3.0])
    def test_invalid_rating(self, engine, now, rating):
        with pytest.raises(InvalidRatingError):
            engine.calculate_review(review_card(now), rating, now)

    def test_naive_now_is_treated_as_utc(self, engine, now):
        card = FSRSEngine.create_new_card('p1', 'q1', now)
        naive = now.replace(tzinfo=None)
        assert engine.calculate_review(card, Rating.Good, naive) == engine.calculate_review(card, Rating.Good, now)


class TestPreview:

    def test_one_entry_per_rating_matching_review(self, engine, now):
        card = review_card(now)
        preview = engine.get_scheduling_preview(card, now)

        assert list(preview) == list(Rating)
        for rating, item in preview.items():
            next_card = engine.calculate_review(card, rating, now)
            assert item.due == next_card.due
            assert item.scheduled_days == next_card.scheduled_days
            assert item.to_dict()['interval'] == next_card.scheduled_days
            assert item.interval_days == pytest.approx((item.due - now).total_seconds() / 86400)

    def test_preview_respects_exam_date(self, now):
        exam_date = now + DAY
        preview = get_scheduling_preview(
            review_card(now, stability=30.0, last_review=now - 30 * DAY),
            SchedulerConfig(maximum_interval=36500, exam_date=exam_date),
            now,
        )
        assert all(item.due <= exam_date for item in preview.values())

    def test_functional_alias(self, now):
        card = review_card(now)
        assert calculate_review(card, Rating.Good, SchedulerConfig(), now) == FSRSEngine().calculate_review(card, Rating.Good, now)


class TestQueues:

    def test_sort_by_urgency(self, now):
        cards = [
            review_card(now, question_id='future-far', due=now + 3 * DAY),
            review_card(now, question_id='overdue-1d', due=now - DAY),
            review_card(now, question_id='future-soon', due=now + MINUTE),
            review_card(now, question_id='overdue-3d', due=now - 3 * DAY),
            review_card(now, question_id='due-now', due=now),
        ]
        original = list(cards)

        ordered = FSRSEngine.sort_cards_by_urgency(cards, now)

        assert [c.question_id for c in ordered] == ['overdue-3d', 'overdue-1d', 'due-now', 'future-soon', 'future-far']
        assert cards == original

    def test_due_boundary_is_inclusive(self, now):
        assert FSRSEngine.is_card_due(review_card(now, due=now), now) is True
        assert FSRSEngine.is_card_due(review_card(now, due=now + datetime.timedelta(seconds=1)), now) is False

    def test_get_due_cards(self, now):
        cards = [review_card(now, question_id='a', due=now - DAY), review_card(now, question_id='b', due=now + DAY)]
        assert [c.question_id for c in FSRSEngine.get_due_cards(cards, now)] == ['a']


class TestExamHelpers:

    @pytest.mark.parametrize('delta, expected', [
        (datetime.timedelta(hours=12), 1),
        (datetime.timedelta(days=3), 3),
        (datetime.timedelta(days=3, minutes=1), 4),
        (datetime.timedelta(0), 0),
        (-datetime.timedelta(days=2), 0),
    ])
    def test_days_until_exam(self, now, delta, expected):
        assert FSRSEngine.get_days_until_exam(now + delta, now) == expected

    def test_exam_prep_config(self, now):
        config = FSRSEngine.create_exam_prep_config(now + 10 * DAY, now)

        assert config.request_retention == 0.95
        assert config.maximum_interval == 10
        assert config.enable_fuzz is False
        assert config.enable_short_term is True
        assert config.exam_date == now + 10 * DAY

    def test_exam_prep_config_for_past_exam_keeps_one_day(self, now):
        assert FSRSEngine.create_exam_prep_config(now - DAY, now).maximum_interval == 1

    def test_exam_result_to_rating(self):
        assert FSRSEngine.exam_result_to_rating(True) == Rating.Good
        assert FSRSEngine.exam_result_to_rating(False) == Rating.Again

    def test_review_logs_get_unique_ids(self, now):
        first = FSRSEngine.create_review_log('p1', 'q1', 3, ReviewSource.EXAM, now)
        second = FSRSEngine.create_review_log('p1', 'q1', 3, ReviewSource.EXAM, now)

        assert first.id != second.id
        assert first.rating == Rating.Good
        assert first.source == 'exam'

    @pytest.mark.parametrize('days, label', [
        (-0.5, 'now'),
        (0, '<1m'),
        (10 / 1440, '10m'),
        (3 / 24, '3h'),
        (5, '5d'),
    ])
    def test_format_interval(self, days, label):
        assert FSRSEngine.format_interval(days) == label

    def test_migrated_card(self, engine, now):
        card = engine.create_migrated_card('p1', 'q1', now)

        assert card.reps == 1
        assert card.state == CardState.Learning
        assert card.due == now
        assert card.stability == pytest.approx(engine.algorithm.init_stability(Rating.Good))
        assert card.difficulty == pytest.approx(engine.algorithm.init_difficulty(Rating.Good))

    def test_retrievability(self, engine, now):
        assert engine.get_retrievability(FSRSEngine.create_new_card('p1', 'q1', now), now) == 0.0
        assert engine.get_retrievability(review_card(now, stability=5.0, last_review=now - 5 * DAY), now) == pytest.approx(0.9)
