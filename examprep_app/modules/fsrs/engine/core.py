from __future__ import annotations

import datetime
import logging
import math
import numbers
import uuid
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence

from examprep_app.modules.shared.utils.time_utils import days_between, ensure_utc, utcnow
from ..config import FSRSDefaultConfig
from ..exceptions import InvalidRatingError
from ..schemas import (
    CardState,
    MemoryCard,
    Rating,
    ReviewLog,
    ReviewSource,
    SchedulerConfig,
    SchedulingPreviewItem,
)
from .algorithm import FSRSAlgorithm

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 1440


class _Step(NamedTuple):
    """Outcome of one rating before dates are attached."""
    state: CardState
    stability: float
    difficulty: float
    days: int = 0       # whole-day interval; 0 for a same-day step
    minutes: int = 0    # same-day step length


class FSRSEngine:
    """
    FSRS-5 scheduler with exam-date capping.
    Pure Logic Layer: No Database, No Flask Context.

    Every public method takes an explicit ``now`` (wall clock when omitted) and
    returns new ``MemoryCard`` values; cards are never mutated in place.
    """

    def __init__(self, config: Optional[SchedulerConfig] = None, weights: Optional[Sequence[float]] = None):
        self.config = config or SchedulerConfig()
        self.algorithm = FSRSAlgorithm(weights or FSRSDefaultConfig.FSRS_GLOBAL_WEIGHTS)

    # --- Review ---

    def calculate_review(self, card: MemoryCard, rating, now: Optional[datetime.datetime] = None) -> MemoryCard:
        """
        Apply one rating to ``card`` and return the next card state.

        Same (card, rating, config, now) always yields the same card, fuzz included.
        """
        rating = self.validate_rating(rating)
        now = ensure_utc(now) if now else utcnow()

        elapsed_days = self._elapsed_days(card, now)
        state = self._effective_state(card)

        if state == CardState.New:
            step = self._schedule_new(rating)
        elif state == CardState.Review:
            step = self._schedule_review(card, rating, elapsed_days)
        else:
            step = self._schedule_learning(card, state, rating, elapsed_days)

        days = step.days
        if days and step.state == CardState.Review and self.config.enable_fuzz:
            days = self.algorithm.apply_fuzz(
                days, elapsed_days, self.config.maximum_interval,
                seed=self._fuzz_seed(card, now),
            )

        if days:
            due = now + datetime.timedelta(days=days)
        else:
            due = now + datetime.timedelta(minutes=step.minutes)
        due, scheduled_days = self._cap_to_exam_date(due, days, now)

        lapses = card.lapses
        if rating == Rating.Again and state == CardState.Review:
            lapses += 1

        return MemoryCard(
            profile_id=card.profile_id,
            question_id=card.question_id,
            due=due,
            state=step.state,
            stability=step.stability,
            difficulty=step.difficulty,
            elapsed_days=elapsed_days,
            scheduled_days=scheduled_days,
            reps=card.reps + 1,
            lapses=lapses,
            last_review=now,
        )

    def get_scheduling_preview(
        self,
        card: MemoryCard,
        now: Optional[datetime.datetime] = None
    ) -> Dict[Rating, SchedulingPreviewItem]:
        """What each rating would do to ``card``; nothing is committed."""
        now = ensure_utc(now) if now else utcnow()
        preview = {}
        for rating in Rating:
            next_card = self.calculate_review(card, rating, now)
            preview[rating] = SchedulingPreviewItem(
                due=next_card.due,
                scheduled_days=next_card.scheduled_days,
                interval_days=days_between(now, next_card.due),
            )
        return preview

    def get_retrievability(self, card: MemoryCard, now: Optional[datetime.datetime] = None) -> float:
        """Current modeled recall probability; 0 for a card never reviewed."""
        if card.state == CardState.New or card.stability <= 0:
            return 0.0
        if card.last_review is None:
            return 1.0
        now = ensure_utc(now) if now else utcnow()
        return self.algorithm.forgetting_curve(days_between(card.last_review, now), card.stability)

    def create_migrated_card(self, profile_id: str, question_id: str,
                             now: Optional[datetime.datetime] = None) -> MemoryCard:
        """Card for a question viewed before reviews were tracked: one Good-equivalent exposure, due now."""
        now = ensure_utc(now) if now else utcnow()
        return MemoryCard(
            profile_id=profile_id,
            question_id=question_id,
            due=now,
            state=CardState.Learning,
            stability=self.algorithm.init_stability(Rating.Good),
            difficulty=self.algorithm.init_difficulty(Rating.Good),
            reps=1,
        )

    # --- Per-state transitions ---

    def _schedule_new(self, rating: Rating) -> _Step:
        alg = self.algorithm
        stability = {r: alg.init_stability(r) for r in Rating}
        difficulty = alg.init_difficulty(rating)

        if rating == Rating.Again:
            return self._again_step(CardState.Learning, stability[rating], difficulty,
                                    FSRSDefaultConfig.NEW_STEPS_MINUTES['again'])

        if self.config.enable_short_term and rating != Rating.Easy:
            key = 'hard' if rating == Rating.Hard else 'good'
            return _Step(CardState.Learning, stability[rating], difficulty,
                         minutes=FSRSDefaultConfig.NEW_STEPS_MINUTES[key])

        return _Step(CardState.Review, stability[rating], difficulty,
                     days=self._graduating_interval(rating, stability))

    def _schedule_learning(self, card: MemoryCard, state: CardState, rating: Rating, elapsed_days: int) -> _Step:
        steps = (FSRSDefaultConfig.RELEARNING_STEPS_MINUTES if state == CardState.Relearning
                 else FSRSDefaultConfig.LEARNING_STEPS_MINUTES)
        difficulty = self.algorithm.next_difficulty(card.difficulty, rating)
        stability = {r: self._next_stability(card, r, elapsed_days) for r in Rating}

        if rating == Rating.Again:
            return self._again_step(state, stability[rating], difficulty, steps['again'])

        if self.config.enable_short_term and rating == Rating.Hard:
            return _Step(state, stability[rating], difficulty, minutes=steps['hard'])

        return _Step(CardState.Review, stability[rating], difficulty,
                     days=self._graduating_interval(rating, stability))

    def _schedule_review(self, card: MemoryCard, rating: Rating, elapsed_days: int) -> _Step:
        difficulty = self.algorithm.next_difficulty(card.difficulty, rating)
        stability = {r: self._next_stability(card, r, elapsed_days) for r in Rating}

        if rating == Rating.Again:
            return self._again_step(CardState.Relearning, stability[rating], difficulty,
                                    FSRSDefaultConfig.RELEARNING_STEPS_MINUTES['again'])

        hard, good, easy = self._ordered_intervals(stability)
        days = {Rating.Hard: hard, Rating.Good: good, Rating.Easy: easy}[rating]
        return _Step(CardState.Review, stability[rating], difficulty, days=days)

    def _again_step(self, state: CardState, stability: float, difficulty: float, minutes: int) -> _Step:
        if self.config.enable_short_term:
            return _Step(state, stability, difficulty, minutes=minutes)
        return _Step(state, stability, difficulty,
                     days=min(FSRSDefaultConfig.LONG_TERM_AGAIN_DAYS, self.config.maximum_interval))

    # --- Helpers ---

    def _next_stability(self, card: MemoryCard, rating: Rating, elapsed_days: int) -> float:
        alg = self.algorithm
        if elapsed_days == 0:
            return alg.next_short_term_stability(card.stability, rating)
        retrievability = alg.forgetting_curve(elapsed_days, card.stability)
        if rating == Rating.Again:
            return alg.next_forget_stability(card.difficulty, card.stability, retrievability)
        return alg.next_recall_stability(card.difficulty, card.stability, retrievability, rating)

    def _interval(self, stability: float) -> int:
        return self.algorithm.next_interval(
            stability, self.config.request_retention, self.config.maximum_interval
        )

    def _ordered_intervals(self, stability: Dict[Rating, float]):
        """Day intervals for Hard/Good/Easy with hard <= good < easy before the max-interval clamp."""
        hard = self._interval(stability[Rating.Hard])
        good = self._interval(stability[Rating.Good])
        easy = self._interval(stability[Rating.Easy])
        hard = min(hard, good)
        good = max(good, hard + 1)
        easy = max(easy, good + 1)
        cap = self.config.maximum_interval
        return min(hard, cap), min(good, cap), min(easy, cap)

    def _graduating_interval(self, rating: Rating, stability: Dict[Rating, float]) -> int:
        """Interval for a card leaving New/Learning/Relearning straight into Review."""
        if self.config.enable_short_term:
            # only Good (or Easy) graduates; Easy stays at least a day past Good
            good = self._interval(stability[Rating.Good])
            if rating == Rating.Easy:
                return min(max(self._interval(stability[Rating.Easy]), good + 1), self.config.maximum_interval)
            return good
        hard, good, easy = self._ordered_intervals(stability)
        return {Rating.Hard: hard, Rating.Good: good, Rating.Easy: easy}[rating]

    def _cap_to_exam_date(self, due: datetime.datetime, scheduled_days: int, now: datetime.datetime):
        if not self.config.has_exam_date:
            return due, scheduled_days
        # a past exam date caps at now: due never precedes the review
        ceiling = max(ensure_utc(self.config.exam_date), now)
        if due <= ceiling:
            return due, scheduled_days
        return ceiling, max(0, math.floor(days_between(now, ceiling)))

    @staticmethod
    def _elapsed_days(card: MemoryCard, now: datetime.datetime) -> int:
        if card.last_review is None:
            return 0
        return max(0, math.floor(days_between(card.last_review, now)))

    @staticmethod
    def _effective_state(card: MemoryCard) -> CardState:
        # cards imported without memory state restart from New
        if card.state != CardState.New and (card.stability <= 0 or card.difficulty <= 0):
            logger.debug("Card %s has no memory state, scheduling as new", card.id)
            return CardState.New
        return card.state

    @staticmethod
    def _fuzz_seed(card: MemoryCard, now: datetime.datetime) -> str:
        return f"{int(now.timestamp() * 1000)}:{card.reps}:{card.difficulty * card.stability:.6f}"

    @staticmethod
    def validate_rating(rating) -> Rating:
        # floats and strings are refused rather than truncated
        if isinstance(rating, bool) or not isinstance(rating, numbers.Integral):
            raise InvalidRatingError(rating)
        try:
            return Rating(rating)
        except ValueError:
            raise InvalidRatingError(rating)

    # --- Cards, queues & helpers (no scheduling math) ---

    @staticmethod
    def create_new_card(profile_id: str, question_id: str, now: Optional[datetime.datetime] = None) -> MemoryCard:
        return MemoryCard(
            profile_id=profile_id,
            question_id=question_id,
            due=ensure_utc(now) if now else utcnow(),
            state=CardState.New,
        )

    @staticmethod
    def exam_result_to_rating(is_correct: bool) -> Rating:
        return Rating.Good if is_correct else Rating.Again

    @staticmethod
    def is_card_due(card: MemoryCard, now: Optional[datetime.datetime] = None) -> bool:
        now = ensure_utc(now) if now else utcnow()
        return ensure_utc(card.due) <= now

    @staticmethod
    def get_due_cards(cards: Iterable[MemoryCard], now: Optional[datetime.datetime] = None) -> List[MemoryCard]:
        now = ensure_utc(now) if now else utcnow()
        return [card for card in cards if FSRSEngine.is_card_due(card, now)]

    @staticmethod
    def sort_cards_by_urgency(cards: Iterable[MemoryCard], now: Optional[datetime.datetime] = None) -> List[MemoryCard]:
        """Overdue first (oldest due first), then upcoming (soonest first). Input is not modified."""
        now = ensure_utc(now) if now else utcnow()
        return sorted(cards, key=lambda card: (ensure_utc(card.due) > now, ensure_utc(card.due)))

    @staticmethod
    def get_days_until_exam(exam_date: datetime.datetime, now: Optional[datetime.datetime] = None) -> int:
        now = ensure_utc(now) if now else utcnow()
        return max(0, math.ceil(days_between(now, exam_date)))

    @staticmethod
    def create_exam_prep_config(exam_date: datetime.datetime, now: Optional[datetime.datetime] = None) -> SchedulerConfig:
        days_left = FSRSEngine.get_days_until_exam(exam_date, now)
        return SchedulerConfig(
            request_retention=FSRSDefaultConfig.FSRS_DESIRED_RETENTION,
            maximum_interval=max(1, days_left),
            enable_fuzz=False,
            enable_short_term=True,
            exam_date=ensure_utc(exam_date),
        )

    @staticmethod
    def create_review_log(
        profile_id: str,
        question_id: str,
        rating,
        source: str = ReviewSource.STUDY,
        now: Optional[datetime.datetime] = None
    ) -> ReviewLog:
        return ReviewLog(
            id=uuid.uuid4().hex,
            profile_id=profile_id,
            question_id=question_id,
            rating=FSRSEngine.validate_rating(rating),
            reviewed_at=ensure_utc(now) if now else utcnow(),
            source=source,
        )

    @staticmethod
    def format_interval(days: float) -> str:
        """Short label for a preview button: 'now', '<1m', '10m', '3h', '5d'."""
        if days < 0:
            return 'now'
        minutes = days * MINUTES_PER_DAY
        if minutes < 1:
            return '<1m'
        if minutes < 60:
            return f"{math.floor(minutes + 0.5)}m"
        hours = minutes / 60
        if hours < 24:
            return f"{math.floor(hours + 0.5)}h"
        return f"{math.floor(days + 0.5)}d"


# Functional aliases for callers that hold a config rather than an engine

def calculate_review(card: MemoryCard, rating, config: Optional[SchedulerConfig] = None,
                     now: Optional[datetime.datetime] = None) -> MemoryCard:
    return FSRSEngine(config).calculate_review(card, rating, now)


def get_scheduling_preview(card: MemoryCard, config: Optional[SchedulerConfig] = None,
                           now: Optional[datetime.datetime] = None) -> Dict[Rating, SchedulingPreviewItem]:
    return FSRSEngine(config).get_scheduling_preview(card, now)


create_new_card = FSRSEngine.create_new_card
exam_result_to_rating = FSRSEngine.exam_result_to_rating
is_card_due = FSRSEngine.is_card_due
get_due_cards = FSRSEngine.get_due_cards
sort_cards_by_urgency = FSRSEngine.sort_cards_by_urgency
get_days_until_exam = FSRSEngine.get_days_until_exam
create_exam_prep_config = FSRSEngine.create_exam_prep_config
create_review_log = FSRSEngine.create_review_log
format_interval = FSRSEngine.format_interval
