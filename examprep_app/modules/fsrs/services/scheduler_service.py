from typing import Any, Dict, List, Optional, Tuple
import datetime
import logging

from pydantic import ValidationError as PydanticValidationError

from examprep_app.core.error_handlers import format_validation_errors
from examprep_app.core.extensions import db
from examprep_app.modules.shared.utils.db_session import safe_commit
from examprep_app.modules.shared.utils.time_utils import ensure_utc, utcnow
from ..engine.core import FSRSEngine
from ..exceptions import InvalidConfigError
from ..schemas import (
    FSRSStats,
    MemoryCard,
    Rating,
    ReviewSource,
    SchedulerConfig,
    SchedulerConfigSchema,
    SchedulingPreviewItem,
)
from ..signals import card_reviewed
from .card_store import CardStore

logger = logging.getLogger(__name__)


class SchedulerService:
    """
    Orchestrator for FSRS scheduling.
    Handles DB interactions, Engine calls, and Signal emission.
    """

    @staticmethod
    def get_engine(profile_id: str) -> FSRSEngine:
        return FSRSEngine(CardStore.get_config(profile_id))

    @staticmethod
    def _apply_review(
        engine: FSRSEngine,
        profile_id: str,
        question_id: str,
        rating,
        source: str,
        now: datetime.datetime
    ) -> MemoryCard:
        """Calculate and stage one review; the caller commits."""
        rating = engine.validate_rating(rating)
        card = CardStore.get_or_create_card(profile_id, question_id, now, commit=False)
        next_card = engine.calculate_review(card, rating, now)
        CardStore.update_card(next_card, commit=False)
        CardStore.add_review_log(
            engine.create_review_log(profile_id, question_id, rating, source, now),
            commit=False
        )
        return next_card

    @staticmethod
    def _emit_reviewed(card: MemoryCard, rating: Rating, source: str) -> None:
        card_reviewed.send(
            SchedulerService,
            profile_id=card.profile_id,
            question_id=card.question_id,
            rating=int(rating),
            source=source,
            card=card,
        )

    @staticmethod
    def review_card(
        profile_id: str,
        question_id: str,
        rating,
        now: Optional[datetime.datetime] = None,
        source: str = ReviewSource.STUDY
    ) -> MemoryCard:
        """
        Main entry point for a study review: get-or-create the card, schedule it,
        persist card + log in one commit, then emit ``card_reviewed``.
        """
        now = ensure_utc(now) if now else utcnow()
        engine = SchedulerService.get_engine(profile_id)
        try:
            next_card = SchedulerService._apply_review(engine, profile_id, question_id, rating, source, now)
            safe_commit(db.session)
        except Exception:
            db.session.rollback()
            raise

        logger.info(
            "Reviewed %s for %s: rating=%s state=%s due=%s",
            question_id, profile_id, int(rating), next_card.state.name, next_card.due.isoformat()
        )
        SchedulerService._emit_reviewed(next_card, Rating(int(rating)), source)
        return next_card

    @staticmethod
    def review_from_exam(
        profile_id: str,
        question_id: str,
        is_correct: bool,
        now: Optional[datetime.datetime] = None
    ) -> MemoryCard:
        """Binary exam outcome as a review: correct -> Good, wrong -> Again."""
        rating = FSRSEngine.exam_result_to_rating(is_correct)
        return SchedulerService.review_card(profile_id, question_id, rating, now, source=ReviewSource.EXAM)

    @staticmethod
    def stage_exam_result(
        profile_id: str,
        session,
        now: Optional[datetime.datetime] = None
    ) -> List[Tuple[MemoryCard, Rating]]:
        """
        Stage a review for every answered question of a finished exam session.
        Skipped questions carry no recall signal and are left alone.
        Nothing is committed; once the caller commits it passes the result to ``announce_reviews``.
        """
        now = ensure_utc(now) if now else utcnow()
        engine = SchedulerService.get_engine(profile_id)
        staged = []
        for question in session.questions:
            answer = session.answers.get(question.id)
            if answer is None or answer.selected_answer is None:
                continue
            rating = engine.exam_result_to_rating(answer.is_correct)
            card = SchedulerService._apply_review(
                engine, profile_id, question.id, rating, ReviewSource.EXAM, now
            )
            staged.append((card, rating))
        return staged

    @staticmethod
    def announce_reviews(reviewed: List[Tuple[MemoryCard, Rating]], source: str = ReviewSource.EXAM) -> None:
        for card, rating in reviewed:
            SchedulerService._emit_reviewed(card, rating, source)

    @staticmethod
    def review_exam_result(profile_id: str, session, now: Optional[datetime.datetime] = None) -> List[MemoryCard]:
        """Feed a finished exam session into the memory model in one commit."""
        try:
            reviewed = SchedulerService.stage_exam_result(profile_id, session, now)
            safe_commit(db.session)
        except Exception:
            db.session.rollback()
            raise

        logger.info("Exam session %s fed %d reviews into profile %s", session.id, len(reviewed), profile_id)
        SchedulerService.announce_reviews(reviewed)
        return [card for card, _ in reviewed]

    # --- Queues ---

    @staticmethod
    def get_due_queue(profile_id: str, now: Optional[datetime.datetime] = None) -> List[MemoryCard]:
        """Due cards, most overdue first."""
        now = ensure_utc(now) if now else utcnow()
        due = CardStore.get_due_cards_for_profile(profile_id, now)
        return FSRSEngine.sort_cards_by_urgency(due, now)

    @staticmethod
    def get_next_due_card(profile_id: str, now: Optional[datetime.datetime] = None) -> Optional[MemoryCard]:
        queue = SchedulerService.get_due_queue(profile_id, now)
        return queue[0] if queue else None

    @staticmethod
    def get_schedule_preview(
        profile_id: str,
        question_id: str,
        now: Optional[datetime.datetime] = None
    ) -> Dict[Rating, SchedulingPreviewItem]:
        """Preview for all four ratings. Unknown questions preview as new cards without creating them."""
        now = ensure_utc(now) if now else utcnow()
        card = CardStore.get_card(profile_id, question_id) or FSRSEngine.create_new_card(profile_id, question_id, now)
        return SchedulerService.get_engine(profile_id).get_scheduling_preview(card, now)

    @staticmethod
    def get_stats(profile_id: str, now: Optional[datetime.datetime] = None) -> FSRSStats:
        from examprep_app.modules.stats.logics.card_stats import calculate_card_stats
        return calculate_card_stats(CardStore.get_cards_for_profile(profile_id), now)

    # --- Settings ---

    @staticmethod
    def get_config(profile_id: str) -> SchedulerConfig:
        return CardStore.get_config(profile_id)

    @staticmethod
    def update_config(profile_id: str, changes: Dict[str, Any]) -> SchedulerConfig:
        """Merge camelCase ``changes`` into the stored settings, validate, save."""
        merged = {**CardStore.get_config(profile_id).to_dict(), **(changes or {})}
        try:
            config = SchedulerConfigSchema.model_validate(merged).to_config()
        except PydanticValidationError as e:
            raise InvalidConfigError('Invalid scheduler settings', errors=format_validation_errors(e)) from e
        CardStore.save_config(profile_id, config)
        logger.info("Scheduler settings for %s updated: %s", profile_id, config.to_dict())
        return config

    @staticmethod
    def set_exam_date(
        profile_id: str,
        exam_date: datetime.datetime,
        now: Optional[datetime.datetime] = None
    ) -> SchedulerConfig:
        """Switch the profile to exam-prep settings for ``exam_date``."""
        config = FSRSEngine.create_exam_prep_config(exam_date, now)
        CardStore.save_config(profile_id, config)
        logger.info(
            "Exam date for %s set to %s (max interval %d days)",
            profile_id, exam_date.isoformat(), config.maximum_interval
        )
        return config

