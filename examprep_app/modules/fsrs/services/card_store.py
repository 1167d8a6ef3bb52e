# File: examprep_app/modules/fsrs/services/card_store.py
"""Record store for memory cards, review logs and scheduler settings.

Single-record writes commit immediately unless ``commit=False`` is passed so
callers can compose several writes into one transaction. Multi-record
operations (import, clear) always run as one transaction.
"""

from __future__ import annotations

import datetime
import logging
import uuid
from dataclasses import replace
from typing import Iterable, List, Optional

from examprep_app.core.extensions import db
from examprep_app.modules.shared.utils.db_session import safe_commit
from examprep_app.modules.shared.utils.time_utils import ensure_utc, utcnow
from ..engine.core import FSRSEngine
from ..models import MemoryCardRecord, ReviewLogRecord, SchedulerConfigRecord
from ..schemas import (
    CardState,
    MemoryCard,
    ProfileBackup,
    Rating,
    ReviewLog,
    SchedulerConfig,
    make_card_id,
)
from ..signals import profile_data_cleared, profile_data_imported

logger = logging.getLogger(__name__)


class CardStore:
    """Get-by-id, upsert and per-profile queries over the FSRS tables."""

    # --- Mapping ---

    @staticmethod
    def _to_card(record: MemoryCardRecord) -> MemoryCard:
        return MemoryCard(
            profile_id=record.profile_id,
            question_id=record.question_id,
            due=ensure_utc(record.due),
            state=CardState(record.state or 0),
            stability=record.stability or 0.0,
            difficulty=record.difficulty or 0.0,
            elapsed_days=record.elapsed_days or 0,
            scheduled_days=record.scheduled_days or 0,
            reps=record.reps or 0,
            lapses=record.lapses or 0,
            last_review=ensure_utc(record.last_review),
        )

    @staticmethod
    def _to_log(record: ReviewLogRecord) -> ReviewLog:
        return ReviewLog(
            id=record.id,
            profile_id=record.profile_id,
            question_id=record.question_id,
            rating=Rating(record.rating),
            reviewed_at=ensure_utc(record.reviewed_at),
            source=record.source,
        )

    @staticmethod
    def _put_card_record(card: MemoryCard) -> None:
        record = db.session.get(MemoryCardRecord, card.id)
        if record is None:
            record = MemoryCardRecord(id=card.id, profile_id=card.profile_id, question_id=card.question_id)
            db.session.add(record)
        record.state = int(card.state)
        record.stability = card.stability
        record.difficulty = card.difficulty
        record.due = card.due
        record.last_review = card.last_review
        record.elapsed_days = card.elapsed_days
        record.scheduled_days = card.scheduled_days
        record.reps = card.reps
        record.lapses = card.lapses

    @staticmethod
    def _put_config_record(profile_id: str, config: SchedulerConfig) -> None:
        record = db.session.get(SchedulerConfigRecord, profile_id)
        if record is None:
            record = SchedulerConfigRecord(profile_id=profile_id, data=config.to_dict())
            db.session.add(record)
        else:
            record.data = config.to_dict()

    # --- Cards ---

    @staticmethod
    def get_card(profile_id: str, question_id: str) -> Optional[MemoryCard]:
        record = db.session.get(MemoryCardRecord, make_card_id(profile_id, question_id))
        return CardStore._to_card(record) if record else None

    @staticmethod
    def get_or_create_card(profile_id: str, question_id: str,
                           now: Optional[datetime.datetime] = None, commit: bool = True) -> MemoryCard:
        card = CardStore.get_card(profile_id, question_id)
        if card is not None:
            return card
        card = FSRSEngine.create_new_card(profile_id, question_id, now)
        CardStore._put_card_record(card)
        if commit:
            safe_commit(db.session)
        else:
            db.session.flush()
        return card

    @staticmethod
    def update_card(card: MemoryCard, commit: bool = True) -> None:
        CardStore._put_card_record(card)
        if commit:
            safe_commit(db.session)

    @staticmethod
    def get_cards_for_profile(profile_id: str) -> List[MemoryCard]:
        records = MemoryCardRecord.query.filter_by(profile_id=profile_id).all()
        return [CardStore._to_card(r) for r in records]

    @staticmethod
    def get_due_cards_for_profile(profile_id: str, now: Optional[datetime.datetime] = None) -> List[MemoryCard]:
        return FSRSEngine.get_due_cards(CardStore.get_cards_for_profile(profile_id), now)

    # --- Review logs ---

    @staticmethod
    def add_review_log(log: ReviewLog, commit: bool = True) -> None:
        db.session.add(ReviewLogRecord(
            id=log.id,
            profile_id=log.profile_id,
            question_id=log.question_id,
            rating=int(log.rating),
            reviewed_at=log.reviewed_at,
            source=log.source,
        ))
        if commit:
            safe_commit(db.session)

    @staticmethod
    def get_review_logs(profile_id: str) -> List[ReviewLog]:
        records = (ReviewLogRecord.query
                   .filter_by(profile_id=profile_id)
                   .order_by(ReviewLogRecord.reviewed_at.asc())
                   .all())
        return [CardStore._to_log(r) for r in records]

    # --- Scheduler config ---

    @staticmethod
    def get_config(profile_id: str) -> SchedulerConfig:
        """Stored settings, or the defaults when absent or unreadable."""
        record = db.session.get(SchedulerConfigRecord, profile_id)
        if record is None:
            return SchedulerConfig()
        try:
            return SchedulerConfig.from_dict(record.data or {})
        except ValueError as e:
            logger.warning("Ignoring unreadable scheduler config for %s: %s", profile_id, e)
            return SchedulerConfig()

    @staticmethod
    def save_config(profile_id: str, config: SchedulerConfig, commit: bool = True) -> None:
        CardStore._put_config_record(profile_id, config)
        if commit:
            safe_commit(db.session)

    # --- Bulk operations ---

    @staticmethod
    def migrate_viewed_questions(profile_id: str, question_ids: Iterable[str],
                                 now: Optional[datetime.datetime] = None,
                                 engine: Optional[FSRSEngine] = None) -> int:
        """Create a card for every viewed question that has none yet. Returns the number created."""
        engine = engine or FSRSEngine()
        now = ensure_utc(now) if now else utcnow()
        migrated = 0
        seen = set()
        for question_id in question_ids:
            if question_id in seen or CardStore.get_card(profile_id, question_id) is not None:
                continue
            seen.add(question_id)
            CardStore._put_card_record(engine.create_migrated_card(profile_id, question_id, now))
            migrated += 1
        if migrated:
            safe_commit(db.session)
        logger.info("Migrated %d viewed questions into cards for profile %s", migrated, profile_id)
        return migrated

    @staticmethod
    def export_profile_data(profile_id: str) -> ProfileBackup:
        return ProfileBackup(
            cards=CardStore.get_cards_for_profile(profile_id),
            review_logs=CardStore.get_review_logs(profile_id),
            config=CardStore.get_config(profile_id),
        )

    @staticmethod
    def import_profile_data(profile_id: str, backup: ProfileBackup) -> None:
        """Write a backup into ``profile_id``: cards, logs and config commit together or not at all."""
        try:
            for card in backup.cards:
                # re-key to the target profile
                CardStore._put_card_record(replace(card, profile_id=profile_id))
                db.session.flush()

            for log in backup.review_logs:
                existing = db.session.get(ReviewLogRecord, log.id)
                if existing is not None and existing.profile_id == profile_id:
                    continue
                # the same log may live on under the source profile
                log_id = log.id if existing is None else uuid.uuid4().hex
                CardStore.add_review_log(replace(log, id=log_id, profile_id=profile_id), commit=False)
                db.session.flush()

            CardStore._put_config_record(profile_id, backup.config)
            safe_commit(db.session)
        except Exception:
            db.session.rollback()
            logger.exception("Import into profile %s failed, nothing was written", profile_id)
            raise

        logger.info(
            "Imported %d cards and %d review logs into profile %s",
            len(backup.cards), len(backup.review_logs), profile_id
        )
        profile_data_imported.send(
            CardStore, profile_id=profile_id,
            cards=len(backup.cards), review_logs=len(backup.review_logs)
        )

    @staticmethod
    def clear_profile_data(profile_id: str) -> None:
        """Delete every card, log and config of ``profile_id`` in one transaction."""
        try:
            MemoryCardRecord.query.filter_by(profile_id=profile_id).delete()
            ReviewLogRecord.query.filter_by(profile_id=profile_id).delete()
            SchedulerConfigRecord.query.filter_by(profile_id=profile_id).delete()
            safe_commit(db.session)
        except Exception:
            db.session.rollback()
            raise
        logger.info("Cleared FSRS data for profile %s", profile_id)
        profile_data_cleared.send(CardStore, profile_id=profile_id)
