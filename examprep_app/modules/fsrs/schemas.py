# File: examprep_app/modules/fsrs/schemas.py
import datetime
from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import Optional, Dict, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from examprep_app.modules.shared.utils.time_utils import parse_datetime, to_iso
from .config import FSRSDefaultConfig


# Standard FSRS Rating (1-4), ordered by recall confidence
class Rating(IntEnum):
    Again = 1
    Hard = 2
    Good = 3
    Easy = 4


class CardState(IntEnum):
    New = 0
    Learning = 1
    Review = 2
    Relearning = 3


class ReviewSource:
    STUDY = 'study'
    EXAM = 'exam'

    ALL = (STUDY, EXAM)


def make_card_id(profile_id: str, question_id: str) -> str:
    """Card ids are derived, never generated: one card per (profile, question)."""
    return f"{profile_id}_{question_id}"


@dataclass(frozen=True)
class MemoryCard:
    """Spaced-repetition state of one learner/question pair."""
    profile_id: str
    question_id: str
    due: datetime.datetime
    state: CardState = CardState.New
    stability: float = 0.0      # days until recall drops to the target retention
    difficulty: float = 0.0     # 1-10 once reviewed
    elapsed_days: int = 0
    scheduled_days: int = 0
    reps: int = 0
    lapses: int = 0
    last_review: Optional[datetime.datetime] = None

    @property
    def id(self) -> str:
        return make_card_id(self.profile_id, self.question_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'profileId': self.profile_id,
            'questionId': self.question_id,
            'state': int(self.state),
            'due': to_iso(self.due),
            'stability': self.stability,
            'difficulty': self.difficulty,
            'elapsedDays': self.elapsed_days,
            'scheduledDays': self.scheduled_days,
            'reps': self.reps,
            'lapses': self.lapses,
            'lastReview': to_iso(self.last_review),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MemoryCard':
        return cls(
            profile_id=str(data['profileId']),
            question_id=str(data['questionId']),
            due=parse_datetime(data['due']),
            state=CardState(int(data.get('state', CardState.New))),
            stability=float(data.get('stability', 0.0)),
            difficulty=float(data.get('difficulty', 0.0)),
            elapsed_days=int(data.get('elapsedDays', 0)),
            scheduled_days=int(data.get('scheduledDays', 0)),
            reps=int(data.get('reps', 0)),
            lapses=int(data.get('lapses', 0)),
            last_review=parse_datetime(data.get('lastReview')),
        )


@dataclass(frozen=True)
class ReviewLog:
    """Append-only record of one rating event. Audit/export only."""
    id: str
    profile_id: str
    question_id: str
    rating: Rating
    reviewed_at: datetime.datetime
    source: str = ReviewSource.STUDY

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'profileId': self.profile_id,
            'questionId': self.question_id,
            'rating': int(self.rating),
            'reviewedAt': to_iso(self.reviewed_at),
            'source': self.source,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ReviewLog':
        return cls(
            id=str(data['id']),
            profile_id=str(data['profileId']),
            question_id=str(data['questionId']),
            rating=Rating(int(data['rating'])),
            reviewed_at=parse_datetime(data['reviewedAt']),
            source=data.get('source', ReviewSource.STUDY),
        )


@dataclass(frozen=True)
class SchedulerConfig:
    request_retention: float = FSRSDefaultConfig.FSRS_DESIRED_RETENTION
    maximum_interval: int = FSRSDefaultConfig.FSRS_MAX_INTERVAL
    enable_fuzz: bool = FSRSDefaultConfig.FSRS_ENABLE_FUZZ
    enable_short_term: bool = FSRSDefaultConfig.FSRS_ENABLE_SHORT_TERM
    # Hard ceiling for every due date; None when no exam is booked
    exam_date: Optional[datetime.datetime] = None

    @property
    def has_exam_date(self) -> bool:
        return self.exam_date is not None

    def with_updates(self, **changes) -> 'SchedulerConfig':
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'requestRetention': self.request_retention,
            'maximumInterval': self.maximum_interval,
            'enableFuzz': self.enable_fuzz,
            'enableShortTerm': self.enable_short_term,
            'examDate': to_iso(self.exam_date),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SchedulerConfig':
        return SchedulerConfigSchema.model_validate(data).to_config()


@dataclass(frozen=True)
class SchedulingPreviewItem:
    due: datetime.datetime
    scheduled_days: int
    # real-valued distance to due; only used for the button label
    interval_days: float

    def to_dict(self) -> Dict[str, Any]:
        return {'due': to_iso(self.due), 'interval': self.scheduled_days}


@dataclass
class FSRSStats:
    total_cards: int = 0
    new_cards: int = 0
    learning_cards: int = 0
    review_cards: int = 0
    relearning_cards: int = 0
    due_now: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            'totalCards': self.total_cards,
            'newCards': self.new_cards,
            'learningCards': self.learning_cards,
            'reviewCards': self.review_cards,
            'relearningCards': self.relearning_cards,
            'dueNow': self.due_now,
        }


@dataclass
class ProfileBackup:
    """Everything the memory model stores for one profile."""
    cards: list = field(default_factory=list)
    review_logs: list = field(default_factory=list)
    config: SchedulerConfig = field(default_factory=SchedulerConfig)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'cards': [c.to_dict() for c in self.cards],
            'reviewLogs': [log.to_dict() for log in self.review_logs],
            'config': self.config.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProfileBackup':
        """Raises KeyError/ValueError/TypeError on a malformed backup."""
        return cls(
            cards=[MemoryCard.from_dict(c) for c in data.get('cards') or []],
            review_logs=[ReviewLog.from_dict(log) for log in data.get('reviewLogs') or []],
            config=SchedulerConfig.from_dict(data.get('config') or {}),
        )


# --- Request payloads ---

class SchedulerConfigSchema(BaseModel):
    model_config = ConfigDict(extra='ignore', populate_by_name=True)

    request_retention: float = Field(
        default=FSRSDefaultConfig.FSRS_DESIRED_RETENTION, alias='requestRetention', gt=0, lt=1
    )
    maximum_interval: int = Field(default=FSRSDefaultConfig.FSRS_MAX_INTERVAL, alias='maximumInterval', ge=1)
    enable_fuzz: bool = Field(default=FSRSDefaultConfig.FSRS_ENABLE_FUZZ, alias='enableFuzz')
    enable_short_term: bool = Field(default=FSRSDefaultConfig.FSRS_ENABLE_SHORT_TERM, alias='enableShortTerm')
    exam_date: Optional[datetime.datetime] = Field(default=None, alias='examDate')

    @field_validator('exam_date', mode='before')
    @classmethod
    def _parse_exam_date(cls, value):
        if value in (None, ''):
            return None
        return parse_datetime(value)

    def to_config(self) -> SchedulerConfig:
        return SchedulerConfig(
            request_retention=self.request_retention,
            maximum_interval=self.maximum_interval,
            enable_fuzz=self.enable_fuzz,
            enable_short_term=self.enable_short_term,
            exam_date=parse_datetime(self.exam_date),
        )


class ReviewPayload(BaseModel):
    model_config = ConfigDict(extra='ignore', populate_by_name=True)

    question_id: str = Field(alias='questionId', min_length=1)
    rating: Rating


class ExamOutcomePayload(BaseModel):
    model_config = ConfigDict(extra='ignore', populate_by_name=True)

    question_id: str = Field(alias='questionId', min_length=1)
    is_correct: bool = Field(alias='isCorrect')


class MigratePayload(BaseModel):
    model_config = ConfigDict(extra='ignore', populate_by_name=True)

    viewed_question_ids: list = Field(default_factory=list, alias='viewedQuestionIds')


class ExamPrepPayload(BaseModel):
    model_config = ConfigDict(extra='ignore', populate_by_name=True)

    exam_date: datetime.datetime = Field(alias='examDate')

    @field_validator('exam_date', mode='before')
    @classmethod
    def _parse_exam_date(cls, value):
        return parse_datetime(value)
