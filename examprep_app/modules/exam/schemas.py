# File: examprep_app/modules/exam/schemas.py
import datetime
from dataclasses import dataclass, field
from typing import Optional, Dict, List, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from examprep_app.modules.catalog.schemas import Question
from examprep_app.modules.shared.utils.time_utils import parse_datetime, to_iso


@dataclass
class ExamConfig:
    """How many questions to draw from each section, and whether to shuffle."""
    questions_per_section: Dict[int, int] = field(default_factory=dict)
    shuffle_questions: bool = True

    def wanted(self, section_number: int) -> int:
        return max(0, int(self.questions_per_section.get(section_number, 0) or 0))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'questionsPerSection': {str(k): v for k, v in self.questions_per_section.items()},
            'shuffleQuestions': self.shuffle_questions,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ExamConfig':
        return cls(
            questions_per_section={int(k): int(v) for k, v in (data.get('questionsPerSection') or {}).items()},
            shuffle_questions=bool(data.get('shuffleQuestions', True)),
        )


@dataclass
class UserAnswer:
    question_id: str
    selected_answer: Optional[str]
    is_correct: bool
    answered_at: datetime.datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            'questionId': self.question_id,
            'selectedAnswer': self.selected_answer,
            'isCorrect': self.is_correct,
            'answeredAt': to_iso(self.answered_at),
        }


@dataclass
class ExamSession:
    """One exam attempt. Lives in memory until it is scored and written to history."""
    id: str
    user_id: str
    config: ExamConfig
    questions: List[Question] = field(default_factory=list)
    # question id -> answer; at most one answer per question
    answers: Dict[str, UserAnswer] = field(default_factory=dict)
    started_at: Optional[datetime.datetime] = None
    completed_at: Optional[datetime.datetime] = None

    def find_question(self, question_id: str) -> Optional[Question]:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None


@dataclass
class SectionResult:
    section_number: int
    section_title: str
    total_questions: int
    correct_answers: int
    score: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sectionNumber': self.section_number,
            'sectionTitle': self.section_title,
            'totalQuestions': self.total_questions,
            'correctAnswers': self.correct_answers,
            'score': self.score,
        }


@dataclass
class ExamResult:
    session_id: str
    user_id: str
    total_questions: int
    correct_answers: int
    wrong_answers: int
    unanswered: int
    score: int
    passed: bool
    completed_at: datetime.datetime
    section_results: List[SectionResult] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sessionId': self.session_id,
            'userId': self.user_id,
            'totalQuestions': self.total_questions,
            'correctAnswers': self.correct_answers,
            'wrongAnswers': self.wrong_answers,
            'unanswered': self.unanswered,
            'score': self.score,
            'passed': self.passed,
            'completedAt': to_iso(self.completed_at),
            'sectionResults': [r.to_dict() for r in self.section_results],
        }


@dataclass
class ExamProgress:
    answered: int
    total: int
    percentage: int


@dataclass
class ExamHistoryEntry:
    """Persisted summary of one finished exam."""
    session_id: str
    user_id: str
    score: int
    passed: bool
    total_questions: int
    correct_answers: int
    completed_at: datetime.datetime
    config: ExamConfig

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sessionId': self.session_id,
            'userId': self.user_id,
            'score': self.score,
            'passed': self.passed,
            'totalQuestions': self.total_questions,
            'correctAnswers': self.correct_answers,
            'completedAt': to_iso(self.completed_at),
            'config': self.config.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ExamHistoryEntry':
        return cls(
            session_id=str(data['sessionId']),
            user_id=str(data['userId']),
            score=int(data['score']),
            passed=bool(data['passed']),
            total_questions=int(data['totalQuestions']),
            correct_answers=int(data['correctAnswers']),
            completed_at=parse_datetime(data['completedAt']),
            config=ExamConfig.from_dict(data.get('config') or {}),
        )

    @classmethod
    def from_result(cls, result: ExamResult, config: ExamConfig) -> 'ExamHistoryEntry':
        return cls(
            session_id=result.session_id,
            user_id=result.user_id,
            score=result.score,
            passed=result.passed,
            total_questions=result.total_questions,
            correct_answers=result.correct_answers,
            completed_at=result.completed_at,
            config=config,
        )


# --- Request payloads ---

class ExamConfigSchema(BaseModel):
    model_config = ConfigDict(extra='ignore', populate_by_name=True)

    questions_per_section: Dict[int, int] = Field(default_factory=dict, alias='questionsPerSection')
    shuffle_questions: bool = Field(default=True, alias='shuffleQuestions')

    @field_validator('questions_per_section')
    @classmethod
    def _non_negative_counts(cls, value):
        for section_number, count in value.items():
            if count < 0:
                raise ValueError(f'section {section_number}: question count must be >= 0')
        return value

    def to_config(self) -> ExamConfig:
        return ExamConfig(
            questions_per_section=dict(self.questions_per_section),
            shuffle_questions=self.shuffle_questions,
        )


class AnswerPayload(BaseModel):
    model_config = ConfigDict(extra='ignore', populate_by_name=True)

    question_id: str = Field(alias='questionId', min_length=1)
    selected_answer: Optional[str] = Field(default=None, alias='selectedAnswer')


class CompletePayload(BaseModel):
    model_config = ConfigDict(extra='ignore', populate_by_name=True)

    update_memory: bool = Field(default=True, alias='updateMemory')
