# File: examprep_app/modules/study/schemas.py
import datetime
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field

from examprep_app.modules.catalog.schemas import Question

# section_number 0 means "every section"
ALL_SECTIONS = 0


@dataclass
class StudySession:
    id: str
    user_id: str
    section_number: int
    questions: List[Question] = field(default_factory=list)
    viewed_questions: Set[str] = field(default_factory=set)
    current_section_number: int = 1
    started_at: Optional[datetime.datetime] = None
    last_active_at: Optional[datetime.datetime] = None


@dataclass
class StudyProgress:
    section_number: int
    section_title: str
    total_questions: int
    viewed_questions: int
    percentage: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sectionNumber': self.section_number,
            'sectionTitle': self.section_title,
            'totalQuestions': self.total_questions,
            'viewedQuestions': self.viewed_questions,
            'percentage': self.percentage,
        }


@dataclass
class StudyTotals:
    viewed: int
    total: int
    percentage: int

    def to_dict(self) -> Dict[str, int]:
        return {'viewed': self.viewed, 'total': self.total, 'percentage': self.percentage}


class ViewedPayload(BaseModel):
    model_config = ConfigDict(extra='ignore', populate_by_name=True)

    question_id: str = Field(alias='questionId', min_length=1)
