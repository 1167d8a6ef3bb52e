# File: examprep_app/modules/catalog/schemas.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Option letters used by the licensing exam (Bulgarian alphabet)
ANSWER_LETTERS = ('А', 'Б', 'В', 'Г')
OPTIONS_PER_QUESTION = 4


@dataclass(frozen=True)
class AnswerOption:
    letter: str
    text: str


@dataclass(frozen=True)
class Question:
    """One multiple-choice question. Immutable once loaded."""
    id: str
    number: int
    question: str
    options: tuple
    correct_answer: str

    def option_text(self, letter: str) -> Optional[str]:
        for option in self.options:
            if option.letter == letter:
                return option.text
        return None


@dataclass(frozen=True)
class Section:
    """A syllabus topic; sections partition the catalog."""
    section_number: int
    title: str
    questions: tuple = ()
    title_en: str = ''
    exam_class: str = ''
    last_updated: str = ''
    source_file: str = ''

    @property
    def question_ids(self) -> frozenset:
        return frozenset(q.id for q in self.questions)


@dataclass(frozen=True)
class ExamCatalog:
    """Versioned, immutable set of sections supplied by the extraction pipeline."""
    version: str = ''
    extracted_at: str = ''
    sections: tuple = ()

    @property
    def all_questions(self) -> List[Question]:
        return [q for section in self.sections for q in section.questions]

    def get_section(self, section_number: int) -> Optional[Section]:
        for section in self.sections:
            if section.section_number == section_number:
                return section
        return None

    def question_index(self) -> Dict[str, Question]:
        return {q.id: q for q in self.all_questions}


# --- Input validation (JSON catalog files, API payloads) ---

class AnswerOptionSchema(BaseModel):
    model_config = ConfigDict(extra='ignore')

    letter: str = Field(min_length=1)
    text: str


class QuestionSchema(BaseModel):
    model_config = ConfigDict(extra='ignore', populate_by_name=True)

    id: str = Field(min_length=1)
    number: int
    question: str
    options: List[AnswerOptionSchema]
    correct_answer: str = Field(alias='correctAnswer')

    @field_validator('options')
    @classmethod
    def _exactly_four_options(cls, value):
        if len(value) != OPTIONS_PER_QUESTION:
            raise ValueError(f'expected {OPTIONS_PER_QUESTION} options, got {len(value)}')
        letters = [opt.letter for opt in value]
        if len(set(letters)) != len(letters):
            raise ValueError('option letters must be unique')
        return value

    @model_validator(mode='after')
    def _correct_answer_is_an_option(self):
        if self.correct_answer not in {opt.letter for opt in self.options}:
            raise ValueError(f'correct answer {self.correct_answer!r} is not one of the options')
        return self

    def to_question(self) -> Question:
        return Question(
            id=self.id,
            number=self.number,
            question=self.question,
            options=tuple(AnswerOption(letter=o.letter, text=o.text) for o in self.options),
            correct_answer=self.correct_answer,
        )


class SectionMetadataSchema(BaseModel):
    model_config = ConfigDict(extra='ignore', populate_by_name=True)

    section_number: int = Field(alias='sectionNumber')
    title: str
    title_en: str = Field(default='', alias='titleEn')
    exam_class: str = Field(default='', alias='examClass')
    last_updated: str = Field(default='', alias='lastUpdated')
    source_file: str = Field(default='', alias='sourceFile')


class SectionSchema(BaseModel):
    model_config = ConfigDict(extra='ignore')

    metadata: SectionMetadataSchema
    questions: List[QuestionSchema] = Field(default_factory=list)


class CatalogSchema(BaseModel):
    model_config = ConfigDict(extra='ignore', populate_by_name=True)

    version: str = ''
    extracted_at: str = Field(default='', alias='extractedAt')
    sections: List[SectionSchema] = Field(default_factory=list)

    @model_validator(mode='after')
    def _sections_partition_questions(self):
        numbers = [s.metadata.section_number for s in self.sections]
        if len(set(numbers)) != len(numbers):
            raise ValueError('section numbers must be unique')
        seen = set()
        for section in self.sections:
            for question in section.questions:
                if question.id in seen:
                    raise ValueError(f'question {question.id!r} belongs to more than one section')
                seen.add(question.id)
        return self

    def to_catalog(self) -> ExamCatalog:
        return ExamCatalog(
            version=self.version,
            extracted_at=self.extracted_at,
            sections=tuple(
                Section(
                    section_number=s.metadata.section_number,
                    title=s.metadata.title,
                    questions=tuple(q.to_question() for q in s.questions),
                    title_en=s.metadata.title_en,
                    exam_class=s.metadata.exam_class,
                    last_updated=s.metadata.last_updated,
                    source_file=s.metadata.source_file,
                )
                for s in self.sections
            ),
        )
