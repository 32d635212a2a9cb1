"""Pydantic request/response schemas used by the flows and the API.

Field names are snake_case in Python and camelCase on the wire, matching
the exam REST API (`correctAnswer`, `totalMarks`, `startDate`, ...).
Dump with `by_alias=True` when building outbound JSON.
"""

from datetime import datetime
from enum import Enum
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .config import settings
from .utils.testcase_codec import TestCase, decode_all


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "MULTIPLE_CHOICE"
    SINGLE_CHOICE = "SINGLE_CHOICE"
    TRUE_FALSE = "TRUE_FALSE"
    SHORT_ANSWER = "SHORT_ANSWER"
    LONG_ANSWER = "LONG_ANSWER"
    CODING = "CODING"


class ExamType(str, Enum):
    QUIZ = "QUIZ"
    ASSIGNMENT = "ASSIGNMENT"
    CODING = "CODING"
    EXAM = "EXAM"


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Question(WireModel):
    """Editor-local question record.

    `options` holds candidate answers for choice questions and encoded
    test cases for CODING questions. `marks` is not range-checked here;
    the editor may hold unfinished values until validation.
    """
    type: QuestionType = QuestionType.MULTIPLE_CHOICE
    question: str = ""
    options: List[str] = Field(default_factory=list)
    correct_answer: Optional[str] = Field(default=None, alias="correctAnswer")
    marks: int = 1

    @property
    def test_cases(self) -> List[TestCase]:
        """Decoded test cases; empty for non-CODING questions."""
        if self.type != QuestionType.CODING:
            return []
        return decode_all(self.options)


class QuestionFormData(WireModel):
    """One single-choice entry of the quiz-creation form."""
    question: str = Field(min_length=1)
    option_a: str = Field(min_length=1, alias="optionA")
    option_b: str = Field(min_length=1, alias="optionB")
    option_c: Optional[str] = Field(default=None, alias="optionC")
    option_d: Optional[str] = Field(default=None, alias="optionD")
    correct_answer: Literal["A", "B", "C", "D"] = Field(alias="correctAnswer")
    marks: int = Field(ge=1)

    def option_for(self, letter: str) -> Optional[str]:
        return {
            "A": self.option_a,
            "B": self.option_b,
            "C": self.option_c,
            "D": self.option_d,
        }.get(letter)

    def filled_options(self) -> List[str]:
        """Non-empty option slots in A-D order."""
        return [o for o in (self.option_a, self.option_b, self.option_c, self.option_d) if o]


def parse_form_date(value: str) -> datetime:
    """Parse a form date string; raises ValueError when malformed."""
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Invalid date format")
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        raise ValueError("Invalid date format")


def as_exam_time(dt: datetime) -> datetime:
    """Attach the configured exam time zone to naive values."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=settings.tzinfo)
    return dt


class ExamFormData(WireModel):
    """Exam-level metadata collected by the quiz-creation form.

    `questions` mirrors the form's own array field and stays empty; the
    authoritative list lives in `QuizExamService`.
    """
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    type: ExamType = ExamType.QUIZ
    duration: int = Field(ge=1)
    total_marks: int = Field(ge=1, alias="totalMarks")
    start_date: str = Field(alias="startDate")
    end_date: str = Field(alias="endDate")
    questions: List[Any] = Field(default_factory=list)

    @field_validator("start_date", "end_date")
    @classmethod
    def _check_date(cls, v: str) -> str:
        parse_form_date(v)
        return v

    @model_validator(mode="after")
    def _check_date_order(self):
        # same instants as the submitted ISO strings
        start = as_exam_time(parse_form_date(self.start_date))
        end = as_exam_time(parse_form_date(self.end_date))
        if end <= start:
            raise ValueError("End date must be after start date")
        return self


class ExamQuestionPayload(WireModel):
    type: QuestionType = QuestionType.MULTIPLE_CHOICE
    question: str
    options: List[str]
    correct_answer: str = Field(alias="correctAnswer")
    marks: int


class ExamPayload(WireModel):
    """Request body for `POST /api/exam`."""
    title: str
    description: str
    type: ExamType = ExamType.QUIZ
    duration: int
    total_marks: int = Field(alias="totalMarks")
    start_date: str = Field(alias="startDate")
    end_date: str = Field(alias="endDate")
    questions: List[ExamQuestionPayload]


class JoinExamRequest(WireModel):
    exam_code: str = Field(alias="examCode")


class FieldUpdate(BaseModel):
    """Body for a single editor field change."""
    field: Literal["type", "question", "options", "correct_answer", "correctAnswer", "marks"]
    value: Any = None


class TestCaseIn(BaseModel):
    input: str = ""
    output: str = ""


class OptionIn(BaseModel):
    value: str = ""
