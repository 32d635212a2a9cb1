"""Flow services used by the HTTP controllers and client code.

This module holds the two form-driven flows of the exam portal:
`QuizExamService` assembles and submits a quiz, `ExamEntryService` admits
a student to an exam session. Both validate before any network call,
report problems through a `Notifier` and leave their state editable on
failure; neither retries.
"""

import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Union

from pydantic import ValidationError

from .client import ExamApiClient, ExamApiError
from .config import settings
from .schemas import (
    ExamFormData,
    ExamPayload,
    ExamQuestionPayload,
    ExamType,
    QuestionFormData,
    QuestionType,
    as_exam_time,
    parse_form_date,
)
from .utils.browser import FullscreenController, Navigator, SessionStore
from .utils.notifications import Notifier

quiz_logger = logging.getLogger("exam_portal.quiz")
entry_logger = logging.getLogger("exam_portal.entry")

QUESTION_MESSAGES = {
    "question": "Question is required",
    "optionA": "Option A is required",
    "optionB": "Option B is required",
    "correctAnswer": "Correct answer is required",
    "marks": "Marks must be at least 1",
}
EXAM_MESSAGES = {
    "title": "Title is required",
    "description": "Description is required",
    "duration": "Duration must be at least 1 minute",
    "totalMarks": "Total marks must be at least 1",
    "startDate": "Invalid date format",
    "endDate": "Invalid date format",
}


class QuizValidationError(ValueError):
    """Client-side validation failure; `errors` holds `{field, error}` items."""
    def __init__(self, message: str, errors: Optional[List[dict]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []


def _field_errors(exc: ValidationError, messages: dict) -> List[dict]:
    out = []
    for err in exc.errors():
        loc = err.get("loc") or ()
        if loc:
            field = str(loc[0])
            msg = messages.get(field, err.get("msg", "invalid value"))
        else:
            # model-level rule: only the date-order check lives there
            field = "endDate"
            msg = str(err.get("msg", "")).removeprefix("Value error, ")
        out.append({"field": field, "error": msg})
    return out


def to_iso_utc(value: str) -> str:
    """Canonical ISO-8601 UTC form, e.g. `2025-03-01T09:00:00.000Z`.

    Naive values are read in the configured exam time zone.
    """
    dt = as_exam_time(parse_form_date(value))
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_date_for_input(dt: datetime) -> str:
    """Render `dt` the way a datetime-local input expects (minute precision)."""
    return dt.strftime("%Y-%m-%dT%H:%M")


def default_exam_form(now: Optional[datetime] = None) -> dict:
    """Initial values for a new quiz form, keyed by wire names."""
    now = now or datetime.now(settings.tzinfo)
    return {
        "title": "",
        "description": "",
        "type": ExamType.QUIZ.value,
        "duration": 60,
        "totalMarks": 100,
        "startDate": format_date_for_input(now),
        "endDate": format_date_for_input(now + timedelta(days=1)),
        "questions": [],
    }


class QuizExamService:
    """Quiz-creation form state: accumulated questions plus submission.

    Questions are committed one at a time with `add_question`; `submit`
    validates the exam fields, checks that question marks add up to the
    exam's total and posts one JSON document. On success the local list
    is cleared and `on_success` is called.
    """
    def __init__(self, client: Optional[ExamApiClient], notifier: Optional[Notifier] = None, on_success: Optional[Callable[[], None]] = None):
        self.client = client
        self.notifier = notifier or Notifier()
        self.on_success = on_success
        self._questions: List[QuestionFormData] = []
        self.is_submitting = False
        self.question_errors: List[dict] = []
        self.form_errors: List[dict] = []
        self.last_response: Optional[dict] = None
        self.last_failure: Optional[str] = None

    @property
    def questions(self) -> List[QuestionFormData]:
        return list(self._questions)

    def total_question_marks(self) -> int:
        return sum(q.marks for q in self._questions)

    def add_question(self, data: Union[dict, QuestionFormData]) -> bool:
        """Validate one question entry and append it to the quiz."""
        try:
            q = data if isinstance(data, QuestionFormData) else QuestionFormData.model_validate(data)
        except ValidationError as e:
            self.question_errors = _field_errors(e, QUESTION_MESSAGES)
            self.notifier.error(self.question_errors[0]["error"])
            return False
        if len(q.filled_options()) < 2:
            self.question_errors = [{"field": "options", "error": "Please provide at least 2 options"}]
            self.notifier.error("Please provide at least 2 options")
            return False
        self.question_errors = []
        self._questions = [*self._questions, q]
        self.notifier.success("Question added successfully")
        return True

    def remove_question(self, index: int):
        if index < 0 or index >= len(self._questions):
            raise ValueError(f"question index out of range: {index}")
        self._questions = [q for i, q in enumerate(self._questions) if i != index]
        self.notifier.success("Question removed")

    def build_payload(self, form: Union[dict, ExamFormData]) -> ExamPayload:
        """Validate the exam form and assemble the `POST /api/exam` body.

        Raises `QuizValidationError` without touching any state.
        """
        try:
            exam = form if isinstance(form, ExamFormData) else ExamFormData.model_validate(form)
        except ValidationError as e:
            errors = _field_errors(e, EXAM_MESSAGES)
            raise QuizValidationError(errors[0]["error"], errors)
        if not self._questions:
            raise QuizValidationError("Please add at least one question")
        total = self.total_question_marks()
        if total != exam.total_marks:
            raise QuizValidationError(
                f"Total marks ({exam.total_marks}) does not match the sum of question marks ({total})",
                [{"field": "totalMarks", "error": "marks mismatch"}],
            )
        questions = []
        for q in self._questions:
            questions.append(ExamQuestionPayload(
                type=QuestionType.MULTIPLE_CHOICE,
                question=q.question,
                options=q.filled_options(),
                # letter -> literal option text, empty when that slot is blank
                correct_answer=q.option_for(q.correct_answer) or "",
                marks=q.marks,
            ))
        return ExamPayload(
            title=exam.title,
            description=exam.description,
            type=ExamType.QUIZ,
            duration=exam.duration,
            total_marks=exam.total_marks,
            start_date=to_iso_utc(exam.start_date),
            end_date=to_iso_utc(exam.end_date),
            questions=questions,
        )

    def submit(self, form: Union[dict, ExamFormData], client: Optional[ExamApiClient] = None) -> bool:
        """Validate and post the quiz; `client` overrides the service's own for this call."""
        if self.is_submitting:
            quiz_logger.warning("submit_ignored reason=in_flight")
            self.last_failure = "in_flight"
            return False
        self.is_submitting = True
        self.last_failure = None
        try:
            payload = self.build_payload(form)
            quiz_logger.info(
                "quiz_submit %s",
                json.dumps({"title": payload.title, "questions": len(payload.questions), "total_marks": payload.total_marks}, ensure_ascii=True),
            )
            self.last_response = (client or self.client).create_exam(payload)
        except QuizValidationError as e:
            self.form_errors = e.errors
            self.last_failure = "validation"
            self.notifier.error(e.message)
            return False
        except ExamApiError as e:
            self.last_failure = "api"
            quiz_logger.warning("quiz_submit_failed %s", json.dumps({"status_code": e.status_code, "message": e.message}, ensure_ascii=True))
            self.notifier.error(e.message or "Failed to create exam")
            return False
        finally:
            self.is_submitting = False
        self.form_errors = []
        self._questions = []
        self.notifier.success("Exam created successfully")
        if self.on_success is not None:
            self.on_success()
        return True


class ExamEntryService:
    """Student flow: exam code -> join call -> fullscreen -> exam route."""
    def __init__(
        self,
        client: ExamApiClient,
        fullscreen: FullscreenController,
        session: Optional[SessionStore] = None,
        navigator: Optional[Navigator] = None,
        notifier: Optional[Notifier] = None,
    ):
        self.client = client
        self.fullscreen = fullscreen
        self.session = session or SessionStore()
        self.navigator = navigator or Navigator()
        self.notifier = notifier or Notifier()
        self.loading = False

    def join(self, exam_code: str) -> bool:
        """Join `exam_code`; returns True once the exam route was pushed."""
        code = (exam_code or "").strip()
        if not code:
            self.notifier.error("Please enter an exam code")
            return False
        if self.loading:
            entry_logger.warning("join_ignored reason=in_flight")
            return False
        self.loading = True
        try:
            self.client.join_exam(code)
            if not self.fullscreen.request():
                self.fullscreen.exit()
                self.notifier.error("Please enable fullscreen mode to start the exam")
                return False
        except ExamApiError as e:
            entry_logger.warning("join_failed %s", json.dumps({"status_code": e.status_code, "message": e.message}, ensure_ascii=True))
            self.notifier.error(e.message or "Failed to join exam")
            self.fullscreen.exit()
            return False
        finally:
            self.loading = False
        self.session.set_item("examCode", code)
        self.session.set_item("examStartTime", datetime.now(timezone.utc).isoformat())
        self.navigator.push(f"/exam/{code}")
        return True
