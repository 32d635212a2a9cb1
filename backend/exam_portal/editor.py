"""In-memory question-list editor.

`QuestionManager` keeps an ordered list of `Question` records for the
instructor's exam editor. Every mutator replaces the list (the previous
list object is never edited in place) and then hands a copy of the full
new list to the observer supplied by the caller, typically the component
that owns submission. Notifications are immediate: one call per edit.

Coding questions reuse `options` for encoded test cases (see
`utils.testcase_codec`). Two rules keep that consistent:
- switching a question to CODING re-seeds `options` with one default test case;
- removing the last test case clears it instead of dropping the slot.

Switching away from CODING leaves `options` untouched.
"""

import json
import logging
from typing import Any, Callable, List, Optional

from .schemas import Question, QuestionType
from .utils.testcase_codec import DEFAULT_TEST_CASE, encode, decode
from .validation import validate_questions

logger = logging.getLogger("exam_portal.editor")

EDITABLE_FIELDS = ("type", "question", "options", "correct_answer", "marks")
_FIELD_ALIASES = {"correctAnswer": "correct_answer"}


class EditorError(ValueError):
    """Raised for an invalid editor operation."""


QuestionsObserver = Callable[[List[Question]], None]


class QuestionManager:
    def __init__(self, on_questions_change: Optional[QuestionsObserver] = None, exam_type: Optional[str] = None):
        """`exam_type` is informational only; it is echoed back and never changes editing rules."""
        self._questions: List[Question] = []
        self._observer = on_questions_change
        self.exam_type = exam_type

    @property
    def questions(self) -> List[Question]:
        return [q.model_copy(deep=True) for q in self._questions]

    def __len__(self) -> int:
        return len(self._questions)

    def _commit(self, updated: List[Question], event: str, **details):
        self._questions = updated
        logger.debug("%s %s", event, json.dumps({"count": len(updated), **details}, ensure_ascii=True, default=str))
        if self._observer is not None:
            self._observer(self.questions)

    def _question(self, index: int) -> Question:
        if not isinstance(index, int) or index < 0 or index >= len(self._questions):
            raise EditorError(f"question index out of range: {index}")
        return self._questions[index]

    def _coding_question(self, index: int) -> Question:
        q = self._question(index)
        if q.type != QuestionType.CODING:
            raise EditorError(f"question {index} is not a coding question")
        return q

    def _replace(self, index: int, question: Question) -> List[Question]:
        updated = list(self._questions)
        updated[index] = question
        return updated

    @staticmethod
    def _check_slot(options: List[str], slot: int, what: str):
        if not isinstance(slot, int) or slot < 0 or slot >= len(options):
            raise EditorError(f"{what} index out of range: {slot}")

    def add_question(self) -> Question:
        """Append a blank multiple-choice question worth one mark."""
        q = Question(type=QuestionType.MULTIPLE_CHOICE, question="", options=[""], marks=1)
        self._commit([*self._questions, q], "question_added")
        return q.model_copy(deep=True)

    def update_field(self, index: int, field: str, value: Any):
        """Replace one field of one question.

        Setting `type` to CODING also resets `options` to a single default
        test case, discarding whatever was there.
        """
        field = _FIELD_ALIASES.get(field, field)
        if field not in EDITABLE_FIELDS:
            raise EditorError(f"unknown question field: {field}")
        current = self._question(index)
        value = self._coerce(field, value)
        update = {field: value}
        if field == "type" and value == QuestionType.CODING:
            update["options"] = [DEFAULT_TEST_CASE]
        self._commit(self._replace(index, current.model_copy(update=update)), "field_updated", index=index, field=field)

    @staticmethod
    def _coerce(field: str, value: Any) -> Any:
        try:
            if field == "type":
                return QuestionType(value)
            if field == "marks":
                if isinstance(value, bool):
                    raise TypeError("marks must be a number")
                return int(value)
            if field == "options":
                if not isinstance(value, (list, tuple)):
                    raise TypeError("options must be a list")
                return [str(v) for v in value]
            if field == "correct_answer":
                return None if value is None else str(value)
            return "" if value is None else str(value)
        except (TypeError, ValueError) as e:
            raise EditorError(f"invalid value for {field}: {e}") from e

    def add_option(self, index: int):
        q = self._question(index)
        self._commit(self._replace(index, q.model_copy(update={"options": [*q.options, ""]})), "option_added", index=index)

    def update_option(self, index: int, option_index: int, value: str):
        q = self._question(index)
        self._check_slot(q.options, option_index, "option")
        options = list(q.options)
        options[option_index] = value
        self._commit(self._replace(index, q.model_copy(update={"options": options})), "option_updated", index=index, option=option_index)

    def remove_option(self, index: int, option_index: int):
        q = self._question(index)
        self._check_slot(q.options, option_index, "option")
        options = [o for i, o in enumerate(q.options) if i != option_index]
        self._commit(self._replace(index, q.model_copy(update={"options": options})), "option_removed", index=index, option=option_index)

    def add_test_case(self, index: int):
        q = self._coding_question(index)
        options = [*q.options, DEFAULT_TEST_CASE]
        self._commit(self._replace(index, q.model_copy(update={"options": options})), "test_case_added", index=index)

    def initialize_test_cases(self, index: int):
        """Seed an empty coding question with one default test case."""
        q = self._coding_question(index)
        if q.options:
            return
        self._commit(self._replace(index, q.model_copy(update={"options": [DEFAULT_TEST_CASE]})), "test_cases_initialized", index=index)

    def update_test_case(self, index: int, test_case_index: int, input: str, output: str):
        q = self._coding_question(index)
        self._check_slot(q.options, test_case_index, "test case")
        options = list(q.options)
        options[test_case_index] = encode(input, output)
        self._commit(self._replace(index, q.model_copy(update={"options": options})), "test_case_updated", index=index, test_case=test_case_index)

    def remove_test_case(self, index: int, test_case_index: int):
        """Delete a test case, or clear it when it is the only one left."""
        q = self._coding_question(index)
        self._check_slot(q.options, test_case_index, "test case")
        if len(q.options) > 1:
            options = [o for i, o in enumerate(q.options) if i != test_case_index]
            event = "test_case_removed"
        else:
            options = [encode("", "")]
            event = "test_case_cleared"
        self._commit(self._replace(index, q.model_copy(update={"options": options})), event, index=index, test_case=test_case_index)

    def remove_question(self, index: int):
        self._question(index)
        self._commit([q for i, q in enumerate(self._questions) if i != index], "question_removed", index=index)

    def test_cases(self, index: int):
        """Decoded `(input, output)` pairs of a coding question."""
        return [decode(o) for o in self._coding_question(index).options]

    def validate(self) -> List[dict]:
        return validate_questions(self._questions)
