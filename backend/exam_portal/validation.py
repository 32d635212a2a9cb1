"""Per-kind validation rules for editor questions.

Each `QuestionType` has exactly one rule function in `RULES`; the table is
checked against the enum at import so a new kind cannot be added without
its rules.
"""

from typing import Callable, Dict, List

from .schemas import Question, QuestionType
from .utils.testcase_codec import decode_all


def _choice_rules(q: Question) -> List[str]:
    errors = []
    filled = [o for o in q.options if o and o.strip()]
    if len(filled) < 2:
        errors.append("at least 2 non-empty options required")
    if not (q.correct_answer or "").strip():
        errors.append("correct answer is required")
    return errors


def _true_false_rules(q: Question) -> List[str]:
    if (q.correct_answer or "").strip().lower() not in ("true", "false"):
        return ["correct answer must be 'true' or 'false'"]
    return []


def _free_text_rules(q: Question) -> List[str]:
    return []


def _coding_rules(q: Question) -> List[str]:
    cases = decode_all(q.options)
    if not cases:
        return ["at least one test case required"]
    errors = []
    for i, tc in enumerate(cases):
        if not tc.input and not tc.output:
            errors.append(f"test case {i + 1} is empty")
    return errors


RULES: Dict[QuestionType, Callable[[Question], List[str]]] = {
    QuestionType.MULTIPLE_CHOICE: _choice_rules,
    QuestionType.SINGLE_CHOICE: _choice_rules,
    QuestionType.TRUE_FALSE: _true_false_rules,
    QuestionType.SHORT_ANSWER: _free_text_rules,
    QuestionType.LONG_ANSWER: _free_text_rules,
    QuestionType.CODING: _coding_rules,
}

_missing = set(QuestionType) - set(RULES)
if _missing:
    raise RuntimeError(f"no validation rules for question types: {sorted(m.value for m in _missing)}")


def validate_question(q: Question) -> List[str]:
    """Return a list of problems with `q`; empty when it can be submitted."""
    errors = []
    if not q.question or not q.question.strip():
        errors.append("question text is required")
    if not isinstance(q.marks, int) or q.marks < 1:
        errors.append("marks must be at least 1")
    errors.extend(RULES[QuestionType(q.type)](q))
    return errors


def validate_questions(questions: List[Question]) -> List[dict]:
    """Validate a question list, returning `{index, error}` items."""
    out = []
    for idx, q in enumerate(questions):
        for err in validate_question(q):
            out.append({'index': idx, 'error': err})
    return out
