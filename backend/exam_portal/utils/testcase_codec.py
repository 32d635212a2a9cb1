"""Codec for coding-question test cases stored in a question's `options`.

A coding question keeps each test case as one string of the form
``<input><SEPARATOR><expected output>``. The separator is a single rarely
typed character so stored exams stay readable by any consumer (the
autograder applies the same `decode` rule).

The separator is not escaped. If it occurs inside the input text the
remainder is attributed to the output when decoding; stored data depends on
the one-character scheme, so callers should treat that as a known limitation.
"""

from typing import Iterable, List, NamedTuple

SEPARATOR = "⏹"


class TestCase(NamedTuple):
    """A decoded `(input, output)` pair."""
    input: str
    output: str


def encode(input: str, output: str) -> str:
    """Pack an input/expected-output pair into a single option string."""
    return f"{input}{SEPARATOR}{output}"


def decode(encoded: str) -> TestCase:
    """Split `encoded` on the first separator.

    Entries without a separator decode to `(encoded, "")`; this never
    raises so one malformed option cannot break a whole question.
    """
    input, found, output = encoded.partition(SEPARATOR)
    if not found:
        return TestCase(encoded, "")
    return TestCase(input, output)


def decode_all(options: Iterable[str]) -> List[TestCase]:
    return [decode(o) for o in options]


DEFAULT_TEST_CASE = encode("Hello", "Helo")


def extract_test_cases(questions: Iterable[dict]) -> List[dict]:
    """Decode the test cases of every CODING question in a stored exam.

    `questions` is the wire form (`type`, `question`, `options`); other
    question kinds are skipped. Output keeps each question's position.
    """
    out = []
    for idx, q in enumerate(questions):
        if not isinstance(q, dict) or q.get('type') != 'CODING':
            continue
        out.append({
            'index': idx,
            'question': q.get('question', ''),
            'test_cases': [tc._asdict() for tc in decode_all(q.get('options') or [])],
        })
    return out
