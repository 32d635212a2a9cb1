"""CLI script to print the decoded test cases of a stored exam.
Usage: python scripts/decode_test_cases.py EXAM_JSON [--question N]
"""
import sys
import argparse
import json
import pathlib
from typing import Optional
# Ensure `backend/` is on sys.path so `exam_portal` imports work when running this script directly
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
from exam_portal.utils.testcase_codec import extract_test_cases


def main(path: pathlib.Path, question: Optional[int] = None) -> int:
    """Read an exam payload (`{questions: [...]}` or a bare list) and
    print each CODING question's `(input, output)` pairs.

    The optional `question` restricts output to one question index.
    """
    if not path.exists():
        print(f'File not found: {path}')
        return 1
    try:
        data = json.loads(path.read_text(encoding='utf-8'))
    except ValueError as e:
        print(f'Invalid JSON in {path}: {e}')
        return 1
    questions = data.get('questions', []) if isinstance(data, dict) else data
    found = extract_test_cases(questions)
    if question is not None:
        found = [q for q in found if q['index'] == question]
    if not found:
        print('No coding questions found')
        return 0
    for q in found:
        print(f"Question {q['index'] + 1}: {q['question']}")
        for n, tc in enumerate(q['test_cases'], start=1):
            print(f"  [{n}] input={tc['input']!r} expected={tc['output']!r}")
    return 0


if __name__ == '__main__':
    parser = argparse.ArgumentParser()
    parser.add_argument('exam_json', type=pathlib.Path, help='Exam payload as sent to POST /api/exam')
    parser.add_argument('--question', type=int, help='Only this question index (0-based)')
    args = parser.parse_args()
    sys.exit(main(args.exam_json, question=args.question))
