import pytest

from exam_portal.editor import EditorError, QuestionManager
from exam_portal.schemas import QuestionType
from exam_portal.utils.testcase_codec import DEFAULT_TEST_CASE, decode, encode


@pytest.fixture
def synced():
    seen = []
    manager = QuestionManager(seen.append)
    return manager, seen


def _coding(manager, index=0):
    manager.add_question()
    manager.update_field(index, "type", "CODING")


def test_add_question_defaults_and_notifies(synced):
    manager, seen = synced
    q = manager.add_question()
    assert q.type == QuestionType.MULTIPLE_CHOICE
    assert q.question == ""
    assert q.options == [""]
    assert q.marks == 1
    assert len(seen) == 1
    assert len(seen[0]) == 1


def test_every_mutation_pushes_full_list(synced):
    manager, seen = synced
    manager.add_question()
    manager.add_question()
    manager.update_field(1, "question", "What is 2+2?")
    manager.add_option(1)
    manager.update_option(1, 1, "4")
    manager.remove_question(0)
    assert len(seen) == 6
    last = seen[-1]
    assert len(last) == 1
    assert last[0].question == "What is 2+2?"
    assert last[0].options == ["", "4"]


def test_observer_gets_copies(synced):
    manager, seen = synced
    manager.add_question()
    seen[0][0].question = "tampered"
    seen[0][0].options.append("x")
    assert manager.questions[0].question == ""
    assert manager.questions[0].options == [""]


def test_switch_to_coding_reseeds_options(synced):
    manager, seen = synced
    manager.add_question()
    manager.update_option(0, 0, "Paris")
    manager.add_option(0)
    manager.update_field(0, "type", "CODING")
    q = manager.questions[0]
    assert q.type == QuestionType.CODING
    assert q.options == [DEFAULT_TEST_CASE]
    assert q.test_cases == [("Hello", "Helo")]


@pytest.mark.parametrize("start", [t for t in QuestionType if t != QuestionType.CODING])
def test_switch_to_coding_from_any_kind_leaves_decodable_options(start):
    manager = QuestionManager()
    manager.add_question()
    manager.update_field(0, "type", start)
    manager.update_field(0, "options", ["a", "b", "c"])
    manager.update_field(0, "type", QuestionType.CODING)
    options = manager.questions[0].options
    assert len(options) >= 1
    for o in options:
        decode(o)


def test_switch_away_from_coding_keeps_encoded_options(synced):
    manager, _ = synced
    _coding(manager)
    manager.update_test_case(0, 0, "1 2", "3")
    manager.update_field(0, "type", "SHORT_ANSWER")
    q = manager.questions[0]
    assert q.type == QuestionType.SHORT_ANSWER
    assert q.options == [encode("1 2", "3")]


def test_update_field_accepts_wire_alias(synced):
    manager, _ = synced
    manager.add_question()
    manager.update_field(0, "correctAnswer", "Paris")
    manager.update_field(0, "marks", "4")
    q = manager.questions[0]
    assert q.correct_answer == "Paris"
    assert q.marks == 4


@pytest.mark.parametrize("field,value", [
    ("type", "ESSAY"),
    ("marks", "many"),
    ("marks", True),
    ("options", "not-a-list"),
    ("explanation", "x"),
])
def test_update_field_rejects_bad_input(synced, field, value):
    manager, seen = synced
    manager.add_question()
    with pytest.raises(EditorError):
        manager.update_field(0, field, value)
    assert len(seen) == 1


def test_out_of_range_indexes_raise(synced):
    manager, _ = synced
    with pytest.raises(EditorError):
        manager.update_field(0, "question", "x")
    manager.add_question()
    with pytest.raises(EditorError):
        manager.remove_option(0, 3)
    with pytest.raises(EditorError):
        manager.remove_question(-1)


def test_add_and_remove_option(synced):
    manager, _ = synced
    manager.add_question()
    manager.add_option(0)
    manager.update_option(0, 0, "A")
    manager.update_option(0, 1, "B")
    manager.remove_option(0, 0)
    assert manager.questions[0].options == ["B"]


def test_test_cases_round_through_editor(synced):
    manager, _ = synced
    _coding(manager)
    manager.add_test_case(0)
    manager.update_test_case(0, 1, "3, 5", "8")
    assert manager.questions[0].options == [DEFAULT_TEST_CASE, encode("3, 5", "8")]
    assert manager.test_cases(0)[1] == ("3, 5", "8")


def test_remove_test_case_deletes_when_several(synced):
    manager, _ = synced
    _coding(manager)
    manager.add_test_case(0)
    manager.update_test_case(0, 0, "first", "1")
    manager.remove_test_case(0, 0)
    assert manager.questions[0].options == [DEFAULT_TEST_CASE]


def test_remove_last_test_case_clears_slot(synced):
    manager, seen = synced
    _coding(manager)
    manager.update_test_case(0, 0, "in", "out")
    manager.remove_test_case(0, 0)
    assert manager.questions[0].options == [encode("", "")]
    assert manager.test_cases(0) == [("", "")]
    assert len(seen[-1][0].options) == 1


def test_remove_test_case_never_drops_below_one(synced):
    manager, _ = synced
    _coding(manager)
    for _ in range(3):
        manager.add_test_case(0)
    for _ in range(10):
        manager.remove_test_case(0, 0)
        assert len(manager.questions[0].options) >= 1
    assert len(manager.questions[0].options) == 1


def test_test_case_operations_require_coding_question(synced):
    manager, _ = synced
    manager.add_question()
    with pytest.raises(EditorError):
        manager.add_test_case(0)
    with pytest.raises(EditorError):
        manager.update_test_case(0, 0, "a", "b")
    with pytest.raises(EditorError):
        manager.remove_test_case(0, 0)


def test_initialize_test_cases_only_seeds_empty_question(synced):
    manager, seen = synced
    _coding(manager)
    manager.update_field(0, "options", [])
    manager.initialize_test_cases(0)
    assert manager.questions[0].options == [DEFAULT_TEST_CASE]
    calls = len(seen)
    manager.initialize_test_cases(0)
    assert len(seen) == calls


def test_remove_question_keeps_order(synced):
    manager, _ = synced
    for text in ("one", "two", "three"):
        manager.add_question()
        manager.update_field(len(manager) - 1, "question", text)
    manager.remove_question(1)
    assert [q.question for q in manager.questions] == ["one", "three"]


def test_validate_reports_by_index(synced):
    manager, _ = synced
    manager.add_question()
    _coding(manager, index=1)
    manager.update_field(1, "question", "Reverse a string")
    errors = manager.validate()
    assert {e["index"] for e in errors} == {0}
