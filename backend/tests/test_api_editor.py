from fastapi.testclient import TestClient

from exam_portal.main import app
from exam_portal.utils.testcase_codec import DEFAULT_TEST_CASE, encode

client = TestClient(app)


def _session():
    r = client.post('/editor/sessions', params={'exam_type': 'CODING'})
    assert r.status_code == 201
    return r.json()['session_id']


def test_request_id_header_exists():
    r = client.get('/health')
    assert r.status_code == 200
    assert 'X-Request-ID' in r.headers


def test_editor_coding_flow():
    sid = _session()
    r = client.post(f'/editor/sessions/{sid}/questions')
    assert r.status_code == 200
    q = r.json()['questions'][0]
    assert q == {'type': 'MULTIPLE_CHOICE', 'question': '', 'options': [''], 'correctAnswer': None, 'marks': 1}

    r = client.patch(f'/editor/sessions/{sid}/questions/0', json={'field': 'type', 'value': 'CODING'})
    assert r.status_code == 200
    q = r.json()['questions'][0]
    assert q['options'] == [DEFAULT_TEST_CASE]
    assert q['testCases'] == [{'input': 'Hello', 'output': 'Helo'}]

    client.post(f'/editor/sessions/{sid}/questions/0/test-cases')
    r = client.put(f'/editor/sessions/{sid}/questions/0/test-cases/1', json={'input': '3, 5', 'output': '8'})
    assert r.json()['questions'][0]['options'][1] == encode('3, 5', '8')

    client.delete(f'/editor/sessions/{sid}/questions/0/test-cases/0')
    r = client.delete(f'/editor/sessions/{sid}/questions/0/test-cases/0')
    q = r.json()['questions'][0]
    assert q['testCases'] == [{'input': '', 'output': ''}]

    body = client.get(f'/editor/sessions/{sid}').json()
    assert body['exam_type'] == 'CODING'
    assert body['changes'] == 6


def test_editor_options_flow():
    sid = _session()
    client.post(f'/editor/sessions/{sid}/questions')
    client.post(f'/editor/sessions/{sid}/questions/0/options')
    client.put(f'/editor/sessions/{sid}/questions/0/options/0', json={'value': 'Paris'})
    client.put(f'/editor/sessions/{sid}/questions/0/options/1', json={'value': 'Rome'})
    client.patch(f'/editor/sessions/{sid}/questions/0', json={'field': 'question', 'value': 'Capital of France?'})
    client.patch(f'/editor/sessions/{sid}/questions/0', json={'field': 'correctAnswer', 'value': 'Paris'})
    r = client.get(f'/editor/sessions/{sid}/validation')
    assert r.json() == {'valid': True, 'errors': []}
    r = client.delete(f'/editor/sessions/{sid}/questions/0/options/1')
    assert r.json()['questions'][0]['options'] == ['Paris']
    r = client.get(f'/editor/sessions/{sid}/validation')
    assert r.json()['valid'] is False
    r = client.delete(f'/editor/sessions/{sid}/questions/0')
    assert r.json()['questions'] == []


def test_editor_errors():
    sid = _session()
    assert client.get('/editor/sessions/missing').status_code == 404
    assert client.post(f'/editor/sessions/{sid}/questions/3/options').status_code == 400
    client.post(f'/editor/sessions/{sid}/questions')
    assert client.post(f'/editor/sessions/{sid}/questions/0/test-cases').status_code == 400
    r = client.patch(f'/editor/sessions/{sid}/questions/0', json={'field': 'type', 'value': 'ESSAY'})
    assert r.status_code == 400
    r = client.patch(f'/editor/sessions/{sid}/questions/0', json={'field': 'explanation', 'value': 'x'})
    assert r.status_code == 422


def test_initialize_test_cases_route():
    sid = _session()
    client.post(f'/editor/sessions/{sid}/questions')
    client.patch(f'/editor/sessions/{sid}/questions/0', json={'field': 'type', 'value': 'CODING'})
    client.patch(f'/editor/sessions/{sid}/questions/0', json={'field': 'options', 'value': []})
    r = client.post(f'/editor/sessions/{sid}/questions/0/test-cases/initialize')
    assert r.json()['questions'][0]['options'] == [DEFAULT_TEST_CASE]


def test_draft_id_is_not_an_editor_session():
    did = client.post('/quiz/drafts').json()['draft_id']
    assert client.get(f'/editor/sessions/{did}').status_code == 404
