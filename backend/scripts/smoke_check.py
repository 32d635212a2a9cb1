"""Run a quick check against the app.

Uses FastAPI's TestClient to open an editor session, switch a question
to CODING and print the seeded test case.
"""

import sys
import os

# Ensure backend folder is on sys.path so `exam_portal` package can be imported
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from fastapi.testclient import TestClient
from exam_portal.main import app


def run():
    client = TestClient(app)
    resp = client.get('/health')
    print('HEALTH:', resp.status_code, resp.json())
    sid = client.post('/editor/sessions').json()['session_id']
    client.post(f'/editor/sessions/{sid}/questions')
    resp = client.patch(f'/editor/sessions/{sid}/questions/0', json={'field': 'type', 'value': 'CODING'})
    print('EDITOR:', resp.status_code)
    print('TEST CASES:', resp.json()['questions'][0].get('testCases'))


if __name__ == '__main__':
    run()
