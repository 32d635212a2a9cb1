"""FastAPI application entrypoint and HTTP controllers.

This module hosts the instructor-side exam authoring flows over JSON so a
browser frontend can drive them. Controllers are intentionally thin: they
look up the session, delegate to the editor or quiz service, and return
the resulting state.

Endpoints implemented:
- POST   /editor/sessions
- GET    /editor/sessions/{sid}
- GET    /editor/sessions/{sid}/validation
- POST   /editor/sessions/{sid}/questions
- PATCH  /editor/sessions/{sid}/questions/{i}
- DELETE /editor/sessions/{sid}/questions/{i}
- POST   /editor/sessions/{sid}/questions/{i}/options
- PUT    /editor/sessions/{sid}/questions/{i}/options/{j}
- DELETE /editor/sessions/{sid}/questions/{i}/options/{j}
- POST   /editor/sessions/{sid}/questions/{i}/test-cases
- POST   /editor/sessions/{sid}/questions/{i}/test-cases/initialize
- PUT    /editor/sessions/{sid}/questions/{i}/test-cases/{j}
- DELETE /editor/sessions/{sid}/questions/{i}/test-cases/{j}
- POST   /quiz/drafts
- GET    /quiz/drafts/{did}
- POST   /quiz/drafts/{did}/questions
- DELETE /quiz/drafts/{did}/questions/{i}
- POST   /quiz/drafts/{did}/submit
- GET    /health
"""

from fastapi import FastAPI, Depends, HTTPException, Body, Request
from fastapi.responses import JSONResponse, Response
from fastapi.middleware.cors import CORSMiddleware
from typing import Optional
import json
import logging
import time
import uuid

from .client import ExamApiClient, get_exam_client
from .config import settings
from .editor import EditorError, QuestionManager
from .schemas import FieldUpdate, OptionIn, QuestionType, TestCaseIn
from .services import QuizExamService, default_exam_form
from .utils.notifications import Notifier
from .utils.sessions import EditorSessionStore

app = FastAPI(title="Exam Portal Authoring API")
logger = logging.getLogger("exam_portal.api")
if not logger.handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)

EDITOR = "editor"
DRAFT = "quiz_draft"

_sessions = EditorSessionStore(
    max_sessions=settings.EDITOR_MAX_SESSIONS,
    ttl_seconds=settings.EDITOR_SESSION_TTL_SECONDS,
)

# Wide-open CORS keeps local frontends working without extra config in dev.
if settings.ALLOW_DEV_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    response: Response
    try:
        response = await call_next(request)
    except Exception:
        elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
        logger.exception(
            "request_failed %s",
            json.dumps(
                {
                    "request_id": req_id,
                    "path": request.url.path,
                    "method": request.method,
                    "duration_ms": elapsed_ms,
                },
                ensure_ascii=True,
            ),
        )
        raise
    response.headers["X-Request-ID"] = req_id
    elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
    logger.info(
        "request_done %s",
        json.dumps(
            {
                "request_id": req_id,
                "path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
                "duration_ms": elapsed_ms,
            },
            ensure_ascii=True,
        ),
    )
    return response


def _new_editor(exam_type: Optional[str]):
    def factory(_session_id: str) -> dict:
        state = {"snapshot": [], "changes": 0}

        def _sync(questions):
            # observer: keeps the submission-side copy current after every edit
            state["snapshot"] = questions
            state["changes"] += 1

        state["manager"] = QuestionManager(_sync, exam_type=exam_type)
        return state
    return factory


def _new_draft(_session_id: str) -> dict:
    notifier = Notifier()
    return {"notifier": notifier, "service": QuizExamService(client=None, notifier=notifier)}


def _editor_entry(sid: str) -> dict:
    entry = _sessions.get(sid, kind=EDITOR)
    if not entry:
        raise HTTPException(status_code=404, detail="editor session not found")
    return entry


def _draft_entry(did: str) -> dict:
    entry = _sessions.get(did, kind=DRAFT)
    if not entry:
        raise HTTPException(status_code=404, detail="quiz draft not found")
    return entry


def _editor_view(entry: dict) -> dict:
    state = entry["state"]
    questions = []
    for q in state["snapshot"]:
        item = q.model_dump(by_alias=True, mode="json")
        if q.type == QuestionType.CODING:
            item["testCases"] = [tc._asdict() for tc in q.test_cases]
        questions.append(item)
    return {
        "session_id": entry["session_id"],
        "exam_type": state["manager"].exam_type,
        "changes": state["changes"],
        "questions": questions,
    }


def _edit(sid: str, action) -> dict:
    entry = _editor_entry(sid)
    with entry["lock"]:
        try:
            action(entry["state"]["manager"])
        except EditorError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return _editor_view(entry)


def _draft_view(entry: dict) -> dict:
    svc: QuizExamService = entry["state"]["service"]
    return {
        "draft_id": entry["session_id"],
        "questions": [q.model_dump(by_alias=True) for q in svc.questions],
        "total_question_marks": svc.total_question_marks(),
        "question_errors": svc.question_errors,
        "form_errors": svc.form_errors,
        "notifications": [n.to_dict() for n in entry["state"]["notifier"].drain()],
    }


@app.get("/health")
def health():
    """Lightweight health check for uptime monitoring."""
    return {"status": "ok"}


@app.post("/editor/sessions", status_code=201)
def create_editor_session(exam_type: Optional[str] = None):
    """Open a new, empty question-list editor."""
    entry = _sessions.create(_new_editor(exam_type), kind=EDITOR)
    return _editor_view(entry)


@app.get("/editor/sessions/{sid}")
def get_editor_session(sid: str):
    return _editor_view(_editor_entry(sid))


@app.get("/editor/sessions/{sid}/validation")
def validate_editor_session(sid: str):
    """Return per-question problems that would block submission."""
    entry = _editor_entry(sid)
    with entry["lock"]:
        errors = entry["state"]["manager"].validate()
    return {"valid": not errors, "errors": errors}


@app.post("/editor/sessions/{sid}/questions")
def add_question(sid: str):
    return _edit(sid, lambda m: m.add_question())


@app.patch("/editor/sessions/{sid}/questions/{index}")
def update_question_field(sid: str, index: int, payload: FieldUpdate):
    """Replace one field; switching `type` to CODING re-seeds the test cases."""
    return _edit(sid, lambda m: m.update_field(index, payload.field, payload.value))


@app.delete("/editor/sessions/{sid}/questions/{index}")
def remove_question(sid: str, index: int):
    return _edit(sid, lambda m: m.remove_question(index))


@app.post("/editor/sessions/{sid}/questions/{index}/options")
def add_option(sid: str, index: int):
    return _edit(sid, lambda m: m.add_option(index))


@app.put("/editor/sessions/{sid}/questions/{index}/options/{option_index}")
def update_option(sid: str, index: int, option_index: int, payload: OptionIn):
    return _edit(sid, lambda m: m.update_option(index, option_index, payload.value))


@app.delete("/editor/sessions/{sid}/questions/{index}/options/{option_index}")
def remove_option(sid: str, index: int, option_index: int):
    return _edit(sid, lambda m: m.remove_option(index, option_index))


@app.post("/editor/sessions/{sid}/questions/{index}/test-cases")
def add_test_case(sid: str, index: int):
    return _edit(sid, lambda m: m.add_test_case(index))


@app.post("/editor/sessions/{sid}/questions/{index}/test-cases/initialize")
def initialize_test_cases(sid: str, index: int):
    return _edit(sid, lambda m: m.initialize_test_cases(index))


@app.put("/editor/sessions/{sid}/questions/{index}/test-cases/{test_case_index}")
def update_test_case(sid: str, index: int, test_case_index: int, payload: TestCaseIn):
    return _edit(sid, lambda m: m.update_test_case(index, test_case_index, payload.input, payload.output))


@app.delete("/editor/sessions/{sid}/questions/{index}/test-cases/{test_case_index}")
def remove_test_case(sid: str, index: int, test_case_index: int):
    """Remove a test case; the last one is cleared instead of removed."""
    return _edit(sid, lambda m: m.remove_test_case(index, test_case_index))


@app.post("/quiz/drafts", status_code=201)
def create_quiz_draft():
    """Start a quiz-creation form; the response carries the form defaults."""
    entry = _sessions.create(_new_draft, kind=DRAFT)
    return {**_draft_view(entry), "defaults": default_exam_form()}


@app.get("/quiz/drafts/{did}")
def get_quiz_draft(did: str):
    return _draft_view(_draft_entry(did))


@app.post("/quiz/drafts/{did}/questions")
def add_quiz_question(did: str, payload: dict = Body(...)):
    """Validate one question entry and add it to the draft."""
    entry = _draft_entry(did)
    with entry["lock"]:
        ok = entry["state"]["service"].add_question(payload)
        view = _draft_view(entry)
    return JSONResponse(status_code=200 if ok else 400, content=view)


@app.delete("/quiz/drafts/{did}/questions/{index}")
def remove_quiz_question(did: str, index: int):
    entry = _draft_entry(did)
    with entry["lock"]:
        try:
            entry["state"]["service"].remove_question(index)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return _draft_view(entry)


@app.post("/quiz/drafts/{did}/submit")
def submit_quiz_draft(did: str, payload: dict = Body(...), client: ExamApiClient = Depends(get_exam_client)):
    """Validate the exam form and post the assembled quiz to the exam API.

    Validation problems answer 400 and API failures 502; in both cases the
    draft keeps its questions. A successful submit clears the draft.
    """
    entry = _draft_entry(did)
    with entry["lock"]:
        svc: QuizExamService = entry["state"]["service"]
        ok = svc.submit(payload, client=client)
        view = _draft_view(entry)
    if ok:
        return {**view, "submitted": True, "response": svc.last_response}
    status = 502 if svc.last_failure == "api" else 400
    return JSONResponse(status_code=status, content={**view, "submitted": False})
