"""FastAPI backend for the Ary reflection conversation."""

from __future__ import annotations

import logging
import os
import uuid
from typing import Annotated, Any

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ary import settings
from ary.extraction.signals import infer_messages
from ary.graph import local_graph
from ary.logging_config import setup_logging
from ary.models.initial_state import new_reflection_state
from ary.workflow import build_graph, can_finish, forget, resume_answer, resume_finish

load_dotenv()
setup_logging()

logger = logging.getLogger(__name__)

# Refuse to start on inconsistent graph or catalog data.
local_graph.load_all()

app = FastAPI(title="Ary", version="0.1.0")
graph = build_graph()

DEMO_NOTICE = "This is a demo. Sign up to experience the full Ary companion."
SessionId = Annotated[
    str,
    Field(min_length=1, max_length=64, pattern=r"^[A-Za-z0-9_-]+$"),
]


# ── Request logging middleware ────────────────────────────────────────────

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every request with method, path, and response time."""
    import time

    request_id = uuid.uuid4().hex[:8]
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s -> %s (%.0fms) [rid=%s]",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
        request_id,
    )
    response.headers["X-Request-ID"] = request_id
    return response


# ── Health check ──────────────────────────────────────────────────────────

@app.get("/health")
def health_check() -> JSONResponse:
    """Lightweight health check for deployment platforms."""
    return JSONResponse({"status": "ok"})


# ── Models ────────────────────────────────────────────────────────────────

class RespondRequest(BaseModel):
    session_id: SessionId
    message: str


class FinishRequest(BaseModel):
    session_id: SessionId


class DemoMessage(BaseModel):
    content: str
    role: str = "user"


class DemoRequest(BaseModel):
    messages: list[DemoMessage] | None = None


class MessageResponse(BaseModel):
    session_id: str
    ai_message: str
    question_id: str | None = None
    entries: int
    can_finish: bool
    status: str
    escalation_level: str = "none"
    escalation_message: str | None = None
    profile: dict[str, Any] | None = None
    evidence: list[dict[str, Any]] | None = None


class DemoResponse(BaseModel):
    signals: list[dict[str, Any]]
    notice: str


def _extract_response(result: dict[str, Any], session_id: str) -> MessageResponse:
    """Build API response from graph state."""
    messages = result.get("messages", [])
    last_ai = messages[-1].content if messages else ""
    is_complete = bool(result.get("done")) and bool(result.get("profile"))
    evidence = result.get("evidence", [])

    return MessageResponse(
        session_id=session_id,
        ai_message=last_ai,
        question_id=None if is_complete else result.get("current_node_id"),
        entries=len(evidence),
        can_finish=can_finish(result),
        status="complete" if is_complete else "in-progress",
        escalation_level=result.get("escalation_level", "none"),
        escalation_message=result.get("escalation_message"),
        profile=result.get("profile") if is_complete else None,
        evidence=evidence if is_complete else None,
    )


def _session_state(session_id: str) -> dict[str, Any]:
    """Current checkpointed values of a session; 400 when unknown or finished.

    Finished sessions are removed from the checkpointer, so they read as
    unknown afterwards.
    """
    config = {"configurable": {"thread_id": session_id}}
    values = graph.get_state(config).values
    if not values:
        raise HTTPException(status_code=400, detail="Unknown session. Start a new session.")
    if values.get("done"):
        raise HTTPException(status_code=400, detail="This session is already complete.")
    return values


def _resume(session_id: str, answer: str | None = None) -> dict[str, Any]:
    """Resume with a reduced answer, or with a finish request when ``answer`` is None.

    A finished conversation is dropped from the checkpointer once its result
    has been read.
    """
    config = {"configurable": {"thread_id": session_id}}
    try:
        if answer is None:
            result = resume_finish(graph, config)
        else:
            result = resume_answer(graph, config, answer)
    except Exception:
        logger.exception("Failed to resume session %s", session_id)
        raise HTTPException(
            status_code=400,
            detail="Unable to continue this session. Start a new session and try again.",
        ) from None

    if result.get("done"):
        forget(graph, config)
        logger.info("Session %s complete; checkpoints released", session_id)
    return result


# ── Conversation ──────────────────────────────────────────────────────────

@app.post("/api/start", response_model=MessageResponse)
def start_session() -> MessageResponse:
    """Start a new reflection session."""
    session_id = str(uuid.uuid4())[:8]
    config = {"configurable": {"thread_id": session_id}}
    initial_state = new_reflection_state(session_id=session_id)

    result = graph.invoke(initial_state, config)
    return _extract_response(result, session_id)


@app.post("/api/respond", response_model=MessageResponse)
def respond(req: RespondRequest) -> MessageResponse:
    """Send a user answer and return the next question or the profile."""
    user_message = req.message.strip()
    max_chars = settings.MAX_MESSAGE_CHARS
    if not user_message:
        raise HTTPException(status_code=400, detail="Message cannot be empty.")
    if len(user_message) > max_chars:
        raise HTTPException(
            status_code=400,
            detail=f"Message too long. Maximum length is {max_chars} characters.",
        )

    _session_state(req.session_id)
    result = _resume(req.session_id, user_message)
    return _extract_response(result, req.session_id)


@app.post("/api/finish", response_model=MessageResponse)
def finish(req: FinishRequest) -> MessageResponse:
    """End the conversation early once enough answers were given."""
    state = _session_state(req.session_id)
    if not can_finish(state):
        raise HTTPException(
            status_code=409,
            detail=(
                f"At least {state.get('min_entries_to_finish')} answers are needed "
                "before finishing."
            ),
        )

    result = _resume(req.session_id)
    return _extract_response(result, req.session_id)


# ── Public demo ───────────────────────────────────────────────────────────

@app.post("/api/demo/analyze", response_model=DemoResponse)
def demo_analyze(req: DemoRequest) -> DemoResponse:
    """Infer signals from a short transcript without starting a session."""
    if not req.messages:
        raise HTTPException(status_code=400, detail="Messages array is required")

    signals = infer_messages([m.model_dump() for m in req.messages])
    logger.info("Demo analysis: %d messages, %d signals", len(req.messages), len(signals))
    return DemoResponse(
        signals=[s.to_dict(include_confidence=False) for s in signals],
        notice=DEMO_NOTICE,
    )


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8080"))
    print(f"Starting web interface on http://localhost:{port}")
    uvicorn.run(app, host="0.0.0.0", port=port)
