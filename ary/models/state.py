"""Shared state definitions for the LangGraph reflection workflow.

The state is checkpointed, so it only ever holds answer-free data:
evidence records, derived signals and escalation levels.  Answers are
reduced by ``ary.workflow.resume_answer`` before the graph is resumed, so
neither state values nor pending resume writes ever hold answer text.

Records are stored as plain dicts (``to_dict()`` form) so checkpoints
serialize without custom types.
"""

from __future__ import annotations

from typing import Any, TypedDict

from langgraph.graph import MessagesState


class EvidenceDict(TypedDict):
    """``EvidenceRecord.to_dict()``: one answered question, without the answer."""

    question_id: str
    question: str
    category: str
    keywords: list[str]
    competencies: list[str]


class SignalDict(TypedDict, total=False):
    """``DerivedSignal.to_dict()``."""

    id: str
    branch: str
    trait: str
    confidence: float
    timestamp: str  # ISO 8601


class ReflectionState(MessagesState):
    """Full shared state for the reflection conversation workflow.

    Extends MessagesState (which provides `messages: list[AnyMessage]`
    with the `add_messages` reducer).  Only AI messages are appended.
    """

    # --- Session identity ---
    session_id: str

    # --- Navigation ---
    current_node_id: str  # node awaiting an answer, or "complete"
    previous_node_id: str | None  # node answered last (for its reaction)
    last_category: str | None

    # --- Evidence (overwrite) ---
    evidence: list[EvidenceDict]
    signals: list[SignalDict]

    # --- Safety ---
    escalation_level: str  # EscalationLevel value of the latest answer
    escalation_message: str | None  # shown verbatim when present

    # --- Result ---
    profile: dict[str, Any]  # CompetenceProfile.to_dict() of the selection
    ranking: list[dict[str, Any]]
    score: int

    # --- Control flow ---
    min_entries_to_finish: int
    finish_requested: bool
    done: bool
