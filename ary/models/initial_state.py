"""Factory helpers for creating workflow state payloads."""

from __future__ import annotations

from typing import Any

from ary import settings
from ary.graph import local_graph
from ary.models.records import EscalationLevel


def new_reflection_state(
    session_id: str,
    min_entries_to_finish: int | None = None,
) -> dict[str, Any]:
    """Return a fresh reflection state dict used by CLI and web entrypoints."""
    graph = local_graph.get_conversation_graph()
    if min_entries_to_finish is None:
        min_entries_to_finish = settings.MIN_ENTRIES_TO_FINISH
    return {
        "session_id": session_id,
        "current_node_id": graph.start_id,
        "previous_node_id": None,
        "last_category": None,
        "evidence": [],
        "signals": [],
        "escalation_level": EscalationLevel.NONE.value,
        "escalation_message": None,
        "profile": {},
        "ranking": [],
        "score": 0,
        "min_entries_to_finish": min_entries_to_finish,
        "finish_requested": False,
        "done": False,
    }
