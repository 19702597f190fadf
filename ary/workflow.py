"""LangGraph workflow: wires the Interviewer and Scorer into a stateful graph.

Flow:
    START → router → interviewer → human_turn → router → …
                  ↘ scorer → END   (graph complete, or finish requested and allowed)

The human_turn node uses LangGraph's `interrupt()` to pause execution and
wait for user input.  Resume values are checkpointed as pending writes, so
answers are reduced before they reach the graph: `resume_answer()` runs
`record_answer()` against the paused state and resumes with the resulting
evidence, signals and escalation update; `resume_finish()` asks to end
early.  `forget()` drops a finished thread from the checkpointer.
"""

from __future__ import annotations

import logging
from typing import Any

from langgraph.checkpoint.memory import MemorySaver
from langgraph.graph import END, START, StateGraph
from langgraph.types import Command, interrupt

from ary.agents.interviewer import interviewer_node
from ary.agents.scorer import scorer_node
from ary.errors import SessionCompleteError
from ary.extraction.signals import infer, sequential_ids
from ary.graph import local_graph
from ary.graph.navigator import advance
from ary.models.records import COMPLETE, EscalationLevel
from ary.models.state import ReflectionState
from ary.safety.boundaries import check_user_input, escalation_message

logger = logging.getLogger(__name__)


def can_finish(state: ReflectionState) -> bool:
    """Enough answers recorded to allow an early finish."""
    return len(state.get("evidence", [])) >= state.get("min_entries_to_finish", 5)


# ── Graph nodes ───────────────────────────────────────────────────────────


def router(state: ReflectionState) -> Command:
    """Decide whether to ask the next question or move to scoring."""
    if state.get("current_node_id") == COMPLETE:
        return Command(update={"done": True}, goto="scorer")
    if state.get("finish_requested") and can_finish(state):
        return Command(update={"done": True}, goto="scorer")
    return Command(goto="interviewer")


def record_answer(state: ReflectionState, text: str) -> dict[str, Any]:
    """Reduce one answer to answer-free state updates.

    Parameters
    ----------
    state : ReflectionState
        State before the answer; ``current_node_id`` is the node answered.
    text : str
        The user's answer.  It is classified, tagged, screened for distress
        and mined for signals, then dropped.

    Returns
    -------
    dict
        Updates for evidence, signals, navigation and escalation fields.
    """
    graph = local_graph.get_conversation_graph()
    node_id = state["current_node_id"]
    evidence = list(state.get("evidence", []))
    signals = list(state.get("signals", []))

    entry, next_id = advance(graph, node_id, text)
    level = check_user_input(text)
    turn = len(evidence) + 1
    ids = sequential_ids(f"{state.get('session_id', 'session')}-{turn}")
    turn_signals = [s.to_dict() for s in infer(text, id_source=ids)]

    logger.info(
        "Turn %d at %s: category=%s escalation=%s signals=%d",
        turn, node_id, entry.category.value, level.value, len(turn_signals),
    )

    return {
        "evidence": evidence + [entry.to_dict()],
        "signals": signals + turn_signals,
        "previous_node_id": node_id,
        "current_node_id": next_id,
        "last_category": entry.category.value,
        "escalation_level": level.value,
        "escalation_message": escalation_message(level),
        "finish_requested": False,
    }


def human_turn(state: ReflectionState) -> dict:
    """Pause execution and wait for an answer-free resume value via interrupt().

    Resume values are ``{"update": record_answer(...)}`` or
    ``{"finish": True}``; ``resume_answer`` and ``resume_finish`` build them.
    Whatever is resumed is stored by the checkpointer, so text is refused.
    """
    payload = interrupt("Waiting for user response…")

    if not isinstance(payload, dict):
        raise TypeError("Resume with resume_answer(); raw answer text is not accepted")

    if payload.get("finish"):
        if can_finish(state):
            return {"finish_requested": True}
        logger.info(
            "Finish requested with %d of %d answers; continuing",
            len(state.get("evidence", [])), state.get("min_entries_to_finish", 5),
        )
        # Re-ask the open question without repeating the last reaction.
        return {
            "finish_requested": False,
            "last_category": None,
            "escalation_level": EscalationLevel.NONE.value,
            "escalation_message": None,
        }

    return dict(payload.get("update", {}))


# ── Resuming a paused conversation ────────────────────────────────────────


def resume_answer(graph, config: dict, text: str) -> dict[str, Any]:
    """Reduce ``text`` against the paused state, then resume with the result.

    The answer is classified, tagged and screened here, outside the graph,
    so only the answer-free update is handed to ``Command(resume=...)``.
    """
    values = graph.get_state(config).values
    if not values:
        raise ValueError("Unknown session; start a new one")
    if values.get("done") or values.get("current_node_id") == COMPLETE:
        raise SessionCompleteError("The conversation is already complete")
    update = record_answer(values, text)
    return graph.invoke(Command(resume={"update": update}), config)


def resume_finish(graph, config: dict) -> dict[str, Any]:
    """Resume with an early-finish request."""
    return graph.invoke(Command(resume={"finish": True}), config)


def forget(graph, config: dict) -> None:
    """Drop every checkpoint and pending write of a finished conversation."""
    graph.checkpointer.delete_thread(config["configurable"]["thread_id"])


# ── Build the graph ───────────────────────────────────────────────────────


def build_graph():
    """Construct and compile the reflection StateGraph."""
    graph = StateGraph(ReflectionState)

    graph.add_node("router", router)
    graph.add_node("interviewer", interviewer_node)
    graph.add_node("human_turn", human_turn)
    graph.add_node("scorer", scorer_node)

    graph.add_edge(START, "router")
    # router uses Command to go to "interviewer" or "scorer"
    graph.add_edge("interviewer", "human_turn")
    graph.add_edge("human_turn", "router")
    graph.add_edge("scorer", END)

    checkpointer = MemorySaver()
    return graph.compile(checkpointer=checkpointer)
