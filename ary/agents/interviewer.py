"""Interviewer agent: asks the next question of the conversation graph.

No text is generated.  Each turn is the reaction template of the node
answered last (for the category the answer fell into) followed by the
prompt of the node now awaiting an answer.  Both come from the packaged
graph, which was screened against the boundary rules when it was loaded;
the combined message is screened again here before it is emitted.
"""

from __future__ import annotations

import logging

from langchain_core.messages import AIMessage

from ary.graph import local_graph
from ary.models.records import ResponseCategory
from ary.models.state import ReflectionState
from ary.safety.boundaries import check_response

logger = logging.getLogger(__name__)


def compose_turn(state: ReflectionState) -> str:
    """Reaction to the previous answer (if any) plus the current prompt."""
    graph = local_graph.get_conversation_graph()
    node = graph.node(state["current_node_id"])

    parts: list[str] = []
    previous_id = state.get("previous_node_id")
    last_category = state.get("last_category")
    if previous_id and last_category:
        parts.append(graph.node(previous_id).reactions[ResponseCategory(last_category)])
    parts.append(node.prompt)
    return " ".join(parts)


def interviewer_node(state: ReflectionState) -> dict:
    """LangGraph node: emit the next question as an AI message."""
    text = compose_turn(state)

    result = check_response(text)
    if not result.ok:
        logger.warning(
            "Interviewer message at %s violates boundary rules: %s",
            state["current_node_id"], result.violation.value,  # type: ignore[union-attr]
        )

    return {
        "messages": [AIMessage(content=text)],
    }
