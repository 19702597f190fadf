"""Scorer agent: ranks the conversation against the competence profiles.

Works from the answer-free evidence stored in the workflow state and the
packaged profile catalog.  The summary message names the selected profile
and never shows a number; the score and ranking stay in state for the
operator views.
"""

from __future__ import annotations

import logging

from langchain_core.messages import AIMessage

from ary import settings
from ary.graph import local_graph
from ary.models.records import EvidenceRecord
from ary.models.state import ReflectionState
from ary.safety.boundaries import check_response
from ary.scoring.profile_scorer import score
from ary.session.exporter import SessionExporter

logger = logging.getLogger(__name__)

CLOSING_LINE = "Thank you for reflecting with me."


def _summary_text(title: str, summary: str) -> str:
    return f"{CLOSING_LINE} Here is what stood out: {title}. {summary}"


def scorer_node(state: ReflectionState) -> dict:
    """LangGraph node: score the evidence and produce the final profile.

    Returns state updates with profile, ranking, score and a summary message.
    """
    records = [EvidenceRecord.from_dict(e) for e in state.get("evidence", [])]
    catalog = local_graph.get_profile_catalog()

    ranked = score(records, catalog)
    summary = _summary_text(ranked.profile.title, ranked.profile.summary)

    result = check_response(summary)
    if not result.ok:
        logger.warning(
            "Summary for %s violates boundary rules: %s",
            ranked.profile.id, result.violation.value,  # type: ignore[union-attr]
        )

    ranked_dict = ranked.to_dict()

    if settings.EXPORT_SESSIONS:
        exporter = SessionExporter(state.get("session_id", "anonymous"))
        exporter.add_evidence(records)
        exporter.add_signals(state.get("signals", []))
        exporter.set_profile(ranked)
        exporter.save()

    return {
        "profile": ranked_dict["profile"],
        "ranking": ranked_dict["ranking"],
        "score": ranked.score,
        "done": True,
        "messages": [AIMessage(content=summary)],
    }
