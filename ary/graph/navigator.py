"""Navigator and evidence recorder for a single conversation.

Usage:
    from ary.graph.navigator import ConversationSession

    session = ConversationSession()
    session.current_node.prompt         # "Hi there. How are you feeling today?"
    session.submit_answer("Pretty good, thanks")
    session.reaction()                   # "That's wonderful to hear."
    if session.can_finish:
        ranked = session.finish()

A session is owned by one caller.  It keeps the answers it was given only
for its own lifetime: everything it hands out (``entries``, ``export()``,
``derived_signals()``) is answer-free.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from ary import settings
from ary.errors import SessionCompleteError, SessionNotReadyError
from ary.extraction.classifier import classify
from ary.extraction.signals import Clock, IdSource, infer
from ary.graph import local_graph
from ary.graph.conversation_graph import ConversationGraph
from ary.models.records import (
    COMPLETE,
    CompetenceProfile,
    DerivedSignal,
    EvidenceRecord,
    HistoryEntry,
    QuestionNode,
    RankedProfile,
    ResponseCategory,
)
from ary.scoring.profile_scorer import score

logger = logging.getLogger(__name__)


def extract_keywords(vocabulary: Sequence[str], text: str) -> tuple[str, ...]:
    """Vocabulary entries contained in the lowercased text, vocabulary order."""
    lowered = text.lower()
    return tuple(kw for kw in vocabulary if kw.lower() in lowered)


def advance(graph: ConversationGraph, node_id: str, text: str) -> tuple[HistoryEntry, str]:
    """Apply one answer at ``node_id``: the single transition of the navigator.

    Parameters
    ----------
    graph : ConversationGraph
    node_id : str
        The node whose prompt was answered.
    text : str
        The user's answer.

    Returns
    -------
    tuple[HistoryEntry, str]
        The recorded entry and the next node id (or ``COMPLETE``).
    """
    node = graph.node(node_id)
    category = classify(text)
    entry = HistoryEntry(
        question_id=node.id,
        question=node.prompt,
        category=category,
        keywords=extract_keywords(graph.keyword_vocabulary(node.id), text or ""),
        competencies=graph.competencies_for(node.id, category),
        answer=text or "",
    )
    next_id = graph.next(node.id, category)
    logger.debug(
        "Answer at %s classified %s → %s (%d keyword tags)",
        node.id, category.value, next_id, len(entry.keywords),
    )
    return entry, next_id


class ConversationSession:
    """One user's traversal of the conversation graph."""

    def __init__(
        self,
        graph: ConversationGraph | None = None,
        min_entries_to_finish: int | None = None,
    ) -> None:
        self.graph = graph if graph is not None else local_graph.get_conversation_graph()
        self.min_entries_to_finish = (
            min_entries_to_finish
            if min_entries_to_finish is not None
            else settings.MIN_ENTRIES_TO_FINISH
        )
        self._node_id: str = self.graph.start_id
        self._previous_node_id: str | None = None
        self._entries: list[HistoryEntry] = []

    def __repr__(self) -> str:
        return (
            f"ConversationSession(node={self._node_id!r}, entries={len(self._entries)})"
        )

    # ── State ────────────────────────────────────────────────────────────

    @property
    def current_node_id(self) -> str:
        return self._node_id

    @property
    def current_node(self) -> QuestionNode | None:
        """The node awaiting an answer; None once the session is complete."""
        if self.is_complete:
            return None
        return self.graph.node(self._node_id)

    @property
    def is_complete(self) -> bool:
        return self._node_id == COMPLETE

    @property
    def can_finish(self) -> bool:
        return len(self._entries) >= self.min_entries_to_finish

    @property
    def last_category(self) -> ResponseCategory | None:
        return self._entries[-1].category if self._entries else None

    @property
    def entries(self) -> tuple[EvidenceRecord, ...]:
        """Answer-free evidence trail, in conversation order."""
        return tuple(e.evidence() for e in self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    # ── Operations ───────────────────────────────────────────────────────

    def submit_answer(self, text: str) -> EvidenceRecord:
        """Record an answer to the current node and move on.

        Returns the answer-free evidence record of the step.
        """
        if self.is_complete:
            raise SessionCompleteError("The conversation is already complete")
        entry, next_id = advance(self.graph, self._node_id, text)
        self._entries.append(entry)
        self._previous_node_id = self._node_id
        self._node_id = next_id
        if self.is_complete:
            logger.info("Conversation complete after %d entries", len(self._entries))
        return entry.evidence()

    def reaction(self) -> str | None:
        """Reaction template of the last answered node for the last category."""
        if self._previous_node_id is None or self.last_category is None:
            return None
        return self.graph.node(self._previous_node_id).reactions[self.last_category]

    def derived_signals(
        self,
        id_source: IdSource | None = None,
        clock: Clock | None = None,
    ) -> list[DerivedSignal]:
        """Signals inferred from every answer so far."""
        text = " ".join(e.answer for e in self._entries)
        return infer(text, id_source=id_source, clock=clock)

    def finish(self, catalog: Sequence[CompetenceProfile] | None = None) -> RankedProfile:
        """Score the conversation; allowed once complete or ``can_finish``."""
        if not (self.is_complete or self.can_finish):
            raise SessionNotReadyError(
                f"At least {self.min_entries_to_finish} answers are needed to finish "
                f"(have {len(self._entries)})"
            )
        profiles = catalog if catalog is not None else local_graph.get_profile_catalog()
        return score(self.entries, profiles)

    def export(self, profile: RankedProfile | None = None) -> dict[str, Any]:
        """Plain structured evidence trail (and profile, when given)."""
        data: dict[str, Any] = {
            "entries": [e.to_dict() for e in self.entries],
            "complete": self.is_complete,
        }
        if profile is not None:
            data["profile"] = profile.to_dict()
        return data
