"""Immutable records shared by the conversation, scoring and safety layers.

Everything here is plain data: frozen dataclasses with tuple-valued
collections and read-only, enum-keyed mappings.  ``to_dict()`` converts a
record into the structured form used at the transport boundary (enum
members become their string values).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

# Terminal pseudo-node: a transition to it ends the conversation.
COMPLETE = "complete"


class ResponseCategory(str, Enum):
    """Coarse classification of a free-text answer."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    DETAILED = "detailed"
    VAGUE = "vague"


class CompetenceBranch(str, Enum):
    """The four dimensions derived signals are bucketed into."""

    COGNITIVE = "cognitive"
    INTERPERSONAL = "interpersonal"
    MOTIVATION = "motivation"
    EXECUTION = "execution"


class EscalationLevel(str, Enum):
    NONE = "none"
    MILD = "mild"          # continue, no special message
    MODERATE = "moderate"  # supportive disclaimer
    SEVERE = "severe"      # refer to external human support


class BoundaryViolation(str, Enum):
    DIAGNOSTIC = "diagnostic"
    EVALUATIVE = "evaluative"
    PRESCRIPTIVE = "prescriptive"
    CLINICAL = "clinical"
    COERCIVE = "coercive"


def frozen_mapping(data: Mapping[Any, Any]) -> Mapping[Any, Any]:
    """Return a read-only view over a copy of ``data``."""
    return MappingProxyType(dict(data))


# ── Conversation graph ───────────────────────────────────────────────────


@dataclass(frozen=True)
class AnswerOption:
    """An example answer: contributes classification examples and tags only."""

    text: str
    category: ResponseCategory
    keywords: tuple[str, ...] = ()
    competencies: tuple[str, ...] = ()


@dataclass(frozen=True)
class QuestionNode:
    """A single step in the conversation graph.

    ``reactions`` and ``next_ids`` are keyed by every ``ResponseCategory``;
    the loader refuses nodes where either map is incomplete.
    """

    id: str
    prompt: str
    options: tuple[AnswerOption, ...]
    reactions: Mapping[ResponseCategory, str]
    next_ids: Mapping[ResponseCategory, str]

    @property
    def is_final(self) -> bool:
        """True when every category leads to the terminal state."""
        return all(nid == COMPLETE for nid in self.next_ids.values())


# ── Evidence ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class EvidenceRecord:
    """Answer-free record of one conversation step.

    This is the only per-step shape that leaves a session: question, resolved
    category and the tags extracted from the answer.
    """

    question_id: str
    question: str
    category: ResponseCategory
    keywords: tuple[str, ...] = ()
    competencies: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "question_id": self.question_id,
            "question": self.question,
            "category": self.category.value,
            "keywords": list(self.keywords),
            "competencies": list(self.competencies),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EvidenceRecord":
        return cls(
            question_id=data["question_id"],
            question=data.get("question", ""),
            category=ResponseCategory(data["category"]),
            keywords=tuple(data.get("keywords", ())),
            competencies=tuple(data.get("competencies", ())),
        )


@dataclass(frozen=True)
class HistoryEntry(EvidenceRecord):
    """One traversal step including the user's answer text.

    Held privately by a session for its lifetime; ``evidence()`` strips the
    answer before anything is handed to a caller.
    """

    answer: str = field(default="", repr=False)

    def evidence(self) -> EvidenceRecord:
        return EvidenceRecord(
            question_id=self.question_id,
            question=self.question,
            category=self.category,
            keywords=self.keywords,
            competencies=self.competencies,
        )


# ── Profiles ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class MatchingPattern:
    question_ids: tuple[str, ...] = ()
    keyword_patterns: tuple[str, ...] = ()
    competence_patterns: tuple[str, ...] = ()


@dataclass(frozen=True)
class CompetenceProfile:
    """A read-only catalog entry describing a competence profile."""

    id: str
    title: str
    summary: str
    competencies: tuple[str, ...]
    detailed_evaluation: str
    matching: MatchingPattern = MatchingPattern()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "summary": self.summary,
            "competencies": list(self.competencies),
            "detailed_evaluation": self.detailed_evaluation,
        }


@dataclass(frozen=True)
class ProfileScore:
    profile_id: str
    score: int


@dataclass(frozen=True)
class RankedProfile:
    """Result of scoring a conversation against the catalog."""

    profile: CompetenceProfile
    score: int
    ranking: tuple[ProfileScore, ...]
    keyword_counts: Mapping[str, int]
    competency_counts: Mapping[str, int]

    def to_dict(self) -> dict[str, Any]:
        return {
            "profile": self.profile.to_dict(),
            "score": self.score,
            "ranking": [
                {"profile_id": ps.profile_id, "score": ps.score} for ps in self.ranking
            ],
            "keyword_counts": dict(self.keyword_counts),
            "competency_counts": dict(self.competency_counts),
        }


# ── Signals & safety ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class DerivedSignal:
    """A non-verbatim inference ("demonstrates X") drawn from user text.

    ``confidence`` is internal and always clamped to [0, 1].
    """

    id: str
    branch: CompetenceBranch
    trait: str
    confidence: float
    timestamp: datetime

    def __post_init__(self) -> None:
        clamped = min(1.0, max(0.0, float(self.confidence)))
        object.__setattr__(self, "confidence", clamped)

    def to_dict(self, *, include_confidence: bool = True) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "branch": self.branch.value,
            "trait": self.trait,
            "timestamp": self.timestamp.isoformat(),
        }
        if include_confidence:
            data["confidence"] = self.confidence
        return data


@dataclass(frozen=True)
class BoundaryCheckResult:
    violation: BoundaryViolation | None = None
    escalation_level: EscalationLevel = EscalationLevel.NONE
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.violation is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "violation": self.violation.value if self.violation else None,
            "escalation_level": self.escalation_level.value,
            "message": self.message,
        }
