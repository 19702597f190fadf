"""Evidence aggregation and weighted competence-profile scoring.

Usage:
    from ary.scoring.profile_scorer import score

    ranked = score(session.entries, catalog)
    ranked.profile.title          # best match
    ranked.ranking                # every profile, score-descending

Scoring a profile against the flattened evidence of a conversation:

    +10  per pattern question id that was asked       (set membership)
    +5   per keyword pattern present among the tags
    +8   per competency pattern present among the tags
    +2   per occurrence of each matched keyword pattern
    +3   per occurrence of each matched competency pattern

Ties keep catalog order.  An empty history selects the first catalog entry.
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

from ary.errors import ConfigurationError
from ary.models.records import (
    CompetenceProfile,
    EvidenceRecord,
    MatchingPattern,
    ProfileScore,
    RankedProfile,
    frozen_mapping,
)
from ary.safety.boundaries import check_response

logger = logging.getLogger(__name__)

QUESTION_WEIGHT = 10
KEYWORD_WEIGHT = 5
COMPETENCY_WEIGHT = 8
KEYWORD_FREQUENCY_WEIGHT = 2
COMPETENCY_FREQUENCY_WEIGHT = 3

TOP_TAGS = 3
MIN_ENTRIES_FOR_PROGRESSION = 4

PROGRESSION_SENTENCE = (
    "As our conversation progressed, you became more specific and detailed "
    "in your responses, showing increasing self-awareness and reflection."
)


@dataclass(frozen=True)
class Evidence:
    """Flattened tags of a conversation."""

    question_ids: frozenset[str]
    keyword_counts: Counter[str]
    competency_counts: Counter[str]


def build_evidence(history: Iterable[EvidenceRecord]) -> Evidence:
    """Flatten tags across the history into frequency tables.

    Counters keep first-seen order, which decides ties between equally
    frequent tags.
    """
    question_ids: set[str] = set()
    keywords: Counter[str] = Counter()
    competencies: Counter[str] = Counter()
    for entry in history:
        question_ids.add(entry.question_id)
        keywords.update(entry.keywords)
        competencies.update(entry.competencies)
    return Evidence(frozenset(question_ids), keywords, competencies)


def score_profile(profile: CompetenceProfile, evidence: Evidence) -> int:
    """Score a single profile against flattened evidence."""
    pattern = profile.matching
    total = QUESTION_WEIGHT * sum(1 for q in pattern.question_ids if q in evidence.question_ids)

    for kw in pattern.keyword_patterns:
        count = evidence.keyword_counts.get(kw, 0)
        if count:
            total += KEYWORD_WEIGHT + KEYWORD_FREQUENCY_WEIGHT * count

    for comp in pattern.competence_patterns:
        count = evidence.competency_counts.get(comp, 0)
        if count:
            total += COMPETENCY_WEIGHT + COMPETENCY_FREQUENCY_WEIGHT * count

    return total


def _keyword_total(entries: Sequence[EvidenceRecord]) -> int:
    return sum(len(e.keywords) for e in entries)


def detailed_evaluation(
    profile: CompetenceProfile,
    history: Sequence[EvidenceRecord],
    evidence: Evidence,
) -> str:
    """Profile template plus observations drawn from the conversation."""
    parts = [profile.detailed_evaluation]

    top_keywords = [kw for kw, _ in evidence.keyword_counts.most_common(TOP_TAGS)]
    if top_keywords:
        parts.append(
            f"Throughout our conversation, you mentioned {', '.join(top_keywords)} "
            "multiple times, showing these are important themes for you."
        )

    top_competencies = evidence.competency_counts.most_common(TOP_TAGS)
    if top_competencies:
        names = ", ".join(c for c, _ in top_competencies)
        counts = ", ".join(str(n) for _, n in top_competencies)
        parts.append(
            f"Your responses consistently demonstrated {names}, "
            f"appearing {counts} times respectively."
        )

    if len(history) >= MIN_ENTRIES_FOR_PROGRESSION:
        half = len(history) // 2
        if _keyword_total(history[half:]) > _keyword_total(history[:half]):
            parts.append(PROGRESSION_SENTENCE)

    return " ".join(parts)


def score(
    history: Iterable[EvidenceRecord],
    catalog: Sequence[CompetenceProfile],
) -> RankedProfile:
    """Rank every catalog profile against the history and select the best.

    Parameters
    ----------
    history : iterable of EvidenceRecord
        Evidence records or history entries, in conversation order.
    catalog : sequence of CompetenceProfile
        Non-empty profile catalog; its order breaks ties.

    Returns
    -------
    RankedProfile
        The selected profile carries the synthesized detailed evaluation.
    """
    if not catalog:
        raise ConfigurationError("Competence profile catalog is empty")

    entries = list(history)
    evidence = build_evidence(entries)

    if not entries:
        ranking = tuple(ProfileScore(p.id, 0) for p in catalog)
        return RankedProfile(
            profile=catalog[0],
            score=0,
            ranking=ranking,
            keyword_counts=frozen_mapping({}),
            competency_counts=frozen_mapping({}),
        )

    scored = [(profile, score_profile(profile, evidence)) for profile in catalog]
    scored.sort(key=lambda item: item[1], reverse=True)  # stable: catalog order on ties
    top, top_score = scored[0]

    logger.info(
        "Scored %d profiles over %d entries: top=%s (%d)",
        len(catalog), len(entries), top.id, top_score,
    )

    return RankedProfile(
        profile=replace(top, detailed_evaluation=detailed_evaluation(top, entries, evidence)),
        score=top_score,
        ranking=tuple(ProfileScore(p.id, s) for p, s in scored),
        keyword_counts=frozen_mapping(evidence.keyword_counts),
        competency_counts=frozen_mapping(evidence.competency_counts),
    )


def explain_score(ranked: RankedProfile, limit: int = 5) -> str:
    """Multi-line operator report of a ranking (not meant for end users)."""
    lines = [f"Selected profile: {ranked.profile.title} ({ranked.profile.id}) score={ranked.score}"]
    lines.append("Ranking:")
    for position, ps in enumerate(ranked.ranking[:limit], start=1):
        lines.append(f"  {position}. {ps.profile_id:<40} {ps.score:>4}")
    if ranked.keyword_counts:
        kws = ", ".join(f"{k}×{n}" for k, n in ranked.keyword_counts.items())
        lines.append(f"Keyword tags: {kws}")
    if ranked.competency_counts:
        comps = ", ".join(f"{c}×{n}" for c, n in ranked.competency_counts.items())
        lines.append(f"Competency tags: {comps}")
    return "\n".join(lines)


# ── Catalog loading ──────────────────────────────────────────────────────


def _parse_profile(raw: Mapping[str, Any]) -> CompetenceProfile:
    try:
        matching = raw.get("matching", {})
        return CompetenceProfile(
            id=raw["id"],
            title=raw["title"],
            summary=raw["summary"],
            competencies=tuple(raw.get("competencies", ())),
            detailed_evaluation=raw["detailed_evaluation"],
            matching=MatchingPattern(
                question_ids=tuple(matching.get("question_ids", ())),
                keyword_patterns=tuple(matching.get("keyword_patterns", ())),
                competence_patterns=tuple(matching.get("competence_patterns", ())),
            ),
        )
    except KeyError as e:
        raise ConfigurationError(f"Competence profile is missing field {e}") from None


def parse_profile_catalog(
    data: Mapping[str, Any],
    known_question_ids: Iterable[str] | None = None,
) -> tuple[CompetenceProfile, ...]:
    """Build the catalog from its JSON structure and check it.

    Unknown question ids only cost a profile points, so they are logged
    rather than rejected.  Empty catalogs, duplicate ids and summaries that
    break the wording rules are configuration errors.
    """
    catalog = tuple(_parse_profile(raw) for raw in data.get("profiles", ()))
    if not catalog:
        raise ConfigurationError("Competence profile catalog is empty")

    seen: set[str] = set()
    for profile in catalog:
        if profile.id in seen:
            raise ConfigurationError(f"Duplicate competence profile id {profile.id!r}")
        seen.add(profile.id)
        for label, text in (("summary", profile.summary), ("evaluation", profile.detailed_evaluation)):
            result = check_response(text)
            if not result.ok:
                raise ConfigurationError(
                    f"Profile {profile.id!r} {label}: {result.message}"
                )

    if known_question_ids is not None:
        known = set(known_question_ids)
        for profile in catalog:
            for qid in profile.matching.question_ids:
                if qid not in known:
                    logger.warning(
                        "Profile %s references unknown question id %s", profile.id, qid
                    )
    return catalog


def load_profile_catalog(
    path: str | Path,
    known_question_ids: Iterable[str] | None = None,
) -> tuple[CompetenceProfile, ...]:
    """Load the read-only profile catalog stored at ``path``."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot read profile catalog {path}: {e}") from e

    catalog = parse_profile_catalog(data, known_question_ids)
    logger.info("Loaded %d competence profiles", len(catalog))
    return catalog
