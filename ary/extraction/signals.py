"""Signal inference: derive "demonstrates X" hints from user text.

A signal names a competence branch and a trait phrase; it never quotes the
user.  Confidence is the share of a branch's vocabulary that appeared in the
text and stays internal (the HTTP layer strips it).

Ids and timestamps are injected so callers and tests can make them
deterministic::

    infer(text, id_source=sequential_ids("sig"), clock=lambda: fixed_time)
"""

from __future__ import annotations

import itertools
import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, Iterator, Mapping

from ary.extraction.word_lists import BRANCH_KEYWORDS, TRAIT_PHRASES
from ary.models.records import CompetenceBranch, DerivedSignal

logger = logging.getLogger(__name__)

IdSource = Iterator[str]
Clock = Callable[[], datetime]


def sequential_ids(prefix: str = "signal") -> IdSource:
    """Monotonic ids ``<prefix>-1``, ``<prefix>-2`` … (a fresh counter per call)."""
    return (f"{prefix}-{n}" for n in itertools.count(1))


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _trait_for(branch: CompetenceBranch, keyword: str) -> str:
    phrase = TRAIT_PHRASES[branch].get(keyword)
    if phrase is None:
        return f"demonstrates {branch.value} competence"
    return phrase


def infer(
    text: str | None,
    id_source: IdSource | None = None,
    clock: Clock | None = None,
) -> list[DerivedSignal]:
    """Infer at most one signal per competence branch from ``text``.

    Parameters
    ----------
    text : str
        User text (one answer, or several joined by spaces).
    id_source : iterator of str, optional
        Supplies signal ids.  Defaults to ``sequential_ids()``.
    clock : callable, optional
        Returns the timestamp for every signal in this call.  Defaults to
        timezone-aware UTC now.

    Returns
    -------
    list[DerivedSignal]
        Branch enum order; branches without a keyword hit are omitted.
    """
    lowered = (text or "").lower()
    if not lowered.strip():
        return []

    ids = id_source if id_source is not None else sequential_ids()
    timestamp = (clock or utc_now)()

    signals: list[DerivedSignal] = []
    for branch in CompetenceBranch:
        vocabulary = BRANCH_KEYWORDS[branch]
        matched = [kw for kw in vocabulary if kw in lowered]
        if not matched:
            continue
        signals.append(
            DerivedSignal(
                id=next(ids),
                branch=branch,
                trait=_trait_for(branch, matched[0]),
                confidence=min(len(matched) / len(vocabulary), 1.0),
                timestamp=timestamp,
            )
        )

    logger.debug("Inferred %d signal(s)", len(signals))
    return signals


def infer_messages(
    messages: Iterable[Mapping[str, object]],
    id_source: IdSource | None = None,
    clock: Clock | None = None,
) -> list[DerivedSignal]:
    """Infer signals from the user messages of a chat transcript.

    Only messages with ``role == "user"`` contribute; their contents are
    joined with single spaces.  Messages without a role count as user
    messages.
    """
    parts = [
        str(m.get("content") or "")
        for m in messages
        if m.get("role", "user") == "user"
    ]
    return infer(" ".join(parts), id_source=id_source, clock=clock)
