"""Curated word lists for answer classification and signal inference.

Two groups live here:

  - sentiment keywords used by the response classifier (matched as whole
    tokens, so contractions such as "can't" are single entries);
  - per-branch competence vocabularies and trait phrases used by the signal
    inference engine (matched as substrings, so "organize" also hits
    "organized" and "organizing").

The classifier makes a coarse sentiment decision only; a signal is a hint,
not a measurement.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from ary.models.records import CompetenceBranch

# ═══════════════════════════════════════════════════════════════════════════
# POSITIVE SENTIMENT
# Any hit makes an answer POSITIVE unless a negative keyword is also present.
# ═══════════════════════════════════════════════════════════════════════════
POSITIVE_KEYWORDS: frozenset[str] = frozenset({
    "good", "great", "well", "excellent", "wonderful", "amazing",
    "fantastic", "happy", "happier", "happiest", "excited", "exciting",
    "love", "loves", "loved", "loving",
    "enjoy", "enjoys", "enjoyed", "enjoying", "enjoyable",
    "yes", "yeah", "sure",
})

# ═══════════════════════════════════════════════════════════════════════════
# NEGATIVE SENTIMENT
# Dominates positive sentiment: "good but stressed" is NEGATIVE.
# ═══════════════════════════════════════════════════════════════════════════
NEGATIVE_KEYWORDS: frozenset[str] = frozenset({
    "bad", "not", "no", "never",
    "don't", "dont", "can't", "cant", "cannot", "won't", "wont",
    "difficult", "difficulty", "difficulties", "hard", "tired", "tiring",
    "struggle", "struggles", "struggled", "struggling",
    "stress", "stresses", "stressed", "stressing", "stressful",
    "worry", "worries", "worried", "worrying",
})


# ═══════════════════════════════════════════════════════════════════════════
# COMPETENCE BRANCH VOCABULARIES
# Order matters: the first matched keyword picks the trait phrase, and the
# vocabulary size is the denominator of a signal's confidence.
# ═══════════════════════════════════════════════════════════════════════════
BRANCH_KEYWORDS: Mapping[CompetenceBranch, tuple[str, ...]] = MappingProxyType({
    CompetenceBranch.COGNITIVE: (
        "analyze", "structure", "organize", "think", "understand", "solve",
        "complexity", "pattern", "logic", "reasoning", "strategy", "plan",
    ),
    CompetenceBranch.INTERPERSONAL: (
        "help", "support", "listen", "understand", "calm", "trust",
        "connect", "communicate", "relate", "empathy", "collaborate", "team",
    ),
    CompetenceBranch.MOTIVATION: (
        "excited", "energized", "passionate", "driven", "motivated",
        "purpose", "meaning", "fulfillment", "satisfaction", "inspired",
        "engaged",
    ),
    CompetenceBranch.EXECUTION: (
        "deliver", "complete", "finish", "execute", "implement", "action",
        "results", "outcome", "achieve", "accomplish", "produce", "create",
    ),
})

# Keyword → trait phrase.  Keywords without an entry fall back to
# "demonstrates <branch> competence".
TRAIT_PHRASES: Mapping[CompetenceBranch, Mapping[str, str]] = MappingProxyType({
    CompetenceBranch.COGNITIVE: MappingProxyType({
        "analyze": "analyzes complex information",
        "structure": "organizes complexity",
        "think": "thinks systematically",
        "solve": "solves problems methodically",
    }),
    CompetenceBranch.INTERPERSONAL: MappingProxyType({
        "help": "supports others effectively",
        "listen": "listens with empathy",
        "calm": "creates calm and trust",
        "connect": "connects with people",
    }),
    CompetenceBranch.MOTIVATION: MappingProxyType({
        "excited": "energized by meaningful work",
        "passionate": "driven by purpose",
        "motivated": "self-motivated",
        "inspired": "finds inspiration in challenges",
    }),
    CompetenceBranch.EXECUTION: MappingProxyType({
        "deliver": "delivers on commitments",
        "complete": "sees tasks through",
        "execute": "executes with precision",
        "achieve": "achieves results",
    }),
})

if set(BRANCH_KEYWORDS) != set(CompetenceBranch) or set(TRAIT_PHRASES) != set(CompetenceBranch):
    raise RuntimeError("branch vocabularies must cover every CompetenceBranch")
