"""Compiled boundary and distress rule tables.

Every table is a tuple of case-insensitive compiled patterns.  Nothing in
this module is mutable after import.

The distress tables are matched against user input only; the remaining
tables are matched against system-authored text (prompts, reactions,
summaries).  The two groups are maintained independently even where their
vocabulary overlaps ("you have" appears in both the directive and the
diagnostic table).
"""

from __future__ import annotations

import re


def _compile(*patterns: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


# ═══════════════════════════════════════════════════════════════════════════
# USER INPUT: DISTRESS INDICATORS
# ═══════════════════════════════════════════════════════════════════════════

# Active self-harm ideation, explicit crisis language
SEVERE_DISTRESS = _compile(
    r"want to (?:die|kill myself|end it)",
    r"suicid",
    r"self[- ]?harm",
    r"can'?t go on",
)

# Hopelessness, overwhelm, generalized failure framing
MILD_DISTRESS = _compile(
    r"(?:feel|feeling) (?:hopeless|worthless|empty)",
    r"can'?t (?:cope|handle|deal)",
    r"(?:always|never) (?:fail|screw up)",
)


# ═══════════════════════════════════════════════════════════════════════════
# SYSTEM TEXT: PROHIBITED LANGUAGE
# Checked in this order; the first table with a hit decides the violation.
# ═══════════════════════════════════════════════════════════════════════════

# Directives, labels and rankings addressed at the user
PRESCRIPTIVE = _compile(
    r"you should",
    r"you need to",
    r"you must",
    r"you're (?:suffering from|diagnosed with|have)",
    r"you have (?:a|an) (?:disorder|condition|problem)",
    r"your score",
    r"you rank",
    r"you're (?:better|worse) than",
)

DIAGNOSTIC = _compile(
    r"you (?:have|suffer from|are diagnosed with)",
    r"(?:disorder|condition|syndrome|illness)",
    r"you're (?:depressed|anxious|bipolar)",
)

EVALUATIVE = _compile(
    r"you're (?:better|worse|good|bad) (?:at|than)",
    r"your (?:score|rating|rank)",
    r"you (?:excel|struggle|fail) (?:at|in)",
)

# Framing the conversation as care delivery
CLINICAL = _compile(
    r"therap(?:y|ist|eutic)",
    r"treatment plan",
    r"medication",
    r"prescri(?:be|ption)",
)

COERCIVE = _compile(
    r"or else",
    r"you have no choice",
    r"you'd better",
    r"whether you like it or not",
)


# ═══════════════════════════════════════════════════════════════════════════
# SYSTEM TEXT: QUESTION PROMPTS
# Prompts may not ask for self-rating, weaknesses, scores or diagnoses.
# ═══════════════════════════════════════════════════════════════════════════
PROHIBITED_QUESTIONS = _compile(
    r"how (?:well|good|bad) (?:are|were) you",
    r"what (?:is|are) your (?:weakness|strength|score|rating)",
    r"you should",
    r"you need to",
    r"you must",
    r"have you (?:ever|been) (?:diagnosed|treated)",
    r"do you (?:suffer|have) (?:from|with)",
)


def first_match(patterns: tuple[re.Pattern[str], ...], text: str) -> re.Pattern[str] | None:
    """Return the first pattern that matches anywhere in ``text``."""
    for pattern in patterns:
        if pattern.search(text):
            return pattern
    return None
