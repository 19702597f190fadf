"""Boundary rule engine: screen system text and detect user distress.

Usage:
    from ary.safety.boundaries import check_response, check_user_input

    check_user_input("I can't cope anymore")        # → EscalationLevel.MILD
    check_response("You should rest more").violation  # → PRESCRIPTIVE

All functions are pure lookups over the compiled tables in
``ary.safety.rules``.  Logging records levels and violation kinds only,
never the text that was checked.

User-input checks yield NONE, MILD or SEVERE; MODERATE is only produced by
diagnostic language on the response side.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from ary.models.records import BoundaryCheckResult, BoundaryViolation, EscalationLevel
from ary.safety import rules

logger = logging.getLogger(__name__)

SEVERE_MESSAGE = (
    "I'm here to listen, but I'm not a mental health professional. "
    "If you're experiencing thoughts of self-harm, please reach out to a "
    "crisis helpline or mental health professional immediately."
)
MODERATE_MESSAGE = (
    "I want to make sure you have the support you need. Consider speaking "
    "with a trusted friend, family member, or professional counselor."
)

ESCALATION_MESSAGES: Mapping[EscalationLevel, str | None] = MappingProxyType({
    EscalationLevel.NONE: None,
    EscalationLevel.MILD: None,
    EscalationLevel.MODERATE: MODERATE_MESSAGE,
    EscalationLevel.SEVERE: SEVERE_MESSAGE,
})

if set(ESCALATION_MESSAGES) != set(EscalationLevel):
    raise RuntimeError("ESCALATION_MESSAGES must cover every EscalationLevel")

# (table, violation, level, explanation), in check order
_RESPONSE_CHECKS = (
    (
        rules.PRESCRIPTIVE,
        BoundaryViolation.PRESCRIPTIVE,
        EscalationLevel.MILD,
        "Response contains prohibited language",
    ),
    (
        rules.DIAGNOSTIC,
        BoundaryViolation.DIAGNOSTIC,
        EscalationLevel.MODERATE,
        "Response contains diagnostic language",
    ),
    (
        rules.EVALUATIVE,
        BoundaryViolation.EVALUATIVE,
        EscalationLevel.MILD,
        "Response contains evaluative language",
    ),
    (
        rules.CLINICAL,
        BoundaryViolation.CLINICAL,
        EscalationLevel.MILD,
        "Response frames the conversation as clinical care",
    ),
    (
        rules.COERCIVE,
        BoundaryViolation.COERCIVE,
        EscalationLevel.MILD,
        "Response contains coercive language",
    ),
)

QUESTION_VIOLATION_MESSAGE = "Question contains prohibited evaluative or diagnostic language"


@dataclass(frozen=True)
class QuestionCheck:
    valid: bool
    violation: str | None = None


def _normalize(text: str | None) -> str:
    if not text:
        return ""
    return text.replace("\u2019", "'").replace("\u2018", "'")


def check_user_input(text: str | None) -> EscalationLevel:
    """Detect distress in user text.  Severe patterns dominate mild ones."""
    normalized = _normalize(text)
    if rules.first_match(rules.SEVERE_DISTRESS, normalized):
        logger.warning("Severe distress indicator detected in user input")
        return EscalationLevel.SEVERE
    if rules.first_match(rules.MILD_DISTRESS, normalized):
        logger.info("Mild distress indicator detected in user input")
        return EscalationLevel.MILD
    return EscalationLevel.NONE


def check_response(text: str | None) -> BoundaryCheckResult:
    """Screen system-authored text.  At most one violation, first table wins.

    Parameters
    ----------
    text : str
        Candidate prompt, reaction or summary.

    Returns
    -------
    BoundaryCheckResult
        ``violation`` is None and the level NONE when the text is clean.
    """
    normalized = _normalize(text)
    for table, violation, level, explanation in _RESPONSE_CHECKS:
        if rules.first_match(table, normalized):
            logger.debug("Boundary violation: %s (%s)", violation.value, level.value)
            return BoundaryCheckResult(
                violation=violation,
                escalation_level=level,
                message=explanation,
            )
    return BoundaryCheckResult()


def escalation_message(level: EscalationLevel) -> str | None:
    """Fixed user-facing disclaimer for ``level`` (None for NONE and MILD)."""
    return ESCALATION_MESSAGES[level]


def validate_question(text: str | None) -> QuestionCheck:
    """Reject prompts that ask for self-rating, scores, directives or diagnoses."""
    if rules.first_match(rules.PROHIBITED_QUESTIONS, _normalize(text)):
        return QuestionCheck(valid=False, violation=QUESTION_VIOLATION_MESSAGE)
    return QuestionCheck(valid=True)
