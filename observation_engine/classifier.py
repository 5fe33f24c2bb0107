"""
Line Classifier — Single-Line Decision Procedure

Grades one observation line against the registry in a fixed, total order:

  1. Blank line          -> valid, 0 points, no feedback
  2. Hard triggers       -> hard_penalty (never exempted by quotation)
  3. Soft triggers       -> soft_warning (skipped when quotation-exempt)
  4. Bonus patterns      -> bonus, in descending priority
  5. Nothing matched     -> valid, +5, "Observation recorded."

Exactly one outcome per line. There is no failure path: any string,
however malformed, degrades to the default-valid result.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Optional

from observation_engine.logging import get_logger
from observation_engine.quotation import has_quoted_span, is_quotation_exempt
from observation_engine.registry import (
    DEFAULT_VALID_FEEDBACK,
    DEFAULT_VALID_POINTS,
    OUTCOME_FOR_TIER,
    OutcomeType,
    Rule,
    RuleRegistry,
    default_registry,
)

logger = get_logger("classifier")


@dataclass(frozen=True)
class ClassificationResult:
    """Outcome of classifying a single line."""
    valid: bool
    outcome_type: OutcomeType
    points: int
    feedback: str
    matched_rule: Optional[str] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["outcome_type"] = self.outcome_type.value
        return data


BLANK_RESULT = ClassificationResult(
    valid=True, outcome_type=OutcomeType.VALID, points=0, feedback="",
)

DEFAULT_RESULT = ClassificationResult(
    valid=True,
    outcome_type=OutcomeType.VALID,
    points=DEFAULT_VALID_POINTS,
    feedback=DEFAULT_VALID_FEEDBACK,
)


def _result_for(rule: Rule, registry: RuleRegistry) -> ClassificationResult:
    outcome = OUTCOME_FOR_TIER[rule.tier]
    return ClassificationResult(
        valid=outcome is OutcomeType.BONUS,
        outcome_type=outcome,
        points=rule.points,
        feedback=registry.feedback_for(rule),
        matched_rule=rule.id.value,
    )


def _first_match(
    rules: tuple[Rule, ...], line: str, quoted: bool,
) -> Optional[Rule]:
    for rule in rules:
        if rule.requires_quote and not quoted:
            continue
        if rule.matches(line):
            return rule
    return None


def classify_line(
    text: str, registry: RuleRegistry = default_registry,
) -> ClassificationResult:
    """
    Classify one observation line.

    Args:
        text: The raw line. Surrounding whitespace is ignored.
        registry: Rule set to evaluate against. Defaults to the shared
            frozen registry.

    Returns:
        An immutable ClassificationResult.
    """
    line = (text or "").strip()
    if not line:
        return BLANK_RESULT

    quoted = has_quoted_span(line)

    rule = _first_match(registry.hard_rules, line, quoted)
    if rule is None and not is_quotation_exempt(line):
        rule = _first_match(registry.soft_rules, line, quoted)
    if rule is None:
        rule = _first_match(registry.bonus_rules, line, quoted)

    if rule is None:
        return DEFAULT_RESULT

    logger.debug(
        "Rule matched",
        extra={"rule_id": rule.id.value, "points": rule.points},
    )
    return _result_for(rule, registry)
