"""
Aggregate Scorer

Classifies a multi-line submission. Blank lines are dropped BEFORE
classification, so they never appear in the per-line results and add
nothing to the totals. (The single-line classifier, by contrast, returns
an explicit neutral result for an empty line.)

Totals:
  total_points   exact sum of per-line points
  valid_count    lines whose result is valid
  penalty_count  lines whose result is not valid
"""

from __future__ import annotations

from dataclasses import dataclass, field

from observation_engine.classifier import ClassificationResult, classify_line
from observation_engine.logging import get_logger
from observation_engine.registry import RuleRegistry, default_registry

logger = get_logger("scorer")


@dataclass
class AggregateResult:
    """Result of scoring a whole submission."""
    per_line: list[ClassificationResult] = field(default_factory=list)
    lines: list[str] = field(default_factory=list)

    @property
    def total_points(self) -> int:
        return sum(r.points for r in self.per_line)

    @property
    def valid_count(self) -> int:
        return sum(1 for r in self.per_line if r.valid)

    @property
    def penalty_count(self) -> int:
        return sum(1 for r in self.per_line if not r.valid)

    def to_dict(self) -> dict:
        return {
            "per_line": [
                {"text": line, **result.to_dict()}
                for line, result in zip(self.lines, self.per_line)
            ],
            "total_points": self.total_points,
            "valid_count": self.valid_count,
            "penalty_count": self.penalty_count,
        }


def split_submission(text: str) -> list[str]:
    """Split on line feeds only, then trim (dropping a trailing carriage return) and skip blanks."""
    return [line.strip() for line in (text or "").split("\n") if line.strip()]


def classify_submission(
    text: str, registry: RuleRegistry = default_registry,
) -> AggregateResult:
    """
    Classify every non-blank line of a submission independently.

    Returns:
        AggregateResult whose totals are derived from ``per_line``, so the
        sum invariant holds by construction.
    """
    lines = split_submission(text)
    result = AggregateResult(
        per_line=[classify_line(line, registry) for line in lines],
        lines=lines,
    )

    logger.debug(
        "Submission scored",
        extra={
            "line_count": len(lines),
            "total_points": result.total_points,
            "valid_count": result.valid_count,
            "penalty_count": result.penalty_count,
        },
    )
    return result
