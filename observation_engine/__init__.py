"""
Observation Engine — Interpretation Detection for Bible Observations

Grades a learner's free-text observation of a passage: literal
observation is rewarded, interpretation is penalized. Deterministic,
rule-based, stateless.

Public API:
  - classify_line:          Grade a single observation line
  - classify_submission:    Grade a multi-line submission with totals
  - check_decoy_verb:       Flag verbs that are not in the passage
  - score_level_submission: Level flow (classification + decoy override)
  - default_registry:       The frozen rule set shared by every call
  - RuleRegistry:           Build an alternative, validated rule set

Usage:
    from observation_engine import classify_line, classify_submission
    result = classify_line("The word 'ran' appears in verse 20.")
    result.points  # 20
"""

__version__ = "1.0.0"

from observation_engine.registry import (
    REGISTRY_VERSION,
    OutcomeType,
    Rule,
    RuleId,
    RuleRegistry,
    RegistryError,
    Tier,
    default_registry,
)
from observation_engine.quotation import is_quotation_exempt
from observation_engine.classifier import ClassificationResult, classify_line
from observation_engine.scorer import AggregateResult, classify_submission
from observation_engine.decoy import DecoyMatch, check_decoy_verb
from observation_engine.levels import (
    ALL_PACKS,
    LevelResult,
    get_level,
    get_pack,
    score_level_submission,
)

__all__ = [
    "REGISTRY_VERSION",
    "OutcomeType",
    "Rule",
    "RuleId",
    "RuleRegistry",
    "RegistryError",
    "Tier",
    "default_registry",
    "is_quotation_exempt",
    "ClassificationResult",
    "classify_line",
    "AggregateResult",
    "classify_submission",
    "DecoyMatch",
    "check_decoy_verb",
    "ALL_PACKS",
    "LevelResult",
    "get_level",
    "get_pack",
    "score_level_submission",
]
