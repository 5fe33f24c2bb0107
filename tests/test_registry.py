"""
Tests for the Pattern Registry — the rule set everything else reads.

If the registry is wrong, every classification built on it is wrong.
"""

import dataclasses

import pytest

from observation_engine.registry import (
    BONUS_PATTERNS,
    FALLBACK_FEEDBACK,
    HARD_TRIGGERS,
    REGISTRY_VERSION,
    SOFT_TRIGGERS,
    RegistryError,
    Rule,
    RuleId,
    RuleRegistry,
    Tier,
    default_registry,
)


def _rule(rule_id=RuleId.COUNT, tier=Tier.BONUS_PATTERN, points=10,
          indicators=(r"\bcount\b",), feedback="ok"):
    return Rule(
        id=rule_id, name="Test", tier=tier, indicators=indicators,
        feedback=feedback, points=points,
    )


class TestRegistryVersion:
    def test_version_exists(self):
        assert REGISTRY_VERSION == "1.0.0"


class TestDefaultRegistry:
    """The shipped rule set: counts, order and point values."""

    def test_rule_counts(self):
        assert len(default_registry.hard_rules) == 6
        assert len(default_registry.soft_rules) == 1
        assert len(default_registry.bonus_rules) == 6
        assert len(default_registry) == 13

    def test_every_rule_id_has_a_rule(self):
        for rid in RuleId:
            assert rid in default_registry

    def test_bonus_priority_order(self):
        ids = [r.id for r in default_registry.bonus_rules]
        assert ids == [
            RuleId.QUOTE_CITATION, RuleId.AGENCY, RuleId.SEQUENCE,
            RuleId.COUNT, RuleId.ENTITY_COUNT, RuleId.SPATIAL,
        ]

    def test_bonus_points(self):
        points = {r.id: r.points for r in default_registry.bonus_rules}
        assert points[RuleId.QUOTE_CITATION] == 20
        assert points[RuleId.AGENCY] == 15
        assert points[RuleId.SEQUENCE] == 15
        assert points[RuleId.COUNT] == 10
        assert points[RuleId.ENTITY_COUNT] == 10
        assert points[RuleId.SPATIAL] == 10

    def test_trigger_points(self):
        assert all(r.points == -10 for r in default_registry.hard_rules)
        assert all(r.points == -5 for r in default_registry.soft_rules)

    def test_tiers_match_groups(self):
        assert all(r.tier is Tier.HARD_TRIGGER for r in HARD_TRIGGERS)
        assert all(r.tier is Tier.SOFT_TRIGGER for r in SOFT_TRIGGERS)
        assert all(r.tier is Tier.BONUS_PATTERN for r in BONUS_PATTERNS)

    def test_only_quote_citation_requires_quote(self):
        needing = [r.id for r in default_registry.rules if r.requires_quote]
        assert needing == [RuleId.QUOTE_CITATION]

    def test_every_rule_has_feedback(self):
        for rule in default_registry.rules:
            assert default_registry.feedback_for(rule)


class TestImmutability:
    """Rules cannot be changed after construction."""

    def test_rule_is_frozen(self):
        rule = default_registry.hard_rules[0]
        with pytest.raises(dataclasses.FrozenInstanceError):
            rule.points = 100

    def test_tiers_are_tuples(self):
        assert isinstance(default_registry.hard_rules, tuple)
        assert isinstance(default_registry.soft_rules, tuple)
        assert isinstance(default_registry.bonus_rules, tuple)


class TestLookup:
    def test_get_by_enum(self):
        rule = default_registry.get(RuleId.AGENCY)
        assert rule is not None
        assert rule.points == 15

    def test_get_by_string(self):
        rule = default_registry.get("MEANING_CLAIM")
        assert rule.tier is Tier.HARD_TRIGGER

    def test_get_unknown(self):
        assert default_registry.get("NOT_A_RULE") is None


class TestDescribe:
    def test_describe_all(self):
        rules = default_registry.describe()
        assert len(rules) == 13
        assert rules[0]["id"] == "MEANING_CLAIM"
        assert rules[-1]["id"] == "SPATIAL"

    def test_describe_priority_within_tier(self):
        bonus = default_registry.describe(Tier.BONUS_PATTERN)
        assert [r["priority"] for r in bonus] == [1, 2, 3, 4, 5, 6]
        assert bonus[0]["id"] == "QUOTE_CITATION"
        assert bonus[0]["requires_quote"] is True

    def test_describe_accepts_string_tier(self):
        soft = default_registry.describe("soft_trigger")
        assert [r["id"] for r in soft] == ["EMOTIONAL_STATE"]
        assert soft[0]["tier"] == "soft_trigger"


class TestValidation:
    """Misconfigured rule sets fail at construction, never at classification."""

    def test_duplicate_id_rejected(self):
        with pytest.raises(RegistryError, match="Duplicate"):
            RuleRegistry([_rule(), _rule()])

    def test_bonus_must_reward(self):
        with pytest.raises(RegistryError, match="positive"):
            RuleRegistry([_rule(points=0)])

    def test_trigger_must_penalize(self):
        with pytest.raises(RegistryError, match="penalty"):
            RuleRegistry([_rule(rule_id=RuleId.MEANING_CLAIM,
                                tier=Tier.HARD_TRIGGER, points=5)])

    def test_unknown_tier_rejected(self):
        with pytest.raises(RegistryError, match="tier"):
            RuleRegistry([_rule(tier="extra_tier")])

    def test_invalid_pattern_rejected(self):
        with pytest.raises(RegistryError, match="invalid pattern"):
            _rule(indicators=(r"(unclosed",))

    def test_empty_indicators_rejected(self):
        with pytest.raises(RegistryError, match="no indicators"):
            _rule(indicators=())

    def test_registry_error_is_value_error(self):
        assert issubclass(RegistryError, ValueError)


class TestFallbackFeedback:
    def test_empty_feedback_uses_tier_message(self):
        registry = RuleRegistry([_rule(feedback="")])
        rule = registry.get(RuleId.COUNT)
        assert registry.feedback_for(rule) == FALLBACK_FEEDBACK[Tier.BONUS_PATTERN]

    def test_non_empty_feedback_kept(self):
        registry = RuleRegistry([_rule(feedback="Counted.")])
        assert registry.feedback_for(registry.get(RuleId.COUNT)) == "Counted."


class TestRuleMatching:
    def test_case_insensitive(self):
        rule = default_registry.get(RuleId.MEANING_CLAIM)
        assert rule.matches("This REPRESENTS the church")

    def test_search_returns_fragment(self):
        rule = default_registry.get(RuleId.SEQUENCE)
        assert rule.search("He arose, then he came") == "then"

    def test_no_match(self):
        rule = default_registry.get(RuleId.THEOLOGY_IMPORT)
        assert rule.search("He arose and came.") is None
