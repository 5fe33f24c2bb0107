"""
Tests for the Line Classifier — the decision procedure every score rests on.

Covers the fixed tier order, the quotation asymmetry between hard and soft
triggers, totality over arbitrary input, and one example per rule.
"""

import pytest

from observation_engine.classifier import (
    BLANK_RESULT,
    DEFAULT_RESULT,
    ClassificationResult,
    classify_line,
)
from observation_engine.registry import (
    FALLBACK_FEEDBACK,
    OutcomeType,
    Rule,
    RuleId,
    RuleRegistry,
    Tier,
)


class TestScenarios:
    """Reference inputs with fixed expected outcomes."""

    def test_empty_line(self):
        result = classify_line("")
        assert result.valid is True
        assert result.outcome_type is OutcomeType.VALID
        assert result.points == 0
        assert result.feedback == ""
        assert result.matched_rule is None

    def test_quoted_word_citation(self):
        result = classify_line("The word 'ran' appears in verse 20.")
        assert result.outcome_type is OutcomeType.BONUS
        assert result.points == 20
        assert result.matched_rule == "QUOTE_CITATION"

    def test_meaning_claim(self):
        result = classify_line("This represents God's mercy.")
        assert result.outcome_type is OutcomeType.HARD_PENALTY
        assert result.points == -10
        assert result.valid is False

    def test_emotional_state(self):
        result = classify_line("He felt sad.")
        assert result.outcome_type is OutcomeType.SOFT_WARNING
        assert result.points == -5
        assert result.valid is False
        assert result.matched_rule == "EMOTIONAL_STATE"

    def test_verb_count(self):
        result = classify_line("Three verbs describe his actions.")
        assert result.outcome_type is OutcomeType.BONUS
        assert result.points == 10
        assert result.matched_rule == "COUNT"


class TestQuotationAsymmetry:
    """Quoting forgives soft triggers but never hard ones."""

    def test_hard_trigger_inside_quotes(self):
        result = classify_line('"This represents God\'s mercy," she wrote.')
        assert result.outcome_type is OutcomeType.HARD_PENALTY

    def test_hard_trigger_with_citation(self):
        result = classify_line('The phrase "represents" appears once.')
        assert result.outcome_type is OutcomeType.HARD_PENALTY
        assert result.matched_rule == "MEANING_CLAIM"

    def test_soft_trigger_forgiven_when_cited(self):
        result = classify_line('The phrase "his heart" appears twice.')
        assert result.outcome_type is not OutcomeType.SOFT_WARNING
        assert result.outcome_type is OutcomeType.BONUS
        assert result.matched_rule == "QUOTE_CITATION"
        assert result.points == 20

    def test_soft_trigger_quoted_without_keyword(self):
        result = classify_line('Jesus "had compassion" on them.')
        assert result.outcome_type is OutcomeType.SOFT_WARNING

    @pytest.mark.parametrize("line", [
        "The phrase 'his father's compassion' appears once.",
        "The phrase ‘his father’s compassion’ appears once.",
    ])
    def test_cited_span_with_possessive(self, line):
        result = classify_line(line)
        assert result.outcome_type is OutcomeType.BONUS
        assert result.matched_rule == "QUOTE_CITATION"
        assert result.points == 20

    def test_cited_soft_trigger_falls_to_default(self):
        result = classify_line('The verse says "he had compassion".')
        assert result == DEFAULT_RESULT


class TestTierPriority:
    def test_soft_before_bonus(self):
        result = classify_line("He felt sad, and the phrase repeats three times")
        assert result.outcome_type is OutcomeType.SOFT_WARNING

    def test_hard_before_soft(self):
        result = classify_line("The angry father represents God.")
        assert result.matched_rule == "MEANING_CLAIM"

    def test_hard_before_bonus(self):
        result = classify_line("Three verbs show his righteousness.")
        assert result.matched_rule == "MORAL_EVALUATION"

    def test_bonus_priority_order(self):
        # Matches SEQUENCE ("before") and COUNT ("two actions")
        result = classify_line("The son performs two actions before the father acts.")
        assert result.matched_rule == "SEQUENCE"
        assert result.points == 15

    def test_quote_citation_needs_a_quote(self):
        result = classify_line("The word ran appears in verse 20.")
        assert result.matched_rule == "SPATIAL"
        assert result.points == 10


class TestEachRule:
    """At least one line that each rule claims."""

    @pytest.mark.parametrize("line, rule_id", [
        ("The stone points to the cornerstone.", "MEANING_CLAIM"),
        ("The calm sea symbolizes inner peace.", "MEANING_CLAIM"),
        ("This passage is about salvation.", "THEOLOGY_IMPORT"),
        ("The coal on his lips shows atonement.", "THEOLOGY_IMPORT"),
        ("The father wanted his son back.", "MOTIVE_ATTRIBUTION"),
        ("The king felt that Daniel was innocent.", "MOTIVE_ATTRIBUTION"),
        ("The Philistine was an evil man.", "MORAL_EVALUATION"),
        ("They stood in the holy place.", "MORAL_EVALUATION"),
        ("The little horn of Daniel 8 is papal Rome.", "IDENTIFICATION_CLAIM"),
        ("Rome is the fourth beast.", "IDENTIFICATION_CLAIM"),
        ("The 2300 days ended in 1844.", "DATE_INTERPRETATION"),
        ("Papal rule lasted from 538 AD to 1798.", "DATE_INTERPRETATION"),
        ("The father was full of joy.", "EMOTIONAL_STATE"),
        ("David was angry at the Philistine.", "EMOTIONAL_STATE"),
        ("The phrase 'be still' is used by Jesus.", "QUOTE_CITATION"),
        ("All actions are by the father.", "AGENCY"),
        ("Only the king speaks in this section.", "AGENCY"),
        ("Kissing follows running.", "SEQUENCE"),
        ("The word went is used three times.", "COUNT"),
        ("The stone is mentioned twice", "COUNT"),
        ("Three people are present: Jesus, Martha and Lazarus.", "ENTITY_COUNT"),
        ("The coal is an instrument.", "ENTITY_COUNT"),
        ("Pentecost is mentioned in the opening clause.", "SPATIAL"),
    ])
    def test_rule_fires(self, line, rule_id):
        assert classify_line(line).matched_rule == rule_id

    def test_holy_spirit_is_not_moral_judgment(self):
        assert classify_line("The Holy Spirit descended.") == DEFAULT_RESULT

    def test_landmark_year_after_preposition(self):
        assert classify_line("The sanctuary was cleansed in 1844.").matched_rule == "DATE_INTERPRETATION"

    def test_landmark_number_without_preposition(self):
        assert classify_line("There are 457 words in this passage.").matched_rule == "COUNT"

    def test_mercy_seat_is_an_object(self):
        result = classify_line("The mercy seat is mentioned.")
        assert result.matched_rule == "SPATIAL"
        assert result.points == 10


class TestDefaultValid:
    def test_plain_observation(self):
        result = classify_line("Jesus wept.")
        assert result.valid is True
        assert result.outcome_type is OutcomeType.VALID
        assert result.points == 5
        assert result.feedback == "Observation recorded."
        assert result.matched_rule is None

    def test_surrounding_whitespace_ignored(self):
        assert classify_line("   The wind ceased.  \t") == classify_line("The wind ceased.")


class TestTotality:
    """Every input produces exactly one well-formed result."""

    @pytest.mark.parametrize("text", [
        "",
        "   \t  ",
        "\n",
        '"',
        '"' * 1000,
        'He said "hello',
        "'''",
        "\x00\x01\x02",
        "\U0001F600 \U0001F600",
        "a" * 10000,
        "???!!!...",
    ])
    def test_always_one_result(self, text):
        result = classify_line(text)
        assert isinstance(result, ClassificationResult)
        assert result.outcome_type in set(OutcomeType)
        assert isinstance(result.feedback, str)

    def test_none_treated_as_blank(self):
        assert classify_line(None) == BLANK_RESULT

    def test_whitespace_only_is_blank(self):
        assert classify_line("   \t  ") == BLANK_RESULT

    def test_valid_matches_outcome(self):
        for text in ("Jesus wept.", "He felt sad.", "This means love.", "Jesus wept first."):
            result = classify_line(text)
            assert result.valid == (result.outcome_type in (OutcomeType.VALID, OutcomeType.BONUS))


class TestDeterminism:
    def test_repeat_calls_identical(self):
        line = "The phrase 'had compassion' appears"
        first = classify_line(line)
        for _ in range(5):
            assert classify_line(line) == first

    def test_to_dict(self):
        data = classify_line("He felt sad.").to_dict()
        assert data == {
            "valid": False,
            "outcome_type": "soft_warning",
            "points": -5,
            "feedback": data["feedback"],
            "matched_rule": "EMOTIONAL_STATE",
        }
        assert data["feedback"]


class TestInjectedRegistry:
    """The classifier evaluates whatever registry it is handed."""

    def _registry(self, feedback="Stone noted."):
        return RuleRegistry([
            Rule(id=RuleId.COUNT, name="Stone", tier=Tier.BONUS_PATTERN,
                 indicators=(r"\bstone\b",), feedback=feedback, points=7),
        ])

    def test_custom_rule_used(self):
        result = classify_line("The stone lay upon it.", self._registry())
        assert result.points == 7
        assert result.feedback == "Stone noted."

    def test_default_rules_absent(self):
        result = classify_line("This represents God's mercy.", self._registry())
        assert result == DEFAULT_RESULT

    def test_fallback_feedback(self):
        result = classify_line("The stone lay upon it.", self._registry(feedback=""))
        assert result.feedback == FALLBACK_FEEDBACK[Tier.BONUS_PATTERN]
