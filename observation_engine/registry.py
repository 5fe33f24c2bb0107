"""
Pattern Registry — Immutable Rule Taxonomy

The registry defines:
  1. The three rule tiers and the order they are evaluated in
  2. Every interpretation-detection rule (hard and soft triggers)
  3. Every rewarded observation technique (bonus patterns)
  4. The feedback text and point value attached to each rule

This module is FROZEN. Rules are tuples of frozen dataclasses with
precompiled patterns; nothing adds, removes or mutates a rule after the
registry is constructed. A RuleRegistry is built once (``default_registry``)
and passed into the classifier functions, so any number of threads or
request handlers can share it without locking.

Version: 1.0.0
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

# --- Registry Version (stamped on API responses and calibration reports) ---
REGISTRY_VERSION = "1.0.0"


class RegistryError(ValueError):
    """Raised when a rule set is misconfigured. Only ever at construction."""


# ============================================================
# ENUMERATIONS
# ============================================================

class Tier(str, Enum):
    """Rule tiers, in evaluation order."""
    HARD_TRIGGER = "hard_trigger"
    SOFT_TRIGGER = "soft_trigger"
    BONUS_PATTERN = "bonus_pattern"


class OutcomeType(str, Enum):
    VALID = "valid"
    HARD_PENALTY = "hard_penalty"
    SOFT_WARNING = "soft_warning"
    BONUS = "bonus"


class RuleId(str, Enum):
    """Closed set of rule identifiers. Every member must have a rule."""
    # Hard triggers
    MEANING_CLAIM = "MEANING_CLAIM"
    THEOLOGY_IMPORT = "THEOLOGY_IMPORT"
    MOTIVE_ATTRIBUTION = "MOTIVE_ATTRIBUTION"
    MORAL_EVALUATION = "MORAL_EVALUATION"
    IDENTIFICATION_CLAIM = "IDENTIFICATION_CLAIM"
    DATE_INTERPRETATION = "DATE_INTERPRETATION"
    # Soft triggers
    EMOTIONAL_STATE = "EMOTIONAL_STATE"
    # Bonus patterns (descending priority)
    QUOTE_CITATION = "QUOTE_CITATION"
    AGENCY = "AGENCY"
    SEQUENCE = "SEQUENCE"
    COUNT = "COUNT"
    ENTITY_COUNT = "ENTITY_COUNT"
    SPATIAL = "SPATIAL"


# Outcome produced when a rule of the given tier fires
OUTCOME_FOR_TIER: dict[Tier, OutcomeType] = {
    Tier.HARD_TRIGGER: OutcomeType.HARD_PENALTY,
    Tier.SOFT_TRIGGER: OutcomeType.SOFT_WARNING,
    Tier.BONUS_PATTERN: OutcomeType.BONUS,
}

# Substituted when a rule carries an empty feedback template
FALLBACK_FEEDBACK: dict[Tier, str] = {
    Tier.HARD_TRIGGER: (
        "Interpretation detected. Restate this as a literal observation "
        "of what the text says."
    ),
    Tier.SOFT_TRIGGER: (
        "This wording characterizes the passage instead of observing it. "
        "Rephrase using the text's own words."
    ),
    Tier.BONUS_PATTERN: "Strong observation.",
}

HARD_PENALTY_POINTS = -10
SOFT_PENALTY_POINTS = -5
DEFAULT_VALID_POINTS = 5
DEFAULT_VALID_FEEDBACK = "Observation recorded."


# ============================================================
# RULE DEFINITION
# ============================================================

@dataclass(frozen=True)
class Rule:
    """
    A single detection rule.

    Each rule is:
    - Deterministic (regex-based, case-insensitive)
    - Bound to exactly one tier
    - Carrying its own feedback and point value
    - Immutable (part of the frozen registry)

    ``indicators`` are alternatives: the rule fires if ANY of them matches.
    ``requires_quote`` additionally demands a quoted span in the line; the
    classifier supplies that check.
    """
    id: RuleId
    name: str
    tier: Tier
    indicators: tuple[str, ...]
    feedback: str
    points: int
    description: str = ""
    requires_quote: bool = False
    _compiled: tuple[re.Pattern, ...] = field(
        init=False, repr=False, compare=False, default=(),
    )

    def __post_init__(self):
        if not self.indicators:
            raise RegistryError(f"Rule {self.id.value} has no indicators")
        try:
            compiled = tuple(
                re.compile(p, re.IGNORECASE) for p in self.indicators
            )
        except re.error as exc:
            raise RegistryError(
                f"Rule {self.id.value} has an invalid pattern: {exc}"
            ) from exc
        object.__setattr__(self, "_compiled", compiled)

    def search(self, line: str) -> Optional[str]:
        """Return the first matched fragment, or None."""
        for pattern in self._compiled:
            m = pattern.search(line)
            if m:
                return m.group(0)
        return None

    def matches(self, line: str) -> bool:
        return self.search(line) is not None


# ============================================================
# SHARED PATTERN FRAGMENTS
# ============================================================

_NUMBER = (
    r"(?:\d+|one|two|three|four|five|six|seven|eight|nine|ten|eleven|"
    r"twelve|thirteen|fourteen|fifteen|twenty|multiple|several|many)"
)

# Prophetic/apocalyptic images that invite a symbolic identification
_SYMBOL = (
    r"(?:beasts?|little\s+horn|horns?|dragon|lamb|scapegoat|harlot|whore|"
    r"image|statue|frogs?|locusts?|king\s+of\s+the\s+(?:north|south)|"
    r"prince\s+that\s+shall\s+come|seal\s+of\s+god|mark\s+of\s+the\s+beast)"
)

# Named historical powers or persons offered as the referent of a symbol
_REFERENT = (
    r"(?:rome|roman\s+empire|papacy|papal\s+rome|pope|vatican|america|"
    r"united\s+states|usa|babylon|greece|persia|medo-?persia|"
    r"antiochus(?:\s+epiphanes)?|titus|satan|devil|azazel|christ|jesus|"
    r"messiah|church|protestant\s+america|sunday(?:\s+worship|\s+laws?)?|"
    r"sabbath)"
)

_COPULA = (
    r"(?:\s+(?:is|are|was|were|equals?|stands?\s+for|refers?\s+to|"
    r"identifies)\s+|\s*=\s*)"
)


# ============================================================
# HARD TRIGGERS (instant penalty, no exemptions)
# ============================================================

HARD_TRIGGERS: tuple[Rule, ...] = (
    Rule(
        id=RuleId.MEANING_CLAIM,
        name="Meaning Claim",
        tier=Tier.HARD_TRIGGER,
        description="Asserts what the text means, represents or signifies.",
        indicators=(
            r"\b(?:means|meant|mean(?=\s+that)|represents?|represented|"
            r"representing|symboli[sz](?:es|ed|e|ing)|symbol\s+of|"
            r"(?:points?|pointed|pointing)\s+to|signif(?:ies|ied|y|ying)|"
            r"typif(?:ies|ied|y|ying)|foreshadow(?:s|ed|ing)?)\b",
        ),
        feedback=(
            "Interpretation detected: saying what the text means or "
            "represents goes beyond observation. Record what the text says, "
            "not what it stands for."
        ),
        points=HARD_PENALTY_POINTS,
    ),
    Rule(
        id=RuleId.THEOLOGY_IMPORT,
        name="Theology Term Import",
        tier=Tier.HARD_TRIGGER,
        description="Imports doctrinal vocabulary not present in the wording.",
        indicators=(
            r"\b(?:grace|atonement|atoning|justification|salvation|"
            r"redemption|redeem(?:s|ed|er|ing)?|sanctif(?:ication|ied|ies)|"
            r"propitiation|forgiveness|repentance|substitutionary|"
            r"imputed\s+righteousness)\b",
        ),
        feedback=(
            "Theological term detected: doctrinal vocabulary imports an "
            "interpretation the passage does not state. Use only words the "
            "text itself contains."
        ),
        points=HARD_PENALTY_POINTS,
    ),
    Rule(
        id=RuleId.MOTIVE_ATTRIBUTION,
        name="Motive Attribution",
        tier=Tier.HARD_TRIGGER,
        description="Reads intent, desire or belief into a character's mind.",
        indicators=(
            r"\b(?:intend(?:s|ed)?|wanted|wants?\s+to|hoped|"
            r"hop(?:es|ing)\s+(?:to|that|for)|believed|believes?\s+that|"
            r"(?:felt|feels)\s+that|(?:knew|knows)\s+that|tried\s+to|"
            r"desired|desires\s+to|in\s+order\s+to\s+(?:show|teach|prove))\b",
        ),
        feedback=(
            "Mind-reading detected: the text does not tell us what anyone "
            "intended, wanted or believed. Observe actions and words only."
        ),
        points=HARD_PENALTY_POINTS,
    ),
    Rule(
        id=RuleId.MORAL_EVALUATION,
        name="Moral Evaluation",
        tier=Tier.HARD_TRIGGER,
        description="Passes moral judgment on a character or action.",
        indicators=(
            r"\b(?:sinful(?:ly)?|righteous(?:ness)?|unrighteous(?:ness)?|"
            r"evil|wicked(?:ness)?|holy(?!\s+(?:ghost|spirit))|unholy|"
            r"cursed|pure|impure|godly|ungodly)\b",
        ),
        feedback=(
            "Moral judgment detected: labeling actions as good or evil is "
            "evaluation, not observation."
        ),
        points=HARD_PENALTY_POINTS,
    ),
    Rule(
        id=RuleId.IDENTIFICATION_CLAIM,
        name="Symbol Identification Claim",
        tier=Tier.HARD_TRIGGER,
        description="Names a historical power or person as a symbol's referent.",
        indicators=(
            r"\b" + _SYMBOL + r"(?:\s+[\w:]+){0,3}?" + _COPULA
            + r"(?:(?:a|an|the)\s+)?(?:(?:type|picture)\s+of\s+)?"
            + _REFERENT + r"\b",
            r"\b" + _REFERENT + r"\s+(?:is|are|was|were)\s+the\s+(?:\w+\s+)?"
            + _SYMBOL + r"\b",
        ),
        feedback=(
            "Identification detected: naming who or what a symbol stands for "
            "is interpretation. Describe the image as the text gives it."
        ),
        points=HARD_PENALTY_POINTS,
    ),
    Rule(
        id=RuleId.DATE_INTERPRETATION,
        name="Date Interpretation Claim",
        tier=Tier.HARD_TRIGGER,
        description="Draws calendrical or prophetic-timeline conclusions.",
        indicators=(
            # Era-marked years: 538 AD, 168 BC, AD 1798
            r"\b\d{1,4}\s*(?:b\.?c\.?(?:e\.?)?|a\.?d\.?)(?!\w)",
            r"\ba\.?d\.?\s*\d{1,4}\b",
            # Reckoning principles
            r"\b(?:day[- ]for[- ](?:a[- ])?year|year[- ]day\s+principle|"
            r"prophetic\s+(?:days?|years?|time(?:line)?|periods?|weeks?))\b",
            # Numbered periods asserted to reach or fulfil something
            r"\b\d[\d,]*\s+(?:literal\s+|prophetic\s+)?(?:days?|years?|weeks?)\s+"
            r"(?:=|equals?|(?:point|points|pointed|reach(?:es)?|leads?|led)\s+to|"
            r"ends?\s+in|ended\s+in|beg(?:an|ins?)\s+in|"
            r"(?:is|are|was|were)\s+fulfilled|fulfill(?:s|ed)?)",
            # Landmark prophetic years
            r"\b(?:in|by|until|till|from)\s+(?:1844|1798|538|457)\b",
        ),
        feedback=(
            "Date interpretation detected: prophetic timelines and dates are "
            "conclusions, not observations of the passage."
        ),
        points=HARD_PENALTY_POINTS,
    ),
)


# ============================================================
# SOFT TRIGGERS (penalized unless quoting the source)
# ============================================================

SOFT_TRIGGERS: tuple[Rule, ...] = (
    Rule(
        id=RuleId.EMOTIONAL_STATE,
        name="Emotional Characterization",
        tier=Tier.SOFT_TRIGGER,
        description="Emotional vocabulary used as the observer's own words.",
        indicators=(
            r"\b(?:feel(?:s|ing|ings)?|felt|heart(?:s|ed|felt|broken)?|"
            r"lov(?:e|es|ed|ing)|anger|angry|angered|wrath|joy(?:ful|ous)?|"
            r"sad(?:ly|ness|dened)?|happ(?:y|ily|iness)|fear(?:s|ed|ful)?|"
            r"afraid|scared|compassion(?:ate)?|grie(?:f|ved?|ving)|"
            r"sorrow(?:ful|s)?|glad(?:ness)?|upset|excited|lonely|ashamed|"
            r"anxious|desperate(?:ly)?|distress(?:ed)?|troubled)\b",
        ),
        feedback=(
            "Emotional language detected: unless you are quoting the text, "
            "describing feelings is characterization. Quote the wording "
            "instead."
        ),
        points=SOFT_PENALTY_POINTS,
    ),
)


# ============================================================
# BONUS PATTERNS (rewarded, descending priority)
# ============================================================

BONUS_PATTERNS: tuple[Rule, ...] = (
    Rule(
        id=RuleId.QUOTE_CITATION,
        name="Quote-Based Citation",
        tier=Tier.BONUS_PATTERN,
        description="Quotes the source and states where or how it occurs.",
        indicators=(
            r"\b(?:appears?|appeared|appearing|occurs?|occurred|repeats?|"
            r"repeated|(?:is|are|was|were)\s+(?:used|mentioned|repeated|"
            r"written|recorded))\b",
        ),
        requires_quote=True,
        feedback=(
            "Excellent: you anchored the observation in the text's exact "
            "wording."
        ),
        points=20,
    ),
    Rule(
        id=RuleId.AGENCY,
        name="Agency Observation",
        tier=Tier.BONUS_PATTERN,
        description="Isolates who performs the actions.",
        indicators=(
            r"\b(?:all|only|every|no)\s+(?:of\s+)?(?:the\s+)?(?:[\w']+\s+){0,2}?"
            r"(?:actions?|verbs?|deeds?|movements?|commands?|speech)\s+"
            r"(?:(?:are|is|were|was|come|comes|came)\s+)?"
            r"(?:(?:performed|done|taken|spoken|given|attributed)\s+)?"
            r"(?:by|from)\b",
            r"\bonly\s+(?:the\s+)?[\w']+\s+(?:acts|speaks|moves|performs|"
            r"commands|does)\b",
        ),
        feedback="Great agency observation: you isolated who does what.",
        points=15,
    ),
    Rule(
        id=RuleId.SEQUENCE,
        name="Sequence Observation",
        tier=Tier.BONUS_PATTERN,
        description="Notes the order in which things happen.",
        indicators=(
            r"\b(?:before|after|afterwards?|then|first|firstly|finally|"
            r"lastly|precedes?|preceded|preceding|follows?|followed|next|"
            r"later|earlier|subsequently)\b",
        ),
        feedback="Good sequence observation: order in the text is worth noticing.",
        points=15,
    ),
    Rule(
        id=RuleId.COUNT,
        name="Count Observation",
        tier=Tier.BONUS_PATTERN,
        description="Counts verbs, actions, words or occurrences.",
        indicators=(
            r"\b" + _NUMBER + r"\s+(?:[\w'-]+\s+)?(?:verbs?|actions?|"
            r"characters?|words?|times|occurrences?|instances?|nouns?|"
            r"phrases?|commands?|questions?|sentences?|clauses?)\b",
            r"\b(?:once|twice|thrice)\b",
        ),
        feedback="Good count: precise numbers keep the observation literal.",
        points=10,
    ),
    Rule(
        id=RuleId.ENTITY_COUNT,
        name="Entity Observation",
        tier=Tier.BONUS_PATTERN,
        description="Counts or identifies persons and objects as entities.",
        indicators=(
            r"\b" + _NUMBER + r"\s+(?:[\w'-]+\s+)?(?:persons?|people|"
            r"figures?|objects?|items?|subjects?|agents?|speakers?|"
            r"individuals?|entities|names?|animals?|groups?|places?)\b",
            r"\b(?:is|are|was|were)\s+(?:an?\s+|the\s+(?:only\s+)?)?"
            r"(?:agents?|subjects?|speakers?|instruments?|objects?)\b",
            r"\b(?:characters?|persons?|people|speakers?|objects?)\s+"
            r"(?:are|is)\s+(?:named|listed|identified|present)\b",
        ),
        feedback="Good entity observation: you tracked who and what is present.",
        points=10,
    ),
    Rule(
        id=RuleId.SPATIAL,
        name="Structural Observation",
        tier=Tier.BONUS_PATTERN,
        description="Notes where something sits in the passage structure.",
        indicators=(
            r"\b(?:beginning|middle|end|ends|ending|opening|closing|start|"
            r"appears?|appeared|mentioned|written|"
            r"(?:is|are|was|were)\s+(?:stated|recorded|placed|located))\b",
        ),
        feedback="Good structural observation: position in the text matters.",
        points=10,
    ),
)


# ============================================================
# THE REGISTRY
# ============================================================

class RuleRegistry:
    """
    Immutable, validated rule set.

    Holds the three tiers as ordered tuples. Validation happens once in
    the constructor; after that the registry is read-only and safe to
    share across threads and coroutines.
    """

    def __init__(self, rules: Iterable[Rule]):
        rules = tuple(rules)
        self._validate(rules)
        self._rules = rules
        self._by_id = {r.id: r for r in rules}
        self._hard = tuple(r for r in rules if r.tier is Tier.HARD_TRIGGER)
        self._soft = tuple(r for r in rules if r.tier is Tier.SOFT_TRIGGER)
        self._bonus = tuple(r for r in rules if r.tier is Tier.BONUS_PATTERN)

    @staticmethod
    def _validate(rules: tuple[Rule, ...]) -> None:
        seen: set[RuleId] = set()
        for rule in rules:
            if not isinstance(rule.tier, Tier) or rule.tier not in OUTCOME_FOR_TIER:
                raise RegistryError(f"Rule {rule.id} has unknown tier {rule.tier!r}")
            if rule.id in seen:
                raise RegistryError(f"Duplicate rule id {rule.id.value}")
            seen.add(rule.id)
            if rule.tier is Tier.BONUS_PATTERN and rule.points <= 0:
                raise RegistryError(
                    f"Bonus rule {rule.id.value} must award positive points"
                )
            if rule.tier is not Tier.BONUS_PATTERN and rule.points >= 0:
                raise RegistryError(
                    f"Trigger rule {rule.id.value} must carry a penalty"
                )

    @property
    def rules(self) -> tuple[Rule, ...]:
        return self._rules

    @property
    def hard_rules(self) -> tuple[Rule, ...]:
        return self._hard

    @property
    def soft_rules(self) -> tuple[Rule, ...]:
        return self._soft

    @property
    def bonus_rules(self) -> tuple[Rule, ...]:
        return self._bonus

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._by_id

    def get(self, rule_id: RuleId | str) -> Optional[Rule]:
        """Look up a rule by id (enum member or its string value)."""
        try:
            return self._by_id.get(RuleId(rule_id))
        except ValueError:
            return None

    def feedback_for(self, rule: Rule) -> str:
        """Rule feedback, or the tier's generic message if the template is empty."""
        return rule.feedback or FALLBACK_FEEDBACK[rule.tier]

    def describe(self, tier: Optional[Tier | str] = None) -> list[dict]:
        """
        Return the rule set as plain dicts, in evaluation order.

        Used by the GET /rules endpoint and calibration reports.
        """
        wanted = Tier(tier) if tier is not None else None
        out = []
        for group in (self._hard, self._soft, self._bonus):
            for priority, rule in enumerate(group, start=1):
                if wanted is not None and rule.tier is not wanted:
                    continue
                out.append({
                    "id": rule.id.value,
                    "name": rule.name,
                    "description": rule.description,
                    "tier": rule.tier.value,
                    "priority": priority,
                    "points": rule.points,
                    "requires_quote": rule.requires_quote,
                    "feedback": self.feedback_for(rule),
                })
        return out


# ============================================================
# SINGLETON — constructed once, never mutated
# ============================================================

default_registry = RuleRegistry(HARD_TRIGGERS + SOFT_TRIGGERS + BONUS_PATTERNS)
