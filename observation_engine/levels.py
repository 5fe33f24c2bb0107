"""
Verse Packs & Level Scoring

Reference passages the observation game is played against. Each level
carries the verbs actually present in the verse, plausible decoy verbs
that are NOT in it, and a set of model observations.

``score_level_submission`` is the level flow: every line is classified,
then cross-checked for decoy verbs. A decoy hit overrides the line's
classification with a hard penalty. The running game score never drops
below zero.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from observation_engine.classifier import ClassificationResult, classify_line
from observation_engine.decoy import check_decoy_verb
from observation_engine.logging import get_logger
from observation_engine.registry import OutcomeType, RuleRegistry, default_registry
from observation_engine.scorer import AggregateResult, split_submission

logger = get_logger("levels")

DECOY_PENALTY_POINTS = -5
DECOY_RULE_ID = "DECOY_VERB"


# ============================================================
# DATA STRUCTURES
# ============================================================

@dataclass(frozen=True)
class VerbBlock:
    text: str
    subject: Optional[str] = None
    is_phrase: bool = False


@dataclass(frozen=True)
class VerseLevel:
    id: int
    reference: str
    text: str
    verbs: tuple[VerbBlock, ...]
    subject_anchors: tuple[str, ...]
    decoy_verbs: tuple[str, ...]
    expected_observations: tuple[str, ...]

    def verb_texts(self) -> list[str]:
        return [v.text for v in self.verbs]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "reference": self.reference,
            "text": self.text,
            "verbs": [
                {"text": v.text, "subject": v.subject, "is_phrase": v.is_phrase}
                for v in self.verbs
            ],
            "subject_anchors": list(self.subject_anchors),
            "decoy_verbs": list(self.decoy_verbs),
            "expected_observations": list(self.expected_observations),
        }


@dataclass(frozen=True)
class VersePack:
    id: str
    name: str
    description: str
    floor: int
    room_code: str
    levels: tuple[VerseLevel, ...]

    def summary(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "floor": self.floor,
            "room_code": self.room_code,
            "levels": [
                {"id": lv.id, "reference": lv.reference} for lv in self.levels
            ],
        }


@dataclass
class LevelResult(AggregateResult):
    """Aggregate result for a level, plus decoy hits and the game score."""
    decoys: list[str] = field(default_factory=list)
    starting_score: int = 0
    final_score: int = 0

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            "decoys": list(self.decoys),
            "starting_score": self.starting_score,
            "final_score": self.final_score,
        })
        return data


def _verbs(*pairs) -> tuple[VerbBlock, ...]:
    """Build verb blocks from (text, subject) pairs; multi-word text is a phrase."""
    return tuple(
        VerbBlock(text=text, subject=subject, is_phrase=" " in text)
        for text, subject in pairs
    )


# ============================================================
# PACK A — Agency & Action
# ============================================================

PACK_A = VersePack(
    id="pack_a",
    name="Agency & Action",
    description="Train 'who does what' under motion pressure",
    floor=2,
    room_code="OR",
    levels=(
        VerseLevel(
            id=1,
            reference="Luke 15:20",
            text=(
                "And he arose, and came to his father. But when he was yet a "
                "great way off, his father saw him, and had compassion, and "
                "ran, and fell on his neck, and kissed him."
            ),
            verbs=_verbs(
                ("arose", "son"), ("came", "son"), ("saw", "father"),
                ("had compassion", "father"), ("ran", "father"),
                ("fell on his neck", "father"), ("kissed", "father"),
            ),
            subject_anchors=("father", "son"),
            decoy_verbs=("forgave", "repented", "embraced", "welcomed", "accepted"),
            expected_observations=(
                "Seven verbs appear in this verse",
                "Two characters are mentioned",
                "The son performs two actions (arose, came)",
                "The father performs five actions",
                "Physical movement verbs precede physical contact verbs",
                "The phrase 'had compassion' appears",
            ),
        ),
        VerseLevel(
            id=2,
            reference="Mark 4:39",
            text=(
                "And he arose, and rebuked the wind, and said unto the sea, "
                "Peace, be still. And the wind ceased, and there was a great "
                "calm."
            ),
            verbs=_verbs(
                ("arose", "Jesus"), ("rebuked", "Jesus"), ("said", "Jesus"),
                ("ceased", "wind"), ("was", "calm"),
            ),
            subject_anchors=("he", "wind", "sea"),
            decoy_verbs=("commanded", "calmed", "stilled", "silenced", "controlled"),
            expected_observations=(
                "Five verbs appear in this verse",
                "Jesus performs three actions",
                "The wind performs one action (ceased)",
                "Speech is recorded: 'Peace, be still'",
                "Jesus' actions precede the wind's action",
            ),
        ),
        VerseLevel(
            id=3,
            reference="John 11:35-44",
            text=(
                "Jesus wept. Then said the Jews, Behold how he loved him! "
                "Jesus therefore again groaning in himself cometh to the "
                "grave. It was a cave, and a stone lay upon it. Jesus said, "
                "Take ye away the stone. Martha, the sister of him that was "
                "dead, saith unto him, Lord, by this time he stinketh: for he "
                "hath been dead four days. Jesus saith unto her, Said I not "
                "unto thee, that, if thou wouldest believe, thou shouldest see "
                "the glory of God? Then they took away the stone from the "
                "place where the dead was laid. And Jesus lifted up his eyes, "
                "and said, Father, I thank thee that thou hast heard me. And I "
                "knew that thou hearest me always: but because of the people "
                "which stand by I said it, that they may believe that thou "
                "hast sent me. And when he thus had spoken, he cried with a "
                "loud voice, Lazarus, come forth. And he that was dead came "
                "forth, bound hand and foot with graveclothes: and his face "
                "was bound about with a napkin. Jesus saith unto them, Loose "
                "him, and let him go."
            ),
            verbs=_verbs(
                ("wept", "Jesus"), ("said", "Jews"), ("groaning", "Jesus"),
                ("cometh", "Jesus"), ("lay", "stone"), ("said", "Jesus"),
                ("saith", "Martha"), ("saith", "Jesus"), ("took away", "they"),
                ("lifted up", "Jesus"), ("said", "Jesus"), ("cried", "Jesus"),
                ("came forth", "Lazarus"), ("saith", "Jesus"),
            ),
            subject_anchors=("Jesus", "Jews", "Martha", "Lazarus", "they"),
            decoy_verbs=("raised", "resurrected", "healed", "revived", "restored"),
            expected_observations=(
                "Jesus wept - two words form a complete sentence",
                "Multiple characters speak in this passage",
                "Jesus speaks multiple times",
                "Lazarus comes forth - one action attributed to him",
                "The stone is mentioned twice",
                "Physical actions and speech alternate",
            ),
        ),
        VerseLevel(
            id=4,
            reference="Matthew 14:29-31",
            text=(
                "And he said, Come. And when Peter was come down out of the "
                "ship, he walked on the water, to go to Jesus. But when he saw "
                "the wind boisterous, he was afraid, and beginning to sink, he "
                "cried, saying, Lord, save me. And immediately Jesus stretched "
                "forth his hand, and caught him, and said unto him, O thou of "
                "little faith, wherefore didst thou doubt?"
            ),
            verbs=_verbs(
                ("said", "Jesus"), ("was come down", "Peter"),
                ("walked", "Peter"), ("saw", "Peter"), ("was afraid", "Peter"),
                ("beginning to sink", "Peter"), ("cried", "Peter"),
                ("stretched forth", "Jesus"), ("caught", "Jesus"),
                ("said", "Jesus"),
            ),
            subject_anchors=("Peter", "Jesus", "wind"),
            decoy_verbs=("drowned", "rescued", "saved", "doubted", "trusted"),
            expected_observations=(
                "Peter performs six actions",
                "Jesus performs four actions",
                "Peter's fear is stated explicitly ('was afraid')",
                "Jesus speaks twice",
                "Physical actions dominate over speech",
                "Peter's sinking precedes Jesus' rescue",
            ),
        ),
        VerseLevel(
            id=5,
            reference="Exodus 14:21-22",
            text=(
                "And Moses stretched out his hand over the sea; and the LORD "
                "caused the sea to go back by a strong east wind all that "
                "night, and made the sea dry land, and the waters were "
                "divided. And the children of Israel went into the midst of "
                "the sea upon the dry ground: and the waters were a wall unto "
                "them on their right hand, and on their left."
            ),
            verbs=_verbs(
                ("stretched out", "Moses"), ("caused", "LORD"),
                ("go back", "sea"), ("made", "LORD"),
                ("were divided", "waters"), ("went", "children of Israel"),
                ("were", "waters"),
            ),
            subject_anchors=("Moses", "LORD", "sea", "waters", "children of Israel"),
            decoy_verbs=("parted", "split", "opened", "crossed", "delivered"),
            expected_observations=(
                "Moses performs one action (stretched out)",
                "The LORD performs two actions (caused, made)",
                "The sea and waters are subjects of verbs",
                "Children of Israel perform one action (went)",
                "Wind is mentioned as instrument, not agent",
                "Right and left are mentioned",
            ),
        ),
        VerseLevel(
            id=6,
            reference="1 Samuel 17:48-51",
            text=(
                "And it came to pass, when the Philistine arose, and came and "
                "drew nigh to meet David, that David hasted, and ran toward "
                "the army to meet the Philistine. And David put his hand in "
                "his bag, and took thence a stone, and slang it, and smote the "
                "Philistine in his forehead, that the stone sunk into his "
                "forehead; and he fell upon his face to the earth. So David "
                "prevailed over the Philistine with a sling and with a stone, "
                "and smote the Philistine, and slew him; but there was no "
                "sword in the hand of David."
            ),
            verbs=_verbs(
                ("arose", "Philistine"), ("came", "Philistine"),
                ("drew nigh", "Philistine"), ("hasted", "David"),
                ("ran", "David"), ("put", "David"), ("took", "David"),
                ("slang", "David"), ("smote", "David"), ("sunk", "stone"),
                ("fell", "Philistine"), ("prevailed", "David"),
                ("smote", "David"), ("slew", "David"),
            ),
            subject_anchors=("David", "Philistine", "stone"),
            decoy_verbs=("killed", "defeated", "conquered", "threw", "hit"),
            expected_observations=(
                "David performs more actions than the Philistine",
                "The Philistine performs three actions initially",
                "David's actions form a sequence: put, took, slang, smote",
                "The stone sunk - the stone is an agent",
                "Smote appears twice",
                "No sword mentioned as being used",
            ),
        ),
        VerseLevel(
            id=7,
            reference="Daniel 6:16-23",
            text=(
                "Then the king commanded, and they brought Daniel, and cast "
                "him into the den of lions. Now the king spake and said unto "
                "Daniel, Thy God whom thou servest continually, he will "
                "deliver thee. And a stone was brought, and laid upon the "
                "mouth of the den; and the king sealed it with his own "
                "signet, and with the signet of his lords; that the purpose "
                "might not be changed concerning Daniel. Then the king went "
                "to his palace, and passed the night fasting: neither were "
                "instruments of musick brought before him: and his sleep went "
                "from him. Then the king arose very early in the morning, and "
                "went in haste unto the den of lions. And when he came to the "
                "den, he cried with a lamentable voice unto Daniel: and the "
                "king spake and said to Daniel, O Daniel, servant of the "
                "living God, is thy God, whom thou servest continually, able "
                "to deliver thee from the lions? Then said Daniel unto the "
                "king, O king, live for ever. My God hath sent his angel, and "
                "hath shut the lions' mouths, that they have not hurt me: "
                "forasmuch as before him innocency was found in me; and also "
                "before thee, O king, have I done no hurt. Then was the king "
                "exceeding glad for him, and commanded that they should take "
                "Daniel up out of the den. So Daniel was taken up out of the "
                "den, and no manner of hurt was found upon him, because he "
                "believed in his God."
            ),
            verbs=_verbs(
                ("commanded", "king"), ("brought", "they"), ("cast", "they"),
                ("spake", "king"), ("said", "king"), ("was brought", "stone"),
                ("laid", "stone"), ("sealed", "king"), ("went", "king"),
                ("passed", "king"), ("went", "sleep"), ("arose", "king"),
                ("went", "king"), ("came", "king"), ("cried", "king"),
                ("spake", "king"), ("said", "king"), ("said", "Daniel"),
                ("sent", "God"), ("shut", "God"), ("commanded", "king"),
                ("was taken up", "Daniel"),
            ),
            subject_anchors=("king", "Daniel", "they", "stone", "God", "angel"),
            decoy_verbs=("prayed", "rescued", "saved", "protected", "delivered"),
            expected_observations=(
                "The king performs more actions than Daniel",
                "Daniel speaks once",
                "The king speaks multiple times",
                "God is credited with sending and shutting",
                "The word 'went' appears multiple times",
                "Commanded appears twice",
                "No prayer action is explicitly stated",
            ),
        ),
        VerseLevel(
            id=8,
            reference="Acts 2:1-4",
            text=(
                "And when the day of Pentecost was fully come, they were all "
                "with one accord in one place. And suddenly there came a sound "
                "from heaven as of a rushing mighty wind, and it filled all "
                "the house where they were sitting. And there appeared unto "
                "them cloven tongues like as of fire, and it sat upon each of "
                "them. And they were all filled with the Holy Ghost, and began "
                "to speak with other tongues, as the Spirit gave them "
                "utterance."
            ),
            verbs=_verbs(
                ("was fully come", "day"), ("were", "they"), ("came", "sound"),
                ("filled", "it/sound"), ("were sitting", "they"),
                ("appeared", "tongues"), ("sat", "it/fire"),
                ("were filled", "they"), ("began to speak", "they"),
                ("gave", "Spirit"),
            ),
            subject_anchors=("they", "sound", "tongues", "Spirit"),
            decoy_verbs=("prayed", "received", "baptized", "anointed", "empowered"),
            expected_observations=(
                "The sound came - the sound is an agent",
                "Fire sat upon each - fire is an agent",
                "They began to speak - not 'they spoke'",
                "The Spirit gave utterance",
                "Filled appears twice with different agents",
                "Wind and fire are described, not commanded",
            ),
        ),
        VerseLevel(
            id=9,
            reference="Revelation 1:17-18",
            text=(
                "And when I saw him, I fell at his feet as dead. And he laid "
                "his right hand upon me, saying, Fear not; I am the first and "
                "the last: I am he that liveth, and was dead; and, behold, I "
                "am alive for evermore, Amen; and have the keys of hell and "
                "of death."
            ),
            verbs=_verbs(
                ("saw", "I/John"), ("fell", "I/John"), ("laid", "he/Christ"),
                ("saying", "he/Christ"), ("am", "I/Christ"),
                ("liveth", "he/Christ"), ("was dead", "he/Christ"),
                ("am alive", "I/Christ"), ("have", "I/Christ"),
            ),
            subject_anchors=("I", "he", "John", "Christ"),
            decoy_verbs=("worshipped", "trembled", "touched", "raised", "comforted"),
            expected_observations=(
                "John performs two actions: saw, fell",
                "Christ performs physical action: laid hand",
                "Christ speaks in first person",
                "Dead and alive are both stated",
                "Keys are mentioned as possessed, not used",
                "Right hand is specified",
            ),
        ),
        VerseLevel(
            id=10,
            reference="Isaiah 6:6-8",
            text=(
                "Then flew one of the seraphims unto me, having a live coal "
                "in his hand, which he had taken with the tongs from off the "
                "altar: And he laid it upon my mouth, and said, Lo, this hath "
                "touched thy lips; and thine iniquity is taken away, and thy "
                "sin purged. Also I heard the voice of the Lord, saying, Whom "
                "shall I send, and who will go for us? Then said I, Here am I; "
                "send me."
            ),
            verbs=_verbs(
                ("flew", "seraphim"), ("having", "seraphim"),
                ("had taken", "seraphim"), ("laid", "he/seraphim"),
                ("said", "he/seraphim"), ("hath touched", "coal"),
                ("is taken away", "iniquity"), ("purged", "sin"),
                ("heard", "I/Isaiah"), ("saying", "Lord"),
                ("send", "Lord question"), ("go", "who question"),
                ("said", "I/Isaiah"), ("send", "imperative"),
            ),
            subject_anchors=("seraphim", "I/Isaiah", "Lord", "coal"),
            decoy_verbs=("cleansed", "forgave", "called", "anointed", "commissioned"),
            expected_observations=(
                "The seraphim flew - physical motion",
                "The coal touched - the coal is agent",
                "Isaiah heard and said",
                "The Lord asks questions",
                "Send appears twice (question and command)",
                "Tongs are mentioned as instrument",
            ),
        ),
    ),
)

ALL_PACKS: tuple[VersePack, ...] = (PACK_A,)


def get_pack(pack_id: str) -> Optional[VersePack]:
    return next((p for p in ALL_PACKS if p.id == pack_id), None)


def get_level(pack_id: str, level_id: int) -> Optional[VerseLevel]:
    pack = get_pack(pack_id)
    if pack is None:
        return None
    return next((lv for lv in pack.levels if lv.id == level_id), None)


# ============================================================
# LEVEL SCORING
# ============================================================

def decoy_result(verb: str) -> ClassificationResult:
    """The result that replaces a line's classification on a decoy hit."""
    return ClassificationResult(
        valid=False,
        outcome_type=OutcomeType.HARD_PENALTY,
        points=DECOY_PENALTY_POINTS,
        feedback=f'"{verb}" doesn\'t appear in this verse!',
        matched_rule=DECOY_RULE_ID,
    )


def score_level_submission(
    text: str,
    level: VerseLevel,
    starting_score: int = 0,
    registry: RuleRegistry = default_registry,
) -> LevelResult:
    """
    Score a submission against one verse level.

    Each non-blank line is classified, then checked for decoy verbs using
    the level's verb lists. The game score is updated line by line and
    floored at zero after every step.
    """
    actual = level.verb_texts()
    result = LevelResult(starting_score=starting_score)
    score = max(0, starting_score)

    for line in split_submission(text):
        line_result = classify_line(line, registry)
        hit = check_decoy_verb(line, actual, level.decoy_verbs)
        if hit is not None:
            line_result = decoy_result(hit.verb)
            result.decoys.append(hit.verb)
            logger.info(
                "Decoy verb referenced",
                extra={"level_id": level.id, "decoy_verb": hit.verb},
            )
        result.lines.append(line)
        result.per_line.append(line_result)
        score = max(0, score + line_result.points)

    result.final_score = score
    return result
