"""
Decoy/Verb Cross-checker

Flags observations that mention an action word which sounds plausible for
the passage but does not occur in it (a "decoy" verb). Pure containment
test: no tiers, no points. Callers decide what a hit costs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional


@dataclass(frozen=True)
class DecoyMatch:
    is_decoy: bool
    verb: str

    def to_dict(self) -> dict:
        return {"is_decoy": self.is_decoy, "verb": self.verb}


def check_decoy_verb(
    observation: str,
    actual_verbs: Iterable[str],
    decoy_verbs: Iterable[str],
) -> Optional[DecoyMatch]:
    """
    Return the first decoy verb referenced by the observation, or None.

    A decoy counts only if it is not itself contained in one of the verbs
    actually present, so overlapping stems ("came" vs "came forth") never
    produce a false positive. Matching is case-insensitive substring
    containment; blank decoy entries are ignored.
    """
    text = (observation or "").lower()
    actual = [v.lower() for v in actual_verbs if v]

    for decoy in decoy_verbs:
        needle = (decoy or "").strip().lower()
        if not needle or needle not in text:
            continue
        if any(needle in verb for verb in actual):
            continue
        return DecoyMatch(is_decoy=True, verb=decoy)
    return None
