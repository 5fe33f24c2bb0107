"""
Corpus Parser — Reads Labeled Observation Samples

Parses the simple text format used for calibration corpus files.
Each sample is one observation line preceded by metadata tags,
separated by '---' delimiters.

Format:
    ---
    expect: MEANING_CLAIM
    source: classroom set 3
    notes: classic symbol reading

    The father's embrace represents God's welcome.

    ---

``expect`` is a rule id from the registry, or ``default`` for a line
that should fall through to the default-valid outcome.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from observation_engine.registry import RuleId

DEFAULT_LABEL = "default"

VALID_LABELS = frozenset({r.value for r in RuleId} | {DEFAULT_LABEL})


@dataclass
class CalibrationSample:
    """A single labeled sample from the calibration corpus."""
    text: str
    expected: str                 # Rule id, or "default"
    source: str
    notes: str

    # Populated after engine evaluation
    engine_result: Optional[dict] = None


def parse_corpus(filepath: str | Path) -> list[CalibrationSample]:
    """
    Parse a calibration corpus file into a list of samples.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if a block carries an unknown ``expect`` label.
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"Corpus file not found: {filepath}")

    content = filepath.read_text(encoding="utf-8")
    blocks = re.split(r"(?:^|\n)\s*---\s*(?:\n|$)", content)

    samples = []
    for block in blocks:
        block = block.strip()
        if not block or block.startswith("#"):
            continue

        sample = _parse_block(block)
        if sample:
            samples.append(sample)

    return samples


def _parse_block(block: str) -> Optional[CalibrationSample]:
    """Parse a single sample block."""
    metadata = {}
    text_lines = []
    in_text = False

    for line in block.split("\n"):
        stripped = line.strip()
        if stripped.startswith("#"):
            continue

        if not in_text:
            match = re.match(r"^(expect|source|notes)\s*:\s*(.+)$", stripped, re.IGNORECASE)
            if match:
                metadata[match.group(1).lower()] = match.group(2).strip()
            elif stripped:
                in_text = True
                text_lines.append(stripped)
        elif stripped:
            text_lines.append(stripped)

    # Observations are single lines; wrapped text is joined back together
    text = " ".join(text_lines).strip()
    if not text:
        return None

    expected = metadata.get("expect", DEFAULT_LABEL)
    if expected.lower() == DEFAULT_LABEL:
        expected = DEFAULT_LABEL
    else:
        expected = expected.upper()
    if expected not in VALID_LABELS:
        raise ValueError(f"Unknown expect label {expected!r} for sample: {text[:60]}")

    return CalibrationSample(
        text=text,
        expected=expected,
        source=metadata.get("source", "unknown"),
        notes=metadata.get("notes", ""),
    )


def parse_all_corpora(corpus_dir: str | Path) -> list[CalibrationSample]:
    """Parse all .txt corpus files in a directory."""
    corpus_dir = Path(corpus_dir)
    samples = []
    for filepath in sorted(corpus_dir.glob("*.txt")):
        samples.extend(parse_corpus(filepath))
    return samples
