"""
Quotation Exception Detector

Decides whether a line is quoting the source closely enough that
soft-trigger vocabulary inside it should be forgiven. A line is exempt
when it contains a quoted span AND a citation keyword such as "phrase",
"verse" or "appears".

The exemption only ever applies to the soft tier. Hard triggers are
checked before this module is consulted.
"""

from __future__ import annotations

import re

# Straight double, curly double, curly single. Spans must be non-empty.
# A curly single span closes at the first \u2019 not followed by a word
# character, so possessives inside it ("father\u2019s") stay in the span.
_DELIMITED_QUOTES = re.compile(
    '"([^"\\n]+)"'
    '|\u201c([^\u201c\u201d\\n]+)\u201d'
    '|\u2018([^\u2018\\n]+?)\u2019(?!\\w)'
)

# Straight single quotes double as apostrophes ("God's", "Jesus'"), so the
# opening mark must not follow a word character and the closing mark must
# not precede one. Apostrophes inside the span are allowed.
_SINGLE_QUOTES = re.compile(r"(?<!\w)'([^\n]+?)'(?!\w)")

_CITATION_PATTERN = re.compile(
    r"\b(?:phrases?|words?|text|verses?|says|states?|stated|reads|"
    r"appears?|appeared|mentioned|written)\b",
    re.IGNORECASE,
)


def find_quoted_spans(line: str) -> list[str]:
    """Return the contents of every quoted span in the line, in order."""
    spans: list[tuple[int, str]] = []
    for m in _DELIMITED_QUOTES.finditer(line):
        content = next(g for g in m.groups() if g is not None)
        spans.append((m.start(), content))
    for m in _SINGLE_QUOTES.finditer(line):
        spans.append((m.start(), m.group(1)))
    return [content for _, content in sorted(spans)]


def has_quoted_span(line: str) -> bool:
    return bool(_DELIMITED_QUOTES.search(line) or _SINGLE_QUOTES.search(line))


def has_citation_keyword(line: str) -> bool:
    return bool(_CITATION_PATTERN.search(line))


def is_quotation_exempt(line: str) -> bool:
    """True when soft-trigger evaluation should be skipped for this line."""
    return has_quoted_span(line) and has_citation_keyword(line)
