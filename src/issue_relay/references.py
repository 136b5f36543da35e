"""
Issue reference detection.

Finds ``#123`` and ``git#123`` tokens in chat messages. Text inside fenced
code blocks, inline code, URLs and quoted lines (``> ...``) is ignored. A
reference must stand alone: it is delimited by whitespace or the ends of the
message. Masked regions are overwritten with NUL characters of equal length,
so reported offsets index into the original message.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List

MAX_ISSUE_NUMBER = 99999

_REFERENCE = re.compile(r"(?<!\S)(?:git)?#(\d{1,5})(?!\S)")

_MASKS = (
    re.compile(r"```[\s\S]*?```"),
    re.compile(r"`[^`\n]+`"),
    re.compile(r"https?://\S+"),
    re.compile(r"^>.*$", re.MULTILINE),
)


@dataclass(slots=True, frozen=True)
class IssueReference:
    pattern: str
    number: int
    start: int
    end: int


def _mask(content: str) -> str:
    for rx in _MASKS:
        content = rx.sub(lambda m: "\0" * len(m.group(0)), content)
    return content


def detect_issue_references(content: str) -> List[IssueReference]:
    """Return unique references in order of appearance (first occurrence wins)."""

    masked = _mask(content)
    seen: set[int] = set()
    found: List[IssueReference] = []
    for match in _REFERENCE.finditer(masked):
        number = int(match.group(1))
        if not 1 <= number <= MAX_ISSUE_NUMBER or number in seen:
            continue
        seen.add(number)
        found.append(IssueReference(match.group(0), number, match.start(), match.end()))
    return found


__all__ = ["IssueReference", "detect_issue_references", "MAX_ISSUE_NUMBER"]
