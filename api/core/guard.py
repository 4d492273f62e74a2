"""
Free-text input filter for SQL metacharacter patterns.

This sits on top of bound parameters, never in place of them: every query
in this service is parameterized whether or not the text passes here.

Rejected:
- statement separator `;`
- line comment marker `--`
- the whole words OR / AND (any case). "Android" or "ORDER" are fine.
"""

from __future__ import annotations

import re

_UNSAFE_PATTERNS = (
    re.compile(r";"),
    re.compile(r"--"),
    re.compile(r"\b(?:or|and)\b", re.IGNORECASE),
)


def is_safe(text: str | None) -> bool:
    raw = text or ""
    return not any(pattern.search(raw) for pattern in _UNSAFE_PATTERNS)
