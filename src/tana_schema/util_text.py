from __future__ import annotations

import re

_DISALLOWED_RE = re.compile(r"[^A-Za-z0-9_\-\s]")
_SEPARATOR_RE = re.compile(r"[\s\-_]+")


def normalize_name(name: str | None) -> str:
    """Normalization used to compare supertag/field names.

    "🎯 My-Goal_Item (v2)" -> "mygoalitemv2". Emoji, punctuation, whitespace,
    dashes and underscores are all dropped, so kebab-case, snake_case and
    spaced variants of a name compare equal.
    """
    if not name:
        return ""
    name = name.lower()
    name = _DISALLOWED_RE.sub("", name)
    name = _SEPARATOR_RE.sub("", name)
    return name.strip()
