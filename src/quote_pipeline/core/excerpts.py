"""Bounded excerpts for diagnostics.

Anything that reaches a log line or an error message goes through these
helpers so raw conversational text is never emitted whole.
"""

from collections.abc import Callable, Iterable
import re
from typing import Any

_ELLIPSIS = "..."


def bounded_excerpt(text: str, limit: int) -> str:
    """Return at most `limit` characters of `text`, marking truncation."""
    if len(text) <= limit:
        return text
    if limit <= len(_ELLIPSIS):
        return text[:limit]
    return text[: limit - len(_ELLIPSIS)] + _ELLIPSIS


def excerpt_around(text: str, pos: int, limit: int) -> str:
    """Return a `limit`-character window centred on `pos`, ellipsis-marked."""
    if len(text) <= limit:
        return text
    half = limit // 2
    start = max(0, min(pos - half, len(text) - limit))
    window = text[start : start + limit]
    prefix = _ELLIPSIS if start > 0 else ""
    suffix = _ELLIPSIS if start + limit < len(text) else ""
    return prefix + window + suffix


def short_repr(value: Any, limit: int = 40) -> str:
    """``repr`` cut down to `limit` characters."""
    return bounded_excerpt(repr(value), limit)


REDACTED = "[REDACTED]"


def value_masker(names: Iterable[str]) -> Callable[[str], str] | None:
    """Build a function that masks the values of `names` in JSON-like text.

    Works on fragments too: a value cut off by the end of the text, or an
    unterminated string, is masked up to where it stops. Returns None when
    `names` is empty.
    """
    names = sorted(set(names))
    if not names:
        return None
    pattern = re.compile(
        r'"(?P<name>' + "|".join(re.escape(n) for n in names) + r')"\s*:\s*'
        r'(?:"(?:[^"\\\n]|\\.)*"?|[^\s,}\]]*)'
    )

    def mask(text: str) -> str:
        return pattern.sub(lambda m: f'"{m.group("name")}": "{REDACTED}"', text)

    return mask


def masked_excerpt(
    text: str,
    limit: int,
    mask: Callable[[str], str] | None,
    pos: int | None = None,
) -> str:
    """Bounded excerpt of `text` with sensitive values masked first.

    When `pos` is given the window is centred on the same spot of the masked
    text.
    """
    if mask is not None:
        if pos is None:
            # Only the head is shown; skip masking the rest of large inputs
            text = text[: limit * 2]
        else:
            pos = len(mask(text[:pos]))
        text = mask(text)
    if pos is None:
        return bounded_excerpt(text, limit)
    return excerpt_around(text, pos, limit)
