"""Locate a candidate payload substring inside raw assistant text.

Strategies are tried in order and the first hit wins:

1. ``fenced_code``: a triple-backtick block, untagged or tagged ``json``.
2. ``html_pre``: a ``<pre>`` or ``<code>`` block, with ``&quot;`` and
   ``&amp;`` decoded.
3. ``brace_object``: the first balanced ``{...}`` object in the text.

Extraction selects a substring and nothing more. It never parses JSON and
never raises; anything it over-matches is rejected downstream by the
validator's fail-closed checks.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
import logging
import re

from quote_pipeline.core.exceptions import NoCandidateFound
from quote_pipeline.core.types import (
    Candidate,
    ExtractionStrategyName,
    Failure,
    Result,
    Success,
)

from .base import BaseHandler

log = logging.getLogger(__name__)

_FENCED_RE = re.compile(
    r"```[^\S\n]*(?P<lang>[A-Za-z][\w+-]*)?(?P<body>.*?)```",
    re.DOTALL,
)
_HTML_BLOCK_RE = re.compile(
    r"<(?P<tag>pre|code)\b[^>]*>(?P<body>.*?)</(?P=tag)\s*>",
    re.DOTALL | re.IGNORECASE,
)
_INNER_CODE_RE = re.compile(
    r"^\s*<code\b[^>]*>(?P<body>.*?)</code\s*>\s*$",
    re.DOTALL | re.IGNORECASE,
)

# Minimal entity set; ampersand is decoded last so "&amp;quot;" stays literal.
_HTML_ENTITIES = (("&quot;", '"'), ("&#34;", '"'), ("&amp;", "&"))


@dataclass(frozen=True, slots=True)
class ExtractionStrategy:
    """A named locate function. Returns a Candidate or None, never raises."""

    name: ExtractionStrategyName
    locate: Callable[[str], Candidate | None]


def locate_fenced_block(text: str) -> Candidate | None:
    """Return the first non-empty fenced block that is untagged or tagged json."""
    for match in _FENCED_RE.finditer(text):
        lang = match.group("lang")
        if lang and lang.lower() != "json":
            continue
        body = match.group("body").strip()
        if body:
            return Candidate(body, "fenced_code", match.start(), match.end())
    return None


def decode_html_entities(text: str) -> str:
    """Decode the quote and ampersand entities only."""
    for entity, char in _HTML_ENTITIES:
        text = text.replace(entity, char)
    return text


def locate_html_block(text: str) -> Candidate | None:
    """Return the first non-empty ``<pre>``/``<code>`` block, entities decoded."""
    for match in _HTML_BLOCK_RE.finditer(text):
        body = match.group("body")
        inner = _INNER_CODE_RE.match(body)
        if inner:
            body = inner.group("body")
        body = decode_html_entities(body).strip()
        if body:
            return Candidate(body, "html_pre", match.start(), match.end())
    return None


def find_balanced_object(text: str) -> tuple[int, int] | None:
    """Return the span of the first balanced ``{...}`` in `text`.

    Single pass with a stack of open-brace positions. Braces inside JSON
    string literals are ignored; string tracking only runs while a brace is
    open, so quotes in surrounding prose do not matter. When the earliest
    brace never closes, the earliest-starting object that did close is used.
    """
    stack: list[int] = []
    in_string = False
    escaped = False
    fallback: tuple[int, int] | None = None

    for i, ch in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"' or ch == "\n":
                # JSON strings cannot span lines; recover from stray quotes
                in_string = False
            continue
        if ch == '"' and stack:
            in_string = True
        elif ch == "{":
            stack.append(i)
        elif ch == "}" and stack:
            start = stack.pop()
            if not stack:
                return start, i + 1
            if fallback is None or start < fallback[0]:
                fallback = (start, i + 1)
    return fallback


def locate_brace_object(text: str) -> Candidate | None:
    """Fallback: the first balanced object-shaped substring."""
    span = find_balanced_object(text)
    if span is None:
        return None
    start, end = span
    return Candidate(text[start:end], "brace_object", start, end)


def default_strategies() -> tuple[ExtractionStrategy, ...]:
    """Built-in strategies in priority order."""
    return (
        ExtractionStrategy("fenced_code", locate_fenced_block),
        ExtractionStrategy("html_pre", locate_html_block),
        ExtractionStrategy("brace_object", locate_brace_object),
    )


class PayloadExtractor(BaseHandler[str, Candidate, NoCandidateFound]):
    """Find the candidate payload substring in raw text.

    Attributes:
        strategies: Ordered strategies; the first to return a candidate wins.
    """

    def __init__(self, strategies: Iterable[ExtractionStrategy] | None = None) -> None:
        """Initialize the extractor.

        Args:
            strategies: Optional strategy sequence. Defaults to the built-ins.
        """
        self.strategies = (
            tuple(strategies) if strategies is not None else default_strategies()
        )

    def extract(self, text: str) -> Candidate | None:
        """Return the first candidate any strategy finds, or None."""
        if not isinstance(text, str) or not text:
            return None
        for strategy in self.strategies:
            try:
                candidate = strategy.locate(text)
            except Exception:
                # A misbehaving custom strategy must not take the turn down
                log.debug("Extraction strategy %s failed", strategy.name, exc_info=True)
                continue
            if candidate is not None:
                log.debug(
                    "Extracted candidate via %s at [%d:%d] (%d chars)",
                    strategy.name,
                    candidate.start,
                    candidate.end,
                    len(candidate.text),
                )
                return candidate
        return None

    def handle(self, command: str) -> Result[Candidate, NoCandidateFound]:
        """Wrap `extract` in a Result for pipeline composition."""
        candidate = self.extract(command)
        if candidate is None:
            return Failure(NoCandidateFound("No payload block found in text"))
        return Success(candidate)
