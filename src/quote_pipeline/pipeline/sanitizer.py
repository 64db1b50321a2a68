"""Strip the matched payload block from text before it is shown to a user."""

from quote_pipeline.core.types import Candidate

from .extractor import PayloadExtractor


def _seam(gap: str) -> str:
    """Whitespace to leave where a block was cut out, given what surrounded it."""
    newlines = gap.count("\n")
    if newlines >= 2:
        return "\n\n"
    if newlines == 1:
        return "\n"
    return " " if gap else ""


def strip_payload(text: str, candidate: Candidate | None) -> str:
    """Remove the candidate's block from `text`.

    The candidate's span covers the whole block (fences or tags included), so
    all three extraction strategies are handled the same way. Only the
    whitespace touching the removed block is rewritten: it collapses to at
    most one blank line, or disappears at either end of the text. Everything
    else is returned as written. Returns `text` unchanged when `candidate` is
    None.
    """
    if candidate is None:
        return text
    before = text[: candidate.start]
    after = text[candidate.end :]
    head = before.rstrip()
    tail = after.lstrip()
    if not head:
        return tail
    if not tail:
        return head
    gap = before[len(head) :] + after[: len(after) - len(tail)]
    return head + _seam(gap) + tail


def sanitize_text(text: str, extractor: PayloadExtractor | None = None) -> str:
    """Extract, then strip, in one call."""
    extractor = extractor if extractor is not None else PayloadExtractor()
    return strip_payload(text, extractor.extract(text))
