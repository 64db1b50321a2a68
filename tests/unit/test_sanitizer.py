"""Unit tests for stripping payload blocks from display text."""

import pytest

from quote_pipeline.core.types import Candidate
from quote_pipeline.pipeline.extractor import PayloadExtractor
from quote_pipeline.pipeline.sanitizer import sanitize_text, strip_payload

pytestmark = pytest.mark.unit

PAYLOAD = '{"type":"anc_quote_update","schemaVersion":1,"fields":{"width":40}}'


class TestStripPayload:
    def test_removes_fenced_block_and_collapses_blank_lines(self):
        text = f"Here is your update:\n\n```json\n{PAYLOAD}\n```\n\n\nLet me know."
        assert sanitize_text(text) == "Here is your update:\n\nLet me know."

    def test_removes_html_block(self):
        text = f"Summary<pre>{PAYLOAD}</pre> done"
        assert sanitize_text(text) == "Summary done"

    def test_removes_bare_object(self):
        text = f"Updated: {PAYLOAD}"
        assert sanitize_text(text) == "Updated:"

    def test_no_candidate_returns_text_unchanged(self):
        text = "  No payload here.\n\n\n\nStill none.  "
        assert strip_payload(text, None) == text
        assert sanitize_text(text) == text

    def test_only_matched_block_is_removed(self):
        text = f"```json\n{PAYLOAD}\n```\nSee also:\n```python\nprint('hi')\n```"
        assert sanitize_text(text) == "See also:\n```python\nprint('hi')\n```"

    def test_payload_only_message_becomes_empty(self):
        assert sanitize_text(f"```json\n{PAYLOAD}\n```") == ""

    def test_span_is_taken_from_candidate(self):
        text = "abc[[block]]def"
        candidate = Candidate("block", "brace_object", 3, 12)
        assert strip_payload(text, candidate) == "abcdef"

    def test_sanitizing_twice_is_stable(self):
        text = f"Intro\n\n```json\n{PAYLOAD}\n```\n\nOutro"
        once = sanitize_text(text)
        assert sanitize_text(once) == once

    def test_custom_extractor_is_used(self):
        extractor = PayloadExtractor(strategies=())
        text = f"```json\n{PAYLOAD}\n```"
        assert sanitize_text(text, extractor) == text


class TestSeamOnly:
    """Whitespace away from the removed block is left as written."""

    def test_prose_spacing_outside_the_block_is_kept(self):
        text = (
            "Line one\n\n\n\nLine two   spaced\n\n"
            f"```json\n{PAYLOAD}\n```\n\n\n\nTrailing\n\n\n\nparagraphs  "
        )
        assert sanitize_text(text) == (
            "Line one\n\n\n\nLine two   spaced\n\nTrailing\n\n\n\nparagraphs  "
        )

    def test_single_newline_seam_is_kept(self):
        text = f"Before\n{PAYLOAD} after"
        assert sanitize_text(text) == "Before\nafter"

    def test_leading_whitespace_of_remaining_text_is_kept(self):
        text = f"   Indented intro {PAYLOAD}"
        assert sanitize_text(text) == "   Indented intro"
