"""Unit tests for candidate extraction strategies."""

import json

import pytest

from quote_pipeline.core.exceptions import NoCandidateFound
from quote_pipeline.core.types import Candidate, Failure, Success
from quote_pipeline.pipeline.extractor import (
    ExtractionStrategy,
    PayloadExtractor,
    decode_html_entities,
    find_balanced_object,
)

pytestmark = pytest.mark.unit

PAYLOAD = '{"type":"anc_quote_update","schemaVersion":1,"fields":{"width":40}}'


class TestFencedStrategy:
    def test_json_tagged_block(self):
        text = f"Here you go:\n```json\n{PAYLOAD}\n```\nAnything else?"
        candidate = PayloadExtractor().extract(text)
        assert candidate is not None
        assert candidate.strategy == "fenced_code"
        assert candidate.text == PAYLOAD
        assert text[candidate.start : candidate.end].startswith("```json")
        assert text[candidate.start : candidate.end].endswith("```")

    def test_untagged_block(self):
        text = f"```\n{PAYLOAD}\n```"
        candidate = PayloadExtractor().extract(text)
        assert candidate.strategy == "fenced_code"
        assert candidate.text == PAYLOAD

    def test_tag_is_case_insensitive(self):
        candidate = PayloadExtractor().extract(f"```JSON\n{PAYLOAD}\n```")
        assert candidate.text == PAYLOAD

    def test_other_language_block_is_skipped(self):
        text = f"```python\nprint('x')\n```\nand\n```json\n{PAYLOAD}\n```"
        candidate = PayloadExtractor().extract(text)
        assert candidate.strategy == "fenced_code"
        assert candidate.text == PAYLOAD

    def test_first_fenced_block_wins(self):
        second = PAYLOAD.replace("40", "41")
        text = f"```json\n{PAYLOAD}\n```\n```json\n{second}\n```"
        assert PayloadExtractor().extract(text).text == PAYLOAD

    def test_empty_fence_falls_through(self):
        text = f"```json\n```\nthen {PAYLOAD}"
        candidate = PayloadExtractor().extract(text)
        assert candidate.strategy == "brace_object"
        assert candidate.text == PAYLOAD


class TestHtmlStrategy:
    def test_pre_code_block_with_entities(self):
        encoded = PAYLOAD.replace('"', "&quot;")
        text = f"<p>Summary</p><pre><code class='language-json'>{encoded}</code></pre>"
        candidate = PayloadExtractor().extract(text)
        assert candidate.strategy == "html_pre"
        assert candidate.text == PAYLOAD
        assert text[candidate.start : candidate.end].startswith("<pre>")

    def test_bare_code_block(self):
        text = f"<code>{PAYLOAD}</code>"
        candidate = PayloadExtractor().extract(text)
        assert candidate.strategy == "html_pre"
        assert json.loads(candidate.text)["schemaVersion"] == 1

    def test_fenced_block_takes_priority(self):
        text = f"<pre>{{}}</pre>\n```json\n{PAYLOAD}\n```"
        assert PayloadExtractor().extract(text).strategy == "fenced_code"

    def test_ampersand_decoded_last(self):
        assert decode_html_entities("&amp;quot; &quot; &amp;") == '&quot; " &'


class TestBraceFallback:
    def test_object_inside_prose(self):
        text = f"Updated the quote {PAYLOAD} - let me know."
        candidate = PayloadExtractor().extract(text)
        assert candidate.strategy == "brace_object"
        assert candidate.text == PAYLOAD

    def test_takes_first_balanced_object_not_greedy_span(self):
        text = f"{PAYLOAD} and later {{unrelated}}"
        candidate = PayloadExtractor().extract(text)
        assert candidate.text == PAYLOAD

    def test_braces_inside_strings_are_ignored(self):
        obj = '{"note": "use } and { freely", "n": 1}'
        assert find_balanced_object(f"x {obj} y") == (2, 2 + len(obj))

    def test_unclosed_leading_brace_still_finds_inner_object(self):
        text = f"Set {{ width to 40: {PAYLOAD}"
        start, end = find_balanced_object(text)
        assert text[start:end] == PAYLOAD

    def test_no_braces(self):
        assert find_balanced_object("no objects here") is None


class TestNoCandidate:
    @pytest.mark.parametrize(
        "text",
        ["", "Plain prose with no markers.", "A lone } brace", "Only { opening"],
    )
    def test_returns_none(self, text):
        assert PayloadExtractor().extract(text) is None

    def test_non_string_input_returns_none(self):
        assert PayloadExtractor().extract(None) is None  # type: ignore[arg-type]

    def test_handle_wraps_miss_in_failure(self):
        result = PayloadExtractor().handle("nothing here")
        assert isinstance(result, Failure)
        assert isinstance(result.error, NoCandidateFound)

    def test_handle_wraps_hit_in_success(self):
        result = PayloadExtractor().handle(PAYLOAD)
        assert isinstance(result, Success)
        assert isinstance(result.value, Candidate)


class TestCustomStrategies:
    def test_failing_strategy_is_skipped(self):
        def explode(_text):
            raise RuntimeError("boom")

        extractor = PayloadExtractor(
            [
                ExtractionStrategy("fenced_code", explode),
                *PayloadExtractor().strategies[1:],
            ]
        )
        candidate = extractor.extract(f"see {PAYLOAD}")
        assert candidate.strategy == "brace_object"

    def test_strategy_order_is_respected(self):
        fallback_only = PayloadExtractor(PayloadExtractor().strategies[2:])
        candidate = fallback_only.extract(f"```json\n{PAYLOAD}\n```")
        assert candidate.strategy == "brace_object"
        assert candidate.text == PAYLOAD
