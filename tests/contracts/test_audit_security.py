"""Security contract tests for audit records and diagnostics.

Layer 2: Security Invariants
Prove that sensitive field values and raw conversation text never leak into
audit records or log output.
"""

import json
import logging

import pytest

from quote_pipeline.config import resolve_settings
from quote_pipeline.pipeline import QuotePipeline
from quote_pipeline.pipeline.audit import REDACTED

CLIENT = "Confidential Stadium Holdings"


class TestAuditRedactionContracts:
    """Redacted fields never surface in audit output."""

    @pytest.mark.contract
    @pytest.mark.security
    def test_client_name_redacted_in_record_and_log(
        self, pipeline, payload_factory, fence, caplog
    ):
        fields = dict(payload_factory()["fields"], clientName=CLIENT)
        text = fence(payload_factory(fields=fields))

        with caplog.at_level(logging.DEBUG, logger="quote_pipeline"):
            outcome = pipeline.process_turn(text, {})

        assert outcome.validation.valid
        assert outcome.state["clientName"] == CLIENT
        assert outcome.audit.excerpt["clientName"] == REDACTED
        assert CLIENT not in json.dumps(outcome.audit.to_dict())
        assert CLIENT not in caplog.text

    @pytest.mark.contract
    @pytest.mark.security
    def test_rejected_sensitive_value_not_echoed(
        self, pipeline, payload_factory, fence, caplog
    ):
        secret = "X" + "S" * 150
        text = fence(payload_factory(fields={"clientName": secret}))

        with caplog.at_level(logging.DEBUG, logger="quote_pipeline"):
            outcome = pipeline.process_turn(text, {})

        assert outcome.validation.error_type == "FieldConstraintError"
        assert secret not in outcome.validation.error
        assert secret not in caplog.text
        assert outcome.audit.error == f"clientName: {REDACTED}"

    @pytest.mark.contract
    @pytest.mark.security
    def test_redaction_list_is_configurable(self, registry, payload_factory, fence):
        settings = resolve_settings({"redacted_fields": ["finalPrice"]})
        pipeline = QuotePipeline(registry, settings)

        outcome = pipeline.process_turn(fence(payload_factory()), {})

        assert outcome.audit.excerpt["finalPrice"] == REDACTED
        assert outcome.audit.excerpt["width"] == 40


class TestExcerptBoundContracts:
    """Diagnostics carry bounded excerpts, never the full input."""

    @pytest.mark.contract
    @pytest.mark.security
    def test_oversized_input_not_logged_whole(self, pipeline, fence, caplog):
        body = '{"type": "anc_quote_update", "note": "' + "private " * 1000 + '"}'

        with caplog.at_level(logging.DEBUG, logger="quote_pipeline"):
            outcome = pipeline.process_turn(fence(body), {})

        assert outcome.validation.error_type == "SizeExceeded"
        assert "private " * 30 not in caplog.text
        for record in caplog.records:
            assert len(record.getMessage()) < 1000

    @pytest.mark.contract
    @pytest.mark.security
    def test_parse_error_excerpt_is_bounded(self, registry, fence, caplog):
        settings = resolve_settings({"excerpt_length": 32})
        pipeline = QuotePipeline(registry, settings)
        body = '{"fields": {"note": "' + "Q" * 300 + '", oops}'

        with caplog.at_level(logging.DEBUG, logger="quote_pipeline"):
            pipeline.process_turn(fence(body), {})

        assert "Q" * 64 not in caplog.text

    @pytest.mark.contract
    @pytest.mark.security
    def test_audit_error_is_bounded(self, registry, payload_factory, fence):
        settings = resolve_settings({"excerpt_length": 40})
        pipeline = QuotePipeline(registry, settings)
        fields = {f"unknown_{'k' * 200}": 1}

        outcome = pipeline.process_turn(fence(payload_factory(fields=fields)), {})

        assert outcome.validation.error_type == "UnknownFieldError"
        assert len(outcome.audit.error) <= 40


class TestValidatorLogRedactionContracts:
    """Validator diagnostics mask redacted values before anything is logged."""

    @pytest.mark.contract
    @pytest.mark.security
    def test_parse_failure_does_not_log_client_name(self, pipeline, fence, caplog):
        body = (
            '{"type":"anc_quote_update","schemaVersion":1,'
            '"fields":{"clientName":"Secret Stadium LLC",}}'
        )

        with caplog.at_level(logging.DEBUG, logger="quote_pipeline"):
            outcome = pipeline.process_turn(fence(body), {})

        assert outcome.validation.error_type == "ParseError"
        assert "Secret Stadium" not in caplog.text
        assert REDACTED in caplog.text

    @pytest.mark.contract
    @pytest.mark.security
    def test_each_rejection_is_warned_once(
        self, pipeline, payload_factory, fence, caplog
    ):
        text = fence(payload_factory(fields={"environment": "Underwater"}))

        with caplog.at_level(logging.DEBUG, logger="quote_pipeline"):
            pipeline.process_turn(text, {})

        warnings = [r for r in caplog.records if r.levelno >= logging.WARNING]
        assert [r.name for r in warnings] == ["quote_pipeline.audit"]
