"""Unit tests for the audit record builder."""

from datetime import datetime
import logging

import pytest

from quote_pipeline.core.exceptions import FieldConstraintError
from quote_pipeline.core.types import Payload, ValidationResult
from quote_pipeline.pipeline.audit import REDACTED, AuditLogger, changed_field_names

pytestmark = pytest.mark.unit


def accepted():
    return ValidationResult.accepted(
        Payload(type="anc_quote_update", schema_version=1, fields={"width": 40})
    )


class TestChangedFieldNames:
    def test_added_changed_and_removed(self):
        previous = {"width": 30, "height": 20, "budget": 5}
        current = {"width": 40, "height": 20, "environment": "Indoor"}
        assert changed_field_names(previous, current) == (
            "budget",
            "environment",
            "width",
        )

    def test_none_is_distinct_from_absent(self):
        assert changed_field_names({}, {"width": None}) == ("width",)

    def test_identical_states(self):
        assert changed_field_names({"width": 1}, {"width": 1}) == ()


class TestAuditLogger:
    def test_passing_record(self):
        audit = AuditLogger()
        record = audit.record({}, {"width": 40}, accepted(), complete=False)
        assert record.passed is True
        assert record.changed_fields == ("width",)
        assert dict(record.excerpt) == {"width": 40}
        assert record.error is None
        assert record.complete is False
        assert datetime.fromisoformat(record.timestamp).tzinfo is not None

    def test_redacts_sensitive_values(self):
        audit = AuditLogger()
        record = audit.record(
            {}, {"clientName": "Acme Arena", "width": 40}, accepted()
        )
        assert record.excerpt["clientName"] == REDACTED
        assert record.excerpt["width"] == 40
        assert "Acme Arena" not in str(record.to_dict())

    def test_custom_redaction_list(self):
        audit = AuditLogger(redacted_fields=["budget"])
        assert audit.redact({"budget": 10, "clientName": "Acme"}) == {
            "budget": REDACTED,
            "clientName": "Acme",
        }

    def test_long_values_are_bounded(self):
        audit = AuditLogger(excerpt_length=20)
        redacted = audit.redact({"status": "x" * 200})
        assert len(redacted["status"]) == 20
        assert redacted["status"].endswith("...")

    def test_failing_record_bounds_error(self):
        audit = AuditLogger(excerpt_length=24)
        failure = ValidationResult.rejected(
            FieldConstraintError("width: " + "too large " * 20, field="width")
        )
        record = audit.record({"width": 30}, {"width": 30}, failure)
        assert record.passed is False
        assert record.error_type == "FieldConstraintError"
        assert len(record.error) <= 24
        assert record.changed_fields == ()

    def test_error_on_redacted_field_hides_message(self):
        audit = AuditLogger()
        failure = ValidationResult.rejected(
            FieldConstraintError("clientName: bad value Acme", field="clientName")
        )
        record = audit.record({}, {}, failure)
        assert record.error == f"clientName: {REDACTED}"

    def test_emits_through_given_logger(self, caplog):
        logger = logging.getLogger("tests.audit")
        audit = AuditLogger(logger=logger)
        with caplog.at_level(logging.INFO, logger="tests.audit"):
            audit.record({}, {"width": 40}, accepted(), complete=False)
        assert caplog.records[-1].name == "tests.audit"
        assert caplog.records[-1].levelno == logging.INFO

    def test_rejections_log_at_warning(self, caplog):
        audit = AuditLogger()
        failure = ValidationResult.rejected(FieldConstraintError("width: bad"))
        with caplog.at_level(logging.INFO, logger="quote_pipeline.audit"):
            audit.record({}, {}, failure)
        assert caplog.records[-1].levelno == logging.WARNING

    def test_to_dict_is_plain(self):
        record = AuditLogger().record({}, {"width": 40}, accepted())
        data = record.to_dict()
        assert data["changed_fields"] == ["width"]
        assert isinstance(data["excerpt"], dict)
