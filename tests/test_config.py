"""Tests for PipelineConfig."""

import pytest
from pydantic import ValidationError

from event_pipeline import PipelineConfig


@pytest.mark.unit
class TestPipelineConfig:
    def test_defaults(self):
        config = PipelineConfig()
        assert config.name == "pipeline"
        assert config.log_payloads is False
        assert config.payload_repr_limit == 200

    def test_frozen(self):
        config = PipelineConfig()
        with pytest.raises(ValidationError):
            config.name = "other"

    def test_rejects_unknown_fields(self):
        with pytest.raises(ValidationError):
            PipelineConfig(timeout=5)

    def test_rejects_empty_name(self):
        with pytest.raises(ValidationError):
            PipelineConfig(name="")

    def test_repr_limit_lower_bound(self):
        with pytest.raises(ValidationError):
            PipelineConfig(payload_repr_limit=8)

    def test_format_payload_placeholder(self):
        assert PipelineConfig().format_payload({"a": 1}) == "<payload>"

    def test_format_payload_truncates(self):
        config = PipelineConfig(log_payloads=True, payload_repr_limit=16)
        text = config.format_payload("x" * 100)
        assert len(text) == 16
        assert text.endswith("...")

    def test_format_payload_short_value(self):
        config = PipelineConfig(log_payloads=True)
        assert config.format_payload([1, 2]) == "[1, 2]"
