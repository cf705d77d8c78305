"""Configuration for :class:`~event_pipeline.pipeline.AsyncEventPipeline`."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PipelineConfig(BaseModel):
    """Settings that shape how a pipeline reports its runs.

    None of these change execution semantics; they only affect what ends up
    in the log records emitted under the ``event_pipeline`` logger.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(
        default="pipeline",
        min_length=1,
        description="Label used to identify this pipeline in log records",
    )
    log_payloads: bool = Field(
        default=False,
        description="Include a repr of each payload in DEBUG log records",
    )
    payload_repr_limit: int = Field(
        default=200,
        ge=16,
        description="Maximum length of a logged payload repr before truncation",
    )

    def format_payload(self, data: Any) -> str:
        """Return a loggable rendering of *data* (or a placeholder)."""
        if not self.log_payloads:
            return "<payload>"
        text = repr(data)
        if len(text) > self.payload_repr_limit:
            return text[: self.payload_repr_limit - 3] + "..."
        return text
