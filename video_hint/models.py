from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass(slots=True, frozen=True)
class LabelRow:
    """One detected label over one time segment, flattened for CSV export."""

    start_seconds: str
    end_seconds: str
    detected_label: str


@dataclass(slots=True, frozen=True)
class ObjectFinalizedEvent:
    """Notification that an object write to storage completed."""

    bucket: str
    name: str
    content_type: str | None = None
    generation: str | None = None
    metageneration: str | None = None
    size: int | None = None


@dataclass(slots=True)
class SourceRecord:
    """A document-store record that originated a label-detection run."""

    id: str
    data: dict[str, Any] = field(default_factory=dict)


class HandlerOutcome(str, Enum):
    SUCCESS = "success"
    SKIPPED_IRRELEVANT = "skipped_irrelevant"
    SKIPPED_MALFORMED = "skipped_malformed"
    SKIPPED_NO_MATCH = "skipped_no_match"
    SKIPPED_AMBIGUOUS = "skipped_ambiguous"
    FAILED_IO = "failed_io"


ERROR_OUTCOMES = frozenset(
    {
        HandlerOutcome.SKIPPED_MALFORMED,
        HandlerOutcome.SKIPPED_AMBIGUOUS,
        HandlerOutcome.FAILED_IO,
    }
)


@dataclass(slots=True)
class HandlerResult:
    """Terminal state of one handler invocation."""

    outcome: HandlerOutcome
    object_path: str
    detail: str = ""
    source_path: str | None = None
    record_id: str | None = None
    prompt: str | None = None

    @property
    def is_error(self) -> bool:
        return self.outcome in ERROR_OUTCOMES

    def to_dict(self) -> dict[str, Any]:
        return {
            "outcome": self.outcome.value,
            "object_path": self.object_path,
            "detail": self.detail,
            "source_path": self.source_path,
            "record_id": self.record_id,
            "prompt": self.prompt,
        }
