from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from video_hint.models import HandlerResult, ObjectFinalizedEvent

ObjectFinalizedHandler = Callable[[ObjectFinalizedEvent], HandlerResult]


def event_from_payload(payload: Mapping[str, Any]) -> ObjectFinalizedEvent:
    """Build an event from a storage object payload or a CloudEvent envelope."""

    data = payload.get("data", payload)
    if not isinstance(data, Mapping):
        raise ValueError("Storage event data must be an object.")

    bucket = data.get("bucket")
    name = data.get("name")
    if not isinstance(bucket, str) or not bucket:
        raise ValueError("Storage event is missing 'bucket'.")
    if not isinstance(name, str) or not name:
        raise ValueError("Storage event is missing 'name'.")

    size = data.get("size")
    return ObjectFinalizedEvent(
        bucket=bucket,
        name=name,
        content_type=data.get("contentType"),
        generation=_optional_str(data.get("generation")),
        metageneration=_optional_str(data.get("metageneration")),
        size=int(size) if size not in (None, "") else None,
    )


def parse_gcs_uri(uri: str) -> tuple[str, str]:
    """Split `gs://bucket/path/to/object` into bucket and object name."""

    prefix = "gs://"
    if not uri.startswith(prefix):
        raise ValueError(f"Expected a gs:// URI, got: {uri}")

    bucket, _, name = uri[len(prefix) :].partition("/")
    if not bucket or not name:
        raise ValueError(f"URI must name both a bucket and an object: {uri}")
    return bucket, name


class ObjectFinalizedRouter:
    """Dispatch finalize events to registered handlers in registration order."""

    def __init__(self) -> None:
        self._handlers: list[ObjectFinalizedHandler] = []

    def on_object_finalized(self, handler: ObjectFinalizedHandler) -> ObjectFinalizedHandler:
        self._handlers.append(handler)
        return handler

    @property
    def handlers(self) -> tuple[ObjectFinalizedHandler, ...]:
        return tuple(self._handlers)

    def dispatch(self, event: ObjectFinalizedEvent) -> list[HandlerResult]:
        return [handler(event) for handler in self._handlers]


def _optional_str(raw_value: Any) -> str | None:
    if raw_value in (None, ""):
        return None
    return str(raw_value)
