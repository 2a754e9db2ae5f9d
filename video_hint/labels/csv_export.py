from __future__ import annotations

import csv
import io
import math
from collections.abc import Iterator, Mapping
from typing import Any

from video_hint.models import LabelRow

CSV_HEADER = ("start_seconds", "end_seconds", "detected_label")


class LabelPayloadError(ValueError):
    """Raised when a label-detection payload does not have the expected shape."""


def labels_to_csv(payload: Any) -> str:
    """Flatten shot label annotations into CSV text.

    The header comes first, then one row per segment in payload order
    (results, then annotations, then segments). Rows are separated by a bare
    newline and the text carries no trailing newline.
    """

    rows = list(iter_label_rows(payload))

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for row in rows:
        writer.writerow((row.start_seconds, row.end_seconds, row.detected_label))

    text = buffer.getvalue()
    return text[:-1] if text.endswith("\n") else text


def iter_label_rows(payload: Any) -> Iterator[LabelRow]:
    """Yield one `LabelRow` per annotated segment, validating as it goes."""

    results = _annotation_results(payload)

    for result_index, result in enumerate(results):
        if not isinstance(result, Mapping):
            raise LabelPayloadError(f"annotation_results[{result_index}] must be an object.")

        annotations = result.get("shot_label_annotations") or []
        if not isinstance(annotations, list):
            raise LabelPayloadError(
                f"annotation_results[{result_index}].shot_label_annotations must be a list."
            )

        for annotation_index, annotation in enumerate(annotations):
            where = f"annotation_results[{result_index}].shot_label_annotations[{annotation_index}]"
            yield from _annotation_rows(annotation, where=where)


def _annotation_results(payload: Any) -> list[Any]:
    if not isinstance(payload, Mapping):
        raise LabelPayloadError("Label payload must be a JSON object.")

    results = payload.get("annotation_results")
    if not isinstance(results, list) or not results:
        raise LabelPayloadError("No annotation_results found in label payload.")
    return results


def _annotation_rows(annotation: Any, *, where: str) -> Iterator[LabelRow]:
    if not isinstance(annotation, Mapping):
        raise LabelPayloadError(f"{where} must be an object.")

    entity = annotation.get("entity")
    if not isinstance(entity, Mapping) or not isinstance(entity.get("description"), str):
        raise LabelPayloadError(f"{where}.entity.description must be a string.")
    description = entity["description"]

    segments = annotation.get("segments") or []
    if not isinstance(segments, list):
        raise LabelPayloadError(f"{where}.segments must be a list.")

    for segment_index, wrapper in enumerate(segments):
        segment_where = f"{where}.segments[{segment_index}]"
        segment = wrapper.get("segment") if isinstance(wrapper, Mapping) else None
        if not isinstance(segment, Mapping):
            raise LabelPayloadError(f"{segment_where}.segment must be an object.")

        yield LabelRow(
            start_seconds=_offset_seconds(segment.get("start_time_offset"), where=f"{segment_where}.start_time_offset"),
            end_seconds=_offset_seconds(segment.get("end_time_offset"), where=f"{segment_where}.end_time_offset"),
            detected_label=description,
        )


def _offset_seconds(offset: Any, *, where: str) -> str:
    # Protobuf JSON drops zero-valued fields, so {} and a missing offset mean 0s.
    if offset is None:
        return "0"
    if not isinstance(offset, Mapping):
        raise LabelPayloadError(f"{where} must be an object.")
    return _format_seconds(offset.get("seconds", 0), where=f"{where}.seconds")


def _format_seconds(raw_value: Any, *, where: str) -> str:
    if isinstance(raw_value, bool):
        raise LabelPayloadError(f"{where} must be a number.")
    if isinstance(raw_value, int):
        return str(raw_value)
    if isinstance(raw_value, float):
        if not math.isfinite(raw_value):
            raise LabelPayloadError(f"{where} must be a finite number.")
        return str(int(raw_value)) if raw_value.is_integer() else repr(raw_value)
    if isinstance(raw_value, str):
        # int64 fields are serialized as strings in protobuf JSON.
        stripped = raw_value.strip()
        try:
            return str(int(stripped))
        except ValueError:
            pass
        try:
            return _format_seconds(float(stripped), where=where)
        except ValueError as exc:
            raise LabelPayloadError(f"{where} must be a number, got {raw_value!r}.") from exc
    raise LabelPayloadError(f"{where} must be a number.")
