from __future__ import annotations

import json
import logging
from typing import Any

from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError

from video_hint.config import Settings
from video_hint.labels.csv_export import LabelPayloadError, labels_to_csv
from video_hint.labels.paths import derive_source_path, is_label_file
from video_hint.labels.prompt import build_video_hint_prompt
from video_hint.models import HandlerOutcome, HandlerResult, ObjectFinalizedEvent, SourceRecord
from video_hint.storage.gcs import ObjectReader
from video_hint.storage.records import RecordStore

HANDLER_NAME = "Handle Video Labels:"
IO_ERRORS = (GoogleAPIError, GoogleAuthError, OSError)

module_logger = logging.getLogger(__name__)


def handle_video_labels(
    event: ObjectFinalizedEvent,
    *,
    reader: ObjectReader,
    store: RecordStore,
    settings: Settings,
    logger: logging.Logger | None = None,
) -> HandlerResult:
    """Turn a finalized label-detection file into a prompt on its source record.

    Every exit is reported as a `HandlerResult`; storage and document-store
    failures become `failed_io` instead of propagating to the trigger.
    """

    log = logger or module_logger
    file_path = event.name
    storage_settings = settings.storage
    record_settings = settings.records

    log.info("%s Starting", HANDLER_NAME)

    if not is_label_file(file_path, storage_settings.label_suffix):
        log.info('%s Video labels file is not a json file, skipping: "%s"', HANDLER_NAME, file_path)
        return HandlerResult(HandlerOutcome.SKIPPED_IRRELEVANT, file_path, detail="not a label file")

    log.info('%s Processing file: "%s"', HANDLER_NAME, file_path)
    try:
        payload = _download_json(reader, event)
    except (*IO_ERRORS, ValueError, RecursionError) as exc:
        log.error("%s Could not download and parse the video labels JSON file: %s", HANDLER_NAME, exc)
        return HandlerResult(HandlerOutcome.FAILED_IO, file_path, detail=f"download/parse failed: {exc}")

    try:
        csv_text = labels_to_csv(payload)
    except LabelPayloadError as exc:
        log.error("%s Couldn't convert the video labels to CSV, skipping: %s", HANDLER_NAME, exc)
        return HandlerResult(HandlerOutcome.SKIPPED_MALFORMED, file_path, detail=str(exc))

    prompt = build_video_hint_prompt(csv_text)
    source_path = derive_source_path(
        file_path,
        suffix=storage_settings.label_suffix,
        output_segment=storage_settings.output_segment,
        input_segment=storage_settings.input_segment,
    )

    try:
        matches = store.find_by_field(record_settings.collection, record_settings.file_field, source_path)
    except IO_ERRORS as exc:
        log.error('%s Record lookup failed for "%s": %s', HANDLER_NAME, source_path, exc)
        return HandlerResult(
            HandlerOutcome.FAILED_IO,
            file_path,
            detail=f"lookup failed: {exc}",
            source_path=source_path,
            prompt=prompt,
        )

    if not matches:
        log.info('%s No document found for file: "%s"', HANDLER_NAME, source_path)
        return HandlerResult(
            HandlerOutcome.SKIPPED_NO_MATCH,
            file_path,
            detail="no matching record",
            source_path=source_path,
            prompt=prompt,
        )

    record = _select_record(matches, policy=record_settings.match_policy, source_path=source_path, log=log)
    if record is None:
        return HandlerResult(
            HandlerOutcome.SKIPPED_AMBIGUOUS,
            file_path,
            detail=f"{len(matches)} records match the source path",
            source_path=source_path,
            prompt=prompt,
        )

    update: dict[str, Any] = {
        record_settings.input_field: prompt,
        # A cleared status lets the text-generation extension pick the record up.
        record_settings.status_field: None,
    }
    try:
        store.update(record_settings.collection, record.id, update)
    except IO_ERRORS as exc:
        log.error('%s Update failed for record "%s": %s', HANDLER_NAME, record.id, exc)
        return HandlerResult(
            HandlerOutcome.FAILED_IO,
            file_path,
            detail=f"update failed: {exc}",
            source_path=source_path,
            record_id=record.id,
            prompt=prompt,
        )

    log.info("%s Finished: Prompt generated and saved to record %s", HANDLER_NAME, record.id)
    return HandlerResult(
        HandlerOutcome.SUCCESS,
        file_path,
        detail="prompt saved",
        source_path=source_path,
        record_id=record.id,
        prompt=prompt,
    )


def _download_json(reader: ObjectReader, event: ObjectFinalizedEvent) -> Any:
    raw = reader.download_bytes(event.bucket, event.name)
    return json.loads(raw.decode("utf-8"))


def _select_record(
    matches: list[SourceRecord],
    *,
    policy: str,
    source_path: str,
    log: logging.Logger,
) -> SourceRecord | None:
    if len(matches) == 1:
        return matches[0]

    ordered = sorted(matches, key=lambda record: record.id)
    if policy == "unique":
        log.error(
            '%s %d records share file "%s" (%s); refusing to pick one',
            HANDLER_NAME,
            len(ordered),
            source_path,
            ", ".join(record.id for record in ordered),
        )
        return None

    log.warning(
        '%s %d records share file "%s"; updating %s and ignoring %s',
        HANDLER_NAME,
        len(ordered),
        source_path,
        ordered[0].id,
        ", ".join(record.id for record in ordered[1:]),
    )
    return ordered[0]
