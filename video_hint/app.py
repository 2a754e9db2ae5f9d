from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from typing import Any

from google.cloud import firestore, storage

from video_hint.config import Settings, load_settings
from video_hint.events import ObjectFinalizedRouter, event_from_payload
from video_hint.handlers.video_labels import handle_video_labels
from video_hint.logging_config import announce_runtime_mode, configure_logging
from video_hint.models import HandlerResult, ObjectFinalizedEvent
from video_hint.storage.credentials import build_credentials
from video_hint.storage.gcs import GcsObjectReader, ObjectReader
from video_hint.storage.records import FirestoreRecordStore, RecordStore

logger = logging.getLogger(__name__)

_router: ObjectFinalizedRouter | None = None
_router_lock = threading.Lock()


def build_router(
    settings: Settings,
    reader: ObjectReader,
    store: RecordStore,
    handler_logger: logging.Logger | None = None,
) -> ObjectFinalizedRouter:
    router = ObjectFinalizedRouter()

    @router.on_object_finalized
    def _video_labels(event: ObjectFinalizedEvent) -> HandlerResult:
        return handle_video_labels(event, reader=reader, store=store, settings=settings, logger=handler_logger)

    return router


def create_runtime(settings: Settings) -> tuple[GcsObjectReader, FirestoreRecordStore]:
    """Create Cloud Storage and Firestore adapters sharing one set of credentials."""

    credentials, detected_project = build_credentials(settings.gcp.credentials_path)
    project = settings.gcp.project or detected_project
    logger.debug("Using Google Cloud project %s", project)

    reader = GcsObjectReader(storage.Client(project=project, credentials=credentials))
    store = FirestoreRecordStore(firestore.Client(project=project, credentials=credentials))
    return reader, store


def bootstrap(settings: Settings | None = None) -> ObjectFinalizedRouter:
    resolved = settings or load_settings()
    configure_logging(resolved.logging)
    announce_runtime_mode(resolved.runtime, logger)
    reader, store = create_runtime(resolved)
    return build_router(resolved, reader, store)


def handle_storage_event(cloud_event: Any) -> list[HandlerResult]:
    """Entry point the storage finalize trigger invokes once per object.

    Accepts a CloudEvent (anything with a `data` attribute) or a plain mapping.
    An event without a bucket or object name dispatches nothing; bootstrap
    failures reach the host.
    """

    global _router
    with _router_lock:
        if _router is None:
            _router = bootstrap()
        router = _router

    payload = cloud_event if isinstance(cloud_event, Mapping) else {"data": getattr(cloud_event, "data", None)}
    try:
        event = event_from_payload(payload)
    except ValueError as exc:
        logger.error("Ignoring malformed storage event: %s", exc)
        return []
    results = router.dispatch(event)
    for result in results:
        logger.debug("Handler finished for %s with outcome %s", result.object_path, result.outcome.value)
    return results
