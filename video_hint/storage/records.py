from __future__ import annotations

from typing import Any, Protocol

from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from video_hint.models import SourceRecord


class RecordStore(Protocol):
    def find_by_field(self, collection: str, field: str, value: str) -> list[SourceRecord]: ...

    def update(self, collection: str, record_id: str, fields: dict[str, Any]) -> None: ...


class FirestoreRecordStore:
    """Equality lookups and partial updates against Cloud Firestore."""

    def __init__(self, client: firestore.Client) -> None:
        self._client = client

    def find_by_field(self, collection: str, field: str, value: str) -> list[SourceRecord]:
        snapshots = self._client.collection(collection).where(filter=FieldFilter(field, "==", value)).get()
        return [SourceRecord(id=snapshot.id, data=snapshot.to_dict() or {}) for snapshot in snapshots]

    def update(self, collection: str, record_id: str, fields: dict[str, Any]) -> None:
        self._client.collection(collection).document(record_id).update(fields)
