from __future__ import annotations

from typing import Protocol

from google.cloud import storage


class ObjectReader(Protocol):
    def download_bytes(self, bucket: str, name: str) -> bytes: ...


class GcsObjectReader:
    """Read finalized objects from Cloud Storage."""

    def __init__(self, client: storage.Client) -> None:
        self._client = client

    def download_bytes(self, bucket: str, name: str) -> bytes:
        return self._client.bucket(bucket).blob(name).download_as_bytes()
