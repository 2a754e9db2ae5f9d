from __future__ import annotations

import os
from pathlib import Path

from google.auth import default as google_auth_default
from google.auth.credentials import Credentials
from google.oauth2 import service_account

CLOUD_PLATFORM_SCOPES = ["https://www.googleapis.com/auth/cloud-platform"]


def build_credentials(credentials_path: str | Path | None = None) -> tuple[Credentials, str | None]:
    """Resolve Google credentials and the project they belong to.

    A service-account key file wins when it exists (explicit path first, then
    GOOGLE_APPLICATION_CREDENTIALS); otherwise application default credentials
    are used, which is what a deployed function runs with.
    """

    key_path = credentials_path or os.environ.get("GOOGLE_APPLICATION_CREDENTIALS")
    if key_path and Path(key_path).exists():
        creds = service_account.Credentials.from_service_account_file(str(key_path), scopes=CLOUD_PLATFORM_SCOPES)
        return creds, creds.project_id

    creds, project = google_auth_default(scopes=CLOUD_PLATFORM_SCOPES)
    return creds, project
