from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field

DEFAULT_CONFIG_PATH = Path("configs/default.yaml")
ENV_PREFIX = "VIDEO_HINT_"
LEGACY_TEST_MODE_ENV = "NEXT_PUBLIC_IS_TEST_MODE"


class StorageSettings(BaseModel):
    label_suffix: str = ".json"
    output_segment: str = "video_annotation_output"
    input_segment: str = "video_annotation_input"


class RecordSettings(BaseModel):
    collection: str = "bot"
    file_field: str = "file"
    input_field: str = "input"
    status_field: str = "status"
    match_policy: Literal["first", "unique"] = "first"


class GcpSettings(BaseModel):
    project: str | None = None
    credentials_path: Path | None = None


class LoggingSettings(BaseModel):
    level: str = "INFO"


class RuntimeSettings(BaseModel):
    test_mode: bool = False


class Settings(BaseModel):
    storage: StorageSettings = Field(default_factory=StorageSettings)
    records: RecordSettings = Field(default_factory=RecordSettings)
    gcp: GcpSettings = Field(default_factory=GcpSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    runtime: RuntimeSettings = Field(default_factory=RuntimeSettings)


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load typed settings from YAML with environment-variable overrides.

    An explicitly requested file must exist; the default location is optional
    so a deployed function can run on defaults plus environment variables.
    """

    explicit_path = config_path or os.getenv(f"{ENV_PREFIX}CONFIG")
    resolved_path = Path(explicit_path or DEFAULT_CONFIG_PATH)
    if explicit_path or resolved_path.exists():
        raw_config = yaml.safe_load(resolved_path.read_text(encoding="utf-8")) or {}
    else:
        raw_config = {}
    data = Settings.model_validate(raw_config).model_dump(mode="python")

    legacy_test_mode = os.getenv(LEGACY_TEST_MODE_ENV)
    if legacy_test_mode is not None:
        data["runtime"]["test_mode"] = legacy_test_mode.strip().lower() == "true"

    for key, raw_value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue

        suffix = key[len(ENV_PREFIX) :]
        if suffix == "CONFIG":
            continue

        path = [part.lower() for part in suffix.split("__")]
        _apply_override(data, path, raw_value)

    return Settings.model_validate(data)


def _apply_override(data: dict[str, Any], path: list[str], raw_value: str) -> None:
    current: Any = data
    for segment in path[:-1]:
        if not isinstance(current, dict) or segment not in current:
            return
        current = current[segment]

    if not isinstance(current, dict):
        return

    final_key = path[-1]
    if final_key not in current:
        return

    current[final_key] = _coerce_value(raw_value, current[final_key])


def _coerce_value(raw_value: str, existing_value: Any) -> Any:
    if isinstance(existing_value, bool):
        return raw_value.lower() in {"1", "true", "yes", "on"}
    if isinstance(existing_value, int) and not isinstance(existing_value, bool):
        return int(raw_value)
    if isinstance(existing_value, float):
        return float(raw_value)
    if isinstance(existing_value, list | dict):
        return json.loads(raw_value)
    if isinstance(existing_value, Path):
        return Path(raw_value)
    return raw_value
