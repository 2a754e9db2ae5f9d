from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from video_hint.config import load_settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("VIDEO_HINT_CONFIG", "NEXT_PUBLIC_IS_TEST_MODE"):
        monkeypatch.delenv(key, raising=False)


def _write_config(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(body, encoding="utf-8")
    return path


def test_load_settings_reads_yaml(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path, "records:\n  collection: videos\nlogging:\n  level: DEBUG\n")

    settings = load_settings(config_path)

    assert settings.records.collection == "videos"
    assert settings.records.file_field == "file"
    assert settings.logging.level == "DEBUG"


def test_missing_default_config_falls_back_to_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    settings = load_settings()

    assert settings.storage.output_segment == "video_annotation_output"
    assert settings.records.match_policy == "first"
    assert settings.runtime.test_mode is False


def test_explicit_missing_config_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "missing.yaml")


def test_env_overrides_are_coerced(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = _write_config(tmp_path, "{}\n")
    monkeypatch.setenv("VIDEO_HINT_RUNTIME__TEST_MODE", "yes")
    monkeypatch.setenv("VIDEO_HINT_RECORDS__MATCH_POLICY", "unique")
    monkeypatch.setenv("VIDEO_HINT_GCP__PROJECT", "demo-project")
    monkeypatch.setenv("VIDEO_HINT_UNKNOWN__KEY", "ignored")

    settings = load_settings(config_path)

    assert settings.runtime.test_mode is True
    assert settings.records.match_policy == "unique"
    assert settings.gcp.project == "demo-project"


def test_legacy_test_mode_flag(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = _write_config(tmp_path, "{}\n")
    monkeypatch.setenv("NEXT_PUBLIC_IS_TEST_MODE", "true")

    assert load_settings(config_path).runtime.test_mode is True


def test_invalid_match_policy_is_rejected(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path, "records:\n  match_policy: newest\n")

    with pytest.raises(ValidationError):
        load_settings(config_path)
