from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import typer
from google.auth.exceptions import GoogleAuthError

from video_hint.app import build_router, create_runtime
from video_hint.config import Settings, load_settings
from video_hint.events import parse_gcs_uri
from video_hint.labels.csv_export import labels_to_csv
from video_hint.labels.paths import derive_source_path
from video_hint.labels.prompt import build_video_hint_prompt
from video_hint.logging_config import announce_runtime_mode, configure_logging
from video_hint.models import ObjectFinalizedEvent

app = typer.Typer(help="Video hint label-to-prompt pipeline step.")
config_app = typer.Typer(help="Configuration commands.")
labels_app = typer.Typer(help="Inspect label-detection files locally.")

app.add_typer(config_app, name="config")
app.add_typer(labels_app, name="labels")

logger = logging.getLogger(__name__)

CONFIG_OPTION_HELP = "Path to YAML configuration file."


def _bootstrap(config_path: Path | None) -> Settings:
    settings = load_settings(config_path)
    configure_logging(settings.logging)
    announce_runtime_mode(settings.runtime, logger)
    logger.debug("Loaded runtime settings from %s", config_path or "defaults")
    return settings


def _read_label_payload(labels_path: Path) -> Any:
    try:
        return json.loads(labels_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ValueError(f"Could not read label file {labels_path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ValueError(f"Label file {labels_path} is not valid JSON: {exc}") from exc


def _fail(exc: Exception) -> typer.Exit:
    logger.error("Command failed: %s", exc)
    typer.echo(f"Error: {exc}", err=True)
    return typer.Exit(code=1)


@config_app.command("show")
def show_config(
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        envvar="VIDEO_HINT_CONFIG",
        help=CONFIG_OPTION_HELP,
    )
) -> None:
    """Print resolved runtime configuration."""

    settings = _bootstrap(config_path)
    typer.echo(json.dumps(settings.model_dump(mode="json"), indent=2))


@labels_app.command("csv")
def labels_csv(labels_path: Path = typer.Argument(..., help="Path to a label-detection JSON file.")) -> None:
    """Print the CSV flattening of a local label-detection file."""

    try:
        typer.echo(labels_to_csv(_read_label_payload(labels_path)))
    except ValueError as exc:
        raise _fail(exc) from exc


@labels_app.command("prompt")
def labels_prompt(labels_path: Path = typer.Argument(..., help="Path to a label-detection JSON file.")) -> None:
    """Print the text-generation prompt built from a local label-detection file."""

    try:
        typer.echo(build_video_hint_prompt(labels_to_csv(_read_label_payload(labels_path))))
    except ValueError as exc:
        raise _fail(exc) from exc


@labels_app.command("source-path")
def labels_source_path(
    object_path: str = typer.Argument(..., help="Object path of a label-detection output file."),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        envvar="VIDEO_HINT_CONFIG",
        help=CONFIG_OPTION_HELP,
    ),
) -> None:
    """Print the source video path a label output file maps back to."""

    settings = _bootstrap(config_path)
    typer.echo(
        derive_source_path(
            object_path,
            suffix=settings.storage.label_suffix,
            output_segment=settings.storage.output_segment,
            input_segment=settings.storage.input_segment,
        )
    )


@app.command("replay")
def replay(
    object_uri: str = typer.Argument(..., help="gs://bucket/path of an already finalized object."),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        envvar="VIDEO_HINT_CONFIG",
        help=CONFIG_OPTION_HELP,
    ),
) -> None:
    """Run the finalize handlers for an existing object against live services."""

    settings = _bootstrap(config_path)
    try:
        bucket, name = parse_gcs_uri(object_uri)
        reader, store = create_runtime(settings)
    except (GoogleAuthError, RuntimeError, ValueError) as exc:
        raise _fail(exc) from exc

    router = build_router(settings, reader, store)
    results = router.dispatch(ObjectFinalizedEvent(bucket=bucket, name=name))

    typer.echo(json.dumps([result.to_dict() for result in results], indent=2))
    if any(result.is_error for result in results):
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
