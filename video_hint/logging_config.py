from __future__ import annotations

import logging

from video_hint.config import LoggingSettings, RuntimeSettings

DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(settings: LoggingSettings) -> None:
    """Configure process-wide logging once at startup."""

    logging.basicConfig(
        level=getattr(logging, settings.level.upper(), logging.INFO),
        format=DEFAULT_LOG_FORMAT,
        force=True,
    )


def announce_runtime_mode(runtime: RuntimeSettings, logger: logging.Logger) -> None:
    if runtime.test_mode:
        logger.warning("Running in test mode")
