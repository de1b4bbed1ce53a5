"""
Logging configuration for neurodsl.

Two file loggers sit beside the ordinary module loggers:

- ``neurodsl.output``: every emitted ``neuro`` line, written to
  ``<log_dir>/run_latest.log`` when ``Config.output_log`` is on.
- ``neurodsl.macro_raw``: the intent and synthesized DSL for each macro,
  written to ``<log_dir>/macro_raw_latest.log`` when ``Config.raw_log`` is on.

Both append and never propagate to the root logger. Each holds at most one
file handler: the one for the most recent config that enabled it. A config
with the flag off detaches it.
"""

import logging
from pathlib import Path
from typing import Optional

from neurodsl.config import Config

OUTPUT_LOGGER = "neurodsl.output"
MACRO_LOGGER = "neurodsl.macro_raw"

OUTPUT_LOG_FILE = "run_latest.log"
MACRO_LOG_FILE = "macro_raw_latest.log"


def _create_file_handler(log_dir: str, log_filename: str) -> Optional[logging.FileHandler]:
    """
    Create an appending file handler that writes bare messages.

    Args:
        log_dir: Directory for the log file; created when missing
        log_filename: Name of the log file (e.g., 'run_latest.log')

    Returns:
        Configured FileHandler, or None if the directory cannot be created
    """
    try:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path / log_filename, mode="a", encoding="utf-8")
    except OSError:
        return None
    handler.setLevel(logging.INFO)
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler


def _configure(name: str, enabled: bool, log_dir: str, log_filename: str) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)
    logger.propagate = False

    target = str((Path(log_dir) / log_filename).resolve()) if enabled else None
    for handler in list(logger.handlers):
        if not isinstance(handler, logging.FileHandler):
            continue
        if handler.baseFilename == target:
            return logger
        logger.removeHandler(handler)
        handler.close()

    if not enabled:
        return logger

    file_handler = _create_file_handler(log_dir, log_filename)
    if file_handler:
        logger.addHandler(file_handler)
    return logger


def get_output_logger(config: Config) -> logging.Logger:
    """Logger for emitted output lines (``neuro: <msg>``)."""
    return _configure(OUTPUT_LOGGER, config.output_log, config.log_dir, OUTPUT_LOG_FILE)


def get_macro_logger(config: Config) -> logging.Logger:
    """Logger for raw macro traces; use ``log_macro_raw`` to write entries."""
    return _configure(MACRO_LOGGER, config.raw_log, config.log_dir, MACRO_LOG_FILE)


def log_macro_raw(logger: logging.Logger, label: str, content: str) -> None:
    logger.info(">>> %s\n%s\n----", label, content)
