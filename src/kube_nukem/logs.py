"""
Logging setup and field-annotated loggers.

Log lines carry key=value fields (e.g. crd=foos.example.com) as a prefix,
so output for several targets stays attributable.
"""

from __future__ import annotations

import logging
import sys
from logging import DEBUG, INFO, Logger, LoggerAdapter
from typing import Any, Mapping, MutableMapping, Optional

from .config import LOG_DATE_FORMAT, LOG_FORMAT

LOGGER_NAME = "kube_nukem"


def configure_logging(verbose: bool = False, stream=None) -> Logger:
    """
    Configure the kube_nukem logger to write to stderr.

    Args:
        verbose: If True, log at DEBUG level; otherwise INFO.
        stream: Optional stream to write to instead of sys.stderr.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(DEBUG if verbose else INFO)
    logger.propagate = False
    return logger


class FieldLogger(LoggerAdapter):
    """LoggerAdapter that prefixes every message with its key=value fields."""

    def __init__(self, logger: Logger, extra: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(logger, dict(extra or {}))

    def with_field(self, key: str, value: Any) -> "FieldLogger":
        fields = dict(self.extra)
        fields[key] = value
        return FieldLogger(self.logger, fields)

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]):
        if not self.extra:
            return msg, kwargs
        prefix = " ".join(f"{key}={value}" for key, value in self.extra.items())
        return f"[{prefix}] {msg}", kwargs
