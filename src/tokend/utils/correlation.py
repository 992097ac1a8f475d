"""Correlation identifiers used to trace one secret's history through the logs."""

from __future__ import annotations

import logging
import uuid

logger = logging.getLogger(__name__)


def create_correlation_id() -> str:
    """Return a fresh correlation id."""

    correlation_id = str(uuid.uuid4())
    logger.info("Created correlation id %s", correlation_id)
    return correlation_id


__all__ = ["create_correlation_id"]
