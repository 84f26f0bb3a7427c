"""Logging setup for the Freestealer API."""

from __future__ import annotations

import logging

from freestealer.core.settings import DEFAULT_SESSION_SECRET, settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once at application startup."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format=LOG_FORMAT,
    )
    if settings.session_secret == DEFAULT_SESSION_SECRET:
        logger.warning("SESSION_SECRET not set, using default (not secure for production)")
    if settings.jwt_secret is None:
        logger.warning("JWT_SECRET not set, using SESSION_SECRET")
