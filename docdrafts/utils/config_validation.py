from __future__ import annotations

import logging

from ..config import Settings

logger = logging.getLogger("docdrafts.config")

LOG_FORMATS = {"json", "plain"}


def validate_settings(settings: Settings) -> list[str]:
    problems = []
    if not settings.db_path:
        problems.append("DOCDRAFTS_DB_PATH is empty")
    if not 0 < settings.port < 65536:
        problems.append(f"DOCDRAFTS_PORT out of range: {settings.port}")
    if settings.db_pool_size < 1:
        problems.append(f"DOCDRAFTS_DB_POOL_SIZE must be at least 1, got {settings.db_pool_size}")
    if settings.db_timeout_seconds <= 0:
        problems.append("DOCDRAFTS_DB_TIMEOUT_SECONDS must be positive")
    if settings.log_format not in LOG_FORMATS:
        problems.append(f"DOCDRAFTS_LOG_FORMAT must be json or plain, got {settings.log_format!r}")
    if settings.log_level not in logging.getLevelNamesMapping():
        problems.append(f"DOCDRAFTS_LOG_LEVEL is not a logging level: {settings.log_level!r}")

    for msg in problems:
        logger.error(msg)

    if settings.db_path == ":memory:":
        logger.warning("Using an in-memory database; drafts are lost on restart.")
    return problems
