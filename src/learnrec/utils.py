from __future__ import annotations

import logging
from typing import Any, Optional

# Event names attached to log records (``record.event``) so operators can tell
# "no data for this user" apart from "the computation blew up".
NO_DATA = "no_data"
COMPUTATION_ERROR = "computation_error"
RECOMMENDATIONS_GENERATED = "recommendations_generated"


def setup_logging(level: int | str = "INFO") -> None:
    """Configure stdlib logging with a consistent, project-wide format."""
    root_logger = logging.getLogger()
    if root_logger.handlers:
        # Avoid duplicate handlers if called multiple times (e.g., notebooks + CLI).
        root_logger.setLevel(level)
        return

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    user_id: Any,
    msg: str,
    *args: Any,
    exc: Optional[BaseException] = None,
    **fields: Any,
) -> None:
    """Log `msg` with structured `event`/`user_id` fields in the record's extras."""
    extra = {"event": event, "user_id": user_id, **fields}
    if exc is not None:
        extra.setdefault("error_type", type(exc).__name__)
        extra.setdefault("error", str(exc))
    logger.log(level, msg, *args, extra=extra, exc_info=exc)
