"""Per-program audit trail.

Messages go to the ``program_audit`` logger with the program id attached as
``extra={"program_id": ...}``. When a log directory is configured, each record
is also appended as one JSON object per line to ``<dir>/<program_id>.log``.
This narrates what the importer did; nothing reads it back for control flow.
"""

from __future__ import annotations

import json
import logging
import os
import traceback
from datetime import datetime, timezone
from typing import Optional

logger = logging.getLogger("program_audit")

_LEVEL_NAMES = {
    logging.INFO: "info",
    logging.WARNING: "warn",
    logging.ERROR: "error",
}


def _describe_error(err: object) -> Optional[str]:
    if err is None:
        return None
    if isinstance(err, BaseException):
        formatted = "".join(traceback.format_exception(type(err), err, err.__traceback__))
        return formatted.strip() or str(err)
    return str(err)


class ProgramFileHandler(logging.Handler):
    """Append JSON lines to a log file named after the record's program id."""

    def __init__(self, directory: str) -> None:
        super().__init__()
        self.directory = directory

    def emit(self, record: logging.LogRecord) -> None:
        try:
            program_id = str(getattr(record, "program_id", "system"))
            entry = {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "level": _LEVEL_NAMES.get(record.levelno, record.levelname.lower()),
                "programId": program_id,
                "message": record.getMessage(),
            }
            error = getattr(record, "error_detail", None)
            if error:
                entry["error"] = error
            os.makedirs(self.directory, exist_ok=True)
            path = os.path.join(self.directory, f"{os.path.basename(program_id)}.log")
            with open(path, "a", encoding="utf-8") as fh:
                fh.write(json.dumps(entry, ensure_ascii=False) + "\n")
        except Exception:
            self.handleError(record)


def configure_program_logging(directory: Optional[str]) -> Optional[ProgramFileHandler]:
    """Attach (once) a file handler writing under ``directory``."""
    logger.setLevel(logging.INFO)
    if not directory:
        return None
    for handler in logger.handlers:
        if isinstance(handler, ProgramFileHandler) and handler.directory == directory:
            return handler
    handler = ProgramFileHandler(directory)
    logger.addHandler(handler)
    return handler


def _log(level: int, program_id: str, message: str, err: object = None) -> None:
    logger.log(
        level,
        message,
        extra={"program_id": program_id, "error_detail": _describe_error(err)},
    )


def info(program_id: str, message: str) -> None:
    _log(logging.INFO, program_id, message)


def warn(program_id: str, message: str, err: object = None) -> None:
    _log(logging.WARNING, program_id, message, err)


def error(program_id: str, message: str, err: object = None) -> None:
    _log(logging.ERROR, program_id, message, err)
