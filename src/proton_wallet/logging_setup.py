"""Per-process logging: a rotating file under the profile plus stderr.

Child processes must never log to stdout, which carries the relay.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(process_name)s] %(name)s: %(message)s"
MAX_LOG_BYTES = 5 * 1024 * 1024
LOG_BACKUPS = 3


class _ProcessNameFilter(logging.Filter):
    def __init__(self, process_name: str) -> None:
        super().__init__()
        self.process_name = process_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.process_name = self.process_name
        return True


def configure_logging(log_dir: Path | None, process_name: str, level: str = "INFO") -> Path | None:
    """Install root handlers for *process_name*.

    Returns the log file path, or ``None`` when *log_dir* is ``None`` (stderr only).
    Calling again replaces the handlers installed by a previous call.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_proton_handler", False):
            root.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    name_filter = _ProcessNameFilter(process_name)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    log_file = None
    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f"{process_name}.log"
        handlers.append(
            RotatingFileHandler(
                log_file, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8"
            )
        )

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(name_filter)
        handler._proton_handler = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.setLevel(level)
    return log_file
