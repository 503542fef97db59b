"""Diagnostic log setup.

The log is append-only and best effort: a handler that cannot open or write
its file drops the record instead of raising into the request path.  Nothing
is ever logged to stdout, which carries the JSON-RPC stream.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

DEFAULT_LOG_FILE = Path(tempfile.gettempdir()) / "toolwire-server.log"
LOG_FORMAT = "%(asctime)s [%(name)s] [%(levelname)s] %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

_ROOT_LOGGER = "toolwire"
_installed: list[logging.Handler] = []


class DiagnosticFileHandler(logging.FileHandler):
    """Append-only file handler that never lets a write failure escape."""

    def __init__(self, path: Path) -> None:
        super().__init__(path, mode="a", encoding="utf-8", delay=True)

    def emit(self, record: logging.LogRecord) -> None:
        # The file is opened lazily here, outside StreamHandler's own guard.
        try:
            super().emit(record)
        except Exception:
            self.handleError(record)

    def handleError(self, record: logging.LogRecord) -> None:  # noqa: N802
        # Diagnostics must not break the protocol; the record is dropped.
        return


def configure_logging(
    log_file: Path | None = None,
    *,
    level: str = "INFO",
    verbose: bool = False,
) -> logging.Logger:
    """Attach the diagnostic handlers to the ``toolwire`` logger.

    Calling it again replaces the handlers installed by the previous call.
    """
    logger = logging.getLogger(_ROOT_LOGGER)
    for handler in _installed:
        logger.removeHandler(handler)
        handler.close()
    _installed.clear()

    file_handler = DiagnosticFileHandler(log_file or DEFAULT_LOG_FILE)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    _installed.append(file_handler)

    if verbose:
        console_handler = RichHandler(console=Console(stderr=True), show_path=False)
        _installed.append(console_handler)

    for handler in _installed:
        logger.addHandler(handler)
    logger.setLevel(level.upper())
    logger.propagate = False
    return logger
