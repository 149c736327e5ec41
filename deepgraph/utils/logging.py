"""Logging helpers for deepgraph.

The library itself only emits records through ``logging.getLogger(__name__)``;
``setup_logging`` is a convenience for scripts and notebooks that want to see
the evaluator's DEBUG output (execution plans and per-op shapes).
"""

import logging
import sys
from typing import Optional

__all__ = ["setup_logging", "MultilineFormatter", "PACKAGE_LOGGER"]

PACKAGE_LOGGER = "deepgraph"


class MultilineFormatter(logging.Formatter):
    """Formatter that keeps multiline messages (such as printed graphs) readable.

    The first line of a message is padded to ``msg_width`` and followed by the
    record metadata; continuation lines are emitted as they are.

    Attributes:
        msg_width: Width the first message line is padded to.
        show_metadata: Whether to append timestamp/level/name metadata.
    """

    def __init__(self, msg_width: int = 80, show_metadata: bool = True) -> None:
        super().__init__(datefmt="%Y-%m-%d %H:%M:%S")
        self.msg_width = msg_width
        self.show_metadata = show_metadata

    def format(self, record: logging.LogRecord) -> str:
        first_line, *rest = record.getMessage().split("\n")
        if self.show_metadata:
            metadata = f"{self.formatTime(record, self.datefmt)} - {record.levelname} - {record.name}"
            first_line = f"{first_line:<{self.msg_width}} {metadata}"
        if record.exc_info:
            rest.append(self.formatException(record.exc_info))
        return "\n".join([first_line, *rest])


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    msg_width: int = 80,
    show_metadata: bool = True,
) -> logging.Handler:
    """Attach a handler with ``MultilineFormatter`` to the package logger.

    Args:
        level: Level for the ``deepgraph`` logger and the new handler.
        log_file: File to write to; stderr when None.
        msg_width: Width for message alignment.
        show_metadata: Whether to append timestamp/level/name metadata to log lines.

    Returns:
        The installed handler, so callers can remove it again.
    """
    if log_file is None:
        handler: logging.Handler = logging.StreamHandler(sys.stderr)
    else:
        handler = logging.FileHandler(log_file, mode="w")
    handler.setFormatter(MultilineFormatter(msg_width=msg_width, show_metadata=show_metadata))
    handler.setLevel(level)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.addHandler(handler)
    logger.setLevel(level)
    return handler
