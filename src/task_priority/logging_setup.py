from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, Union

from .settings import get_settings


class _PackageFilter(logging.Filter):
    """
    Keep the console readable:
    - allow task_priority logs at the configured level
    - any other library: only warnings and above
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name == "task_priority" or record.name.startswith("task_priority."):
            return True
        return record.levelno >= logging.WARNING


# PUBLIC_INTERFACE
def setup_logging(
    level: Optional[Union[int, str]] = None,
    log_file: Optional[Union[str, Path]] = None,
) -> None:
    """
    Configure root logging with a stderr handler and, optionally, a file handler
    that records everything at DEBUG.

    When level is omitted it is read from the LOG_LEVEL setting. Previously
    installed root handlers are removed, so calling this more than once does not
    duplicate output.
    """
    if level is None:
        level = get_settings().log_level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(logging.DEBUG if log_file else level)

    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(level)
    ch.setFormatter(fmt)
    ch.addFilter(_PackageFilter())
    root.addHandler(ch)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(path), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(fmt)
        root.addHandler(fh)

    logging.captureWarnings(True)
