from __future__ import annotations

import logging
import sys
import typing as t

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class _MaxLevelFilter(logging.Filter):
    def __init__(self, max_level: int) -> None:
        super().__init__()
        self._max_level = max_level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno <= self._max_level


def configure_logging(
    debug: bool = False,
    stdout: t.Optional[t.TextIO] = None,
    stderr: t.Optional[t.TextIO] = None,
) -> logging.Logger:
    """Route DEBUG..WARNING records to stdout and ERROR and above to stderr.

    Replaces any handlers already installed on the root logger, so calling it
    twice does not duplicate output.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT)

    out_handler = logging.StreamHandler(stdout or sys.stdout)
    out_handler.setLevel(logging.DEBUG)
    out_handler.addFilter(_MaxLevelFilter(logging.WARNING))
    out_handler.setFormatter(formatter)

    err_handler = logging.StreamHandler(stderr or sys.stderr)
    err_handler.setLevel(logging.ERROR)
    err_handler.setFormatter(formatter)

    root.addHandler(out_handler)
    root.addHandler(err_handler)
    root.setLevel(logging.DEBUG if debug else logging.INFO)
    return root
