"""Unit tests for logging setup."""

import io
import logging

from ttlstore.utils.log import configure_logging


def test_levels_are_split_between_streams(restore_root_logger):
    """Info and warnings go to stdout, errors to stderr."""
    out, err = io.StringIO(), io.StringIO()
    configure_logging(debug=False, stdout=out, stderr=err)

    log = logging.getLogger("ttlstore.test")
    log.debug("debug line")
    log.info("info line")
    log.warning("warning line")
    log.error("error line")

    assert "info line" in out.getvalue()
    assert "warning line" in out.getvalue()
    assert "error line" not in out.getvalue()
    assert "error line" in err.getvalue()
    assert "debug line" not in out.getvalue()


def test_debug_enables_debug_records(restore_root_logger):
    """Debug mode lowers the root level."""
    out, err = io.StringIO(), io.StringIO()
    root = configure_logging(debug=True, stdout=out, stderr=err)

    logging.getLogger("ttlstore.test").debug("debug line")

    assert root.level == logging.DEBUG
    assert "debug line" in out.getvalue()
    assert " - ttlstore.test - DEBUG - debug line" in out.getvalue()


def test_reconfiguring_does_not_duplicate(restore_root_logger):
    """Calling twice leaves exactly two handlers."""
    out, err = io.StringIO(), io.StringIO()
    configure_logging(stdout=out, stderr=err)
    root = configure_logging(stdout=out, stderr=err)

    logging.getLogger("ttlstore.test").info("once")

    assert len(root.handlers) == 2
    assert out.getvalue().count("once") == 1
