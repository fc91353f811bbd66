"""
Shared helpers.
"""
import logging
import sys

from taskguard.core import config


_configured = False


def _configure_root() -> None:
    global _configured
    if _configured:
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s")
    )
    root = logging.getLogger("taskguard")
    root.addHandler(handler)
    root.setLevel(config.LOG_LEVEL)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """
    Get a module logger under the `taskguard` hierarchy.

    Usage:
        log = get_logger(__name__)
        log.info("Running server")
    """
    _configure_root()
    if not name.startswith("taskguard"):
        name = f"taskguard.{name}"
    return logging.getLogger(name)
