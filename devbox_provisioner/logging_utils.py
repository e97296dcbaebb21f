from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

PACKAGE_LOGGER = "devbox_provisioner"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(log_path: Optional[str] = None, *, verbose: bool = False) -> Optional[str]:
    """Attach console (and optionally file) handlers to the package logger.

    The root logger is left alone so a calling build tool keeps its own setup.
    Calling again replaces the previous handlers.

    log_path None means console only; that is what provisioning the host root
    gets by default, since any file written there ends up in the image. An
    unwritable log_path is reported and skipped rather than failing the run.

    Returns the log file in use, or None.
    """

    logger = logging.getLogger(PACKAGE_LOGGER)
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()

    # DEBUG carries command stdout/stderr.
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z")

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(fmt)
    logger.addHandler(console)

    chosen: Optional[str] = None
    if log_path:
        try:
            Path(log_path).parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path, encoding="utf-8")
        except OSError as e:
            logger.warning("Cannot open log file %s (%s); logging to console only", log_path, e)
        else:
            file_handler.setFormatter(fmt)
            logger.addHandler(file_handler)
            chosen = log_path

    logger.debug("Logging initialized (file=%s, verbose=%s)", chosen, verbose)
    return chosen
