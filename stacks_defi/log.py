# log.py
# One-time root logger setup. Modules only ever call logging.getLogger(__name__).

import logging
import sys


def setup_logging(level: str = "INFO"):
    logger = logging.getLogger()
    if logger.handlers:  # already configured (tests, repeated CLI calls)
        return
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    h = logging.StreamHandler(sys.stdout)
    fmt = logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s :: %(message)s"
    )
    h.setFormatter(fmt)
    logger.addHandler(h)
