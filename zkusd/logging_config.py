"""Logging for the zkUSD shells and tools.

Conventions:
- Kernels under ``zkusd.core`` never log; they return rejections as values.
- Shells under ``zkusd.integration`` log each committed operation at INFO and
  each rejection at WARNING (with the ``ErrorCode`` tag) before raising.
- Batch rollbacks in ``Chain.atomic()`` log at DEBUG.
"""

import logging


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
PACKAGE_LOGGER = "zkusd"


def setup_logging(level: int = logging.INFO) -> None:
    """Install one root handler and set the ``zkusd`` logger to ``level``.

    The handler is installed on the first call only; later calls just change
    the package level.
    """
    if not logging.getLogger().handlers:
        logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger(PACKAGE_LOGGER).setLevel(level)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
