"""Logging configuration helpers."""

import logging

_FORMAT = "%(asctime)s %(levelname)s: %(name)s: %(message)s"


def configure_logging(level: int | str = logging.INFO) -> None:
    """Install a single stream handler on the ``photo_albums`` logger.

    Calling it again only changes the level. Pillow's plugin chatter is kept
    at WARNING so image decoding does not flood debug output.
    """
    logger = logging.getLogger("photo_albums")
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    logging.getLogger("PIL").setLevel(logging.WARNING)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
