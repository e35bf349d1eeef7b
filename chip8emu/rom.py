import logging
from pathlib import Path

from .errors import RomLoadError

logger = logging.getLogger(__name__)


def load_rom(path):
    """Read a program image from disk as raw bytes."""
    logger.info("Loading ROM: %s", path)
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise RomLoadError("Unable to read ROM %s: %s" % (path, e)) from e
    if not data:
        raise RomLoadError("ROM %s is empty" % path)
    return data
