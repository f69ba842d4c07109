import logging
import os
from typing import Optional

ENV_LOG_LEVEL = "DLCGATE_LOG_LEVEL"

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"

# urllib3 logs every connection at DEBUG when ownership manifests are fetched
_NOISY_LOGGERS = ("urllib3",)


def _parse_level(value: str) -> Optional[int]:
    value = value.strip()
    if value.isdigit():
        return int(value)
    level = logging.getLevelName(value.upper())
    return level if isinstance(level, int) else None


def configure_logging(default_level: int = logging.INFO) -> int:
    """Set up root logging for the dlcgate CLI and return the chosen level.

    ``DLCGATE_LOG_LEVEL`` takes a level name (``debug``) or number (``10``)
    and wins over ``default_level``. Unrecognised values are reported once
    and ignored.
    """
    level = default_level
    raw = os.getenv(ENV_LOG_LEVEL)
    bad_value = False
    if raw:
        parsed = _parse_level(raw)
        if parsed is None:
            bad_value = True
        else:
            level = parsed
    logging.basicConfig(level=level, format=LOG_FORMAT)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
    if bad_value:
        logging.getLogger(__name__).warning("Ignoring unknown %s=%r", ENV_LOG_LEVEL, raw)
    return level
