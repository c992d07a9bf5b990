# clinic_notify/utils/my_logging.py
"""Logging configuration"""
import logging
import sys
from clinic_notify.config.settings import get_settings

NOISY_LOGGERS = [
    "httpx",
    "httpcore",
    "celery",
    "redis",
    "uvicorn.access",
]


def setup_logging(verbose=False):
    """
    Configure application logging at ``LOG_LEVEL``.

    Unless ``verbose`` is set, third-party client and access logs are
    limited to warnings.
    """
    settings = get_settings()
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    # Silence noisy loggers
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.NOTSET if verbose else logging.WARNING)
