"""
Logging configuration for the Merchant Ops service.
"""
import logging
import os
import sys
from typing import Optional

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure the root logger with a single stdout handler.

    Safe to call more than once; existing handlers are replaced so
    gunicorn reloads and test app factories don't duplicate output.
    """
    level = (level or os.getenv('LOG_LEVEL', 'INFO')).upper()

    root = logging.getLogger()
    root.setLevel(level)

    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)

    logging.getLogger('sqlalchemy.engine').setLevel(
        logging.INFO if level == 'DEBUG' else logging.WARNING
    )
