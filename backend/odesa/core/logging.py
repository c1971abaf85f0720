# odesa/core/logging.py
import logging
import os
from logging.handlers import RotatingFileHandler

from odesa.core.config import Settings

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"
OUTBOX_LOGGER = "odesa.outbox"


def setup_logging(settings: Settings) -> None:
    """
    Console + rotating file for the `odesa` logger tree, and a plain file
    handler for the email outbox.
    """
    formatter = logging.Formatter(LOG_FORMAT)

    logger = logging.getLogger("odesa")
    logger.setLevel(settings.LOG_LEVEL.upper())
    if logger.handlers:
        return

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    logger.addHandler(console)

    os.makedirs(settings.LOG_DIR, exist_ok=True)
    log_file = os.path.join(settings.LOG_DIR, "odesa.log")
    handler = RotatingFileHandler(log_file, maxBytes=5 * 1024 * 1024, backupCount=5)
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    outbox = logging.getLogger(OUTBOX_LOGGER)
    outbox.setLevel(logging.INFO)
    outbox.propagate = False
    outbox_handler = logging.FileHandler(settings.EMAIL_LOG_PATH)
    outbox_handler.setFormatter(logging.Formatter("%(message)s"))
    outbox.addHandler(outbox_handler)
