# logging_config.py
import logging
import os
from logging.handlers import RotatingFileHandler

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_FILE = "shipengine_rates.log"

def setup_logging():
    # Create handlers
    console_handler = logging.StreamHandler()
    file_handler = RotatingFileHandler(
        os.getenv("LOG_FILE", LOG_FILE), maxBytes=10_000_000, backupCount=3
    )

    console_handler.setLevel(logging.DEBUG)
    file_handler.setLevel(logging.DEBUG)

    formatter = logging.Formatter(LOG_FORMAT)
    console_handler.setFormatter(formatter)
    file_handler.setFormatter(formatter)

    root_logger = logging.getLogger()

    if os.getenv("DEBUG", "false").lower() == "true":
        root_logger.setLevel(logging.DEBUG)
    else:
        root_logger.setLevel(logging.INFO)
    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)

    # let uvicorn loggers propagate to the root logger
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).propagate = True
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    # httpx logs every request at INFO, and the request line can carry addresses
    logging.getLogger("httpx").setLevel(logging.WARNING)

    sqlalchemy_engine_logger = logging.getLogger("sqlalchemy.engine")
    sqlalchemy_engine_logger.setLevel(logging.WARNING)
    sqlalchemy_engine_logger.handlers = []
    sqlalchemy_engine_logger.propagate = False
