"""
JSON logging setup.
"""

import logging
import os
import sys
import time
from typing import Optional, Union

from pythonjsonlogger.json import JsonFormatter as _BaseJsonFormatter


class JsonFormatter(_BaseJsonFormatter):
    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record.setdefault("level", record.levelname)
        log_record.setdefault("ts", int(time.time() * 1000))
        log_record.setdefault("logger", record.name)
        log_record.setdefault("service", os.getenv("SERVICE_NAME", "transgate"))


def setup_logger(name: str = "transgate", level: Optional[Union[str, int]] = None) -> logging.Logger:
    """
    Get a logger that writes JSON lines to stdout.

    The handler is attached only once per logger name.
    """
    lvl = level or os.getenv("LOG_LEVEL", "INFO").upper()
    logger = logging.getLogger(name)
    logger.setLevel(lvl)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JsonFormatter("%(message)s"))
        logger.addHandler(handler)
        logger.propagate = False
    return logger
