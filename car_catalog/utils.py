# car_catalog/utils.py
"""Shared utilities: logging setup and query-string coercion."""
import math
import os
import logging
import re
from dotenv import load_dotenv

load_dotenv()

_INT_PREFIX = re.compile(r"[+-]?\d+")


def get_logger(name=__name__):
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        level=getattr(logging, level, logging.INFO)
    )
    return logging.getLogger(name)

logger = get_logger("car-catalog")


def parse_int(value):
    """Coerce `value` to an int, or return None when it has no integer reading.

    Strings are read by their leading integer prefix after trimming, so
    "2000.5" gives 2000 and "15k" gives 15, while "abc" and "" give None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    m = _INT_PREFIX.match(str(value).strip())
    return int(m.group(0)) if m else None
