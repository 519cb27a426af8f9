import math
from datetime import datetime
from typing import Any, Optional

import structlog

logger = structlog.get_logger(__name__)


def convert_iso_to_millis(iso_date_str: str) -> Optional[int]:
    """Convert ISO date string to Unix timestamp in milliseconds"""
    try:
        dt = datetime.fromisoformat(iso_date_str.replace("Z", "+00:00"))
        return int(dt.timestamp() * 1000)
    except ValueError as e:
        logger.error(f"Failed to convert date: {str(e)}")
        return None


def to_millis(raw: Any) -> Optional[int]:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        # json accepts NaN and overflows 1e400 to inf
        if not math.isfinite(raw):
            return None
        return int(raw)
    if isinstance(raw, str):
        return convert_iso_to_millis(raw)
    return None
