from datetime import datetime
from typing import Callable
from zoneinfo import ZoneInfo

from supermarket.core.config import settings

Clock = Callable[[], datetime]


def store_timezone() -> ZoneInfo:
    return ZoneInfo(settings.timezone)


def local_now() -> datetime:
    """Current wall-clock time in the shop's timezone."""
    return datetime.now(store_timezone())
