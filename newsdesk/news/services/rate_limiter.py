from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import structlog

logger = structlog.get_logger(__name__)


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class RefreshRateLimiter:
    """Allows a manual refresh only once the cooldown since the last success has elapsed."""

    def __init__(self, cooldown: timedelta = timedelta(seconds=30), clock: Callable[[], datetime] = utcnow):
        self.cooldown = cooldown
        self._clock = clock

    def try_consume(self, last_success_time: Optional[datetime]) -> bool:
        if last_success_time is None:
            return True

        elapsed = self._clock() - last_success_time
        allowed = elapsed >= self.cooldown
        if not allowed:
            logger.info(
                "Manual refresh denied",
                elapsed_seconds=round(elapsed.total_seconds(), 3),
                cooldown_seconds=self.cooldown.total_seconds()
            )
        return allowed

    def remaining(self, last_success_time: Optional[datetime]) -> timedelta:
        if last_success_time is None:
            return timedelta(0)
        return max(timedelta(0), self.cooldown - (self._clock() - last_success_time))
