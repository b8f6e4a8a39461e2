from __future__ import annotations

from datetime import datetime, timedelta

from .utils import as_utc

_DAY = timedelta(days=1)


def evaluate(not_before: datetime, not_after: datetime, now: datetime) -> tuple[bool, str | None]:
    """
    Return (is_valid, time_to_expiration) for a validity window at `now`.

    The window is inclusive at both ends. time_to_expiration counts whole
    days left, truncated, and is None once `not_after` has been reached;
    an expired certificate is reported here, never rejected.
    """
    not_before, not_after, now = as_utc(not_before), as_utc(not_after), as_utc(now)

    is_valid = not_before <= now <= not_after
    if not_after > now:
        return is_valid, f"{(not_after - now) // _DAY} day(s)"
    return is_valid, None
