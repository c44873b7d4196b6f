from datetime import date

import pendulum

from streamtv.config import TIMEZONE


def today() -> date:
    """Current calendar date in the service timezone."""
    now = pendulum.now(TIMEZONE)
    return date(now.year, now.month, now.day)
