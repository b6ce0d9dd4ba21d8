# =====================================================
#                DOMAIN / TIMESTAMP
# =====================================================

from typing import Tuple

# timestamp of the form 2003-11-07T00:43:23Z
DATE_LENGTH = 10
TIME_LENGTH = 8
TIMESTAMP_LENGTH = 20


def split_timestamp(timestamp: str) -> Tuple[str, str]:
    """Return (date, time); both blank unless the timestamp has the fixed layout length."""
    if len(timestamp) != TIMESTAMP_LENGTH:
        return "", ""
    date = timestamp[:DATE_LENGTH]
    time = timestamp[DATE_LENGTH + 1:DATE_LENGTH + 1 + TIME_LENGTH]
    return date, time
