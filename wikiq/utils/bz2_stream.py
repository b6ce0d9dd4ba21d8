# =====================================================
#               INFRASTRUCTURE / IO
# =====================================================

import bz2
import sys
from contextlib import nullcontext
from typing import Optional

STDIN = "-"


def open_bz2_stream(path: str):
    return bz2.open(path, mode="rb")


def open_input_stream(path: Optional[str] = None):
    """Binary stream for a dump path; `None` or "-" reads standard input."""
    if path is None or path == STDIN:
        return nullcontext(sys.stdin.buffer)
    if str(path).endswith(".bz2"):
        return open_bz2_stream(path)
    return open(path, "rb")


def strip_ns(tag: str) -> str:
    return tag.split("}", 1)[-1]
