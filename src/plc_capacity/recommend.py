from __future__ import annotations

import math
from typing import Sequence

from .config import STANDARD_SIZES_MB


def next_standard_size(megabytes: float, tiers: Sequence[int] = STANDARD_SIZES_MB) -> int:
    """
    Smallest standard PLC memory tier (MB) that holds ``megabytes``.

    Above the largest tier there is no standard size left, so the requirement
    is rounded up to the next whole megabyte instead.
    """
    for size in tiers:
        if size >= megabytes:
            return int(size)
    return int(math.ceil(megabytes))
