"""
Numeric presentation rules shared by the display, report, chart and export.

Every consumer goes through these helpers so what is shown matches what is
stored. Rounding is half away from zero on the exact binary value of the
float, which is what JavaScript ``Math.round``/``toFixed`` produce for the
non-negative values this tool deals with.
"""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Context, Decimal

from .config import BYTES_PER_MB
from .models import CapacityResult


def round_half_up(value: float, places: int = 0) -> Decimal:
    d = Decimal(value)
    quantum = Decimal(1).scaleb(-places)
    # Room for every integer digit plus the requested places and a carry
    context = Context(prec=max(d.adjusted(), 0) + places + 2)
    return d.quantize(quantum, rounding=ROUND_HALF_UP, context=context)


def format_number(value: float) -> str:
    """Rounded integer with thousands separators, e.g. ``2,616,716``."""
    return f"{int(round_half_up(value)):,}"


def format_mb(value: float) -> str:
    return f"{round_half_up(value, 2):.2f}"


def format_percent(value: float) -> str:
    return f"{round_half_up(value, 1):.1f}"


def format_plain(value: float) -> str:
    """Number as typed by a user: ``6`` rather than ``6.0``."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def format_formula(result: CapacityResult) -> str:
    return (
        f"{format_number(result.total_bytes)} ÷ {BYTES_PER_MB:,} = "
        f"{format_mb(result.total_megabytes)} Mb"
    )
