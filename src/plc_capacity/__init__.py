"""
PLC Capacity Calculator.

Turns equipment counts (EM, UN, alarms, AOI) and safety margins into the
minimum PLC memory capacity, with a per-category breakdown, a recommended
standard memory size, and a JSON export/import format.
"""

from .calculator import calculate, sanitize
from .codec import decode_import, decode_state, encode_export, encode_state
from .errors import CapacityError, ImportParseError, ImportStructureError, ReportPreconditionError
from .models import CalculatorState, CapacityResult, Constants, Inputs, Project
from .recommend import next_standard_size
from .session import CalculatorSession

__version__ = "1.0.0"

__all__ = [
    "calculate",
    "sanitize",
    "next_standard_size",
    "encode_state",
    "decode_state",
    "encode_export",
    "decode_import",
    "CalculatorSession",
    "CalculatorState",
    "CapacityResult",
    "Constants",
    "Inputs",
    "Project",
    "CapacityError",
    "ImportParseError",
    "ImportStructureError",
    "ReportPreconditionError",
]
