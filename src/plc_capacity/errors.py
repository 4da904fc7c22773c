"""
Error types raised by the calculator core.

Sanitization problems are never errors (fields fall back to defaults).
Everything the caller must be able to tell apart derives from CapacityError.
"""


class CapacityError(Exception):
    """Base class for calculator errors."""


class ImportParseError(CapacityError, ValueError):
    """Import file could not be read or is not valid JSON."""


class ImportStructureError(CapacityError, ValueError):
    """Import document lacks the required top-level structure."""


class ReportPreconditionError(CapacityError):
    """A report was requested without the mandatory project details."""

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        fields = " and ".join(self.missing)
        super().__init__(f"Please enter {fields} to generate the report")
