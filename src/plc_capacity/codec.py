"""
State Codec
===========

Maps the calculator state to and from its two external JSON shapes.

PERSISTED STATE (storage slot, internal field names):
{
    "inputs": {"emCount", "unCount", "alarmsPerEm", "alarmsPerUn",
               "aoiCount", "errorMarginPercent", "sparePercent"},
    "constants": {"framework", "perEm", "perUn", "perEmAlarm",
                  "perUnAlarm", "perAoi"},
    "project": {"name", "number", "notes"}
}

EXPORT DOCUMENT (file, human field names):
{
    "version": "1.0",
    "exportDate": "ISO timestamp",
    "project": {"name", "number", "notes"},
    "inputs": {"EM", "UN", "alarmsPerEM", "totalAlarmsPerEM", "alarmsPerUN",
               "AOI", "percentageError", "spareCapacity"},
    "constants": {"framework", "EM", "UN", "alarmsEM", "alarmsUN", "AOI"},
    "results": {"total", "totalMb", "breakdown": {...}}
}

The "results" section of an export is informational only: imports always
recompute from inputs and constants.
"""

import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from .calculator import calculate, sanitize
from .config import APP_VERSION, EXPORT_PREFIX, UNTITLED_PROJECT
from .errors import ImportParseError, ImportStructureError
from .formatting import round_half_up
from .models import CalculatorState, Constants, Inputs, Project

logger = logging.getLogger(__name__)

# (model field, export key)
EXPORT_INPUT_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("em_count", "EM"),
    ("un_count", "UN"),
    ("alarms_per_em", "alarmsPerEM"),
    ("alarms_per_un", "alarmsPerUN"),
    ("aoi_count", "AOI"),
    ("error_margin_percent", "percentageError"),
    ("spare_percent", "spareCapacity"),
)

EXPORT_CONSTANT_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("framework", "framework"),
    ("per_em", "EM"),
    ("per_un", "UN"),
    ("per_em_alarm", "alarmsEM"),
    ("per_un_alarm", "alarmsUN"),
    ("per_aoi", "AOI"),
)

EXPORT_BREAKDOWN_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("framework", "framework"),
    ("em", "EM"),
    ("un", "UN"),
    ("alarms_em", "alarmsEM"),
    ("alarms_un", "alarmsUN"),
    ("aoi", "AOI"),
    ("error_margin", "percentError"),
    ("spare", "spare"),
)

REQUIRED_IMPORT_KEYS = ("version", "inputs", "constants")


def _plain(value: float) -> Union[int, float]:
    """Whole numbers are written without a trailing ``.0``."""
    v = float(value)
    return int(v) if v.is_integer() else v


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = data.get(key)
    return value if isinstance(value, Mapping) else {}


def _decode_numbers(model: type, raw: Mapping[str, Any], keys: Dict[str, str]):
    values = {
        name: sanitize(raw.get(keys[name]), field.default)
        for name, field in model.model_fields.items()
    }
    return model(**values)


def _decode_project(raw: Mapping[str, Any]) -> Project:
    return Project(**{
        name: raw.get(name) if isinstance(raw.get(name), str) else ""
        for name in Project.model_fields
    })


def _timestamp(now: datetime) -> str:
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def filename_part(text: str) -> str:
    """Free text made safe for one file-name component (no separators)."""
    return re.sub(r"[^\w.-]", "_", text)


# ---------------------------------------------------------------------------
# Persisted state
# ---------------------------------------------------------------------------

def encode_state(state: CalculatorState) -> Dict[str, Any]:
    return {
        "inputs": {k: _plain(v) for k, v in state.inputs.model_dump(by_alias=True).items()},
        "constants": {k: _plain(v) for k, v in state.constants.model_dump(by_alias=True).items()},
        "project": state.project.model_dump(),
    }


def decode_state(data: Any) -> CalculatorState:
    """
    Decode a persisted-state object.

    Each missing or non-numeric field gets its factory default independently,
    so one bad field never invalidates the rest of the record.
    """
    if not isinstance(data, Mapping):
        raise ImportStructureError("Persisted state must be a JSON object.")

    input_keys = {name: field.alias or name for name, field in Inputs.model_fields.items()}
    constant_keys = {name: field.alias or name for name, field in Constants.model_fields.items()}
    return CalculatorState(
        inputs=_decode_numbers(Inputs, _section(data, "inputs"), input_keys),
        constants=_decode_numbers(Constants, _section(data, "constants"), constant_keys),
        project=_decode_project(_section(data, "project")),
    )


# ---------------------------------------------------------------------------
# Export / import
# ---------------------------------------------------------------------------

def encode_export(state: CalculatorState, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Build the export document. The results section is recomputed here and
    carried for human readers only.
    """
    now = now or datetime.now(timezone.utc)
    inputs, constants = state.inputs, state.constants
    result = calculate(inputs, constants)

    exported_inputs = {key: _plain(getattr(inputs, name)) for name, key in EXPORT_INPUT_FIELDS}
    # Derived, written next to the per-EM figure for readability
    exported_inputs = {
        **{k: exported_inputs[k] for k in ("EM", "UN", "alarmsPerEM")},
        "totalAlarmsPerEM": _plain(result.total_alarms_per_em),
        **{k: exported_inputs[k] for k in ("alarmsPerUN", "AOI", "percentageError", "spareCapacity")},
    }

    return {
        "version": APP_VERSION,
        "exportDate": _timestamp(now),
        "project": state.project.model_dump(),
        "inputs": exported_inputs,
        "constants": {key: _plain(getattr(constants, name)) for name, key in EXPORT_CONSTANT_FIELDS},
        "results": {
            "total": result.total_bytes,
            "totalMb": float(round_half_up(result.total_megabytes, 2)),
            "breakdown": {
                key: int(round_half_up(getattr(result.breakdown, name)))
                for name, key in EXPORT_BREAKDOWN_FIELDS
            },
        },
    }


def _is_missing(value: Any) -> bool:
    # Empty containers count as present; "", 0, false and null do not
    return value is None or (not value and not isinstance(value, (Mapping, list)))


def validate_import(document: Any) -> None:
    if not isinstance(document, Mapping):
        raise ImportStructureError("Invalid file structure. Expected a JSON object.")
    missing = [k for k in REQUIRED_IMPORT_KEYS if _is_missing(document.get(k))]
    if missing:
        raise ImportStructureError(
            f"Invalid file structure. Missing required fields: {', '.join(missing)}"
        )
    for key in ("inputs", "constants"):
        if not isinstance(document[key], Mapping):
            raise ImportStructureError(f"Invalid file structure. '{key}' must be an object.")


def decode_import(document: Any) -> CalculatorState:
    """
    Decode an export document into a fresh state.

    Raises ImportStructureError (and decodes nothing) when version, inputs or
    constants is missing. ``results`` is ignored.
    """
    validate_import(document)
    return CalculatorState(
        inputs=_decode_numbers(Inputs, document["inputs"], dict(EXPORT_INPUT_FIELDS)),
        constants=_decode_numbers(Constants, document["constants"], dict(EXPORT_CONSTANT_FIELDS)),
        project=_decode_project(_section(document, "project")),
    )


def export_filename(project: Project, now: Optional[datetime] = None, prefix: str = EXPORT_PREFIX) -> str:
    now = now or datetime.now(timezone.utc)
    number = filename_part(project.number or UNTITLED_PROJECT)
    return f"{prefix}_{number}_{now.astimezone(timezone.utc).date().isoformat()}.json"


def write_export_file(document: Mapping[str, Any], path: Union[str, Path]) -> Path:
    p = Path(path)
    p.write_text(json.dumps(document, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info(f"Exported: {p}")
    return p


def read_import_file(path: Union[str, Path]) -> CalculatorState:
    """Read and decode an export file. The caller's state is never touched here."""
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ImportParseError(f"Failed to read file: {path}") from e
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise ImportParseError(f"Invalid JSON in {path}: {e}") from e
    return decode_import(document)
