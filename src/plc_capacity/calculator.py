from __future__ import annotations

import math
from typing import Any, Dict, Mapping, Optional

from .config import BYTES_PER_MB
from .formatting import round_half_up
from .models import Breakdown, CapacityResult, Constants, Inputs


def sanitize(raw: Any, default: float) -> float:
    """
    Coerce a raw field value (number, numeric string, None) to a finite,
    non-negative float.

    Missing or unparseable values fall back to ``default``; negative numbers
    are clamped to 0.
    """
    if raw is None or isinstance(raw, bool):
        return float(default)
    if isinstance(raw, str):
        raw = raw.strip()
    try:
        v = float(raw)
    except (TypeError, ValueError, OverflowError):
        return float(default)
    if not math.isfinite(v):
        return float(default)
    return max(0.0, v)


def _sanitize_fields(model: type, raw: Mapping[str, Any], default: Optional[float]) -> Dict[str, float]:
    out: Dict[str, float] = {}
    for name, field in model.model_fields.items():
        fallback = field.default if default is None else default
        value = raw.get(name, raw.get(field.alias)) if field.alias else raw.get(name)
        out[name] = sanitize(value, fallback)
    return out


def sanitize_inputs(raw: Mapping[str, Any], default: Optional[float] = 0.0) -> Inputs:
    """
    Build Inputs from raw form values keyed by field name or alias.

    Form values that do not parse count as ``default`` (0 by default);
    pass ``default=None`` to fall back to the factory value per field instead.
    """
    return Inputs(**_sanitize_fields(Inputs, raw, default))


def sanitize_constants(raw: Mapping[str, Any], default: Optional[float] = 0.0) -> Constants:
    return Constants(**_sanitize_fields(Constants, raw, default))


def calculate(inputs: Inputs, constants: Constants) -> CapacityResult:
    """
    Required PLC memory for the given equipment counts:
    - weighs each equipment category by its per-unit byte cost
    - adds the error margin on top of the base subtotal
    - adds spare capacity on top of the margin-inclusive subtotal
    - converts to megabytes from the unrounded total
    """
    total_alarms_per_em = float(inputs.em_count) * float(inputs.alarms_per_em)

    framework = float(constants.framework)
    em = float(constants.per_em) * float(inputs.em_count)
    un = float(constants.per_un) * float(inputs.un_count)
    alarms_em = total_alarms_per_em * float(constants.per_em_alarm)
    alarms_un = float(inputs.alarms_per_un) * float(constants.per_un_alarm)
    aoi = float(inputs.aoi_count) * float(constants.per_aoi)

    subtotal_before_margins = framework + em + un + alarms_em + alarms_un + aoi
    error_margin = subtotal_before_margins * (float(inputs.error_margin_percent) / 100)
    subtotal_before_spare = subtotal_before_margins + error_margin
    spare = subtotal_before_spare * (float(inputs.spare_percent) / 100)
    total_raw = subtotal_before_spare + spare

    return CapacityResult(
        breakdown=Breakdown(
            framework=framework,
            em=em,
            un=un,
            alarms_em=alarms_em,
            alarms_un=alarms_un,
            aoi=aoi,
            error_margin=error_margin,
            spare=spare,
        ),
        total_alarms_per_em=total_alarms_per_em,
        subtotal_before_margins=subtotal_before_margins,
        subtotal_before_spare=subtotal_before_spare,
        total_raw=total_raw,
        total_bytes=int(round_half_up(total_raw)),
        # Raw total, so the only rounding is the final 2-decimal display
        total_megabytes=total_raw / BYTES_PER_MB,
    )
