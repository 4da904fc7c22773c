"""
Configuration & Constants
=========================

Central registry for application constants and the storage location.

Exports:
    APP_VERSION (str): Version tag written into export documents.
    STORAGE_KEY (str): Fixed key of the persisted-state slot.
    BYTES_PER_MB (int): Bytes in one (binary) megabyte.
    STANDARD_SIZES_MB (tuple): Ascending standard PLC memory tiers.
    CHART_COLOURS (dict): Colour per breakdown component.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Optional, Tuple

APP_NAME = "PLC Capacity Calculator"
APP_VERSION = "1.0"

STORAGE_KEY = "plc_calc_data"
BYTES_PER_MB = 1048576

STANDARD_SIZES_MB: Tuple[int, ...] = (1, 2, 4, 8, 16, 32, 64, 128)

EXPORT_PREFIX = "PLC_Calc"
REPORT_PREFIX = "PLC_Capacity_Report"
UNTITLED_PROJECT = "UNTITLED"

# Keyed by breakdown component name
CHART_COLOURS: Dict[str, str] = {
    "framework": "#17a2b8",
    "em": "#e67e22",
    "un": "#27ae60",
    "alarms_em": "#3498db",
    "alarms_un": "#9b59b6",
    "aoi": "#2ecc71",
    "error_margin": "#2c3e50",
    "spare": "#a0522d",
}

HOME_ENV_VAR = "PLC_CAPACITY_HOME"
STATE_FILENAME = "state.json"


def get_home_dir(environ: Optional[Dict[str, str]] = None) -> Path:
    """
    Directory holding the persisted state.

    ``PLC_CAPACITY_HOME`` wins when set, otherwise ``~/.plc_capacity``.
    """
    env = os.environ if environ is None else environ
    override = env.get(HOME_ENV_VAR, "").strip()
    if override:
        return Path(override).expanduser()
    return Path.home() / ".plc_capacity"


def get_state_path(environ: Optional[Dict[str, str]] = None) -> Path:
    return get_home_dir(environ) / STATE_FILENAME
