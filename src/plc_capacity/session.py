"""
Calculator Session
==================
Owns the one mutable calculator state and keeps the derived result and the
storage slot in step with it.

Every mutation (edit, import, reset) recomputes the result and saves the
state before returning. Imports and resets swap in a fully decoded state,
so a failure leaves the current state untouched.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from .calculator import calculate, sanitize
from .codec import (
    decode_import,
    decode_state,
    encode_export,
    encode_state,
    export_filename,
    read_import_file,
    write_export_file,
)
from .config import STORAGE_KEY
from .errors import CapacityError
from .models import CalculatorState, CapacityResult, Constants, Inputs, Project
from .report import CapacityReport, build_report
from .storage import StateStore

logger = logging.getLogger(__name__)


class CalculatorSession:
    def __init__(self, store: StateStore, key: str = STORAGE_KEY):
        self.store = store
        self.key = key
        self._state = CalculatorState.factory()
        self._result = calculate(self._state.inputs, self._state.constants)

    @property
    def state(self) -> CalculatorState:
        return self._state

    @property
    def result(self) -> CapacityResult:
        return self._result

    # --- Persistence -----------------------------------------------------

    def load(self) -> bool:
        """
        Restore the saved state. Falls back to factory defaults when the slot
        is empty or unreadable; returns True only if saved state was applied.
        """
        try:
            raw = self.store.get(self.key)
            if raw is None:
                self._apply(CalculatorState.factory(), save=False)
                return False
            state = decode_state(json.loads(raw))
        except (OSError, ValueError, CapacityError) as e:
            logger.error(f"Failed to load saved state: {e}")
            self._apply(CalculatorState.factory(), save=False)
            return False
        self._apply(state, save=False)
        logger.info("Loaded saved state.")
        return True

    def save(self) -> None:
        try:
            self.store.set(self.key, json.dumps(encode_state(self._state)))
        except (OSError, ValueError) as e:
            logger.error(f"Failed to save state: {e}")

    def _apply(self, state: CalculatorState, save: bool = True) -> CapacityResult:
        result = calculate(state.inputs, state.constants)
        self._state, self._result = state, result
        if save:
            self.save()
        return result

    # --- Edits -----------------------------------------------------------

    def on_change(self, inputs: Inputs) -> CapacityResult:
        """Replace the inputs wholesale and return the fresh result."""
        return self._apply(self._state.model_copy(update={"inputs": inputs}))

    def update_inputs(self, **changes: Any) -> CapacityResult:
        inputs = _merge(self._state.inputs, changes)
        return self.on_change(inputs)

    def update_constants(self, **changes: Any) -> CapacityResult:
        constants = _merge(self._state.constants, changes)
        return self._apply(self._state.model_copy(update={"constants": constants}))

    def update_project(self, **changes: Any) -> Project:
        unknown = set(changes) - set(Project.model_fields)
        if unknown:
            raise KeyError(f"Unknown project field(s): {', '.join(sorted(unknown))}")
        project = Project(**{**self._state.project.model_dump(), **changes})
        self._apply(self._state.model_copy(update={"project": project}))
        return project

    def reset(self) -> CapacityResult:
        logger.info("Reset to default values.")
        return self._apply(CalculatorState.factory())

    # --- Import / export -------------------------------------------------

    def import_document(self, document: Any) -> CapacityResult:
        state = decode_import(document)
        logger.info("Data imported successfully.")
        return self._apply(state)

    def import_file(self, path: Union[str, Path]) -> CapacityResult:
        state = read_import_file(path)
        logger.info(f"Data imported from {path}.")
        return self._apply(state)

    def export_document(self, now: Optional[datetime] = None) -> dict:
        return encode_export(self._state, now=now)

    def export_to(self, directory: Union[str, Path], now: Optional[datetime] = None) -> Path:
        document = self.export_document(now=now)
        name = export_filename(self._state.project, now=now)
        return write_export_file(document, Path(directory) / name)

    # --- Report ----------------------------------------------------------

    def build_report(self, now: Optional[datetime] = None) -> CapacityReport:
        return build_report(self._state, self._result, generated_at=now)


def _merge(model: Union[Inputs, Constants], changes: Mapping[str, Any]):
    """
    Apply sanitised field edits to a copy of ``model``. A value that does not
    parse counts as 0, the way an emptied form field does.
    """
    fields = type(model).model_fields
    unknown = set(changes) - set(fields)
    if unknown:
        raise KeyError(f"Unknown field(s): {', '.join(sorted(unknown))}")
    values = model.model_dump()
    values.update({name: sanitize(raw, 0.0) for name, raw in changes.items()})
    return type(model)(**values)
