from datetime import datetime, timezone

import pytest

from plc_capacity.calculator import calculate
from plc_capacity.models import CalculatorState, Constants, Inputs, Project
from plc_capacity.session import CalculatorSession
from plc_capacity.storage import MemoryStore


@pytest.fixture
def default_state():
    return CalculatorState.factory()


@pytest.fixture
def default_result(default_state):
    return calculate(default_state.inputs, default_state.constants)


@pytest.fixture
def custom_state():
    return CalculatorState(
        inputs=Inputs(
            em_count=8,
            un_count=2,
            alarms_per_em=22.5,
            alarms_per_un=75,
            aoi_count=11,
            error_margin_percent=12.5,
            spare_percent=25,
        ),
        constants=Constants(per_em=140000, per_aoi=6100.5),
        project=Project(name="Line 3 Packaging", number="P-1042", notes="Phase 2 expansion"),
    )


@pytest.fixture
def fixed_now():
    return datetime(2026, 10, 19, 12, 30, tzinfo=timezone.utc)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def session(store):
    s = CalculatorSession(store)
    s.load()
    return s
