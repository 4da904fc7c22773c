import json

import pytest

from plc_capacity.codec import encode_export, encode_state
from plc_capacity.config import STORAGE_KEY
from plc_capacity.errors import ImportParseError, ImportStructureError, ReportPreconditionError
from plc_capacity.models import CalculatorState, Inputs
from plc_capacity.session import CalculatorSession
from plc_capacity.storage import FileStore, MemoryStore


def _snapshot(session):
    return session.state.model_dump(), session.store.get(session.key)


class TestLoad:

    def test_first_run_uses_factory_defaults(self, session):
        assert session.state == CalculatorState.factory()
        assert session.result.total_bytes == 2616716

    def test_load_reports_missing_slot(self, store):
        assert CalculatorSession(store).load() is False

    def test_restores_saved_state(self, custom_state):
        store = MemoryStore({STORAGE_KEY: json.dumps(encode_state(custom_state))})
        s = CalculatorSession(store)
        assert s.load() is True
        assert s.state == custom_state

    def test_corrupted_slot_falls_back_to_defaults(self, caplog):
        store = MemoryStore({STORAGE_KEY: "{broken"})
        s = CalculatorSession(store)
        assert s.load() is False
        assert s.state == CalculatorState.factory()
        assert "Failed to load saved state" in caplog.text

    def test_partial_record_keeps_present_fields(self):
        store = MemoryStore({STORAGE_KEY: json.dumps({"inputs": {"emCount": 9}})})
        s = CalculatorSession(store)
        s.load()
        assert s.state.inputs.em_count == 9
        assert s.state.inputs.aoi_count == 6


class TestEdits:

    def test_update_inputs_recomputes_and_saves(self, session, store):
        result = session.update_inputs(em_count=7)
        assert result is session.result
        assert result.breakdown.em == 136801 * 7
        saved = json.loads(store.get(STORAGE_KEY))
        assert saved["inputs"]["emCount"] == 7

    def test_unparseable_edit_counts_as_zero(self, session):
        session.update_inputs(aoi_count="", spare_percent="abc")
        assert session.state.inputs.aoi_count == 0
        assert session.state.inputs.spare_percent == 0

    def test_unknown_field_is_rejected_without_mutation(self, session):
        before = _snapshot(session)
        with pytest.raises(KeyError):
            session.update_inputs(em_count=3, bogus=1)
        assert _snapshot(session) == before

    def test_on_change_replaces_inputs(self, session):
        result = session.on_change(Inputs(em_count=0, un_count=0, alarms_per_un=0, aoi_count=0,
                                          error_margin_percent=0, spare_percent=0))
        assert result.total_bytes == 353123

    def test_update_constants(self, session):
        session.update_constants(framework=0)
        assert session.result.breakdown.framework == 0

    def test_update_project_trims(self, session, store):
        session.update_project(name="  Line 3 ", number="P-7")
        assert session.state.project.name == "Line 3"
        assert json.loads(store.get(STORAGE_KEY))["project"]["number"] == "P-7"

    def test_state_survives_new_session(self, store):
        first = CalculatorSession(store)
        first.load()
        first.update_inputs(un_count=3)
        second = CalculatorSession(store)
        assert second.load() is True
        assert second.state == first.state

    def test_file_store_persistence(self, tmp_path):
        path = tmp_path / "nested" / "state.json"
        first = CalculatorSession(FileStore(path))
        first.update_project(name="Line 3", number="P-1")
        second = CalculatorSession(FileStore(path))
        assert second.load() is True
        assert second.state.project.number == "P-1"

    def test_reset(self, session, custom_state, fixed_now):
        session.import_document(encode_export(custom_state, now=fixed_now))
        session.reset()
        assert session.state == CalculatorState.factory()
        assert session.result.total_bytes == 2616716


class TestImport:

    def test_import_replaces_state(self, session, custom_state, fixed_now):
        session.import_document(encode_export(custom_state, now=fixed_now))
        assert session.state == custom_state

    def test_missing_constants_leaves_state_untouched(self, session, fixed_now):
        session.update_inputs(em_count=11)
        before = _snapshot(session)
        doc = encode_export(session.state, now=fixed_now)
        doc["inputs"]["EM"] = 1
        del doc["constants"]

        with pytest.raises(ImportStructureError):
            session.import_document(doc)

        assert _snapshot(session) == before

    def test_bad_file_leaves_state_untouched(self, session, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("[1, 2", encoding="utf-8")
        before = _snapshot(session)
        with pytest.raises(ImportParseError):
            session.import_file(path)
        assert _snapshot(session) == before

    def test_export_then_import_file(self, session, tmp_path, custom_state, fixed_now):
        session.import_document(encode_export(custom_state, now=fixed_now))
        path = session.export_to(tmp_path, now=fixed_now)
        assert path.name == "PLC_Calc_P-1042_2026-10-19.json"

        other = CalculatorSession(MemoryStore())
        other.import_file(path)
        assert other.state == custom_state


class TestReport:

    def test_requires_name_and_number(self, session):
        before = _snapshot(session)
        with pytest.raises(ReportPreconditionError) as exc:
            session.build_report()
        assert exc.value.missing == ["Project Name", "Project Number"]
        assert _snapshot(session) == before

    def test_requires_number(self, session):
        session.update_project(name="Line 3")
        with pytest.raises(ReportPreconditionError, match="Project Number"):
            session.build_report()

    def test_report_built(self, session, fixed_now):
        session.update_project(name="Line 3", number="P-1")
        report = session.build_report(now=fixed_now)
        assert report.total_mb == "2.50"
        assert report.recommended_size_mb == 4
