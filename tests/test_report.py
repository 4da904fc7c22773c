from datetime import datetime, timedelta, timezone

import pytest

from plc_capacity.calculator import calculate
from plc_capacity.chart import chart_items, treemap_figure
from plc_capacity.codec import export_filename
from plc_capacity.errors import ReportPreconditionError
from plc_capacity.models import CalculatorState, Inputs, Project
from plc_capacity.report import (
    breakdown_frame,
    breakdown_labels,
    build_report,
    render_text,
    report_filename,
)


@pytest.fixture
def named_state():
    return CalculatorState(project=Project(name="Line 3 Packaging", number="P-1042"))


class TestBreakdownTable:

    def test_labels(self, default_state, default_result):
        assert breakdown_labels(default_state.inputs, default_result) == [
            "Framework etc.",
            "EM (6 units)",
            "UN (1 unit)",
            "Alarms EM (114)",
            "Alarms UN (60)",
            "AOI (6)",
            "Error Margin (15%)",
            "Spare (30%)",
        ]

    def test_plural_units(self):
        inputs = Inputs(un_count=2, error_margin_percent=12.5)
        labels = breakdown_labels(inputs, calculate(inputs, CalculatorState().constants))
        assert labels[2] == "UN (2 units)"
        assert labels[6] == "Error Margin (12.5%)"

    def test_frame(self, default_state, default_result):
        df = breakdown_frame(default_state, default_result)
        assert list(df.columns) == ["Category", "Value (bytes)", "%"]
        assert len(df) == 9
        assert df.iloc[0].tolist() == ["Framework etc.", "353,123", "13.5%"]
        assert df.iloc[-1].tolist() == ["TOTAL", "2,616,716", "100%"]


class TestReport:

    def test_precondition(self, default_state, default_result):
        with pytest.raises(ReportPreconditionError):
            build_report(default_state, default_result)

    def test_content(self, named_state, default_result, fixed_now):
        report = build_report(named_state, default_result, generated_at=fixed_now)
        assert report.date == "19/10/2026"
        assert report.total_bytes == "2,616,716"
        assert [r.percentage for r in report.rows][-2:] == ["10.0%", "23.1%"]
        assert "Alarms per EM: 19 (Total: 114)" in report.input_lines
        assert "Per AOI: 6,044 bytes" in report.constant_lines
        assert "minimum memory capacity of 2.50 Mb" in report.recommendation
        assert "at least 4 Mb" in report.recommendation
        assert report.footer.endswith("PLC Capacity Calculator v1.0")

    def test_render_text(self, named_state, default_result, fixed_now):
        text = render_text(build_report(named_state, default_result, generated_at=fixed_now))
        assert text.startswith("PLC MEMORY CAPACITY REQUIREMENTS REPORT\n")
        assert "2.50 Mb (2,616,716 bytes)" in text
        assert "NOTES / COMMENTS" not in text

    def test_render_text_with_notes(self, named_state, default_result, fixed_now):
        state = named_state.model_copy(
            update={"project": Project(name="A", number="1", notes="Phase 2 expansion")}
        )
        text = render_text(build_report(state, default_result, generated_at=fixed_now))
        assert "NOTES / COMMENTS\nPhase 2 expansion" in text

    def test_filename(self, fixed_now):
        assert report_filename(Project(number="P-1042"), now=fixed_now) == (
            "PLC_Capacity_Report_P-1042_2026-10-19.txt"
        )

    def test_filename_matches_export_date_and_has_no_separators(self):
        late_evening = datetime(2026, 10, 19, 21, 0, tzinfo=timezone(timedelta(hours=-5)))
        project = Project(number="A/B")
        assert report_filename(project, now=late_evening) == "PLC_Capacity_Report_A_B_2026-10-20.txt"
        assert export_filename(project, now=late_evening).endswith("_2026-10-20.json")


class TestChart:

    def test_items_in_breakdown_order(self, default_result):
        items = chart_items(default_result)
        assert [i["label"] for i in items] == [
            "Framework", "EM", "UN", "Alarms EM", "Alarms UN", "AOI", "% Error", "Spare",
        ]
        assert items[0]["color"] == "#17a2b8"
        assert items[0]["percentage"] == "13.5"

    def test_zero_components_are_skipped(self, default_state):
        inputs = Inputs(aoi_count=0, spare_percent=0)
        items = chart_items(calculate(inputs, default_state.constants))
        labels = [i["label"] for i in items]
        assert "AOI" not in labels
        assert "Spare" not in labels
        assert len(items) == 6

    def test_figure(self, default_result):
        fig = treemap_figure(default_result)
        assert list(fig.data[0].labels)[0] == "Framework"
        assert len(fig.data[0].values) == 8
