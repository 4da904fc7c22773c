"""
PLC Capacity Calculator - Streamlit UI
======================================

Run with:
    streamlit run src/plc_capacity/ui/app.py
"""

import json
from datetime import datetime, timezone

import streamlit as st

from plc_capacity.codec import export_filename
from plc_capacity.chart import treemap_figure
from plc_capacity.config import APP_NAME, APP_VERSION, get_state_path
from plc_capacity.errors import CapacityError, ReportPreconditionError
from plc_capacity.formatting import format_formula, format_mb, format_number
from plc_capacity.logging_config import setup_logging
from plc_capacity.models import Constants, Inputs, Project
from plc_capacity.recommend import next_standard_size
from plc_capacity.report import breakdown_frame, render_text, report_filename
from plc_capacity.session import CalculatorSession
from plc_capacity.storage import FileStore

INPUT_WIDGETS = [
    ("em_count", "Number of EM"),
    ("un_count", "Number of UN"),
    ("alarms_per_em", "Alarms per EM"),
    ("alarms_per_un", "Alarms per UN"),
    ("aoi_count", "Number of AOI"),
    ("error_margin_percent", "Percentage Error (%)"),
    ("spare_percent", "Spare Capacity (%)"),
]

CONSTANT_WIDGETS = [
    ("framework", "Framework (bytes)"),
    ("per_em", "Per EM (bytes)"),
    ("per_un", "Per UN (bytes)"),
    ("per_em_alarm", "Per EM Alarm (bytes)"),
    ("per_un_alarm", "Per UN Alarm (bytes)"),
    ("per_aoi", "Per AOI (bytes)"),
]


def get_session() -> CalculatorSession:
    if "calc" not in st.session_state:
        session = CalculatorSession(FileStore(get_state_path()))
        session.load()
        st.session_state["calc"] = session
        _sync_widgets(session)
    return st.session_state["calc"]


def _sync_widgets(session: CalculatorSession) -> None:
    """Push the session state into the widget keys (first run, import, reset)."""
    s = session.state
    for field, _ in INPUT_WIDGETS:
        st.session_state[f"in_{field}"] = float(getattr(s.inputs, field))
    for field, _ in CONSTANT_WIDGETS:
        st.session_state[f"const_{field}"] = float(getattr(s.constants, field))
    for field in Project.model_fields:
        st.session_state[f"project_{field}"] = getattr(s.project, field)


def _on_reset() -> None:
    session = st.session_state["calc"]
    session.reset()
    _sync_widgets(session)
    st.session_state["flash"] = ("success", "Reset to default values")


def _on_import() -> None:
    session = st.session_state["calc"]
    upload = st.session_state.get("import_file")
    if upload is None:
        return
    try:
        document = json.loads(upload.getvalue().decode("utf-8"))
        session.import_document(document)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        st.session_state["flash"] = ("error", f"Failed to read file: {e}")
        return
    except CapacityError as e:
        st.session_state["flash"] = ("error", f"Import failed: {e}")
        return
    _sync_widgets(session)
    st.session_state["flash"] = ("success", "Data imported successfully")


st.set_page_config(page_title=APP_NAME, layout="wide")
setup_logging()
st.title(APP_NAME)

session = get_session()

flash = st.session_state.pop("flash", None)
if flash:
    kind, message = flash
    getattr(st, kind)(message)

with st.sidebar:
    st.header("Project")
    st.text_input("Project Name", key="project_name")
    st.text_input("Project Number", key="project_number")
    st.text_area("Notes", key="project_notes")

    st.header("Inputs")
    for field, label in INPUT_WIDGETS:
        st.number_input(label, min_value=0.0, step=1.0, key=f"in_{field}")

    with st.expander("Constants (memory per unit)"):
        for field, label in CONSTANT_WIDGETS:
            st.number_input(label, min_value=0.0, step=1.0, key=f"const_{field}")

# Widgets -> session, only for sections that changed
new_inputs = Inputs(**{f: st.session_state[f"in_{f}"] for f, _ in INPUT_WIDGETS})
new_constants = Constants(**{f: st.session_state[f"const_{f}"] for f, _ in CONSTANT_WIDGETS})
new_project = {f: st.session_state[f"project_{f}"] for f in Project.model_fields}
if new_inputs != session.state.inputs:
    session.on_change(new_inputs)
if new_constants != session.state.constants:
    session.update_constants(**new_constants.model_dump())
if Project(**new_project) != session.state.project:
    session.update_project(**new_project)

result = session.result

c1, c2, c3 = st.columns(3)
c1.metric("Minimum required capacity", f"{format_mb(result.total_megabytes)} Mb")
c2.metric("Bytes", format_number(result.total_bytes))
c3.metric("Recommended standard size", f"{next_standard_size(result.total_megabytes)} Mb")
st.caption(format_formula(result))
st.caption(f"Total alarms per EM: {format_number(result.total_alarms_per_em)}")

left, right = st.columns([3, 2])
with left:
    st.plotly_chart(treemap_figure(result), use_container_width=True)
with right:
    st.dataframe(breakdown_frame(session.state, result), hide_index=True, use_container_width=True)

st.divider()
b1, b2, b3, b4 = st.columns(4)

now = datetime.now(timezone.utc)
with b1:
    st.download_button(
        "Export JSON",
        data=json.dumps(session.export_document(now=now), indent=2),
        file_name=export_filename(session.state.project, now=now),
        mime="application/json",
    )

with b2:
    try:
        report = session.build_report(now=now)
    except ReportPreconditionError as e:
        st.button("Download report", disabled=True, help=str(e))
    else:
        st.download_button(
            "Download report",
            data=render_text(report),
            file_name=report_filename(session.state.project, now=now),
            mime="text/plain",
        )

with b3:
    with st.popover("Import JSON"):
        st.write("This will replace all current values with the imported data.")
        st.file_uploader("Export file", type=["json"], key="import_file")
        st.button("Import", on_click=_on_import)

with b4:
    with st.popover("Reset"):
        st.write("This will reset all values to their defaults.")
        st.button("Confirm reset", on_click=_on_reset)

st.caption(f"{APP_NAME} v{APP_VERSION}")
