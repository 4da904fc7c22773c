"""
Capacity Report
===============

Assembles the content of the capacity requirements report (headline, breakdown
table, parameters, recommendation) and renders it as plain text. Page layout
belongs to whichever front end prints it.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

import pandas as pd
from pydantic import BaseModel, Field

from .codec import filename_part
from .config import APP_NAME, APP_VERSION, REPORT_PREFIX
from .errors import ReportPreconditionError
from .formatting import format_mb, format_number, format_percent, format_plain
from .models import CalculatorState, CapacityResult, Inputs, Project
from .recommend import next_standard_size

REPORT_TITLE = "PLC MEMORY CAPACITY REQUIREMENTS REPORT"


class BreakdownRow(BaseModel):
    key: str
    label: str
    value: str
    percentage: str


class CapacityReport(BaseModel):
    title: str = REPORT_TITLE
    project_name: str
    project_number: str
    date: str
    total_mb: str
    total_bytes: str
    rows: List[BreakdownRow]
    total_row: BreakdownRow
    input_lines: List[str] = Field(default_factory=list)
    margin_lines: List[str] = Field(default_factory=list)
    constant_lines: List[str] = Field(default_factory=list)
    notes: str = ""
    recommended_size_mb: int
    recommendation: str
    footer: str


def breakdown_labels(inputs: Inputs, result: CapacityResult) -> List[str]:
    un = format_plain(inputs.un_count)
    return [
        "Framework etc.",
        f"EM ({format_plain(inputs.em_count)} units)",
        f"UN ({un} unit{'' if inputs.un_count == 1 else 's'})",
        f"Alarms EM ({format_plain(result.total_alarms_per_em)})",
        f"Alarms UN ({format_plain(inputs.alarms_per_un)})",
        f"AOI ({format_plain(inputs.aoi_count)})",
        f"Error Margin ({format_plain(inputs.error_margin_percent)}%)",
        f"Spare ({format_plain(inputs.spare_percent)}%)",
    ]


def breakdown_rows(inputs: Inputs, result: CapacityResult) -> List[BreakdownRow]:
    pct = result.percentages()
    labels = breakdown_labels(inputs, result)
    return [
        BreakdownRow(
            key=name,
            label=label,
            value=format_number(value),
            percentage=f"{format_percent(pct[name])}%",
        )
        for (name, value), label in zip(result.breakdown.items(), labels)
    ]


def breakdown_frame(state: CalculatorState, result: CapacityResult) -> pd.DataFrame:
    """Breakdown table with a TOTAL row, as shown on screen."""
    rows = breakdown_rows(state.inputs, result)
    df = pd.DataFrame(
        {
            "Category": [r.label for r in rows] + ["TOTAL"],
            "Value (bytes)": [r.value for r in rows] + [format_number(result.total_bytes)],
            "%": [r.percentage for r in rows] + ["100%"],
        }
    )
    return df


def missing_report_fields(project: Project) -> List[str]:
    missing = []
    if not project.name:
        missing.append("Project Name")
    if not project.number:
        missing.append("Project Number")
    return missing


def build_report(
    state: CalculatorState,
    result: CapacityResult,
    generated_at: Optional[datetime] = None,
) -> CapacityReport:
    """
    Raises ReportPreconditionError when the project name or number is empty.
    """
    missing = missing_report_fields(state.project)
    if missing:
        raise ReportPreconditionError(missing)

    generated_at = generated_at or datetime.now(timezone.utc)
    inputs, constants, project = state.inputs, state.constants, state.project

    recommended = next_standard_size(result.total_megabytes)
    total_mb = format_mb(result.total_megabytes)
    recommendation = (
        "Based on the calculated requirements, please procure a PLC with a minimum "
        f"memory capacity of {total_mb} Mb. Consider selecting a PLC with at least "
        f"{recommended} Mb to accommodate the calculated requirements."
    )

    return CapacityReport(
        project_name=project.name,
        project_number=project.number,
        date=generated_at.strftime("%d/%m/%Y"),
        total_mb=total_mb,
        total_bytes=format_number(result.total_bytes),
        rows=breakdown_rows(inputs, result),
        total_row=BreakdownRow(
            key="total", label="TOTAL", value=format_number(result.total_bytes), percentage="100%"
        ),
        input_lines=[
            f"Number of EM: {format_plain(inputs.em_count)}",
            f"Number of UN: {format_plain(inputs.un_count)}",
            f"Alarms per EM: {format_plain(inputs.alarms_per_em)} "
            f"(Total: {format_plain(result.total_alarms_per_em)})",
            f"Alarms per UN: {format_plain(inputs.alarms_per_un)}",
            f"Number of AOI: {format_plain(inputs.aoi_count)}",
        ],
        margin_lines=[
            f"Percentage Error: {format_plain(inputs.error_margin_percent)}%",
            f"Spare Capacity for Expansion: {format_plain(inputs.spare_percent)}%",
        ],
        constant_lines=[
            f"Framework: {format_number(constants.framework)} bytes",
            f"Per EM: {format_number(constants.per_em)} bytes",
            f"Per UN: {format_number(constants.per_un)} bytes",
            f"Per EM Alarm: {format_number(constants.per_em_alarm)} bytes",
            f"Per UN Alarm: {format_number(constants.per_un_alarm)} bytes",
            f"Per AOI: {format_number(constants.per_aoi)} bytes",
        ],
        notes=project.notes,
        recommended_size_mb=recommended,
        recommendation=recommendation,
        footer=(
            f"Generated: {generated_at.strftime('%d/%m/%Y, %H:%M:%S')}  |  "
            f"{APP_NAME} v{APP_VERSION}"
        ),
    )


def render_text(report: CapacityReport) -> str:
    width = max(len(r.label) for r in report.rows + [report.total_row])
    lines = [
        report.title,
        "=" * len(report.title),
        f"Project: {report.project_name}    Number: {report.project_number}    Date: {report.date}",
        "",
        "MINIMUM REQUIRED PLC CAPACITY",
        f"  {report.total_mb} Mb ({report.total_bytes} bytes)",
        "",
        "CAPACITY BREAKDOWN",
    ]
    for r in report.rows + [report.total_row]:
        lines.append(f"  {r.label:<{width}}  {r.value:>12}  {r.percentage:>6}")

    lines += ["", "INPUT PARAMETERS USED", "Equipment Configuration:"]
    lines += [f"  - {s}" for s in report.input_lines]
    lines.append("Safety Margins:")
    lines += [f"  - {s}" for s in report.margin_lines]
    lines += ["", "CONSTANTS USED (Memory per Unit)"]
    lines += [f"  - {s}" for s in report.constant_lines]

    if report.notes:
        lines += ["", "NOTES / COMMENTS", report.notes]

    lines += ["", "RECOMMENDATION", report.recommendation, "", report.footer]
    return "\n".join(lines) + "\n"


def report_filename(project: Project, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    day = now.astimezone(timezone.utc).date().isoformat()
    return f"{REPORT_PREFIX}_{filename_part(project.number)}_{day}.txt"
