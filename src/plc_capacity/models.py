from __future__ import annotations

from typing import Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, Field, confloat, field_validator

NonNegative = confloat(ge=0, allow_inf_nan=False)


class Inputs(BaseModel):
    """User-editable equipment counts and margins."""

    model_config = ConfigDict(populate_by_name=True)

    em_count: NonNegative = Field(6.0, alias="emCount", description="Number of EM units.")
    un_count: NonNegative = Field(1.0, alias="unCount", description="Number of UN units.")
    alarms_per_em: NonNegative = Field(19.0, alias="alarmsPerEm", description="Alarms per EM unit.")
    alarms_per_un: NonNegative = Field(60.0, alias="alarmsPerUn", description="Alarms allocated to UN units.")
    aoi_count: NonNegative = Field(6.0, alias="aoiCount", description="Number of AOI logic blocks.")
    error_margin_percent: NonNegative = Field(
        15.0, alias="errorMarginPercent", description="Error margin (%), applied to the pre-margin subtotal."
    )
    spare_percent: NonNegative = Field(
        30.0, alias="sparePercent", description="Spare capacity (%), applied after the error margin."
    )


class Constants(BaseModel):
    """Per-unit memory costs (bytes). Platform parameters, editable but rarely changed."""

    model_config = ConfigDict(populate_by_name=True)

    framework: NonNegative = Field(353123.0, description="Fixed framework baseline (bytes).")
    per_em: NonNegative = Field(136801.0, alias="perEm", description="Bytes per EM unit.")
    per_un: NonNegative = Field(340889.0, alias="perUn", description="Bytes per UN unit.")
    per_em_alarm: NonNegative = Field(1145.0, alias="perEmAlarm", description="Bytes per EM alarm.")
    per_un_alarm: NonNegative = Field(1145.0, alias="perUnAlarm", description="Bytes per UN alarm.")
    per_aoi: NonNegative = Field(6044.0, alias="perAoi", description="Bytes per AOI.")


class Project(BaseModel):
    """Project metadata. Not used by the calculation, required for reports."""

    name: str = Field("", description="Project name.")
    number: str = Field("", description="Project number.")
    notes: str = Field("", description="Free-form notes.")

    @field_validator("name", "number", "notes", mode="before")
    @classmethod
    def _strip(cls, v):
        if v is None:
            return ""
        if isinstance(v, str):
            return v.strip()
        return v


class CalculatorState(BaseModel):
    inputs: Inputs = Field(default_factory=Inputs)
    constants: Constants = Field(default_factory=Constants)
    project: Project = Field(default_factory=Project)

    @classmethod
    def factory(cls) -> "CalculatorState":
        """Fresh state holding the factory defaults."""
        return cls()


# Display order of the breakdown components
COMPONENTS: Tuple[str, ...] = (
    "framework",
    "em",
    "un",
    "alarms_em",
    "alarms_un",
    "aoi",
    "error_margin",
    "spare",
)


class Breakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    framework: float
    em: float
    un: float
    alarms_em: float
    alarms_un: float
    aoi: float
    error_margin: float
    spare: float

    def items(self) -> List[Tuple[str, float]]:
        return [(name, getattr(self, name)) for name in COMPONENTS]

    def total(self) -> float:
        return sum(value for _, value in self.items())


class CapacityResult(BaseModel):
    """
    Derived capacity figures. Always recomputed from Inputs + Constants;
    never persisted as authoritative.
    """

    model_config = ConfigDict(frozen=True)

    breakdown: Breakdown
    total_alarms_per_em: float
    subtotal_before_margins: float
    subtotal_before_spare: float
    total_raw: float
    total_bytes: int
    total_megabytes: float

    def percentages(self) -> Dict[str, float]:
        """
        Share of each component against the *rounded* byte total.

        Independent rounding means the figures need not add up to exactly 100.
        """
        if self.total_bytes == 0:
            return {name: 0.0 for name in COMPONENTS}
        return {name: value / self.total_bytes * 100 for name, value in self.breakdown.items()}
