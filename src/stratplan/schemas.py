from __future__ import annotations

from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

MetricType = Literal["numeric", "milestone"]
StatusLevel = Literal["on-track", "at-risk", "off-track"]


class PlanModel(BaseModel):
    # Snapshots arrive with camelCase keys (metricType, ownerDept, ...).
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        allow_inf_nan=False,
    )


def _none_to_list(value: Any) -> Any:
    return [] if value is None else value


class KPI(PlanModel):
    id: str
    name: str = ""
    metric_type: MetricType
    target: float = 0.0
    current: float = 0.0
    unit: str | None = None
    owner_dept: list[str] = Field(default_factory=list)
    start: date | None = None
    end: date | None = None
    notes: str | None = None
    last_updated: datetime | None = None

    # informational only; containment decides where a KPI rolls up
    objective_id: str | None = None
    strategy_id: str | None = None
    tactic_id: str | None = None

    @field_validator("owner_dept", mode="before")
    @classmethod
    def missing_owner_dept(cls, value: Any) -> Any:
        return _none_to_list(value)

    @field_validator("start", "end", mode="before")
    @classmethod
    def date_part(cls, value: Any) -> Any:
        # ETL writes full ISO timestamps; only the calendar date matters here
        if isinstance(value, str) and "T" in value:
            return value.split("T", 1)[0]
        return value


class Tactic(PlanModel):
    id: str
    name: str = ""
    description: str | None = None
    kpis: list[KPI] = Field(default_factory=list)

    @field_validator("kpis", mode="before")
    @classmethod
    def missing_kpis(cls, value: Any) -> Any:
        return _none_to_list(value)


class Strategy(PlanModel):
    id: str
    name: str = ""
    description: str | None = None
    kpis: list[KPI] = Field(default_factory=list)
    tactics: list[Tactic] = Field(default_factory=list)

    @field_validator("kpis", "tactics", mode="before")
    @classmethod
    def missing_children(cls, value: Any) -> Any:
        return _none_to_list(value)


class Objective(PlanModel):
    id: str
    name: str = ""
    description: str | None = None
    strategies: list[Strategy] = Field(default_factory=list)
    last_updated: datetime | None = None

    @field_validator("strategies", mode="before")
    @classmethod
    def missing_strategies(cls, value: Any) -> Any:
        return _none_to_list(value)


class StatusWithPercent(PlanModel):
    percent: float
    status: StatusLevel
    total: int


class ObjectivesData(PlanModel):
    objectives: list[Objective] = Field(default_factory=list)
    last_sync: datetime | None = None
    version: str | None = None

    @field_validator("objectives", mode="before")
    @classmethod
    def missing_objectives(cls, value: Any) -> Any:
        return _none_to_list(value)


class KPIsData(PlanModel):
    kpis: list[KPI] = Field(default_factory=list)
    last_sync: datetime | None = None
    version: str | None = None

    @field_validator("kpis", mode="before")
    @classmethod
    def missing_kpis(cls, value: Any) -> Any:
        return _none_to_list(value)
