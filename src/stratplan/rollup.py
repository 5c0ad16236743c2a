"""Roll-up engine for the strategic plan hierarchy.

Converts KPI measurements into completion fractions in [0, 1] and rolls
them up Tactic -> Strategy -> Objective. Every function here is pure: it
reads a tree fragment and returns a number, a status label or a count.
Results are never rounded; see ``stratplan.formatting`` for display.

Strategies pool the leaf KPIs of their direct list and all of their tactics
before averaging once. Objectives average the per-strategy results.
"""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .schemas import KPI, Objective, StatusLevel, StatusWithPercent, Strategy, Tactic


@dataclass(frozen=True)
class StatusThresholds:
    on_track: float = 0.70
    at_risk: float = 0.40


DEFAULT_THRESHOLDS = StatusThresholds()


# ---------- Percentages ----------

def kpi_pct(kpi: KPI) -> float:
    """Completion fraction for a single KPI.

    numeric: current / target clamped to [0, 1], 0 when target is 0.
    milestone: 1 when current is non-zero, otherwise 0; target is ignored.
    """
    if kpi.metric_type == "numeric":
        if kpi.target == 0:
            return 0.0
        return max(0.0, min(1.0, kpi.current / kpi.target))
    return 1.0 if kpi.current else 0.0


def agg_pct(values: Sequence[float]) -> float:
    """Arithmetic mean; an empty sequence aggregates to 0."""
    if len(values) == 0:
        return 0.0
    return sum(values) / len(values)


def _strategy_leaf_kpis(strategy: Strategy) -> list[KPI]:
    leaves = list(strategy.kpis)
    for tactic in strategy.tactics:
        leaves.extend(tactic.kpis)
    return leaves


def tactic_pct(tactic: Tactic) -> float:
    return agg_pct([kpi_pct(k) for k in tactic.kpis])


def strategy_pct(strategy: Strategy) -> float:
    # pooled over every leaf KPI, not an average of tactic averages
    return agg_pct([kpi_pct(k) for k in _strategy_leaf_kpis(strategy)])


def objective_pct(objective: Objective) -> float:
    return agg_pct([strategy_pct(s) for s in objective.strategies])


def plan_pct(objectives: Iterable[Objective]) -> float:
    """Overall progress across a whole plan (mean of objective results)."""
    return agg_pct([objective_pct(o) for o in objectives])


# ---------- Status ----------

def status_level(pct: float, thresholds: StatusThresholds = DEFAULT_THRESHOLDS) -> StatusLevel:
    if pct >= thresholds.on_track:
        return "on-track"
    if pct >= thresholds.at_risk:
        return "at-risk"
    return "off-track"


def _with_status(percent: float, total: int, thresholds: StatusThresholds) -> StatusWithPercent:
    return StatusWithPercent(percent=percent, status=status_level(percent, thresholds), total=total)


def kpi_status(kpi: KPI, thresholds: StatusThresholds = DEFAULT_THRESHOLDS) -> StatusWithPercent:
    return _with_status(kpi_pct(kpi), 1, thresholds)


def tactic_status(tactic: Tactic, thresholds: StatusThresholds = DEFAULT_THRESHOLDS) -> StatusWithPercent:
    return _with_status(tactic_pct(tactic), tactic_kpi_count(tactic), thresholds)


def strategy_status(strategy: Strategy, thresholds: StatusThresholds = DEFAULT_THRESHOLDS) -> StatusWithPercent:
    return _with_status(strategy_pct(strategy), strategy_kpi_count(strategy), thresholds)


def objective_status(objective: Objective, thresholds: StatusThresholds = DEFAULT_THRESHOLDS) -> StatusWithPercent:
    return _with_status(objective_pct(objective), objective_kpi_count(objective), thresholds)


# ---------- Counts ----------

def tactic_kpi_count(tactic: Tactic) -> int:
    return len(tactic.kpis)


def strategy_kpi_count(strategy: Strategy) -> int:
    return len(strategy.kpis) + sum(tactic_kpi_count(t) for t in strategy.tactics)


def objective_kpi_count(objective: Objective) -> int:
    return sum(strategy_kpi_count(s) for s in objective.strategies)


def objective_strategy_count(objective: Objective) -> int:
    return len(objective.strategies)


@dataclass(frozen=True)
class PlanSummary:
    objectives: int
    strategies: int
    tactics: int
    kpis: int
    overall_percent: float
    overall_status: StatusLevel


def plan_summary(
    objectives: Sequence[Objective],
    thresholds: StatusThresholds = DEFAULT_THRESHOLDS,
) -> PlanSummary:
    """Headline figures for a whole plan snapshot."""
    overall = plan_pct(objectives)
    return PlanSummary(
        objectives=len(objectives),
        strategies=sum(objective_strategy_count(o) for o in objectives),
        tactics=sum(len(s.tactics) for o in objectives for s in o.strategies),
        kpis=sum(objective_kpi_count(o) for o in objectives),
        overall_percent=overall,
        overall_status=status_level(overall, thresholds),
    )
