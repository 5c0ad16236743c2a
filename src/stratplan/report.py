from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

import pandas as pd

from stratplan.formatting import format_percent, status_class, status_label
from stratplan.logging_utils import plan_logger
from stratplan.rollup import (
    DEFAULT_THRESHOLDS,
    StatusThresholds,
    kpi_status,
    objective_status,
    plan_summary,
    strategy_status,
    tactic_status,
)
from stratplan.schemas import Objective, StatusWithPercent

ROLLUP_COLUMNS = [
    "level",
    "id",
    "name",
    "parent_id",
    "metric_type",
    "percent",
    "status",
    "total",
    "badge_class",
]


def _row(level: str, item_id: str, name: str, parent_id: str | None, result: StatusWithPercent, metric_type: str | None = None) -> dict[str, Any]:
    return {
        "level": level,
        "id": item_id,
        "name": name,
        "parent_id": parent_id,
        "metric_type": metric_type,
        "percent": result.percent,
        "status": result.status,
        "total": result.total,
        "badge_class": status_class(result.status),
    }


def build_rollup_frame(
    objectives: Sequence[Objective],
    thresholds: StatusThresholds = DEFAULT_THRESHOLDS,
) -> pd.DataFrame:
    """One row per objective, strategy, tactic and KPI, in tree order.

    ``percent`` is the unrounded completion fraction.
    """
    rows: list[dict[str, Any]] = []
    for o in objectives:
        rows.append(_row("objective", o.id, o.name, None, objective_status(o, thresholds)))
        for s in o.strategies:
            rows.append(_row("strategy", s.id, s.name, o.id, strategy_status(s, thresholds)))
            for k in s.kpis:
                rows.append(_row("kpi", k.id, k.name, s.id, kpi_status(k, thresholds), k.metric_type))
            for t in s.tactics:
                rows.append(_row("tactic", t.id, t.name, s.id, tactic_status(t, thresholds)))
                for k in t.kpis:
                    rows.append(_row("kpi", k.id, k.name, t.id, kpi_status(k, thresholds), k.metric_type))
    return pd.DataFrame(rows, columns=ROLLUP_COLUMNS)


def status_distribution(frame: pd.DataFrame) -> pd.DataFrame:
    """Count of entities per level and status band."""
    if frame.empty:
        return pd.DataFrame(columns=["level", "status", "count"])
    return (
        frame.groupby(["level", "status"], dropna=False)
        .size()
        .reset_index(name="count")
        .sort_values(["level", "status"])
        .reset_index(drop=True)
    )


def run_rollup_report(
    objectives: Sequence[Objective],
    out_dir: Path,
    thresholds: StatusThresholds = DEFAULT_THRESHOLDS,
    decimals: int = 0,
    log_file: Path | None = None,
) -> dict[str, Any]:
    logger = plan_logger("report", log_file=log_file)
    out_dir.mkdir(parents=True, exist_ok=True)

    logger.info("Building roll-up report for %s objectives", len(objectives))

    frame = build_rollup_frame(objectives, thresholds)
    frame.to_csv(out_dir / "rollup.csv", index=False)

    dist = status_distribution(frame)
    dist.to_csv(out_dir / "status_distribution.csv", index=False)

    summary = plan_summary(objectives, thresholds)
    logger.info(
        "Plan summary: objectives=%s strategies=%s tactics=%s kpis=%s overall=%s",
        summary.objectives, summary.strategies, summary.tactics, summary.kpis,
        format_percent(summary.overall_percent, 2),
    )

    # ---------- Markdown summary ----------
    lines: list[str] = []
    lines.append("# Strategic Plan Roll-up")
    lines.append("")
    lines.append("## Summary")
    lines.append(f"- Objectives: **{summary.objectives}**")
    lines.append(f"- Strategies: **{summary.strategies}**")
    lines.append(f"- Tactics: **{summary.tactics}**")
    lines.append(f"- KPIs: **{summary.kpis}**")
    lines.append(
        f"- Overall progress: **{format_percent(summary.overall_percent, decimals)}** "
        f"({status_label(summary.overall_status)})"
    )
    lines.append("")
    lines.append("## Objectives")
    objective_rows = frame[frame["level"] == "objective"]
    if objective_rows.empty:
        lines.append("- No objectives found.")
    for _, r in objective_rows.iterrows():
        lines.append(
            f"- `{r['id']}` {r['name']}: {format_percent(float(r['percent']), decimals)} "
            f"{status_label(r['status'])} ({int(r['total'])} KPIs)"
        )
    lines.append("")
    lines.append("## Thresholds")
    lines.append(f"- On Track: >= {format_percent(thresholds.on_track)}")
    lines.append(f"- At Risk: >= {format_percent(thresholds.at_risk)}")
    lines.append("")

    summary_md_path = out_dir / "rollup_summary.md"
    summary_md_path.write_text("\n".join(lines), encoding="utf-8")
    logger.info("Wrote summary report: %s", summary_md_path)

    return {
        "out_dir": str(out_dir),
        "rows": int(len(frame)),
        "objectives": summary.objectives,
        "strategies": summary.strategies,
        "kpis": summary.kpis,
        "overall_percent": summary.overall_percent,
        "overall_status": summary.overall_status,
    }
