from __future__ import annotations

import json
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from stratplan.logging_utils import plan_logger
from stratplan.schemas import KPI, KPIsData, Objective, ObjectivesData


@dataclass
class BackrefMismatch:
    kpi_id: str
    field: str
    recorded: str | None
    contained_in: str | None


@dataclass
class IdHierarchy:
    objective_id: str
    strategy_id: str | None = None
    tactic_id: str | None = None


def _read_json_required(path: Path) -> Any:
    if not path.exists():
        raise FileNotFoundError(f"Required snapshot not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def load_objectives(path: Path) -> ObjectivesData:
    logger = plan_logger("loader")
    data = ObjectivesData.model_validate(_read_json_required(path))
    logger.info(
        "Loaded %s objectives from %s (version=%s lastSync=%s)",
        len(data.objectives), path, data.version, data.last_sync,
    )

    mismatches = find_backref_mismatches(data.objectives)
    for m in mismatches:
        logger.warning(
            "KPI %s records %s=%s but is contained in %s",
            m.kpi_id, m.field, m.recorded, m.contained_in,
        )
    return data


def load_kpis(path: Path) -> KPIsData:
    logger = plan_logger("loader")
    data = KPIsData.model_validate(_read_json_required(path))
    logger.info("Loaded %s KPIs from %s", len(data.kpis), path)
    return data


def parse_id_hierarchy(item_id: str) -> IdHierarchy:
    """Ancestor ids implied by dotted numbering: '3.5.6.1' -> 3 / 3.5 / 3.5.6."""
    parts = item_id.split(".")
    return IdHierarchy(
        objective_id=parts[0],
        strategy_id=".".join(parts[:2]) if len(parts) >= 2 else None,
        tactic_id=".".join(parts[:3]) if len(parts) >= 3 else None,
    )


def _walk_kpis(objectives: Sequence[Objective]) -> Iterator[tuple[KPI, str, str, str | None]]:
    # (kpi, objective id, strategy id, tactic id or None) in display order
    for objective in objectives:
        for strategy in objective.strategies:
            for kpi in strategy.kpis:
                yield kpi, objective.id, strategy.id, None
            for tactic in strategy.tactics:
                for kpi in tactic.kpis:
                    yield kpi, objective.id, strategy.id, tactic.id


def flatten_kpis(objectives: Sequence[Objective]) -> list[KPI]:
    """Every KPI reachable through containment, direct KPIs before tactic KPIs."""
    return [kpi for kpi, *_ in _walk_kpis(objectives)]


def find_backref_mismatches(objectives: Sequence[Objective]) -> list[BackrefMismatch]:
    """KPIs whose recorded objective/strategy/tactic ids disagree with the tree.

    Unset back-references are not reported. This is a data-quality check only;
    roll-ups always follow containment.
    """
    mismatches: list[BackrefMismatch] = []
    for kpi, objective_id, strategy_id, tactic_id in _walk_kpis(objectives):
        for field, recorded, actual in (
            ("objectiveId", kpi.objective_id, objective_id),
            ("strategyId", kpi.strategy_id, strategy_id),
            ("tacticId", kpi.tactic_id, tactic_id),
        ):
            if recorded is not None and recorded != actual:
                mismatches.append(
                    BackrefMismatch(kpi_id=kpi.id, field=field, recorded=recorded, contained_in=actual)
                )
    return mismatches


def filter_objectives(objectives: Sequence[Objective], term: str) -> list[Objective]:
    """Case-insensitive match on objective id, name or description."""
    needle = term.strip().lower()
    if not needle:
        return list(objectives)
    return [
        o
        for o in objectives
        if needle in o.id.lower()
        or needle in o.name.lower()
        or (o.description is not None and needle in o.description.lower())
    ]


def dump_snapshot(data: ObjectivesData | KPIsData, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(data.model_dump_json(by_alias=True, exclude_none=True, indent=2), encoding="utf-8")
    return path
