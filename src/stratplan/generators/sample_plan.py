from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any

import numpy as np
from faker import Faker

from stratplan.config import load_config
from stratplan.generators.common import (
    generation_settings,
    get_faker,
    int_range,
    seed_everything,
)
from stratplan.loader import dump_snapshot, flatten_kpis, parse_id_hierarchy
from stratplan.logging_utils import plan_logger
from stratplan.schemas import KPI, KPIsData, Objective, ObjectivesData, Strategy, Tactic

DEPARTMENTS = [
    "Stewardship",
    "Development",
    "Communications",
    "Finance",
    "Programs",
    "Operations",
    "ED",
    "Board",
]

NUMERIC_UNITS = {
    # unit: candidate targets
    "acres": [50, 120, 500, 1000],
    "%": [100],
    "$": [25000, 100000, 250000],
    "members": [200, 500, 1500],
    "events": [4, 6, 12],
    "volunteers": [25, 60, 150],
}

SCHEMA_VERSION = "1.0"


@dataclass
class SampleSizes:
    objectives: int = 4
    strategies_per_objective: tuple[int, int] = (2, 5)
    tactics_per_strategy: tuple[int, int] = (0, 3)
    kpis_per_group: tuple[int, int] = (0, 4)
    milestone_share: float = 0.3

    @classmethod
    def from_settings(cls, settings: dict[str, Any]) -> "SampleSizes":
        gen = generation_settings(settings)
        defaults = cls()
        return cls(
            objectives=int(gen.get("objectives", defaults.objectives)),
            strategies_per_objective=int_range(gen.get("strategies_per_objective"), defaults.strategies_per_objective),
            tactics_per_strategy=int_range(gen.get("tactics_per_strategy"), defaults.tactics_per_strategy),
            kpis_per_group=int_range(gen.get("kpis_per_group"), defaults.kpis_per_group),
            milestone_share=float(gen.get("milestone_share", defaults.milestone_share)),
        )


def _title(fake: Faker) -> str:
    return fake.catch_phrase().title()


def _build_kpi(fake: Faker, kpi_id: str, sizes: SampleSizes, in_tactic: bool) -> KPI:
    ancestors = parse_id_hierarchy(kpi_id)
    start = fake.date_between(start_date=date(2024, 1, 1), end_date=date(2024, 12, 31))
    end = fake.date_between(start_date=date(2025, 1, 1), end_date=date(2027, 12, 31))
    owners = sorted(set(fake.random_elements(elements=DEPARTMENTS, length=random.randint(1, 2))))

    if random.random() < sizes.milestone_share:
        metric_type, unit, target = "milestone", None, 1.0
        current = 1.0 if random.random() < 0.45 else 0.0
    else:
        metric_type = "numeric"
        unit = random.choice(list(NUMERIC_UNITS))
        target = float(random.choice(NUMERIC_UNITS[unit]))
        # mostly in progress, a few overshoot the target
        current = round(float(target * np.random.beta(2.0, 2.0) * 1.2), 1)

    return KPI(
        id=kpi_id,
        name=fake.bs().capitalize(),
        metric_type=metric_type,
        target=target,
        current=current,
        unit=unit,
        owner_dept=owners,
        start=start,
        end=end,
        objective_id=ancestors.objective_id,
        strategy_id=ancestors.strategy_id,
        # direct strategy KPIs share the tactic numbering depth
        tactic_id=ancestors.tactic_id if in_tactic else None,
    )


def _build_strategy(fake: Faker, objective_id: str, index: int, sizes: SampleSizes) -> Strategy:
    strategy_id = f"{objective_id}.{index}"
    n_tactics = random.randint(*sizes.tactics_per_strategy)

    tactics: list[Tactic] = []
    for t in range(1, n_tactics + 1):
        tactic_id = f"{strategy_id}.{t}"
        kpis = [
            _build_kpi(fake, f"{tactic_id}.{k}", sizes, in_tactic=True)
            for k in range(1, random.randint(*sizes.kpis_per_group) + 1)
        ]
        tactics.append(Tactic(id=tactic_id, name=_title(fake), kpis=kpis))

    # direct KPIs are numbered after the tactics so ids stay unique
    direct = [
        _build_kpi(fake, f"{strategy_id}.{n_tactics + k}", sizes, in_tactic=False)
        for k in range(1, random.randint(*sizes.kpis_per_group) + 1)
    ]
    return Strategy(
        id=strategy_id,
        name=_title(fake),
        description=fake.sentence(nb_words=12),
        kpis=direct,
        tactics=tactics,
    )


def build_sample_plan(seed: int = 42, sizes: SampleSizes | None = None) -> ObjectivesData:
    """Deterministic synthetic plan for demos and tests. Writes nothing."""
    sizes = sizes or SampleSizes()
    seed_everything(seed)
    fake = get_faker()
    stamp = datetime(2025, 1, 1, tzinfo=timezone.utc)

    objectives: list[Objective] = []
    for o in range(1, sizes.objectives + 1):
        objective_id = str(o)
        strategies = [
            _build_strategy(fake, objective_id, s, sizes)
            for s in range(1, random.randint(*sizes.strategies_per_objective) + 1)
        ]
        objectives.append(
            Objective(
                id=objective_id,
                name=_title(fake),
                description=fake.paragraph(nb_sentences=2),
                strategies=strategies,
                last_updated=stamp,
            )
        )
    return ObjectivesData(objectives=objectives, last_sync=stamp, version=SCHEMA_VERSION)


def generate_sample_plan() -> ObjectivesData:
    config = load_config()
    seed = int(generation_settings(config.raw).get("random_seed", 42))
    sizes = SampleSizes.from_settings(config.raw)

    logger = plan_logger("generators.sample_plan", log_file=config.log_file)
    logger.info("Generating sample plan with seed=%s objectives=%s", seed, sizes.objectives)

    plan = build_sample_plan(seed=seed, sizes=sizes)
    kpis = KPIsData(kpis=flatten_kpis(plan.objectives), last_sync=plan.last_sync, version=plan.version)

    objectives_path = dump_snapshot(plan, config.data_path("objectives_path"))
    kpis_path = dump_snapshot(kpis, config.data_path("kpis_path"))
    logger.info("Wrote %s objectives to %s", len(plan.objectives), objectives_path)
    logger.info("Wrote %s KPIs to %s", len(kpis.kpis), kpis_path)
    return plan
