from stratplan.config import load_settings
from stratplan.generators.sample_plan import SampleSizes, build_sample_plan
from stratplan.loader import find_backref_mismatches, flatten_kpis
from stratplan.rollup import objective_pct


def test_sample_plan_is_deterministic():
    first = build_sample_plan(seed=7)
    second = build_sample_plan(seed=7)
    assert first.model_dump() == second.model_dump()


def test_sample_plan_shape():
    sizes = SampleSizes(objectives=3, strategies_per_objective=(1, 2), tactics_per_strategy=(0, 2), kpis_per_group=(1, 3))
    plan = build_sample_plan(seed=11, sizes=sizes)
    assert len(plan.objectives) == 3
    for objective in plan.objectives:
        assert 1 <= len(objective.strategies) <= 2
        assert 0.0 <= objective_pct(objective) <= 1.0
        for strategy in objective.strategies:
            assert strategy.id.startswith(f"{objective.id}.")
            assert 0 <= len(strategy.tactics) <= 2

    kpis = flatten_kpis(plan.objectives)
    assert kpis
    assert len({k.id for k in kpis}) == len(kpis)
    assert find_backref_mismatches(plan.objectives) == []


def test_sample_sizes_from_settings():
    sizes = SampleSizes.from_settings(load_settings())
    assert sizes.objectives == 4
    assert sizes.strategies_per_objective == (2, 5)
    assert sizes.kpis_per_group == (0, 4)
