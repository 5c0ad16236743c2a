import json
from datetime import date

import pytest
from pydantic import ValidationError

from stratplan.loader import (
    dump_snapshot,
    filter_objectives,
    find_backref_mismatches,
    flatten_kpis,
    load_kpis,
    load_objectives,
    parse_id_hierarchy,
)
from stratplan.rollup import strategy_pct
from stratplan.schemas import KPI, ObjectivesData

SNAPSHOT = {
    "objectives": [
        {
            "id": "3",
            "name": "Protect Land",
            "description": "Conserve priority habitat",
            "strategies": [
                {
                    "id": "3.5",
                    "name": "Acquire easements",
                    "kpis": [
                        {
                            "id": "3.5.1",
                            "name": "Acres protected",
                            "metricType": "numeric",
                            "target": 500,
                            "current": 250,
                            "unit": "acres",
                            "ownerDept": ["Stewardship", "ED"],
                            "start": "2024-01-01T00:00:00.000Z",
                            "end": "2026-12-31",
                            "objectiveId": "3",
                            "strategyId": "3.5",
                        }
                    ],
                    "tactics": [
                        {
                            "id": "3.5.6",
                            "name": "Landowner outreach",
                            "kpis": [
                                {
                                    "id": "3.5.6.1",
                                    "name": "Outreach plan adopted",
                                    "metricType": "milestone",
                                    "target": 1,
                                    "current": 1,
                                    "tacticId": "3.5.7",
                                }
                            ],
                        }
                    ],
                },
                {"id": "3.6", "name": "Steward lands", "kpis": None, "tactics": None},
            ],
        },
        {"id": "4", "name": "Grow Community", "strategies": []},
    ],
    "lastSync": "2025-03-01T12:00:00Z",
    "version": "1.0",
}


def write_snapshot(tmp_path, payload):
    path = tmp_path / "objectives.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_load_objectives_reads_camel_case(tmp_path):
    data = load_objectives(write_snapshot(tmp_path, SNAPSHOT))
    assert data.version == "1.0"
    kpi = data.objectives[0].strategies[0].kpis[0]
    assert kpi.metric_type == "numeric"
    assert kpi.owner_dept == ["Stewardship", "ED"]
    assert kpi.start == date(2024, 1, 1)
    assert kpi.end == date(2026, 12, 31)


def test_missing_lists_are_empty(tmp_path):
    data = load_objectives(write_snapshot(tmp_path, SNAPSHOT))
    empty = data.objectives[0].strategies[1]
    assert empty.kpis == []
    assert empty.tactics == []
    assert strategy_pct(empty) == 0


def test_missing_snapshot(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_objectives(tmp_path / "missing.json")


def test_unknown_metric_type_rejected(tmp_path):
    bad = {"objectives": [{"id": "1", "strategies": [{"id": "1.1", "kpis": [{"id": "1.1.1", "metricType": "ratio"}]}]}]}
    with pytest.raises(ValidationError):
        load_objectives(write_snapshot(tmp_path, bad))


def test_models_are_frozen():
    kpi = KPI(id="1", metric_type="numeric", target=10, current=5)
    with pytest.raises(ValidationError):
        kpi.current = 7


def test_flatten_kpis_follows_containment():
    data = ObjectivesData.model_validate(SNAPSHOT)
    assert [k.id for k in flatten_kpis(data.objectives)] == ["3.5.1", "3.5.6.1"]


def test_find_backref_mismatches():
    data = ObjectivesData.model_validate(SNAPSHOT)
    mismatches = find_backref_mismatches(data.objectives)
    assert len(mismatches) == 1
    assert mismatches[0].kpi_id == "3.5.6.1"
    assert mismatches[0].field == "tacticId"
    assert mismatches[0].recorded == "3.5.7"
    assert mismatches[0].contained_in == "3.5.6"


def test_filter_objectives():
    data = ObjectivesData.model_validate(SNAPSHOT)
    assert [o.id for o in filter_objectives(data.objectives, "habitat")] == ["3"]
    assert [o.id for o in filter_objectives(data.objectives, "GROW")] == ["4"]
    assert [o.id for o in filter_objectives(data.objectives, "4")] == ["4"]
    assert len(filter_objectives(data.objectives, "  ")) == 2


def test_parse_id_hierarchy():
    ids = parse_id_hierarchy("3.5.6.1")
    assert (ids.objective_id, ids.strategy_id, ids.tactic_id) == ("3", "3.5", "3.5.6")
    ids = parse_id_hierarchy("3")
    assert (ids.objective_id, ids.strategy_id, ids.tactic_id) == ("3", None, None)


def test_dump_snapshot_writes_camel_case(tmp_path):
    data = ObjectivesData.model_validate(SNAPSHOT)
    path = dump_snapshot(data, tmp_path / "out" / "objectives.json")
    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw["lastSync"].startswith("2025-03-01")
    assert raw["objectives"][0]["strategies"][0]["kpis"][0]["metricType"] == "numeric"
    assert load_objectives(path).model_dump() == data.model_dump()


def test_load_kpis(tmp_path):
    path = tmp_path / "kpis.json"
    path.write_text(json.dumps({"kpis": [{"id": "1.1.1", "metricType": "milestone", "current": 0}]}), encoding="utf-8")
    data = load_kpis(path)
    assert len(data.kpis) == 1
    assert data.kpis[0].target == 0


@pytest.mark.parametrize("value", [float("nan"), float("inf")])
def test_non_finite_measurements_rejected(value):
    with pytest.raises(ValidationError):
        KPI(id="1", metric_type="numeric", target=100, current=value)
