from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

from pydantic import ValidationError
from rich import print as rprint
from rich.markup import escape
from rich.tree import Tree

from .config import AppConfig, load_config
from .formatting import format_percent, status_badge
from .generators.sample_plan import generate_sample_plan
from .loader import filter_objectives, load_kpis, load_objectives
from .paths import path_from_root
from .report import run_rollup_report
from .rollup import (
    kpi_status,
    objective_status,
    plan_summary,
    strategy_status,
    tactic_status,
)
from .schemas import ObjectivesData, StatusWithPercent

T = TypeVar("T")


def init_dirs() -> None:
    for folder in ["config", "data", "output/logs", "output/reports"]:
        path_from_root(folder).mkdir(parents=True, exist_ok=True)
    rprint("[green]Directory scaffold initialized.[/green]")


def show_config() -> None:
    config = load_config()
    rprint("[bold cyan]Settings[/bold cyan]")
    rprint(json.dumps(config.raw, indent=2))


def _load_or_exit(loader: Callable[[Path], T], path: Path) -> T:
    try:
        return loader(path)
    except FileNotFoundError:
        rprint(f"[red]No snapshot at {escape(str(path))}.[/red] Run `generate-sample` or load one first.")
        raise SystemExit(1)
    except ValidationError as exc:
        rprint(f"[red]Snapshot {escape(str(path))} is malformed:[/red]\n{escape(str(exc))}")
        raise SystemExit(1)


def _load_plan(config: AppConfig) -> ObjectivesData:
    return _load_or_exit(load_objectives, config.data_path("objectives_path"))


def _label(item_id: str, name: str, result: StatusWithPercent, decimals: int) -> str:
    return (
        f"[bold]{escape(item_id)}[/bold] {escape(name)}  "
        f"{format_percent(result.percent, decimals)} {status_badge(result.status)} "
        f"[dim]({result.total} KPIs)[/dim]"
    )


def show_plan(term: str = "") -> None:
    config = load_config()
    thresholds = config.thresholds
    decimals = config.percent_decimals
    data = _load_plan(config)

    objectives = filter_objectives(data.objectives, term) if term else data.objectives
    if not objectives:
        rprint("[yellow]No objectives found.[/yellow]")
        return

    root = Tree("[bold cyan]Strategic Plan[/bold cyan]")
    for o in objectives:
        o_node = root.add(_label(o.id, o.name, objective_status(o, thresholds), decimals))
        for s in o.strategies:
            s_node = o_node.add(_label(s.id, s.name, strategy_status(s, thresholds), decimals))
            for k in s.kpis:
                s_node.add(_label(k.id, k.name, kpi_status(k, thresholds), decimals))
            for t in s.tactics:
                t_node = s_node.add(_label(t.id, t.name, tactic_status(t, thresholds), decimals))
                for k in t.kpis:
                    t_node.add(_label(k.id, k.name, kpi_status(k, thresholds), decimals))
    rprint(root)


def show_summary() -> None:
    config = load_config()
    data = _load_plan(config)
    summary = plan_summary(data.objectives, config.thresholds)

    rprint("[bold magenta]Plan summary[/bold magenta]")
    rprint(f"  - Objectives: {summary.objectives}")
    rprint(f"  - Strategies: {summary.strategies}")
    rprint(f"  - Tactics: {summary.tactics}")
    rprint(f"  - KPIs: {summary.kpis}")
    rprint(
        f"  - Overall progress: {format_percent(summary.overall_percent, config.percent_decimals)} "
        f"{status_badge(summary.overall_status)}"
    )
    kpis_path = config.data_path("kpis_path")
    if kpis_path.exists():
        flat = _load_or_exit(load_kpis, kpis_path)
        # the flat list is written alongside the tree and can drift from it
        style = "green" if len(flat.kpis) == summary.kpis else "yellow"
        rprint(f"  - Flat KPI list: [{style}]{len(flat.kpis)}[/{style}]")
    if data.last_sync is not None:
        rprint(f"  - Last sync: {data.last_sync.isoformat()}")


def rollup_report_cmd() -> None:
    config = load_config()
    data = _load_plan(config)
    result = run_rollup_report(
        data.objectives,
        out_dir=config.report_dir,
        thresholds=config.thresholds,
        decimals=config.percent_decimals,
        log_file=config.log_file,
    )
    rprint("[green]Roll-up report complete.[/green]")
    rprint(f"  - Output folder: {result['out_dir']}")
    rprint(f"  - Rows: {result['rows']}")
    rprint(f"  - Overall progress: {format_percent(result['overall_percent'], config.percent_decimals)}")


def generate_sample_cmd() -> None:
    plan = generate_sample_plan()
    rprint(f"[green]Generated sample plan:[/green] {len(plan.objectives)} objectives -> data/objectives.json, data/kpis.json")


def main(argv: list[str] | None = None) -> None:
    import sys

    args = argv if argv is not None else sys.argv[1:]
    command = args[0] if args else "help"

    commands = {
        "init-dirs": init_dirs,
        "show-config": show_config,
        "show-plan": lambda: show_plan(" ".join(args[1:])),
        "summary": show_summary,
        "rollup-report": rollup_report_cmd,
        "generate-sample": generate_sample_cmd,
    }

    if command in ("help", "-h", "--help"):
        rprint(
            "[bold]StratPlan CLI[/bold]\n"
            "Commands:\n"
            "  init-dirs\n"
            "  show-config\n"
            "  show-plan \\[search term]\n"
            "  summary\n"
            "  rollup-report\n"
            "  generate-sample"
        )
        return

    if command not in commands:
        rprint(f"[red]Unknown command:[/red] {command}")
        raise SystemExit(1)

    commands[command]()


if __name__ == "__main__":
    main()
