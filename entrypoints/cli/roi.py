from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

from roi_analyzer.adapters.config import config
from roi_analyzer.adapters.file_store import JsonFileKeyValueStore
from roi_analyzer.adapters.storage import build_key_value_store
from roi_analyzer.analysis.finance import compute
from roi_analyzer.analysis.report import format_report
from roi_analyzer.repos.scenarios_repo import ScenarioStore
from roi_analyzer.services.validation import parse_input

app = typer.Typer(help="Multifamily ROI analyzer (metrics, reports, saved scenarios).")
scenarios_app = typer.Typer(help="Manage saved scenarios.")
app.add_typer(scenarios_app, name="scenarios")


def _load_input(path: Path):
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        typer.echo(f"cannot read input file {path}: {e}", err=True)
        raise typer.Exit(code=1)
    if not isinstance(raw, dict):
        typer.echo(f"{path} must hold a JSON object", err=True)
        raise typer.Exit(code=1)
    return parse_input(raw)


def _open_store(store_path: Optional[Path]) -> ScenarioStore:
    if store_path is not None:
        return ScenarioStore(JsonFileKeyValueStore(store_path), config.SCENARIOS_KEY)
    return ScenarioStore(build_key_value_store(config), config.SCENARIOS_KEY)


def _require_persisted(store: ScenarioStore) -> None:
    if store.diverged:
        typer.echo(f"could not write scenarios to storage (key {store.key}); change not saved", err=True)
        raise typer.Exit(code=1)


def _store_path_option():
    return typer.Option(
        None, "--store-path", help="JSON file to keep scenarios in (overrides ROI_STORE_* settings)."
    )


@app.command("compute")
def compute_cmd(
    input_file: Path = typer.Argument(..., help="JSON file with the input assumptions"),
) -> None:
    """
    Print the derived metrics as JSON.
    """
    metrics = compute(_load_input(input_file))
    typer.echo(json.dumps(metrics.as_dict(), indent=2))


@app.command("report")
def report_cmd(
    input_file: Path = typer.Argument(..., help="JSON file with the input assumptions"),
) -> None:
    """
    Print the plain-text analysis report.
    """
    typer.echo(format_report(_load_input(input_file)), nl=False)


@scenarios_app.command("list")
def list_cmd(store_path: Optional[Path] = _store_path_option()) -> None:
    store = _open_store(store_path)
    for s in store.all():
        typer.echo(f"{s.id}\t{s.created_at.isoformat()}\t{s.name}")


@scenarios_app.command("save")
def save_cmd(
    name: str = typer.Argument(..., help="Scenario name"),
    input_file: Path = typer.Argument(..., help="JSON file with the input assumptions"),
    scenario_id: Optional[int] = typer.Option(None, "--id", help="Update this scenario instead of creating one"),
    store_path: Optional[Path] = _store_path_option(),
) -> None:
    """
    Save an input file as a new scenario, or overwrite an existing one with --id.
    """
    store = _open_store(store_path)
    snapshot = _load_input(input_file)
    if scenario_id is not None:
        if not store.update(scenario_id, snapshot):
            typer.echo(f"scenario {scenario_id} not found", err=True)
            raise typer.Exit(code=1)
        store.rename(scenario_id, name)
        _require_persisted(store)
        typer.echo(str(scenario_id))
        return
    scenario = store.save_new(name, snapshot)
    _require_persisted(store)
    typer.echo(str(scenario.id))


@scenarios_app.command("show")
def show_cmd(
    scenario_id: int = typer.Argument(...),
    report: bool = typer.Option(False, "--report", help="Print the analysis report instead of JSON"),
    store_path: Optional[Path] = _store_path_option(),
) -> None:
    store = _open_store(store_path)
    scenario = store.find(scenario_id)
    if scenario is None:
        typer.echo(f"scenario {scenario_id} not found", err=True)
        raise typer.Exit(code=1)
    if report:
        typer.echo(format_report(scenario.data), nl=False)
    else:
        typer.echo(json.dumps(scenario.to_record(), indent=2))


@scenarios_app.command("delete")
def delete_cmd(
    scenario_id: int = typer.Argument(...),
    store_path: Optional[Path] = _store_path_option(),
) -> None:
    store = _open_store(store_path)
    if not store.delete(scenario_id):
        typer.echo(f"scenario {scenario_id} not found", err=True)
        raise typer.Exit(code=1)
    _require_persisted(store)


if __name__ == "__main__":
    app()
