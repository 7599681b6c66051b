"""
dollar_store.cli.simulate
=========================

Run a Dollar Store Kids scenario on a fresh in-process host and print the
resulting collateral figures.

Scenario (`run`): deploy the stack, enable minting, fund the reserve with the
full cap's collateral, mint once for each of N holders, then burn the first M
units. Any revert aborts the scenario with exit code 1.

Examples:
  dsk-sim run --holders 5 --burns 2
  dsk-sim run --max-units 3 --holders 4          # fourth mint exhausts the cap
  dsk-sim run --json
  dsk-sim config --config-file dsk.yaml
"""
from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from dollar_store import logging as dlog
from dollar_store.config import Config, from_env, from_file, load_config
from dollar_store.devnet import burn_for, deploy_local_stack, fund_reserve, mint_for, summary
from dollar_store.errors import ConfigError, DollarStoreError
from dollar_store.runtime import derive_address, to_hex
from dollar_store.version import runtime_banner

app = typer.Typer(
    name="dsk-sim",
    add_completion=False,
    no_args_is_help=True,
    help="Simulate Dollar Store Kids mint/burn scenarios on a local host.",
)


def _load(config_file: Optional[Path]) -> Config:
    try:
        return from_env(base=from_file(config_file)) if config_file else load_config()
    except (ConfigError, FileNotFoundError) as e:
        typer.echo(f"config error: {e}", err=True)
        raise typer.Exit(2)


def _render(console: Console, report: Dict[str, Any]) -> None:
    t = Table(title="Dollar Store Kids", box=box.SIMPLE)
    t.add_column("field", style="cyan")
    t.add_column("value", justify="right")
    for k, v in report["summary"].items():
        t.add_row(k, str(v))
    console.print(t)

    if report["units"]:
        u = Table(title="Units", box=box.SIMPLE)
        u.add_column("unit_id", justify="right")
        u.add_column("holder")
        u.add_column("status")
        for row in report["units"]:
            u.add_row(str(row["unit_id"]), row["holder"], row["status"])
        console.print(u)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version and exit"),
    log_level: str = typer.Option("WARNING", "--log-level", help="Log level"),
    log_format: str = typer.Option("text", "--log-format", help="json|text"),
) -> None:
    if version:
        typer.echo(runtime_banner())
        raise typer.Exit(0)
    dlog.setup_logging(level=log_level, fmt=log_format)


@app.command("run")
def run(
    holders: int = typer.Option(3, "--holders", "-n", min=0, help="Distinct accounts that mint once each"),
    burns: int = typer.Option(1, "--burns", "-b", min=0, help="How many of the minted units to burn"),
    max_units: Optional[int] = typer.Option(None, "--max-units", min=1, help="Override the supply cap"),
    config_file: Optional[Path] = typer.Option(None, "--config-file", help="JSON/YAML config file"),
    json_out: bool = typer.Option(False, "--json", help="Emit a JSON report"),
) -> None:
    """Deploy, enable minting, fund, mint for N holders and burn M units."""
    cfg = _load(config_file)
    if max_units is not None:
        cfg = replace(cfg, collection=replace(cfg.collection, max_units=max_units))
    if burns > holders:
        typer.echo("--burns cannot exceed --holders", err=True)
        raise typer.Exit(2)

    units: List[Dict[str, Any]] = []
    with dlog.trace_scope():
        dlog.bind(component="simulate")
        stack = deploy_local_stack(cfg)
        try:
            stack.host.transact(stack.governor, stack.controller, "toggle_mint")
            fund_reserve(stack)
            for i in range(holders):
                account = derive_address(f"holder-{i}")
                unit_id = mint_for(stack, account)
                units.append({"unit_id": unit_id, "holder": to_hex(account), "status": "held"})
            for row in units[:burns]:
                burn_for(stack, bytes.fromhex(row["holder"][2:]), row["unit_id"])
                row["status"] = "burnt"
        except DollarStoreError as e:
            typer.echo(f"scenario failed: {e.reason} ({e.code})", err=True)
            raise typer.Exit(1)

    report = {"addresses": stack.addresses(), "summary": summary(stack), "units": units}
    if json_out:
        typer.echo(json.dumps(report, indent=2, sort_keys=True))
    else:
        _render(Console(), report)


@app.command("config")
def show_config(
    config_file: Optional[Path] = typer.Option(None, "--config-file", help="JSON/YAML config file"),
) -> None:
    """Print the effective configuration as JSON."""
    cfg = _load(config_file)
    out = cfg.to_dict()
    out["max_collateral"] = cfg.max_collateral
    typer.echo(json.dumps(out, indent=2, sort_keys=True))


if __name__ == "__main__":  # pragma: no cover
    app()
