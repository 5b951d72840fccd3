from __future__ import annotations

import dataclasses
import importlib
import json
from typing import Any, Optional

import typer

from ..core.binder import bind_config, describe_bindings
from ..core.errors import BindError

app = typer.Typer(help="envbind CLI")


def _load_target(target: str) -> Any:
    """Import ``module:Class`` and return a fresh instance of the dataclass."""
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise typer.BadParameter("target must look like module:ClassName", param_hint="TARGET")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise typer.BadParameter(f"cannot import {module_name}: {e}", param_hint="TARGET") from e
    cls = getattr(module, attr, None)
    if not isinstance(cls, type) or not dataclasses.is_dataclass(cls):
        raise typer.BadParameter(f"{target} is not a dataclass", param_hint="TARGET")
    return cls()


@app.command()
def describe(
    target: str = typer.Argument(..., help="module:ClassName of the config dataclass"),
    header: Optional[str] = typer.Option(None, "--header"),
):
    cfg = _load_target(target)
    try:
        text = describe_bindings(cfg, header)
    except BindError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(text)


@app.command()
def read(
    target: str = typer.Argument(..., help="module:ClassName of the config dataclass"),
    config: Optional[str] = typer.Option(None, "--config", help="YAML, JSON, TOML or .env file"),
    prefix: str = typer.Option("", "--prefix", help="Application prefix for environment keys"),
):
    cfg = _load_target(target)
    try:
        # flags belong to this CLI, not to the bound record
        bind_config(config, prefix, cfg, argv=[])
    except BindError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps(dataclasses.asdict(cfg), indent=2, default=str))


if __name__ == "__main__":
    app()
