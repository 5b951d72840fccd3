"""Binding entry points: files, environment and flags onto a record."""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, TextIO, Union

import click

from ..sources.env_vars import read_env_vars, to_prefix
from ..sources.flags import read_flag_vars
from .finalize import finalize
from .metadata import read_struct_metadata
# File formats are imported lazily in bind_config

logger = logging.getLogger(__name__)

DEFAULT_HEADER = "Environment variables:"


def bind_env(
    cfg: Any,
    app_name: str = "",
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> None:
    """Bind environment variables onto ``cfg``, then apply defaults.

    Args:
        cfg: Dataclass instance to update in place.
        app_name: Application name; ``"app"`` makes every key start with ``APP_``.
        environ: Mapping to read from. Defaults to ``os.environ``.

    Raises:
        SchemaError: If ``cfg`` is not a dataclass instance.
        CoercionError: If a value cannot be converted.
        RequiredValueMissing: If a required field stays empty.
    """
    metas = read_struct_metadata(cfg)
    read_env_vars(metas, to_prefix(app_name), environ)
    finalize(metas)


def bind_config(
    path: Union[str, Path, None],
    app_name: str,
    cfg: Any,
    *,
    argv: Optional[Sequence[str]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> None:
    """Bind a config file, the environment and command-line flags onto ``cfg``.

    Sources are applied in that order, each overriding the previous one;
    defaults fill whatever is still empty at the end. Entries of a ``.env``
    file take precedence over the process environment.

    Args:
        path: Optional config file (``.yaml``, ``.yml``, ``.json``,
            ``.toml`` or ``.env``).
        app_name: Application name used as environment key prefix.
        cfg: Dataclass instance to update in place.
        argv: Command-line arguments. Defaults to ``sys.argv[1:]``.
        environ: Mapping to read from. Defaults to ``os.environ``.

    Raises:
        FileLoadError: If the config file cannot be loaded.
        FlagError: If the command line cannot be parsed.
        SchemaError: If ``cfg`` is not a dataclass instance.
        CoercionError: If a value cannot be converted.
        RequiredValueMissing: If a required field stays empty.
    """
    from ..sources.files import parse_file

    logger.debug("binding %s from file=%s app=%r", type(cfg).__name__, path, app_name)
    env: Mapping[str, str] = os.environ if environ is None else environ
    if path:
        extra = parse_file(path, cfg)
        if extra:
            merged: Dict[str, str] = dict(env)
            merged.update(extra)
            env = merged

    metas = read_struct_metadata(cfg)
    read_env_vars(metas, to_prefix(app_name), env)
    read_flag_vars(metas, argv)
    finalize(metas)


def describe_bindings(cfg: Any, header_text: Optional[str] = None) -> str:
    """Describe the environment variables ``cfg`` reads.

    Every candidate key gets an entry with its kind, the key it is an
    alternative to (for all but the first), the description and the
    default literal.

    Args:
        cfg: Dataclass instance.
        header_text: Heading line. Defaults to ``"Environment variables:"``.

    Returns:
        The description, or an empty string when no field is bindable.
    """
    metas = read_struct_metadata(cfg)
    header = DEFAULT_HEADER if header_text is None else header_text

    description = ""
    for meta in metas:
        if not meta.env_list:
            continue
        for idx, env in enumerate(meta.env_list):
            entry = f"\n  {env} {meta.shape.kind.value}"
            if idx > 0:
                entry += f" (alternative to {meta.env_list[0]})"
            entry += f"\n    \t{meta.description}"
            if meta.default is not None:
                entry += f" (default {json.dumps(meta.default, ensure_ascii=False)})"
            description += entry

    if description:
        return header + description
    return ""


def usage(
    cfg: Any,
    header_text: Optional[str] = None,
    *usage_funcs: Callable[[], None],
    output: Optional[TextIO] = None,
) -> Callable[[], None]:
    """Build a help printer for ``cfg``.

    The returned callable runs ``usage_funcs`` first, separates their
    output with a blank line, then prints :func:`describe_bindings`. The
    description is built on each call, so it reflects the record as it is
    then and schema errors surface when printing.

    Args:
        cfg: Dataclass instance.
        header_text: Heading line for the description.
        *usage_funcs: Other usage printers to run first.
        output: Stream to write to. Defaults to stderr.

    Returns:
        A zero-argument callable.
    """

    def print_usage() -> None:
        stream = sys.stderr if output is None else output
        for fn in usage_funcs:
            fn()
        text = describe_bindings(cfg, header_text)
        if usage_funcs:
            click.echo(file=stream)
        click.echo(text, file=stream)

    return print_usage
