"""Command-line flag source."""

from __future__ import annotations

import logging
import sys
from typing import List, Optional, Sequence, Set, Tuple

import click

from ..core.errors import FlagError
from ..core.metadata import FieldDescriptor

logger = logging.getLogger(__name__)


def to_flag_name(name: str, aliases: Sequence[str]) -> str:
    """Name a flag after the first candidate key, else the field name.

    ``DB_PORT`` becomes ``db-port``; a field name is only lower-cased.
    """
    if aliases:
        return aliases[0].lower().replace("_", "-")
    return name.lower()


def _build_command(metas: List[FieldDescriptor]) -> Tuple[click.Command, List[Tuple[str, FieldDescriptor]]]:
    params: List[click.Parameter] = []
    bound: List[Tuple[str, FieldDescriptor]] = []
    names: Set[str] = set()

    for idx, meta in enumerate(metas):
        flag_name = to_flag_name(meta.field_name, meta.env_list)
        if flag_name in names:
            logger.debug("flag %s is already taken, %s is not bound from the command line", flag_name, meta.path)
            continue
        names.add(flag_name)

        param_name = f"flag_{idx}"
        params.append(
            click.Option(
                [f"--{flag_name}", f"-{flag_name}", param_name],
                default=None,
                help=meta.description or None,
            )
        )
        bound.append((param_name, meta))

    command = click.Command(
        name=None,
        params=params,
        context_settings={
            "ignore_unknown_options": True,
            "allow_extra_args": True,
            "help_option_names": [],
        },
    )
    return command, bound


def read_flag_vars(metas: List[FieldDescriptor], argv: Optional[Sequence[str]] = None) -> None:
    """Bind command-line flags onto the described fields.

    One ``--name`` (or ``-name``) flag is declared per field. When two
    fields map to the same flag name only the first is declared. Unknown
    arguments are ignored and empty values count as not provided.

    Args:
        metas: Field descriptors.
        argv: Arguments to parse. Defaults to ``sys.argv[1:]``.

    Raises:
        FlagError: If the arguments cannot be parsed.
    """
    args = list(sys.argv[1:] if argv is None else argv)
    command, bound = _build_command(metas)
    try:
        ctx = command.make_context("envbind", args)
    except click.ClickException as e:
        raise FlagError(e.format_message()) from e

    for param_name, meta in bound:
        value = ctx.params.get(param_name)
        if not value:
            continue
        logger.debug("binding %s from command-line flag", meta.path)
        meta.set_raw(value)
