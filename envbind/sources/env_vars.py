"""Environment variable source."""

from __future__ import annotations

import logging
import os
from typing import List, Mapping, Optional

from ..core.metadata import FieldDescriptor

logger = logging.getLogger(__name__)


def to_prefix(name: str) -> str:
    """Turn an application name into an environment key prefix.

    ``"app"`` becomes ``"APP_"``; an empty name gives no prefix.
    """
    if not name:
        return ""
    if not name.endswith("_"):
        name += "_"
    return name.upper()


def read_env_vars(
    metas: List[FieldDescriptor],
    prefix: str,
    environ: Optional[Mapping[str, str]] = None,
) -> None:
    """Bind environment variables onto the described fields.

    For each field the candidate keys are tried in order with ``prefix``
    prepended; the first one present wins. Absent keys are not an error.

    Args:
        metas: Field descriptors.
        prefix: Prefix prepended to every key.
        environ: Mapping to read from. Defaults to ``os.environ``.
    """
    env = os.environ if environ is None else environ
    for meta in metas:
        for key in meta.env_list:
            name = prefix + key
            if name in env:
                logger.debug("binding %s from environment variable %s", meta.path, name)
                meta.set_raw(env[name])
                break
