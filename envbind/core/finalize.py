from __future__ import annotations

import logging
from typing import List

from .errors import RequiredValueMissing
from .metadata import FieldDescriptor

logger = logging.getLogger(__name__)


def finalize(metas: List[FieldDescriptor]) -> None:
    """Enforce required fields and apply defaults to fields left empty.

    "Empty" means the field still holds its zero value: a field explicitly
    set to ``0``, ``""`` or ``False`` is indistinguishable from one never set.
    """
    for meta in metas:
        if not meta.is_zero():
            continue

        if meta.required and meta.default is None:
            raise RequiredValueMissing(meta.path)

        if meta.default is not None:
            logger.debug("applying default %r to %s", meta.default, meta.path)
            meta.set_raw(meta.default)
