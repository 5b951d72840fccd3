"""Discovery of bindable fields on a dataclass record."""

from __future__ import annotations

import dataclasses
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, List, Optional, Tuple

from .coerce import parse_value
from .errors import SchemaError
from .fields import (
    DEFAULT_SEPARATOR,
    TAG_ENV,
    TAG_ENV_DEFAULT,
    TAG_ENV_DESCRIPTION,
    TAG_ENV_LAYOUT,
    TAG_ENV_PREFIX,
    TAG_ENV_SEPARATOR,
    is_required,
)
from .types import Kind, TypeShape, classify, is_record_type, is_zero, resolve_hints

logger = logging.getLogger(__name__)


@dataclass
class FieldDescriptor:
    """Binding metadata for one leaf field of a record.

    Attributes:
        env_list: Candidate keys, already prefixed; first match wins.
        field_name: Attribute name on the owning record.
        path: Dotted path from the root record, used in messages.
        owner: The record instance holding the field.
        shape: Resolved target type.
        default: Default literal applied by the finalizer.
        layout: ``strptime`` layout for timestamps.
        separator: List and map separator.
        description: Human-readable description.
        required: Whether the field must end up non-empty.
    """

    env_list: List[str]
    field_name: str
    path: str
    owner: Any = field(repr=False)
    shape: TypeShape
    default: Optional[str] = None
    layout: Optional[str] = None
    separator: str = DEFAULT_SEPARATOR
    description: str = ""
    required: bool = False

    @property
    def value(self) -> Any:
        return getattr(self.owner, self.field_name)

    def is_zero(self) -> bool:
        return is_zero(self.value)

    def set_raw(self, raw: str) -> None:
        """Convert ``raw`` and store it on the owning record."""
        value = parse_value(self.shape, raw, self.separator, self.layout, current=self.value)
        setattr(self.owner, self.field_name, value)


def _is_settable(record: Any, name: str) -> bool:
    if name.startswith("_"):
        return False
    return not type(record).__dataclass_params__.frozen


def _takes_layout(shape: TypeShape) -> bool:
    while shape.kind in (Kind.SEQUENCE, Kind.MAPPING) and shape.elem is not None:
        shape = shape.elem
    return shape.kind is Kind.TIMESTAMP


def read_struct_metadata(cfg: Any) -> List[FieldDescriptor]:
    """Collect descriptors for every bindable field of ``cfg``.

    Nested dataclass fields are not described themselves; their own fields
    are collected after the current level, breadth first, with the group's
    ``env-prefix`` appended to the accumulated prefix. ``datetime`` fields
    are leaves. Groups left as ``None`` are skipped, as are private fields
    and fields of frozen dataclasses.

    Args:
        cfg: Root dataclass instance.

    Returns:
        Descriptors in discovery order.

    Raises:
        SchemaError: If the root is not a dataclass instance, or annotations
            cannot be resolved.
    """
    queue: Deque[Tuple[Any, str, str]] = deque([(cfg, "", "")])
    metas: List[FieldDescriptor] = []

    while queue:
        record, prefix, path = queue.popleft()
        if not dataclasses.is_dataclass(record) or isinstance(record, type):
            where = path or "root"
            raise SchemaError(f"wrong type {type(record).__name__} at {where}, expected a dataclass instance")

        hints = resolve_hints(record)
        for f in dataclasses.fields(record):
            tp = hints.get(f.name, f.type)
            full_path = f"{path}.{f.name}" if path else f.name

            if is_record_type(tp):
                if f.name.startswith("_"):
                    continue
                nested = getattr(record, f.name)
                if nested is None:
                    logger.debug("group %s is None, its fields are not bound", full_path)
                    continue
                sub_prefix = f.metadata.get(TAG_ENV_PREFIX, "")
                queue.append((nested, prefix + sub_prefix, full_path))
                continue

            if not _is_settable(record, f.name):
                continue

            env_list: List[str] = []
            envs = f.metadata.get(TAG_ENV)
            if envs:
                env_list = envs.split(DEFAULT_SEPARATOR) if isinstance(envs, str) else list(envs)
                if prefix:
                    env_list = [prefix + env for env in env_list]

            shape = classify(tp)
            metas.append(
                FieldDescriptor(
                    env_list=env_list,
                    field_name=f.name,
                    path=full_path,
                    owner=record,
                    shape=shape,
                    default=f.metadata.get(TAG_ENV_DEFAULT),
                    layout=f.metadata.get(TAG_ENV_LAYOUT) if _takes_layout(shape) else None,
                    separator=f.metadata.get(TAG_ENV_SEPARATOR, DEFAULT_SEPARATOR),
                    description=f.metadata.get(TAG_ENV_DESCRIPTION, ""),
                    required=is_required(f.metadata),
                )
            )

    logger.debug("collected %d field descriptors from %s", len(metas), type(cfg).__name__)
    return metas
