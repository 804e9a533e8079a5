"""
Compiled field schemas for configuration classes.

A configuration class is turned once into an ordered tuple of bindings:

- ``LeafBinding``: a primitive field bound to one environment key
- ``GroupBinding``: a nested dataclass / pydantic model to recurse into
- ``Skip``: a field the populator leaves alone, with the reason

The populator walks these tuples instead of inspecting types while it
assigns values, so every skip is explicit and can be asserted on.
"""

import dataclasses
import logging
import sys
import types
from enum import Enum
from functools import lru_cache
from typing import (
    Annotated, Any, Iterator, Optional, Sequence, Tuple, Union,
    get_args, get_origin, get_type_hints,
)

from pydantic import BaseModel

from envstruct.errors import InvalidTargetError
from envstruct.widths import FloatWidth, IntWidth

logger = logging.getLogger(__name__)

DEFAULT_TAG = "env"


class FieldKind(str, Enum):
    """Primitive categories the resolver can produce."""
    STRING = "string"
    INT = "int"
    UINT = "uint"
    BOOL = "bool"
    FLOAT = "float"


class SkipReason(str, Enum):
    """Why a field is not populated."""
    UNANNOTATED = "unannotated"
    UNSUPPORTED_TYPE = "unsupported_type"
    UNRESOLVED_TYPE = "unresolved_type"


@dataclasses.dataclass(frozen=True)
class LeafBinding:
    """Primitive field bound to an environment key."""
    name: str
    key: str
    kind: FieldKind
    bits: int = 64
    settable: bool = True

    @property
    def type_name(self) -> str:
        if self.kind in (FieldKind.STRING, FieldKind.BOOL):
            return self.kind.value
        return f"{self.kind.value}{self.bits}"


@dataclasses.dataclass(frozen=True)
class GroupBinding:
    """Nested structure field; prefix is the group's own annotation, if any."""
    name: str
    prefix: Optional[str]
    struct_type: type


@dataclasses.dataclass(frozen=True)
class Skip:
    """Field left untouched by the populator."""
    name: str
    reason: SkipReason
    key: Optional[str] = None


Binding = Union[LeafBinding, GroupBinding, Skip]


@dataclasses.dataclass(frozen=True)
class Schema:
    """Ordered bindings for one configuration class."""
    struct_type: type
    entries: Tuple[Binding, ...]

    def leaves(self) -> Tuple[LeafBinding, ...]:
        return tuple(e for e in self.entries if isinstance(e, LeafBinding))

    def groups(self) -> Tuple[GroupBinding, ...]:
        return tuple(e for e in self.entries if isinstance(e, GroupBinding))

    def skipped(self) -> Tuple[Skip, ...]:
        return tuple(e for e in self.entries if isinstance(e, Skip))


@dataclasses.dataclass(frozen=True)
class _RawField:
    name: str
    annotation: Any
    key: Optional[str]
    metadata: Tuple[Any, ...]
    settable: bool


def is_struct_type(tp: Any) -> bool:
    """True for dataclass classes and pydantic model classes."""
    if not isinstance(tp, type):
        return False
    return dataclasses.is_dataclass(tp) or issubclass(tp, BaseModel)


def is_struct_instance(obj: Any) -> bool:
    """True for dataclass instances and pydantic model instances."""
    return not isinstance(obj, type) and is_struct_type(type(obj))


def join_key(prefix: str, key: str, separator: str = "_") -> str:
    """Namespace key under prefix; an empty prefix leaves key unchanged."""
    if not prefix:
        return key
    return f"{prefix}{separator}{key}"


def _unwrap(annotation: Any, metadata: Sequence[Any]) -> Tuple[Any, Tuple[Any, ...]]:
    """Strip Annotated and Optional wrappers, collecting Annotated metadata."""
    extras = list(metadata)
    while True:
        origin = get_origin(annotation)
        if origin is Annotated:
            extras.extend(annotation.__metadata__)
            annotation = get_args(annotation)[0]
            continue
        if origin is Union or origin is getattr(types, 'UnionType', None):
            args = [a for a in get_args(annotation) if a is not type(None)]
            if len(args) == 1:
                annotation = args[0]
                continue
        return annotation, tuple(extras)


def _leaf_kind(annotation: Any, extras: Sequence[Any]) -> Optional[Tuple[FieldKind, int]]:
    int_width = next((m for m in extras if isinstance(m, IntWidth)), None)
    float_width = next((m for m in extras if isinstance(m, FloatWidth)), None)

    # bool before int: bool is an int subclass
    if annotation is bool:
        return FieldKind.BOOL, 1
    if annotation is str:
        return FieldKind.STRING, 0
    if annotation is int:
        if int_width is None:
            return FieldKind.INT, 64
        kind = FieldKind.INT if int_width.signed else FieldKind.UINT
        return kind, int_width.bits
    if annotation is float:
        return FieldKind.FLOAT, float_width.bits if float_width else 64
    return None


def _eval_annotation(cls: type, f: dataclasses.Field) -> Any:
    """Evaluate one string annotation in its module; unresolvable names stay strings."""
    if not isinstance(f.type, str):
        return f.type

    module = sys.modules.get(cls.__module__)
    namespace = dict(vars(module)) if module else {}
    namespace.update(vars(cls))
    try:
        return eval(f.type, namespace)
    except (NameError, AttributeError, SyntaxError, TypeError) as e:
        logger.debug(f"Could not resolve {cls.__name__}.{f.name}: {e}")

    # a local nested config is still recognisable from its factory
    if is_struct_type(f.default_factory):
        return f.default_factory
    return f.type


def _dataclass_fields(cls: type, tag: str) -> Iterator[_RawField]:
    try:
        hints = get_type_hints(cls, include_extras=True)
    except (NameError, TypeError) as e:
        logger.debug(f"Resolving {cls.__name__} annotations per field: {e}")
        hints = {f.name: _eval_annotation(cls, f) for f in dataclasses.fields(cls)}
    frozen = cls.__dataclass_params__.frozen

    for f in dataclasses.fields(cls):
        yield _RawField(
            name=f.name,
            annotation=hints.get(f.name, f.type),
            key=f.metadata.get(tag) or None,
            metadata=(),
            settable=not frozen and not f.name.startswith('_'),
        )


def _model_fields(cls: type, tag: str) -> Iterator[_RawField]:
    frozen = bool(cls.model_config.get('frozen', False))

    for name, info in cls.model_fields.items():
        extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
        yield _RawField(
            name=name,
            annotation=info.annotation,
            key=extra.get(tag) or None,
            metadata=tuple(info.metadata),
            settable=not frozen and not info.frozen and not name.startswith('_'),
        )


def _compile_field(raw: _RawField) -> Binding:
    annotation, extras = _unwrap(raw.annotation, raw.metadata)

    if is_struct_type(annotation):
        return GroupBinding(name=raw.name, prefix=raw.key, struct_type=annotation)

    if raw.key is None:
        return Skip(name=raw.name, reason=SkipReason.UNANNOTATED)

    if isinstance(annotation, str):
        return Skip(name=raw.name, reason=SkipReason.UNRESOLVED_TYPE, key=raw.key)

    kind = _leaf_kind(annotation, extras)
    if kind is None:
        return Skip(name=raw.name, reason=SkipReason.UNSUPPORTED_TYPE, key=raw.key)

    return LeafBinding(
        name=raw.name,
        key=raw.key,
        kind=kind[0],
        bits=kind[1],
        settable=raw.settable,
    )


@lru_cache(maxsize=None)
def compile_schema(struct_type: type, tag: str = DEFAULT_TAG) -> Schema:
    """
    Build the ordered binding list for a dataclass or pydantic model class.

    Fields keep their declaration order. The result is cached per
    (class, tag) and is immutable.

    Raises:
        InvalidTargetError: struct_type is not a dataclass or pydantic model class
    """
    if not is_struct_type(struct_type):
        raise InvalidTargetError(struct_type)

    if issubclass(struct_type, BaseModel):
        raw_fields = _model_fields(struct_type, tag)
    else:
        raw_fields = _dataclass_fields(struct_type, tag)

    entries = tuple(_compile_field(raw) for raw in raw_fields)
    logger.debug(f"Compiled schema for {struct_type.__name__}: {len(entries)} fields")
    return Schema(struct_type=struct_type, entries=entries)


def walk(
    struct_type: type,
    tag: str = DEFAULT_TAG,
    join_keys: bool = False,
    separator: str = "_",
) -> Iterator[Tuple[str, Optional[str], Union[LeafBinding, Skip]]]:
    """
    Flatten a class's schema through its declared groups.

    Yields ``(field_path, effective_key, binding)`` for every leaf and skip,
    where field_path is dotted (``database.dsn``) and effective_key is the
    environment key the populator would read with the same options.
    """
    yield from _walk(struct_type, tag, join_keys, separator, prefix="", path="")


def _walk(struct_type, tag, join_keys, separator, prefix, path):
    for entry in compile_schema(struct_type, tag).entries:
        field_path = f"{path}.{entry.name}" if path else entry.name
        if isinstance(entry, GroupBinding):
            child_prefix = prefix
            if join_keys and entry.prefix:
                child_prefix = join_key(prefix, entry.prefix, separator)
            yield from _walk(entry.struct_type, tag, join_keys, separator, child_prefix, field_path)
        elif entry.key is not None:
            key = join_key(prefix, entry.key, separator) if join_keys else entry.key
            yield field_path, key, entry
        else:
            yield field_path, None, entry


__all__ = [
    'DEFAULT_TAG',
    'FieldKind',
    'SkipReason',
    'LeafBinding',
    'GroupBinding',
    'Skip',
    'Binding',
    'Schema',
    'is_struct_type',
    'is_struct_instance',
    'join_key',
    'compile_schema',
    'walk',
]
