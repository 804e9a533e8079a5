"""
Struct populator: fill a configuration instance from the environment.

The walk follows the compiled schema of the target's class in field
declaration order. Leaves are resolved through ``envstruct.resolver`` and
assigned in place; groups are recursed into using the nested instance
already held by the parent.

Presence policy decides what an unresolved leaf means:

- PERMISSIVE: keep the field's current value and carry on
- STRICT: raise MissingVariableError and visit nothing further

Fields assigned before a strict failure keep their new values.

Group prefixes are inert unless ``join_keys`` is enabled, in which case a
leaf under a group tagged ``DB`` reads ``DB_<key>`` (prefixes accumulate
through nested groups).
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, TypeVar

from envstruct.errors import (
    InvalidTargetError,
    MissingVariableError,
    UnresolvedTypeError,
    UnsettableFieldError,
)
from envstruct.resolver import (
    fits_int,
    fits_uint,
    narrow_float32,
    resolve_bool,
    resolve_float64,
    resolve_int64,
    resolve_string,
    resolve_uint64,
)
from envstruct.schema import (
    DEFAULT_TAG,
    FieldKind,
    GroupBinding,
    LeafBinding,
    Skip,
    SkipReason,
    compile_schema,
    is_struct_instance,
    join_key,
)

logger = logging.getLogger(__name__)

T = TypeVar('T')

_RESOLVERS: Dict[FieldKind, Callable[[str, Optional[Mapping[str, str]]], Tuple[Any, bool]]] = {
    FieldKind.STRING: resolve_string,
    FieldKind.INT: resolve_int64,
    FieldKind.UINT: resolve_uint64,
    FieldKind.BOOL: resolve_bool,
    FieldKind.FLOAT: resolve_float64,
}


class PresencePolicy(str, Enum):
    """How unset or unparseable variables are treated."""
    PERMISSIVE = "permissive"
    STRICT = "strict"


class Populator:
    """
    Populates dataclass and pydantic model instances from environment variables.

    Args:
        policy: PERMISSIVE keeps defaults for missing variables, STRICT raises
        join_keys: namespace leaf keys under their group prefixes
        separator: string placed between prefix and key when joining
        tag: metadata key holding the environment variable name
        environ: mapping to read from; os.environ (looked up per read) if None
    """

    def __init__(
        self,
        policy: PresencePolicy = PresencePolicy.PERMISSIVE,
        join_keys: bool = False,
        separator: str = "_",
        tag: str = DEFAULT_TAG,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.policy = PresencePolicy(policy)
        self.join_keys = join_keys
        self.separator = separator
        self.tag = tag
        self.environ = environ

    @property
    def strict(self) -> bool:
        return self.policy is PresencePolicy.STRICT

    def populate(self, target: T) -> T:
        """
        Populate target in place and return it.

        Raises:
            InvalidTargetError: target is not a dataclass or pydantic model instance
            MissingVariableError: STRICT only, a leaf variable is unset or malformed
            UnsettableFieldError: STRICT only, an annotated leaf cannot be written
            UnresolvedTypeError: STRICT only, an annotated leaf's type cannot be resolved
        """
        if not is_struct_instance(target):
            raise InvalidTargetError(target)

        self._populate(target, prefix="", path="")
        return target

    def resolve(self, binding: LeafBinding, key: str) -> Tuple[Any, bool]:
        """Resolve one leaf and narrow it to the binding's declared width."""
        value, present = _RESOLVERS[binding.kind](key, self.environ)
        if not present:
            return value, False

        if binding.kind is FieldKind.INT and binding.bits < 64:
            if not fits_int(value, binding.bits):
                return 0, False
        elif binding.kind is FieldKind.UINT and binding.bits < 64:
            if not fits_uint(value, binding.bits):
                return 0, False
        elif binding.kind is FieldKind.FLOAT and binding.bits == 32:
            return narrow_float32(value)

        return value, True

    def _populate(self, target: Any, prefix: str, path: str):
        schema = compile_schema(type(target), self.tag)

        for entry in schema.entries:
            field_path = f"{path}.{entry.name}" if path else entry.name

            if isinstance(entry, GroupBinding):
                nested = getattr(target, entry.name)
                if not is_struct_instance(nested):
                    logger.debug(f"Skipping group {field_path}: value is {type(nested).__name__}")
                    continue
                child_prefix = prefix
                if self.join_keys and entry.prefix:
                    child_prefix = join_key(prefix, entry.prefix, self.separator)
                self._populate(nested, child_prefix, field_path)

            elif isinstance(entry, Skip):
                self._skip(entry, field_path)

            else:
                key = join_key(prefix, entry.key, self.separator) if self.join_keys else entry.key
                self._set_leaf(target, entry, key, field_path)

    def _skip(self, entry: Skip, field_path: str):
        if entry.reason is SkipReason.UNRESOLVED_TYPE:
            if self.strict:
                raise UnresolvedTypeError(entry.key, field_path)
            logger.warning(f"Skipping {field_path}: cannot resolve its type annotation")
            return
        logger.debug(f"Skipping {field_path}: {entry.reason.value}")

    def _set_leaf(self, target: Any, binding: LeafBinding, key: str, field_path: str):
        if not binding.settable:
            if self.strict:
                raise UnsettableFieldError(key, field_path)
            logger.debug(f"Skipping {field_path}: field is not settable")
            return

        value, present = self.resolve(binding, key)
        if not present:
            if self.strict:
                logger.info(f"Environment variable {key} missing or invalid for {field_path}")
                raise MissingVariableError(key, field_path)
            logger.debug(f"{key} not set, keeping default for {field_path}")
            return

        setattr(target, binding.name, value)
        logger.debug(f"Set {field_path} from {key}")


def populate(
    target: T,
    policy: PresencePolicy = PresencePolicy.PERMISSIVE,
    *,
    join_keys: bool = False,
    separator: str = "_",
    tag: str = DEFAULT_TAG,
    environ: Optional[Mapping[str, str]] = None,
) -> T:
    """Populate target from the environment. See Populator for the options."""
    populator = Populator(
        policy=policy,
        join_keys=join_keys,
        separator=separator,
        tag=tag,
        environ=environ,
    )
    return populator.populate(target)


__all__ = ['PresencePolicy', 'Populator', 'populate']
