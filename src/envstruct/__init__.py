"""
envstruct - populate dataclasses and pydantic models from environment variables.

Usage:
    from dataclasses import dataclass
    from envstruct import PresencePolicy, env_field, populate

    @dataclass
    class Config:
        port: int = env_field("PORT", default=8000)
        host: str = env_field("HOST", default="localhost")

    config = populate(Config())
    config = populate(Config(), PresencePolicy.STRICT)
"""

__version__ = "0.1.0"

from envstruct.errors import (
    EnvStructError,
    InvalidTargetError,
    MissingVariableError,
    UnresolvedTypeError,
    UnsettableFieldError,
)
from envstruct.fields import EnvField, EnvGroup, env_field, env_group
from envstruct.populator import Populator, PresencePolicy, populate
from envstruct.resolver import (
    parse_bool,
    parse_float,
    parse_int,
    parse_uint,
    resolve_bool,
    resolve_float64,
    resolve_int64,
    resolve_string,
    resolve_uint64,
)
from envstruct.schema import DEFAULT_TAG, compile_schema, walk
from envstruct.widths import (
    Float32, Float64,
    Int8, Int16, Int32, Int64,
    UInt8, UInt16, UInt32, UInt64,
)

__all__ = [
    'EnvStructError',
    'InvalidTargetError',
    'MissingVariableError',
    'UnresolvedTypeError',
    'UnsettableFieldError',
    'EnvField',
    'EnvGroup',
    'env_field',
    'env_group',
    'Populator',
    'PresencePolicy',
    'populate',
    'parse_bool',
    'parse_float',
    'parse_int',
    'parse_uint',
    'resolve_bool',
    'resolve_float64',
    'resolve_int64',
    'resolve_string',
    'resolve_uint64',
    'DEFAULT_TAG',
    'compile_schema',
    'walk',
    'Float32', 'Float64',
    'Int8', 'Int16', 'Int32', 'Int64',
    'UInt8', 'UInt16', 'UInt32', 'UInt64',
]
