"""
Helpers for declaring environment-bound fields.

Dataclasses:

    @dataclass
    class DatabaseConfig:
        dsn: str = env_field("DSN", default="")

    @dataclass
    class Config:
        port: int = env_field("PORT", default=8000)
        database: DatabaseConfig = env_group("DB", default_factory=DatabaseConfig)

Pydantic models:

    class Config(BaseModel):
        port: int = EnvField("PORT", default=8000)
        database: DatabaseConfig = EnvGroup("DB", default_factory=DatabaseConfig)
"""

import dataclasses
from typing import Any, Optional

from pydantic import Field
from pydantic_core import PydanticUndefined

from envstruct.schema import DEFAULT_TAG


def env_field(key: str, *, tag: str = DEFAULT_TAG, metadata: Optional[dict] = None, **kwargs: Any):
    """dataclasses.field() bound to environment variable ``key``."""
    merged = dict(metadata or {})
    merged[tag] = key
    return dataclasses.field(metadata=merged, **kwargs)


def env_group(prefix: Optional[str] = None, *, tag: str = DEFAULT_TAG,
              metadata: Optional[dict] = None, **kwargs: Any):
    """dataclasses.field() for a nested config, optionally tagged with a group prefix."""
    merged = dict(metadata or {})
    if prefix:
        merged[tag] = prefix
    return dataclasses.field(metadata=merged, **kwargs)


def _schema_extra(value: Optional[str], tag: str, extra: Any) -> dict:
    merged = dict(extra) if isinstance(extra, dict) else {}
    if value:
        merged[tag] = value
    return merged


def EnvField(key: str, default: Any = PydanticUndefined, *, tag: str = DEFAULT_TAG, **kwargs: Any) -> Any:
    """pydantic Field() bound to environment variable ``key``."""
    kwargs['json_schema_extra'] = _schema_extra(key, tag, kwargs.get('json_schema_extra'))
    return Field(default, **kwargs)


def EnvGroup(prefix: Optional[str] = None, default: Any = PydanticUndefined, *,
             tag: str = DEFAULT_TAG, **kwargs: Any) -> Any:
    """pydantic Field() for a nested model, optionally tagged with a group prefix."""
    kwargs['json_schema_extra'] = _schema_extra(prefix, tag, kwargs.get('json_schema_extra'))
    return Field(default, **kwargs)


__all__ = ['env_field', 'env_group', 'EnvField', 'EnvGroup']
