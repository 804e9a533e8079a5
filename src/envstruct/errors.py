"""
Exceptions raised while populating configuration objects.
"""

from typing import Optional


class EnvStructError(Exception):
    """Base class for all envstruct errors."""


class InvalidTargetError(EnvStructError):
    """Target is not a mutable configuration instance (dataclass or pydantic model)."""

    def __init__(self, target):
        self.target = target
        if isinstance(target, type):
            what = f"class {target.__name__}"
        else:
            what = f"{type(target).__name__!r} value"
        super().__init__(
            f"cannot populate {what}: expected a dataclass or pydantic model instance"
        )


class MissingVariableError(EnvStructError):
    """Environment variable is unset or cannot be parsed for its field."""

    def __init__(self, key: str, field_path: Optional[str] = None):
        self.key = key
        self.field_path = field_path
        message = f"environment variable not found: {key}"
        if field_path:
            message += f" (field {field_path})"
        super().__init__(message)


class UnsettableFieldError(EnvStructError):
    """Annotated field exists but cannot be written (private or frozen)."""

    def __init__(self, key: str, field_path: Optional[str] = None):
        self.key = key
        self.field_path = field_path
        super().__init__(f"cannot set field {field_path or '?'} from {key}")


class UnresolvedTypeError(EnvStructError):
    """Annotated field's type hint cannot be evaluated (e.g. a forward reference)."""

    def __init__(self, key: str, field_path: Optional[str] = None):
        self.key = key
        self.field_path = field_path
        super().__init__(f"cannot resolve type of field {field_path or '?'} bound to {key}")


__all__ = [
    'EnvStructError',
    'InvalidTargetError',
    'MissingVariableError',
    'UnsettableFieldError',
    'UnresolvedTypeError',
]
