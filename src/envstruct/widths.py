"""
Width-annotated numeric aliases for configuration fields.

Python integers and floats have no fixed width, so narrow fields are
declared with ``typing.Annotated``:

    @dataclass
    class Config:
        workers: UInt8 = env_field("WORKERS", default=4)
        ratio: Float32 = env_field("RATIO", default=0.5)

Values outside the declared range are treated as unresolved.
"""

from dataclasses import dataclass
from typing import Annotated


@dataclass(frozen=True)
class IntWidth:
    """Bit width and signedness of an integer field."""
    bits: int = 64
    signed: bool = True


@dataclass(frozen=True)
class FloatWidth:
    """Bit width of a floating point field (32 or 64)."""
    bits: int = 64


Int8 = Annotated[int, IntWidth(8, True)]
Int16 = Annotated[int, IntWidth(16, True)]
Int32 = Annotated[int, IntWidth(32, True)]
Int64 = Annotated[int, IntWidth(64, True)]

UInt8 = Annotated[int, IntWidth(8, False)]
UInt16 = Annotated[int, IntWidth(16, False)]
UInt32 = Annotated[int, IntWidth(32, False)]
UInt64 = Annotated[int, IntWidth(64, False)]

Float32 = Annotated[float, FloatWidth(32)]
Float64 = Annotated[float, FloatWidth(64)]


__all__ = [
    'IntWidth',
    'FloatWidth',
    'Int8', 'Int16', 'Int32', 'Int64',
    'UInt8', 'UInt16', 'UInt32', 'UInt64',
    'Float32', 'Float64',
]
