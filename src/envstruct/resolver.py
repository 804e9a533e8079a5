"""
Primitive resolver: read one environment variable and convert it.

Every resolver returns a ``(value, present)`` tuple. ``present`` is False
when the variable is unset *or* when its value does not parse as the
target type; the two cases are deliberately indistinguishable here.
Callers that need to tell them apart should check ``key in os.environ``
first.

Parsing is strict and locale-free: no surrounding whitespace, no digit
separators. Integers are base 10 only; floats may also be hexadecimal with
a binary exponent.
"""

import math
import os
import re
import struct
from typing import Mapping, Optional, Tuple


INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1
UINT64_MAX = (1 << 64) - 1

TRUE_VALUES = frozenset({'1', 't', 'T', 'TRUE', 'true', 'True'})
FALSE_VALUES = frozenset({'0', 'f', 'F', 'FALSE', 'false', 'False'})

_INT_RE = re.compile(r'[+-]?[0-9]+')
_UINT_RE = re.compile(r'[0-9]+')
_FLOAT_RE = re.compile(r'[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?')
_HEX_FLOAT_RE = re.compile(r'[+-]?0[xX]([0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)[pP][+-]?[0-9]+')
_SPECIAL_FLOAT_RE = re.compile(r'[+-]?(inf|infinity|nan)', re.IGNORECASE)


def _lookup(key: str, environ: Optional[Mapping[str, str]]) -> Optional[str]:
    if environ is None:
        environ = os.environ
    return environ.get(key)


# String-level parsers. An empty string never parses.

def parse_int(value: str) -> Tuple[int, bool]:
    """Parse a signed base-10 integer that fits in 64 bits."""
    if not value or not _INT_RE.fullmatch(value):
        return 0, False
    i = int(value)
    if not fits_int(i, 64):
        return 0, False
    return i, True


def parse_uint(value: str) -> Tuple[int, bool]:
    """Parse an unsigned base-10 integer that fits in 64 bits."""
    if not value or not _UINT_RE.fullmatch(value):
        return 0, False
    u = int(value)
    if not fits_uint(u, 64):
        return 0, False
    return u, True


def parse_bool(value: str) -> Tuple[bool, bool]:
    """Parse one of the canonical boolean spellings (1/t/T/TRUE/true/True, 0/f/...)."""
    if value in TRUE_VALUES:
        return True, True
    if value in FALSE_VALUES:
        return False, True
    return False, False


def parse_float(value: str) -> Tuple[float, bool]:
    """
    Parse a decimal floating point literal into a double.

    Accepts ``inf``, ``infinity`` and ``nan`` in any case with an optional
    sign, and hexadecimal literals with a binary exponent (``0x1p-2``). A
    finite literal too large for a double fails rather than rounding to
    infinity.
    """
    if not value:
        return 0.0, False
    if _SPECIAL_FLOAT_RE.fullmatch(value):
        return float(value), True
    if _HEX_FLOAT_RE.fullmatch(value):
        try:
            return float.fromhex(value), True
        except OverflowError:
            return 0.0, False
    if not _FLOAT_RE.fullmatch(value):
        return 0.0, False
    f = float(value)
    if math.isinf(f):
        return 0.0, False
    return f, True


# Width checks applied when assigning to narrow fields.

def fits_int(value: int, bits: int) -> bool:
    """Check that value is representable as a signed integer of the given width."""
    limit = 1 << (bits - 1)
    return -limit <= value < limit


def fits_uint(value: int, bits: int) -> bool:
    """Check that value is representable as an unsigned integer of the given width."""
    return 0 <= value < (1 << bits)


def narrow_float32(value: float) -> Tuple[float, bool]:
    """Round a double to single precision. Finite values beyond float32 range fail."""
    try:
        return struct.unpack('<f', struct.pack('<f', value))[0], True
    except OverflowError:
        return 0.0, False


# Environment resolvers.

def resolve_string(key: str, environ: Optional[Mapping[str, str]] = None) -> Tuple[str, bool]:
    """Return the raw value of the variable named by key."""
    value = _lookup(key, environ)
    if value is None:
        return '', False
    return value, True


def resolve_int64(key: str, environ: Optional[Mapping[str, str]] = None) -> Tuple[int, bool]:
    """Return the variable as a signed 64-bit integer."""
    value = _lookup(key, environ)
    if value is None:
        return 0, False
    return parse_int(value)


def resolve_uint64(key: str, environ: Optional[Mapping[str, str]] = None) -> Tuple[int, bool]:
    """Return the variable as an unsigned 64-bit integer."""
    value = _lookup(key, environ)
    if value is None:
        return 0, False
    return parse_uint(value)


def resolve_bool(key: str, environ: Optional[Mapping[str, str]] = None) -> Tuple[bool, bool]:
    """Return the variable as a boolean."""
    value = _lookup(key, environ)
    if value is None:
        return False, False
    return parse_bool(value)


def resolve_float64(key: str, environ: Optional[Mapping[str, str]] = None) -> Tuple[float, bool]:
    """Return the variable as a double precision float."""
    value = _lookup(key, environ)
    if value is None:
        return 0.0, False
    return parse_float(value)


__all__ = [
    'parse_int',
    'parse_uint',
    'parse_bool',
    'parse_float',
    'fits_int',
    'fits_uint',
    'narrow_float32',
    'resolve_string',
    'resolve_int64',
    'resolve_uint64',
    'resolve_bool',
    'resolve_float64',
]
