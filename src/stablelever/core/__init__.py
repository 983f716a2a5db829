"""
Stablelever Core
================

Integer-domain fixed-point primitives, exceptions and interpolation used by
every pricing module. Decimal helpers are provided *only* for I/O formatting.
"""

# NOTE:
#   Values are `bits * 10^exponent` with checked arithmetic. Every monetary
#   operation picks floor or ceil explicitly at the call site.

from .constants import (
    U64_MAX,
    I64_MIN,
    I64_MAX,
    U128_MAX,
    Z0,
    N2,
    N3,
    N4,
    N5,
    N6,
    N7,
    N8,
    N9,
)

from .fixed import UFix64, IFix64, UFix128, eq_tolerance

from .interp import Point, FixInterp

from .fmt import (
    DEFAULT_DECIMAL_PRECISION,
    to_decimal,
    fmt_dec,
    fmt_fixed,
    from_decimal_floor,
    from_decimal_ceil,
)

from .exc import (
    EngineError,
    ArithmeticFault,
    OracleValidationError,
    DomainError,
    StalenessError,
    reraise_as,
)

__all__ = [
    # constants
    "U64_MAX",
    "I64_MIN",
    "I64_MAX",
    "U128_MAX",
    "Z0",
    "N2",
    "N3",
    "N4",
    "N5",
    "N6",
    "N7",
    "N8",
    "N9",
    # fixed point
    "UFix64",
    "IFix64",
    "UFix128",
    "eq_tolerance",
    # interpolation
    "Point",
    "FixInterp",
    # fmt
    "DEFAULT_DECIMAL_PRECISION",
    "to_decimal",
    "fmt_dec",
    "fmt_fixed",
    "from_decimal_floor",
    "from_decimal_ceil",
    # exceptions
    "EngineError",
    "ArithmeticFault",
    "OracleValidationError",
    "DomainError",
    "StalenessError",
    "reraise_as",
]
