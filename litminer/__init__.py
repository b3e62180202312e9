from .errors import (
    InvalidConfiguration,
    InvalidInput,
    InvariantViolation,
    LitminerError,
    ZeroTotal,
)

__version__ = "0.1.0"

__all__ = [
    "InvalidConfiguration",
    "InvalidInput",
    "InvariantViolation",
    "LitminerError",
    "ZeroTotal",
]
