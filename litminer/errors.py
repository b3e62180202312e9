from typing import Any, Optional


class LitminerError(Exception):
    """Base class for all litminer errors."""


class InvalidConfiguration(LitminerError, ValueError):
    """Raised for a bad n-gram size, an uncompilable regex, or an unknown mode."""


class InvalidInput(LitminerError, ValueError):
    """Raised when input tables cannot be scored or parsed."""


class InvariantViolation(LitminerError, RuntimeError):
    """
    A logic bug surfaced by an internal consistency check.

    Never recovered. ``key`` holds the offending grouping key.
    """

    def __init__(self, message: str, key: Optional[Any] = None):
        super().__init__(f"{message} (key={key!r})" if key is not None else message)
        self.key = key


class ZeroTotal(InvalidInput, InvariantViolation):
    """A document has term counts but a non-positive total word count."""
