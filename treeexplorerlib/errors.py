"""Error types and input validation for TreeExplorerLib.

The engines distinguish two kinds of failure:

- Ordinary failures (invalid input, missing value, duplicate key) are not
  exceptional. They are returned to the caller as ``None``/``False`` and
  recorded in the operation log so a visualization can explain them.
- Programming errors (calling an abstract operation, building a tree from
  an impossible configuration) raise one of the exceptions below.

Validators never raise; they return a list of :class:`Violation` records.
"""

import math
from dataclasses import dataclass
from typing import Any, Optional


class TreeExplorerError(Exception):
    """Base class for all exceptions raised by TreeExplorerLib."""
    pass


class InvalidTreeConfigError(TreeExplorerError, ValueError):
    """Raised when a TreeConfig cannot be satisfied by an engine."""
    pass


class SentinelMutationError(TreeExplorerError, AttributeError):
    """Raised when code tries to write to the red-black nil sentinel."""
    pass


@dataclass(frozen=True)
class Violation:
    """A single structural invariant violation reported by a validator.

    Attributes:
        property: Human readable name of the violated property
        node: Id of the offending node, if one can be blamed
        detail: Optional extra context (values involved, counts, ...)
    """
    property: str
    node: Optional[Any] = None
    detail: Optional[str] = None

    def to_dict(self) -> dict:
        return {'property': self.property, 'node': self.node, 'detail': self.detail}


def coerce_numeric(value: Any, allow_strings: bool = True) -> Optional[float]:
    """Coerce user input into a numeric key.

    Integers and floats pass through unchanged (ints stay ints so that
    comparison strings read naturally). Strings are parsed when
    ``allow_strings`` is set. Booleans, NaN and anything else are rejected.

    Args:
        value: Raw value supplied by the caller
        allow_strings: Whether numeric strings such as ``"42"`` are accepted

    Returns:
        The numeric value, or None if the input is not a usable number
    """
    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return None
        return value

    if allow_strings and isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = int(text)
        except ValueError:
            try:
                number = float(text)
            except ValueError:
                return None
        if isinstance(number, float) and math.isnan(number):
            return None
        return number

    return None
