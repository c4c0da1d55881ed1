"""Single interval over an arbitrary totally ordered bound type.

Each side of an interval carries a boundary kind (open, closed or unbounded).
Only ``<`` and ``==`` are required of the bound type, so ints, floats,
fractions and datetimes all work.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

B = TypeVar("B")


class BoundKind(Enum):
    OPEN = "open"
    CLOSED = "closed"
    UNBOUNDED = "unbounded"


OPEN = BoundKind.OPEN
CLOSED = BoundKind.CLOSED
UNBOUNDED = BoundKind.UNBOUNDED


@dataclass(frozen=True)
class Interval(Generic[B]):
    """Interval with independent boundary kinds on each side.

    An unbounded side stores ``None`` as its bound. Empty intervals can be
    represented (e.g. ``(3, 3)``); use :meth:`is_empty` to detect them.
    """

    lower: Optional[B]
    upper: Optional[B]
    lower_kind: BoundKind = CLOSED
    upper_kind: BoundKind = CLOSED

    def __post_init__(self):
        if not isinstance(self.lower_kind, BoundKind):
            raise ValueError("lower_kind must be a BoundKind")
        if not isinstance(self.upper_kind, BoundKind):
            raise ValueError("upper_kind must be a BoundKind")
        if self.lower_kind is UNBOUNDED:
            if self.lower is not None:
                raise ValueError("unbounded lower side must not carry a bound")
        elif self.lower is None:
            raise ValueError("bounded lower side requires a bound")
        if self.upper_kind is UNBOUNDED:
            if self.upper is not None:
                raise ValueError("unbounded upper side must not carry a bound")
        elif self.upper is None:
            raise ValueError("bounded upper side requires a bound")

    # ------------------------------------------------------------------
    # constructors
    # ------------------------------------------------------------------

    @classmethod
    def closed(cls, lower: B, upper: B) -> Interval[B]:
        """``[lower, upper]``"""
        return cls(lower, upper, CLOSED, CLOSED)

    @classmethod
    def open(cls, lower: B, upper: B) -> Interval[B]:
        """``(lower, upper)``"""
        return cls(lower, upper, OPEN, OPEN)

    @classmethod
    def closed_open(cls, lower: B, upper: B) -> Interval[B]:
        """``[lower, upper)``"""
        return cls(lower, upper, CLOSED, OPEN)

    @classmethod
    def open_closed(cls, lower: B, upper: B) -> Interval[B]:
        """``(lower, upper]``"""
        return cls(lower, upper, OPEN, CLOSED)

    @classmethod
    def at_least(cls, lower: B) -> Interval[B]:
        return cls(lower, None, CLOSED, UNBOUNDED)

    @classmethod
    def greater_than(cls, lower: B) -> Interval[B]:
        return cls(lower, None, OPEN, UNBOUNDED)

    @classmethod
    def at_most(cls, upper: B) -> Interval[B]:
        return cls(None, upper, UNBOUNDED, CLOSED)

    @classmethod
    def less_than(cls, upper: B) -> Interval[B]:
        return cls(None, upper, UNBOUNDED, OPEN)

    @classmethod
    def unbounded(cls) -> Interval[Any]:
        return cls(None, None, UNBOUNDED, UNBOUNDED)

    @classmethod
    def singleton(cls, point: B) -> Interval[B]:
        return cls(point, point, CLOSED, CLOSED)

    # ------------------------------------------------------------------
    # ordering keys
    # ------------------------------------------------------------------

    def lower_key(self) -> tuple:
        """Sort key of the lower side; ``-inf`` first, closed before open."""
        if self.lower_kind is UNBOUNDED:
            return (0,)
        return (1, self.lower, 0 if self.lower_kind is CLOSED else 1)

    def upper_key(self) -> tuple:
        """Sort key of the upper side; open before closed, ``+inf`` last."""
        if self.upper_kind is UNBOUNDED:
            return (2,)
        return (1, self.upper, 1 if self.upper_kind is CLOSED else 0)

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------

    def is_bounded(self) -> bool:
        return self.lower_kind is not UNBOUNDED and self.upper_kind is not UNBOUNDED

    def is_empty(self) -> bool:
        if not self.is_bounded():
            return False
        if self.lower < self.upper:
            return False
        if self.lower == self.upper:
            return not (self.lower_kind is CLOSED and self.upper_kind is CLOSED)
        return True

    def length(self):
        """``upper - lower``; only defined for bounded intervals."""
        if not self.is_bounded():
            raise ValueError("length of an unbounded interval is undefined")
        return self.upper - self.lower

    def contains(self, point: B) -> bool:
        if self.lower_kind is CLOSED and point < self.lower:
            return False
        if self.lower_kind is OPEN and not self.lower < point:
            return False
        if self.upper_kind is CLOSED and self.upper < point:
            return False
        if self.upper_kind is OPEN and not point < self.upper:
            return False
        return True

    def __contains__(self, point: B) -> bool:
        return self.contains(point)

    def intersection(self, other: Interval[B]) -> Optional[Interval[B]]:
        """Common part of both intervals, or ``None`` when it is empty."""
        lo = self if self.lower_key() >= other.lower_key() else other
        hi = self if self.upper_key() <= other.upper_key() else other
        result = Interval(lo.lower, hi.upper, lo.lower_kind, hi.upper_kind)
        if result.is_empty():
            return None
        return result

    def overlaps(self, other: Interval[B]) -> bool:
        return self.intersection(other) is not None

    def is_adjacent(self, other: Interval[B]) -> bool:
        """True when the two intervals abut without overlapping or leaving a gap,
        e.g. ``[0, 10)`` and ``[10, 20]``."""
        return _abuts(self, other) or _abuts(other, self)

    def span(self, other: Interval[B]) -> Interval[B]:
        """Smallest interval containing both."""
        lo = self if self.lower_key() <= other.lower_key() else other
        hi = self if self.upper_key() >= other.upper_key() else other
        return Interval(lo.lower, hi.upper, lo.lower_kind, hi.upper_kind)

    def __str__(self) -> str:
        left = "(-inf" if self.lower_kind is UNBOUNDED else (
            ("[" if self.lower_kind is CLOSED else "(") + str(self.lower))
        right = "+inf)" if self.upper_kind is UNBOUNDED else (
            str(self.upper) + ("]" if self.upper_kind is CLOSED else ")"))
        return f"{left}, {right}"


def _abuts(left: Interval, right: Interval) -> bool:
    if left.upper_kind is UNBOUNDED or right.lower_kind is UNBOUNDED:
        return False
    if left.upper != right.lower:
        return False
    # exactly one side owns the shared point
    return (left.upper_kind is CLOSED) != (right.lower_kind is CLOSED)
