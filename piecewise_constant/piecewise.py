"""Piecewise-constant functions over an ordered domain.

Two storage variants share one contract:

* :class:`Piecewise` keeps the lower-bound keys alongside its segments and
  locates points by binary search.
* :class:`SmallPiecewise` holds at most ``capacity`` segments and scans them
  linearly, which is faster for a handful of segments.

Both are immutable. They are only produced by :class:`~.builder.Builder` (the
public constructors route through it), so a finished instance is always
sorted, non-overlapping and free of empty domains. Gaps between segments are
allowed; :meth:`PiecewiseBase.value_at` returns ``None`` there.
"""

from __future__ import annotations

import bisect
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, Iterator, Optional, TypeVar

from .errors import CapacityExceeded
from .interval import Interval

B = TypeVar("B")
V = TypeVar("V")
W = TypeVar("W")


@dataclass(frozen=True)
class Segment(Generic[B, V]):
    """A value held constant over one domain interval."""

    domain: Interval[B]
    value: V

    def __mul__(self, factor: Any) -> Segment[B, V]:
        return Segment(self.domain, self.value * factor)


class PiecewiseBase(ABC, Generic[B, V]):
    """Operations common to both storage variants."""

    __slots__ = ("_segments",)

    _segments: tuple

    @abstractmethod
    def value_at(self, point: B) -> Optional[V]:
        """Value of the segment containing ``point``, or ``None`` in a gap."""

    def segments(self) -> Iterator[tuple[Interval[B], V]]:
        """Lazy ``(domain, value)`` pairs in ascending domain order.

        Every call starts a fresh pass over the segments.
        """
        return ((seg.domain, seg.value) for seg in self._segments)

    def __iter__(self) -> Iterator[Segment[B, V]]:
        return iter(self._segments)

    def __len__(self) -> int:
        return len(self._segments)

    def domain_extent(self) -> Optional[Interval[B]]:
        """Bounding interval from the first lower bound to the last upper bound.

        Gaps inside the extent are not reported. ``None`` for an empty function.
        """
        if not self._segments:
            return None
        return self._segments[0].domain.span(self._segments[-1].domain)

    def map_values(self, fn: Callable[[V], W]):
        """Apply ``fn`` to every value, keeping domains and the storage variant."""
        return self._with_segments(tuple(Segment(s.domain, fn(s.value)) for s in self._segments))

    def __mul__(self, factor: Any):
        return self._with_segments(tuple(s * factor for s in self._segments))

    def __rmul__(self, factor: Any):
        return self._with_segments(tuple(Segment(s.domain, factor * s.value) for s in self._segments))

    def to_piecewise(self) -> Piecewise[B, V]:
        return Piecewise._from_validated(self._segments)

    def to_small(self, capacity: int) -> SmallPiecewise[B, V]:
        if len(self._segments) > capacity:
            raise CapacityExceeded(capacity)
        return SmallPiecewise._from_validated(self._segments, capacity)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PiecewiseBase):
            return NotImplemented
        return self._segments == other._segments

    def __hash__(self) -> int:
        return hash(self._segments)

    def __repr__(self) -> str:
        body = ", ".join(f"{s.domain}: {s.value!r}" for s in self._segments)
        return f"{type(self).__name__}([{body}])"

    @abstractmethod
    def _with_segments(self, segments: tuple):
        """Same storage variant holding ``segments``."""


class Piecewise(PiecewiseBase[B, V]):
    """Heap-backed piecewise function with logarithmic lookup."""

    __slots__ = ("_keys",)

    def __init__(self, segments: Iterable[Any] = ()):
        from .builder import Builder

        built = Builder().extend(segments).finish()
        self._segments = built._segments
        self._keys = built._keys

    @classmethod
    def _from_validated(cls, segments: tuple) -> Piecewise[B, V]:
        obj = cls.__new__(cls)
        obj._segments = segments
        obj._keys = [s.domain.lower_key() for s in segments]
        return obj

    @classmethod
    def builder(cls):
        from .builder import Builder

        return Builder()

    def _locate(self, point: B) -> Optional[int]:
        # rightmost segment starting at or before `point`
        idx = bisect.bisect_right(self._keys, (1, point, 0)) - 1
        if idx < 0 or not self._segments[idx].domain.contains(point):
            return None
        return idx

    def value_at(self, point: B) -> Optional[V]:
        idx = self._locate(point)
        if idx is None:
            return None
        return self._segments[idx].value

    def _with_segments(self, segments: tuple) -> Piecewise:
        return Piecewise._from_validated(segments)


class SmallPiecewise(PiecewiseBase[B, V]):
    """Fixed-capacity piecewise function with linear lookup."""

    __slots__ = ("_capacity",)

    def __init__(self, capacity: int, segments: Iterable[Any] = ()):
        from .builder import Builder

        built = Builder(capacity=capacity).extend(segments).finish()
        self._segments = built._segments
        self._capacity = built._capacity

    @classmethod
    def _from_validated(cls, segments: tuple, capacity: int) -> SmallPiecewise[B, V]:
        obj = cls.__new__(cls)
        obj._segments = segments
        obj._capacity = capacity
        return obj

    @classmethod
    def builder(cls, capacity: int):
        from .builder import Builder

        return Builder(capacity=capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    def value_at(self, point: B) -> Optional[V]:
        for seg in self._segments:
            dom = seg.domain
            if dom.contains(point):
                return seg.value
            # segments are sorted; nothing further can contain the point
            if dom.lower_key() > (1, point, 0):
                return None
        return None

    def _with_segments(self, segments: tuple) -> SmallPiecewise:
        return SmallPiecewise._from_validated(segments, self._capacity)
