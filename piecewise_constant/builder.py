from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Generic, Iterable, Optional, TypeVar, Union

from .errors import BuilderFinished, CapacityExceeded, EmptyInterval, OutOfOrder, Overlap
from .interval import Interval
from .piecewise import Piecewise, Segment, SmallPiecewise

logger = logging.getLogger(__name__)

B = TypeVar("B")
V = TypeVar("V")

_MISSING = object()


class BuilderState(Enum):
    EMPTY = "empty"
    BUILDING = "building"
    FINALIZED = "finalized"


class Builder(Generic[B, V]):
    """Incremental, order-checked accumulation of segments.

    Segments must be pushed in ascending order; nothing is sorted implicitly.
    Each push is checked against the previous segment only, which is enough
    because the accepted sequence stays sorted and non-overlapping.

    ``capacity=None`` finishes into a :class:`Piecewise`; an integer capacity
    finishes into a :class:`SmallPiecewise` and rejects pushes beyond it.
    """

    def __init__(self, capacity: Optional[int] = None):
        if capacity is not None and capacity < 0:
            raise ValueError("capacity must be non-negative")
        self._capacity = capacity
        self._segments: list[Segment[B, V]] = []
        self._state = BuilderState.EMPTY

    @property
    def state(self) -> BuilderState:
        return self._state

    @property
    def capacity(self) -> Optional[int]:
        return self._capacity

    def __len__(self) -> int:
        return len(self._segments)

    def push(
        self,
        segment: Union[Segment[B, V], Interval[B]],
        value: Any = _MISSING,
    ) -> Builder[B, V]:
        """Append a segment; on failure the builder is left untouched.

        Accepts either a ready :class:`Segment` or a domain followed by its value.
        """
        if self._state is BuilderState.FINALIZED:
            raise BuilderFinished("builder already finished")
        if value is not _MISSING:
            if not isinstance(segment, Interval):
                raise TypeError("push(domain, value) needs an Interval domain")
            segment = Segment(segment, value)
        elif not isinstance(segment, Segment):
            raise TypeError("push() needs a Segment or a (domain, value) pair")
        domain = segment.domain
        if domain.is_empty():
            raise EmptyInterval(f"segment domain {domain} is empty")
        if self._segments:
            prev = self._segments[-1].domain
            if prev.overlaps(domain):
                raise Overlap(f"segment domain {domain} overlaps previous {prev}")
            if domain.lower_key() < prev.lower_key():
                raise OutOfOrder(f"segment domain {domain} starts before previous {prev}")
        if self._capacity is not None and len(self._segments) >= self._capacity:
            raise CapacityExceeded(self._capacity)
        self._segments.append(segment)
        self._state = BuilderState.BUILDING
        return self

    def add(self, domain: Interval[B], value: V) -> Builder[B, V]:
        return self.push(domain, value)

    def extend(self, items: Iterable[Union[Segment[B, V], tuple[Interval[B], V]]]) -> Builder[B, V]:
        """Push each item in order, stopping at the first rejected one.

        Items are either :class:`Segment` objects or ``(domain, value)`` pairs.
        """
        for item in items:
            if isinstance(item, Segment):
                self.push(item)
            else:
                domain, value = item
                self.add(domain, value)
        return self

    def finish(self) -> Any:
        """Finalize and return the container; zero pushes give the empty function."""
        if self._state is BuilderState.FINALIZED:
            raise BuilderFinished("builder already finished")
        self._state = BuilderState.FINALIZED
        segments = tuple(self._segments)
        self._segments = []
        if self._capacity is None:
            logger.debug("finished Piecewise with %d segments", len(segments))
            return Piecewise._from_validated(segments)
        logger.debug("finished SmallPiecewise with %d/%d segments", len(segments), self._capacity)
        return SmallPiecewise._from_validated(segments, self._capacity)
