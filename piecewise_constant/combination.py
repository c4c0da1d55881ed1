r"""Joint refinement of two partitions under a binary value operator.

Both inputs are walked with one cursor each. At every step the two current
domains are intersected; a non-empty intersection :math:`I` yields the output
segment :math:`(I, \mathrm{op}(a, b))`. The cursor whose domain ends first is
advanced (both on a tie), so the walk is a single :math:`O(|A| + |B|)` pass.

Regions covered by only one input, or by neither, produce no output: an
undefined value never reaches ``op``.
"""

from __future__ import annotations

import logging
import operator
from typing import Callable, TypeVar
import torch

from .errors import ValueOpFailed
from .piecewise import Piecewise, PiecewiseBase, Segment

logger = logging.getLogger(__name__)

B = TypeVar("B")
VA = TypeVar("VA")
VB = TypeVar("VB")
VC = TypeVar("VC")


def _values_equal(x, y) -> bool:
    """Equality used for merging; ambiguous or failing comparisons count as unequal."""
    try:
        if isinstance(x, torch.Tensor) or isinstance(y, torch.Tensor):
            return (
                isinstance(x, torch.Tensor)
                and isinstance(y, torch.Tensor)
                and x.shape == y.shape
                and x.dtype == y.dtype
                and torch.equal(x, y)
            )
        return bool(x == y)
    except Exception:
        return False


def _append_coalesced(out: list[Segment], seg: Segment) -> None:
    """Append ``seg``, merging it into the last segment when they abut with equal values."""
    if out:
        last = out[-1]
        if last.domain.is_adjacent(seg.domain) and _values_equal(last.value, seg.value):
            out[-1] = Segment(last.domain.span(seg.domain), last.value)
            return
    out.append(seg)


def combine(
    a: PiecewiseBase[B, VA],
    b: PiecewiseBase[B, VB],
    op: Callable[[VA, VB], VC],
) -> Piecewise[B, VC]:
    """Pointwise ``op(a(t), b(t))`` over the jointly covered region.

    Either storage variant may back either input; the result is always a
    heap :class:`Piecewise`. An exception raised by ``op`` aborts the merge
    and is re-raised as :class:`ValueOpFailed`.
    """
    sa = a._segments
    sb = b._segments
    out: list[Segment] = []

    i = j = 0
    while i < len(sa) and j < len(sb):
        x, y = sa[i], sb[j]
        common = x.domain.intersection(y.domain)
        if common is not None:
            try:
                value = op(x.value, y.value)
            except Exception as exc:
                raise ValueOpFailed(exc) from exc
            _append_coalesced(out, Segment(common, value))

        xu = x.domain.upper_key()
        yu = y.domain.upper_key()
        if xu <= yu:
            i += 1
        if yu <= xu:
            j += 1

    logger.debug("combine: %d x %d segments -> %d", len(sa), len(sb), len(out))
    return Piecewise._from_validated(tuple(out))


def add(a: PiecewiseBase, b: PiecewiseBase) -> Piecewise:
    return combine(a, b, operator.add)


def subtract(a: PiecewiseBase, b: PiecewiseBase) -> Piecewise:
    return combine(a, b, operator.sub)


def multiply(a: PiecewiseBase, b: PiecewiseBase) -> Piecewise:
    return combine(a, b, operator.mul)
