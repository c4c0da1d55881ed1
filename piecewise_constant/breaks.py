"""Conversion between piecewise functions and (breaks, values) tensors.

The tensor layout covers ``[b_0, b_M]`` without gaps. Cell ``i`` is
``[b_i, b_{i+1})`` and the last cell also includes ``b_M``. This matches a
``searchsorted(breaks, t, right=True) - 1`` lookup clamped to the final cell.
"""

from __future__ import annotations

import torch

from .builder import Builder
from .interval import CLOSED, OPEN, Interval
from .piecewise import Piecewise, PiecewiseBase

Tensor = torch.Tensor


def from_breaks(breaks: Tensor, values: Tensor) -> Piecewise[float, float]:
    """Build a gap-free function from 1D ``breaks`` (M+1,) and ``values`` (M,)."""
    b = torch.as_tensor(breaks)
    v = torch.as_tensor(values)
    if b.ndim != 1 or b.numel() < 2:
        raise ValueError("breaks must be 1D with length >= 2")
    if not torch.all(b[1:] > b[:-1]):
        raise ValueError("breaks must be strictly increasing")
    if v.ndim != 1 or v.shape[0] != b.numel() - 1:
        raise ValueError("values must have shape (len(breaks)-1,)")

    bl = b.tolist()
    vl = v.tolist()
    builder = Builder()
    for i, value in enumerate(vl):
        upper_kind = CLOSED if i == len(vl) - 1 else OPEN
        builder.add(Interval(bl[i], bl[i + 1], CLOSED, upper_kind), value)
    return builder.finish()


def to_breaks(
    fn: PiecewiseBase,
    *,
    dtype: torch.dtype = torch.float64,
    device: torch.device | str = "cpu",
) -> tuple[Tensor, Tensor]:
    """Inverse of :func:`from_breaks` for gap-free functions with finite extent.

    Boundary kinds are dropped; only the breakpoints survive.
    """
    segs = list(fn)
    if not segs:
        raise ValueError("cannot convert an empty function to breaks")
    for seg in segs:
        if not seg.domain.is_bounded():
            raise ValueError(f"segment domain {seg.domain} is unbounded")
    for prev, nxt in zip(segs[:-1], segs[1:]):
        if not prev.domain.is_adjacent(nxt.domain):
            raise ValueError(f"gap between {prev.domain} and {nxt.domain}")

    bl = [segs[0].domain.lower] + [s.domain.upper for s in segs]
    vl = [s.value for s in segs]
    device = torch.device(device)
    return (
        torch.tensor(bl, dtype=dtype, device=device),
        torch.tensor(vl, dtype=dtype, device=device),
    )
