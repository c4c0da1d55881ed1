r"""Convolution of two finite-support piecewise-constant functions.

For a pair of constant boxes :math:`a\,\mathbf 1_{[l_a, l_a+L_a]}` and
:math:`b\,\mathbf 1_{[l_b, l_b+L_b]}` the convolution is the tent

.. math::
    (f_a * f_b)(t) = a\,b\,\max\bigl(0,\ \min(t - s_0,\ s_3 - t,\ L_a,\ L_b)\bigr),

with :math:`s_0 = l_a + l_b` and :math:`s_3 = s_0 + L_a + L_b`. It rises
linearly from 0 at :math:`s_0` to the plateau :math:`a\,b\,\min(L_a, L_b)`
and falls back to 0 at :math:`s_3`. Boundary kinds do not matter here
because single points carry no mass.

All pair tents are superposed on the union of their breakpoints. The sum is
continuous and linear between consecutive knots. It is then resampled to
constant pieces with a caller-chosen :class:`~.resampling.Resampling`. That
resampling step is lossy.
"""

from __future__ import annotations

import logging
import torch

from .combination import _append_coalesced
from .errors import UnboundedDomain
from .interval import Interval
from .piecewise import Piecewise, PiecewiseBase, Segment
from .resampling import Resampling

logger = logging.getLogger(__name__)

Tensor = torch.Tensor


def _box_table(fn: PiecewiseBase, *, dtype: torch.dtype, device: torch.device) -> tuple[Tensor, Tensor, Tensor]:
    """Return (lower, length, value) tensors, one entry per segment."""
    lo, ln, val = [], [], []
    for seg in fn:
        dom = seg.domain
        if not dom.is_bounded():
            raise UnboundedDomain(f"convolution needs finite support; got segment domain {dom}")
        lo.append(float(dom.lower))
        ln.append(float(dom.upper) - float(dom.lower))
        val.append(float(seg.value))
    return (
        torch.tensor(lo, dtype=dtype, device=device),
        torch.tensor(ln, dtype=dtype, device=device),
        torch.tensor(val, dtype=dtype, device=device),
    )


def tent_sum(
    t: Tensor,
    s0: Tensor,
    s3: Tensor,
    plateau_len: Tensor,
    height: Tensor,
) -> Tensor:
    """Evaluate the superposition of tents at the points ``t``.

    Args:
        t:           (K,) evaluation points
        s0, s3:      (P,) start and end of each tent
        plateau_len: (P,) min(L_a, L_b) per tent
        height:      (P,) a*b per tent
    Returns:
        (K,)
    """
    tt = t.unsqueeze(0)                                   # (1,K)
    overlap = torch.minimum(tt - s0.unsqueeze(-1), s3.unsqueeze(-1) - tt)
    overlap = torch.minimum(overlap, plateau_len.unsqueeze(-1))
    overlap = torch.clamp(overlap, min=0.0)               # (P,K)
    return torch.sum(height.unsqueeze(-1) * overlap, dim=0)


def knot_values(
    s0: Tensor,
    s1: Tensor,
    s2: Tensor,
    s3: Tensor,
    height: Tensor,
) -> tuple[Tensor, Tensor]:
    """Superposed tents on their own breakpoint grid, in O(P log P).

    A tent has slope ``+h`` on ``[s0, s1]``, 0 on ``[s1, s2]`` and ``-h`` on
    ``[s2, s3]``, i.e. slope changes ``+h, -h, -h, +h`` at its four knots.
    Summing the changes per knot and integrating twice (cumsum of slopes,
    then cumsum of slope times cell width) gives the exact values at every
    knot without evaluating each tent on the whole grid.

    Returns:
        knots:  (K,) sorted unique breakpoints
        values: (K,) accumulated value at each knot
    """
    points = torch.cat([s0, s1, s2, s3])                  # (4P,)
    deltas = torch.cat([height, -height, -height, height])
    knots, inverse = torch.unique(points, sorted=True, return_inverse=True)
    kink = torch.zeros_like(knots).index_add_(0, inverse, deltas)
    slope = torch.cumsum(kink, dim=0)                     # slope right of each knot
    rise = slope[:-1] * (knots[1:] - knots[:-1])
    values = torch.cat([torch.zeros_like(knots[:1]), torch.cumsum(rise, dim=0)])
    return knots, values


def convolve(
    a: PiecewiseBase,
    b: PiecewiseBase,
    resampling: Resampling,
    *,
    dtype: torch.dtype = torch.float64,
    device: torch.device | str = "cpu",
) -> Piecewise[float, float]:
    """Convolve ``a`` and ``b`` and resample to a piecewise-constant result.

    Bounds and values must be real numbers. They are converted with
    ``float()`` and accumulated in ``dtype``, so exact types such as
    ``Fraction`` or ``Decimal`` come back as Python floats. Every segment of
    both inputs must be bounded on both sides, otherwise
    :class:`UnboundedDomain` is raised. ``resampling`` is mandatory.
    """
    if not isinstance(resampling, Resampling):
        raise TypeError("convolve requires an explicit Resampling policy")
    device = torch.device(device)

    lo_a, len_a, val_a = _box_table(a, dtype=dtype, device=device)
    lo_b, len_b, val_b = _box_table(b, dtype=dtype, device=device)

    # all (i, j) pairs, flattened to (P,)
    s0 = (lo_a.unsqueeze(-1) + lo_b.unsqueeze(0)).reshape(-1)
    la = len_a.unsqueeze(-1).expand(-1, lo_b.numel()).reshape(-1)
    lb = len_b.unsqueeze(0).expand(lo_a.numel(), -1).reshape(-1)
    height = (val_a.unsqueeze(-1) * val_b.unsqueeze(0)).reshape(-1)

    # zero-length boxes carry no mass
    keep = torch.minimum(la, lb) > 0
    s0, la, lb, height = s0[keep], la[keep], lb[keep], height[keep]
    if s0.numel() == 0:
        logger.debug("convolve: no pair with positive measure, result is empty")
        return Piecewise._from_validated(())

    s1 = s0 + torch.minimum(la, lb)
    s2 = s0 + torch.maximum(la, lb)
    s3 = s0 + la + lb
    knots, at_knots = knot_values(s0, s1, s2, s3, height)

    # the sum is linear between knots, so refining interpolates it exactly
    grid = resampling.refine(knots)
    acc = resampling.refine(at_knots)                     # (K,)
    samples = resampling.sample(acc[:-1], acc[1:])        # (K-1,)

    bounds = grid.tolist()
    values = samples.tolist()
    last = len(values) - 1
    out: list[Segment] = []
    for k, value in enumerate(values):
        if k == last:
            domain = Interval.closed(bounds[k], bounds[k + 1])
        else:
            domain = Interval.closed_open(bounds[k], bounds[k + 1])
        _append_coalesced(out, Segment(domain, value))

    logger.debug(
        "convolve: %d x %d segments, %d tents, %d knots -> %d segments",
        len(a), len(b), int(s0.numel()), int(grid.numel()), len(out),
    )
    return Piecewise._from_validated(tuple(out))
