from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import torch

Tensor = torch.Tensor


class SampleMode(Enum):
    LEFT = "left"
    RIGHT = "right"
    MIDPOINT = "midpoint"


@dataclass(frozen=True)
class Resampling:
    """Policy for turning a continuous piecewise-linear curve into constant pieces.

    Every cell between consecutive knots is split into ``subdivisions`` equal
    output segments. Each output segment takes the curve's value at its left
    end, right end or midpoint, according to ``mode``. The curve is linear on
    each cell, so the midpoint value is the mean of the two end values.
    """
    mode: SampleMode
    subdivisions: int = 1

    def __post_init__(self):
        if not isinstance(self.mode, SampleMode):
            raise ValueError("mode must be a SampleMode")
        if int(self.subdivisions) != self.subdivisions or self.subdivisions < 1:
            raise ValueError("subdivisions must be an integer >= 1")

    @classmethod
    def left(cls, subdivisions: int = 1) -> Resampling:
        return cls(SampleMode.LEFT, subdivisions)

    @classmethod
    def right(cls, subdivisions: int = 1) -> Resampling:
        return cls(SampleMode.RIGHT, subdivisions)

    @classmethod
    def midpoint(cls, subdivisions: int = 1) -> Resampling:
        return cls(SampleMode.MIDPOINT, subdivisions)

    def refine(self, knots: Tensor) -> Tensor:
        """Insert ``subdivisions - 1`` equally spaced points into every cell.

        ``knots`` must be 1D, sorted and unique. Existing knots are kept exactly.
        Applied to values sitting on the knots, the same map interpolates them
        linearly onto the refined grid.
        """
        n = int(self.subdivisions)
        if n == 1 or knots.numel() < 2:
            return knots
        # (K-1, n) offsets; the right end of each cell is the next cell's left end
        frac = torch.arange(n, dtype=knots.dtype, device=knots.device) / n
        lengths = knots[1:] - knots[:-1]
        inner = knots[:-1].unsqueeze(-1) + lengths.unsqueeze(-1) * frac.unsqueeze(0)
        return torch.cat([inner.reshape(-1), knots[-1:]], dim=0)

    def sample(self, left: Tensor, right: Tensor) -> Tensor:
        """Per-cell sample from the curve values at each cell's two ends."""
        if self.mode is SampleMode.LEFT:
            return left
        if self.mode is SampleMode.RIGHT:
            return right
        return 0.5 * (left + right)
