from .interval import BoundKind, Interval
from .errors import (
    BuilderFinished,
    CapacityExceeded,
    ConstructionError,
    EmptyInterval,
    OperationError,
    OutOfOrder,
    Overlap,
    PiecewiseError,
    UnboundedDomain,
    ValueOpFailed,
)
from .piecewise import Piecewise, PiecewiseBase, Segment, SmallPiecewise
from .builder import Builder, BuilderState
from .combination import add, combine, multiply, subtract
from .resampling import Resampling, SampleMode
from .convolution import convolve
from .breaks import from_breaks, to_breaks

__all__ = [
    "BoundKind",
    "Interval",
    "Segment",
    "PiecewiseBase",
    "Piecewise",
    "SmallPiecewise",
    "Builder",
    "BuilderState",
    "combine",
    "add",
    "subtract",
    "multiply",
    "convolve",
    "Resampling",
    "SampleMode",
    "from_breaks",
    "to_breaks",
    "PiecewiseError",
    "ConstructionError",
    "Overlap",
    "OutOfOrder",
    "EmptyInterval",
    "CapacityExceeded",
    "BuilderFinished",
    "OperationError",
    "UnboundedDomain",
    "ValueOpFailed",
]
