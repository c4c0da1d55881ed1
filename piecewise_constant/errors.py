from __future__ import annotations


class PiecewiseError(Exception):
    """Base class for every error raised by this package."""


# -----------------------------------------------------------------------------
# Construction
# -----------------------------------------------------------------------------

class ConstructionError(PiecewiseError, ValueError):
    """A segment was rejected while building a partition."""


class Overlap(ConstructionError):
    pass


class OutOfOrder(ConstructionError):
    pass


class EmptyInterval(ConstructionError):
    pass


class CapacityExceeded(ConstructionError):
    def __init__(self, capacity: int):
        super().__init__(f"inline capacity of {capacity} segments exceeded")
        self.capacity = capacity


class BuilderFinished(ConstructionError):
    pass


# -----------------------------------------------------------------------------
# Operations on finished partitions
# -----------------------------------------------------------------------------

class OperationError(PiecewiseError):
    pass


class UnboundedDomain(OperationError, ValueError):
    pass


class ValueOpFailed(OperationError):
    """The caller-supplied value operator raised; its exception is kept in ``inner``."""

    def __init__(self, inner: BaseException):
        super().__init__(f"value operator failed: {inner!r}")
        self.inner = inner
