from __future__ import annotations


class SubsetSelectionError(Exception):
    """Base class of every error raised by ``subset_selection``."""


class DimensionMismatch(SubsetSelectionError, ValueError):
    """Label count, design matrix rows, initial values or cache buffers disagree in size."""


class InvalidLabels(SubsetSelectionError, ValueError):
    """Classification labels are not exactly the two classes -1 and +1."""


class NumericalDivergence(SubsetSelectionError, FloatingPointError):
    """The dual iterate kept becoming non-finite after every step size reduction.

    :ivar delta: The last step size tried.
    :ivar restarts: Number of restarts performed.
    """

    def __init__(self, msg: str, delta: float, restarts: int) -> None:
        super().__init__(msg)
        self.delta = delta
        self.restarts = restarts
