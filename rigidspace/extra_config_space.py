"""Extra degrees of freedom stored along with robot configurations."""

from __future__ import annotations

import operator

import numpy as np

__all__ = ["ExtraConfigSpace"]


class ExtraConfigSpace:
    """Extra variables appended to a configuration, with their bounds.

    Useful for instance to store velocities in the nodes of a roadmap
    when planning in state space.
    """

    def __init__(self, dimension=0):
        self.set_dimension(dimension)

    @property
    def dimension(self) -> int:
        """Number of extra degrees of freedom."""
        return self._dimension

    @property
    def lower(self) -> np.ndarray:
        """Lower bounds; the array may be modified in place."""
        return self._lower

    @property
    def upper(self) -> np.ndarray:
        """Upper bounds; the array may be modified in place."""
        return self._upper

    def set_dimension(self, dimension) -> None:
        """Resize the space and reset the bounds to minus and plus infinity."""
        dimension = operator.index(dimension)
        if dimension < 0:
            raise ValueError(f"dimension must be non-negative, got {dimension}")
        self._dimension = dimension
        self._lower = np.full(dimension, -np.inf)
        self._upper = np.full(dimension, np.inf)

    def __repr__(self) -> str:
        return f"ExtraConfigSpace(dimension={self._dimension})"