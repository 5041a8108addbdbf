"""Cartesian products of elementary Lie groups.

A :class:`LiegroupSpace` is a sequence of elementary Lie groups.  Its
configuration vectors are the concatenation of the configuration vectors
of its components, and likewise for tangent vectors.
"""

from __future__ import annotations

import operator
from collections.abc import Iterable, Iterator

import numpy as np

from rigidspace.liegroups import (
    ArgumentPosition,
    CartesianProduct,
    DerivativeProduct,
    LieGroupOperation,
    SpecialEuclidean2,
    SpecialEuclidean3,
    SpecialOrthogonal2,
    SpecialOrthogonal3,
    VectorSpace,
)

__all__ = ["LiegroupSpace"]


def _vector(value, size: int, what: str) -> np.ndarray:
    array = np.asarray(value, dtype=float)
    if array.shape != (size,):
        raise ValueError(f"{what} must have size {size}, got shape {array.shape}")
    return array


class LiegroupSpace:
    """Cartesian product of elementary Lie groups."""

    def __init__(self, types: Iterable[LieGroupOperation] = ()):
        self._types: list[LieGroupOperation] = list(types)
        for lie_group in self._types:
            if not isinstance(lie_group, LieGroupOperation):
                raise TypeError(f"not a Lie group operation: {lie_group!r}")
        self._update()

    # -- construction -----------------------------------------------------

    @classmethod
    def rn(cls, n) -> LiegroupSpace:
        """Return the vector space R^n."""
        return cls([VectorSpace(operator.index(n), False)])

    @classmethod
    def r1(cls, rotation=False) -> LiegroupSpace:
        """Return R, marked as a bounded rotation when ``rotation`` is true."""
        return cls([VectorSpace(1, bool(rotation))])

    @classmethod
    def r2(cls) -> LiegroupSpace:
        """Return R^2."""
        return cls([VectorSpace(2, False)])

    @classmethod
    def r3(cls) -> LiegroupSpace:
        """Return R^3."""
        return cls([VectorSpace(3, False)])

    @classmethod
    def so2(cls) -> LiegroupSpace:
        """Return SO(2)."""
        return cls([SpecialOrthogonal2()])

    @classmethod
    def so3(cls) -> LiegroupSpace:
        """Return SO(3)."""
        return cls([SpecialOrthogonal3()])

    @classmethod
    def r2xso2(cls) -> LiegroupSpace:
        """Return R^2 x SO(2)."""
        return cls([CartesianProduct(VectorSpace(2, False), SpecialOrthogonal2())])

    @classmethod
    def r3xso3(cls) -> LiegroupSpace:
        """Return R^3 x SO(3)."""
        return cls([CartesianProduct(VectorSpace(3, False), SpecialOrthogonal3())])

    @classmethod
    def se2(cls) -> LiegroupSpace:
        """Return SE(2)."""
        return cls([SpecialEuclidean2()])

    @classmethod
    def se3(cls) -> LiegroupSpace:
        """Return SE(3)."""
        return cls([SpecialEuclidean3()])

    @classmethod
    def empty(cls) -> LiegroupSpace:
        """Return the empty Lie group."""
        return cls()

    def _update(self) -> None:
        self._nq = sum(lie_group.nq for lie_group in self._types)
        self._nv = sum(lie_group.nv for lie_group in self._types)
        if self._types:
            self._neutral = np.concatenate([lg.neutral() for lg in self._types])
        else:
            self._neutral = np.zeros(0)

    # -- sizes and names --------------------------------------------------

    @property
    def types(self) -> tuple[LieGroupOperation, ...]:
        """The elementary Lie groups, in order."""
        return tuple(self._types)

    @property
    def nq(self) -> int:
        """Size of a configuration vector."""
        return self._nq

    @property
    def nv(self) -> int:
        """Size of a tangent vector."""
        return self._nv

    def nq_of(self, rank) -> int:
        """Configuration size of the component at ``rank``."""
        return self._component(rank).nq

    def nv_of(self, rank) -> int:
        """Tangent size of the component at ``rank``."""
        return self._component(rank).nv

    def _component(self, rank) -> LieGroupOperation:
        rank = operator.index(rank)
        if not 0 <= rank < len(self._types):
            raise IndexError(f"rank {rank} out of range")
        return self._types[rank]

    @property
    def name(self) -> str:
        """Names of the components joined by ``*``."""
        return "*".join(lie_group.name for lie_group in self._types)

    def __repr__(self) -> str:
        return f"LiegroupSpace({self.name!r})"

    def __str__(self) -> str:
        return self.name

    # -- elements ---------------------------------------------------------

    def neutral(self) -> np.ndarray:
        """Return the neutral element."""
        return self._neutral.copy()

    def exp(self, v) -> np.ndarray:
        """Return the exponential of a tangent vector."""
        return self.integrate(self._neutral, v)

    def _segments(self) -> Iterator[tuple[LieGroupOperation, slice, slice]]:
        iq = iv = 0
        for lie_group in self._types:
            yield lie_group, slice(iq, iq + lie_group.nq), slice(iv, iv + lie_group.nv)
            iq += lie_group.nq
            iv += lie_group.nv

    def _config(self, q) -> np.ndarray:
        return _vector(q, self._nq, "configuration")

    def _tangent(self, v) -> np.ndarray:
        return _vector(v, self._nv, "tangent vector")

    def integrate(self, q, v) -> np.ndarray:
        """Return ``q + v``, component by component."""
        q = self._config(q)
        v = self._tangent(v)
        result = q.copy()
        for lie_group, qs, vs in self._segments():
            result[qs] = lie_group.integrate(q[qs], v[vs])
        return result

    def difference(self, q0, q1) -> np.ndarray:
        """Return ``q1 - q0``, the vector taking ``q0`` to ``q1``."""
        q0 = self._config(q0)
        q1 = self._config(q1)
        result = np.zeros(self._nv)
        for lie_group, qs, vs in self._segments():
            result[vs] = lie_group.difference(q0[qs], q1[qs])
        return result

    def interpolate(self, q0, q1, u) -> np.ndarray:
        """Return the point at parameter ``u`` between ``q0`` and ``q1``."""
        q0 = self._config(q0)
        q1 = self._config(q1)
        result = q0.copy()
        for lie_group, qs, _ in self._segments():
            result[qs] = lie_group.interpolate(q0[qs], q1[qs], u)
        return result

    # -- derivatives ------------------------------------------------------

    def _apply(self, jacobian, blocks, side) -> np.ndarray:
        side = DerivativeProduct(side)
        result = np.array(jacobian, dtype=float)
        if result.ndim != 2:
            raise ValueError("jacobian must be a matrix")
        on_left = side is DerivativeProduct.DERIVATIVE_TIMES_INPUT
        size = result.shape[0] if on_left else result.shape[1]
        if size != self._nv:
            what = "rows" if on_left else "columns"
            raise ValueError(f"jacobian must have {self._nv} {what}, got {size}")
        for vs, block in blocks:
            if on_left:
                result[vs, :] = block @ result[vs, :]
            else:
                result[:, vs] = result[:, vs] @ block
        return result

    def dintegrate_dq(
        self, q, v, jacobian, side=DerivativeProduct.DERIVATIVE_TIMES_INPUT
    ) -> np.ndarray:
        """Combine ``jacobian`` with the derivative of ``integrate`` in ``q``."""
        q = self._config(q)
        v = self._tangent(v)
        blocks = (
            (vs, lg.dintegrate_dq(q[qs], v[vs])) for lg, qs, vs in self._segments()
        )
        return self._apply(jacobian, blocks, side)

    def dintegrate_dv(
        self, q, v, jacobian, side=DerivativeProduct.DERIVATIVE_TIMES_INPUT
    ) -> np.ndarray:
        """Combine ``jacobian`` with the derivative of ``integrate`` in ``v``."""
        q = self._config(q)
        v = self._tangent(v)
        blocks = (
            (vs, lg.dintegrate_dv(q[qs], v[vs])) for lg, qs, vs in self._segments()
        )
        return self._apply(jacobian, blocks, side)

    def _ddifference(self, q0, q1, jacobian, side, arg) -> np.ndarray:
        q0 = self._config(q0)
        q1 = self._config(q1)
        blocks = (
            (vs, lg.ddifference(q0[qs], q1[qs], arg))
            for lg, qs, vs in self._segments()
        )
        return self._apply(jacobian, blocks, side)

    def ddifference_dq0(
        self, q0, q1, jacobian, side=DerivativeProduct.DERIVATIVE_TIMES_INPUT
    ) -> np.ndarray:
        """Combine ``jacobian`` with the derivative of ``difference`` in ``q0``."""
        return self._ddifference(q0, q1, jacobian, side, ArgumentPosition.ARG0)

    def ddifference_dq1(
        self, q0, q1, jacobian, side=DerivativeProduct.DERIVATIVE_TIMES_INPUT
    ) -> np.ndarray:
        """Combine ``jacobian`` with the derivative of ``difference`` in ``q1``."""
        return self._ddifference(q0, q1, jacobian, side, ArgumentPosition.ARG1)

    def jdifference(
        self, q0, q1, j0, j1, apply_on_the_left=True
    ) -> tuple[np.ndarray, np.ndarray]:
        """Return both derivatives of ``difference`` combined with ``j0``, ``j1``."""
        side = (
            DerivativeProduct.DERIVATIVE_TIMES_INPUT
            if apply_on_the_left
            else DerivativeProduct.INPUT_TIMES_DERIVATIVE
        )
        return (
            self.ddifference_dq0(q0, q1, j0, side),
            self.ddifference_dq1(q0, q1, j1, side),
        )

    # -- structure --------------------------------------------------------

    def merge_vector_spaces(self) -> None:
        """Merge consecutive vector spaces into a single one, in place."""
        if not self._types:
            return
        merged: list[LieGroupOperation] = []
        previous_is_vector_space = False
        size = 0
        for lie_group in self._types:
            current_is_vector_space = lie_group.is_vector_space
            if previous_is_vector_space and current_is_vector_space:
                size += lie_group.nq
                merged[-1] = VectorSpace(size, False)
            else:
                size = lie_group.nq if current_is_vector_space else 0
                previous_is_vector_space = current_is_vector_space
                merged.append(lie_group)
        self._types = merged
        self._update()

    def vector_spaces_merged(self) -> LiegroupSpace:
        """Return a copy with consecutive vector spaces merged."""
        other = LiegroupSpace(self._types)
        other.merge_vector_spaces()
        return other

    def is_vector_space(self) -> bool:
        """Whether every component is a vector space."""
        return all(lie_group.is_vector_space for lie_group in self._types)

    def __eq__(self, other) -> bool:
        if not isinstance(other, LiegroupSpace):
            return NotImplemented
        return self._types == other._types

    __hash__ = None

    def __imul__(self, other: LiegroupSpace) -> LiegroupSpace:
        if not isinstance(other, LiegroupSpace):
            return NotImplemented
        self._types.extend(other._types)
        self.merge_vector_spaces()
        self._update()
        return self

    def __mul__(self, other: LiegroupSpace) -> LiegroupSpace:
        if not isinstance(other, LiegroupSpace):
            return NotImplemented
        result = LiegroupSpace(self._types)
        result *= other
        return result

    def __pow__(self, n) -> LiegroupSpace:
        n = operator.index(n)
        if n < 0:
            raise ValueError("Cartesian power must be non-negative")
        if n == 0:
            return LiegroupSpace.empty()
        result = LiegroupSpace(self._types * n)
        result.merge_vector_spaces()
        return result