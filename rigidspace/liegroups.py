"""Elementary Lie groups and the mapping from joint types to them.

Every operation works on configuration vectors of size ``nq`` and on
tangent vectors of size ``nv``.  Tangent vectors are expressed in the
local frame: ``integrate(q, v)`` is ``q * exp(v)`` and
``difference(q0, q1)`` is ``log(q0^-1 * q1)``, so that
``integrate(q0, difference(q0, q1))`` gives back ``q1``.

Quaternions are stored as ``(x, y, z, w)``, planar rotations as
``(cos, sin)``, and tangent vectors of SE(n) put the linear part first.
"""

from __future__ import annotations

import enum
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpy as np

__all__ = [
    "DerivativeProduct",
    "ArgumentPosition",
    "LieGroupMap",
    "LieGroupOperation",
    "VectorSpace",
    "SpecialOrthogonal2",
    "SpecialOrthogonal3",
    "CartesianProduct",
    "SpecialEuclidean2",
    "SpecialEuclidean3",
    "operation_for_joint",
]

_SMALL_ANGLE = 1e-8


class DerivativeProduct(enum.Enum):
    """Side on which a derivative is applied to a given matrix."""

    DERIVATIVE_TIMES_INPUT = "derivative_times_input"
    INPUT_TIMES_DERIVATIVE = "input_times_derivative"


class ArgumentPosition(enum.IntEnum):
    """Argument with respect to which a derivative is taken."""

    ARG0 = 0
    ARG1 = 1


class LieGroupMap(enum.Enum):
    """Choice of Lie group for free-flyer and planar joints."""

    RNXSON = "rnxson"
    DEFAULT = "default"


# ---------------------------------------------------------------------------
# Numerical helpers


def _as_vector(value, size: int, what: str) -> np.ndarray:
    array = np.asarray(value, dtype=float)
    if array.shape != (size,):
        raise ValueError(f"{what} must have size {size}, got shape {array.shape}")
    return array


def _skew(w: np.ndarray) -> np.ndarray:
    return np.array(
        [
            [0.0, -w[2], w[1]],
            [w[2], 0.0, -w[0]],
            [-w[1], w[0], 0.0],
        ]
    )


def _expm(a: np.ndarray) -> np.ndarray:
    """Matrix exponential by scaling and squaring of a Taylor series."""
    n = a.shape[0]
    norm = np.linalg.norm(a, 1)
    squarings = max(0, int(math.ceil(math.log2(norm))) + 1) if norm > 0 else 0
    scaled = a / (2.0**squarings)
    result = np.eye(n)
    term = np.eye(n)
    for k in range(1, 19):
        term = term @ scaled / k
        result = result + term
    for _ in range(squarings):
        result = result @ result
    return result


def _right_jacobian(ad: np.ndarray) -> np.ndarray:
    """Right Jacobian of the exponential, the integral of exp(-s ad) over [0, 1]."""
    n = ad.shape[0]
    block = np.zeros((2 * n, 2 * n))
    block[:n, :n] = -ad
    block[:n, n:] = np.eye(n)
    return _expm(block)[:n, n:]


def _quat_mul(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    av, aw = a[:3], a[3]
    bv, bw = b[:3], b[3]
    vector = aw * bv + bw * av + np.cross(av, bv)
    return np.append(vector, aw * bw - av @ bv)


def _quat_conj(q: np.ndarray) -> np.ndarray:
    return np.append(-q[:3], q[3])


def _quat_exp(v: np.ndarray) -> np.ndarray:
    half = np.linalg.norm(v) / 2.0
    # sin(theta / 2) / theta without a division by zero
    factor = 0.5 * np.sinc(half / np.pi)
    return np.append(factor * v, math.cos(half))


def _quat_log(q: np.ndarray) -> np.ndarray:
    q = q / np.linalg.norm(q)
    if q[3] < 0:
        q = -q
    vector = q[:3]
    n = np.linalg.norm(vector)
    if n < 1e-12:
        return 2.0 * vector / q[3]
    theta = 2.0 * math.atan2(n, q[3])
    return vector * (theta / n)


def _quat_to_matrix(q: np.ndarray) -> np.ndarray:
    x, y, z, w = q / np.linalg.norm(q)
    return np.array(
        [
            [1 - 2 * (y * y + z * z), 2 * (x * y - z * w), 2 * (x * z + y * w)],
            [2 * (x * y + z * w), 1 - 2 * (x * x + z * z), 2 * (y * z - x * w)],
            [2 * (x * z - y * w), 2 * (y * z + x * w), 1 - 2 * (x * x + y * y)],
        ]
    )


def _matrix_to_quat(r: np.ndarray) -> np.ndarray:
    trace = r[0, 0] + r[1, 1] + r[2, 2]
    if trace > 0:
        s = math.sqrt(trace + 1.0) * 2.0
        w = 0.25 * s
        x = (r[2, 1] - r[1, 2]) / s
        y = (r[0, 2] - r[2, 0]) / s
        z = (r[1, 0] - r[0, 1]) / s
    elif r[0, 0] > r[1, 1] and r[0, 0] > r[2, 2]:
        s = math.sqrt(1.0 + r[0, 0] - r[1, 1] - r[2, 2]) * 2.0
        w = (r[2, 1] - r[1, 2]) / s
        x = 0.25 * s
        y = (r[0, 1] + r[1, 0]) / s
        z = (r[0, 2] + r[2, 0]) / s
    elif r[1, 1] > r[2, 2]:
        s = math.sqrt(1.0 + r[1, 1] - r[0, 0] - r[2, 2]) * 2.0
        w = (r[0, 2] - r[2, 0]) / s
        x = (r[0, 1] + r[1, 0]) / s
        y = 0.25 * s
        z = (r[1, 2] + r[2, 1]) / s
    else:
        s = math.sqrt(1.0 + r[2, 2] - r[0, 0] - r[1, 1]) * 2.0
        w = (r[1, 0] - r[0, 1]) / s
        x = (r[0, 2] + r[2, 0]) / s
        y = (r[1, 2] + r[2, 1]) / s
        z = 0.25 * s
    q = np.array([x, y, z, w])
    return q / np.linalg.norm(q)


def _exp3(w: np.ndarray) -> np.ndarray:
    theta = np.linalg.norm(w)
    k = _skew(w)
    if theta < _SMALL_ANGLE:
        return np.eye(3) + k + 0.5 * (k @ k)
    return (
        np.eye(3)
        + (math.sin(theta) / theta) * k
        + ((1 - math.cos(theta)) / theta**2) * (k @ k)
    )


def _log3(r: np.ndarray) -> np.ndarray:
    return _quat_log(_matrix_to_quat(r))


def _se3_v(w: np.ndarray) -> np.ndarray:
    theta = np.linalg.norm(w)
    k = _skew(w)
    if theta < _SMALL_ANGLE:
        return np.eye(3) + k / 2.0 + (k @ k) / 6.0
    return (
        np.eye(3)
        + ((1 - math.cos(theta)) / theta**2) * k
        + ((theta - math.sin(theta)) / theta**3) * (k @ k)
    )


def _se2_v(theta: float) -> np.ndarray:
    if abs(theta) < _SMALL_ANGLE:
        a, b = 1 - theta * theta / 6.0, theta / 2.0
    else:
        a, b = math.sin(theta) / theta, (1 - math.cos(theta)) / theta
    return np.array([[a, -b], [b, a]])


def _rotation2(theta: float) -> np.ndarray:
    c, s = math.cos(theta), math.sin(theta)
    return np.array([[c, -s], [s, c]])


# ---------------------------------------------------------------------------
# Operations


class LieGroupOperation(ABC):
    """A Lie group acting on configuration and tangent vectors."""

    @property
    @abstractmethod
    def nq(self) -> int:
        """Size of a configuration vector."""

    @property
    @abstractmethod
    def nv(self) -> int:
        """Size of a tangent vector."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human readable name of the group."""

    @property
    def is_vector_space(self) -> bool:
        """Whether the group is a plain vector space."""
        return False

    def neutral(self) -> np.ndarray:
        """Return the neutral element."""
        return self._neutral()

    def integrate(self, q, v) -> np.ndarray:
        """Return ``q * exp(v)``."""
        return self._integrate(self._config(q), self._tangent(v))

    def difference(self, q0, q1) -> np.ndarray:
        """Return ``log(q0^-1 * q1)``."""
        return self._difference(self._config(q0), self._config(q1))

    def interpolate(self, q0, q1, u) -> np.ndarray:
        """Return the point at parameter ``u`` on the geodesic from q0 to q1."""
        q0 = self._config(q0)
        q1 = self._config(q1)
        if u == 0:
            return q0.copy()
        if u == 1:
            return q1.copy()
        return self._interpolate(q0, q1, float(u))

    def dintegrate_dq(self, q, v) -> np.ndarray:
        """Jacobian of ``integrate`` with respect to the configuration."""
        return self._dintegrate_dq(self._config(q), self._tangent(v))

    def dintegrate_dv(self, q, v) -> np.ndarray:
        """Jacobian of ``integrate`` with respect to the tangent vector."""
        return self._dintegrate_dv(self._config(q), self._tangent(v))

    def ddifference(self, q0, q1, arg) -> np.ndarray:
        """Jacobian of ``difference`` with respect to argument ``arg``."""
        return self._ddifference(
            self._config(q0), self._config(q1), ArgumentPosition(arg)
        )

    def _config(self, q) -> np.ndarray:
        return _as_vector(q, self.nq, "configuration")

    def _tangent(self, v) -> np.ndarray:
        return _as_vector(v, self.nv, "tangent vector")

    def _interpolate(self, q0, q1, u):
        return self._integrate(q0, u * self._difference(q0, q1))

    @abstractmethod
    def _neutral(self) -> np.ndarray: ...

    @abstractmethod
    def _integrate(self, q, v) -> np.ndarray: ...

    @abstractmethod
    def _difference(self, q0, q1) -> np.ndarray: ...

    @abstractmethod
    def _dintegrate_dq(self, q, v) -> np.ndarray: ...

    @abstractmethod
    def _dintegrate_dv(self, q, v) -> np.ndarray: ...

    @abstractmethod
    def _ddifference(self, q0, q1, arg) -> np.ndarray: ...


@dataclass(frozen=True)
class VectorSpace(LieGroupOperation):
    """The vector space R^size; ``rotation`` marks a bounded rotation."""

    size: int
    rotation: bool = False

    def __post_init__(self):
        if int(self.size) != self.size or self.size < 0:
            raise ValueError(f"invalid vector space size: {self.size!r}")

    @property
    def nq(self) -> int:
        return self.size

    @property
    def nv(self) -> int:
        return self.size

    @property
    def name(self) -> str:
        return f"R^{self.size}"

    @property
    def is_vector_space(self) -> bool:
        return True

    def _neutral(self):
        return np.zeros(self.size)

    def _integrate(self, q, v):
        return q + v

    def _difference(self, q0, q1):
        return q1 - q0

    def _interpolate(self, q0, q1, u):
        return q0 + u * (q1 - q0)

    def _dintegrate_dq(self, q, v):
        return np.eye(self.size)

    def _dintegrate_dv(self, q, v):
        return np.eye(self.size)

    def _ddifference(self, q0, q1, arg):
        identity = np.eye(self.size)
        return -identity if arg is ArgumentPosition.ARG0 else identity


@dataclass(frozen=True)
class SpecialOrthogonal2(LieGroupOperation):
    """SO(2), stored as a unit complex number ``(cos, sin)``."""

    @property
    def nq(self) -> int:
        return 2

    @property
    def nv(self) -> int:
        return 1

    @property
    def name(self) -> str:
        return "SO(2)"

    def _neutral(self):
        return np.array([1.0, 0.0])

    def _integrate(self, q, v):
        c, s = math.cos(v[0]), math.sin(v[0])
        result = np.array([q[0] * c - q[1] * s, q[0] * s + q[1] * c])
        return result / np.linalg.norm(result)

    def _difference(self, q0, q1):
        c0, s0 = q0
        c1, s1 = q1
        return np.array([math.atan2(c0 * s1 - s0 * c1, c0 * c1 + s0 * s1)])

    def _dintegrate_dq(self, q, v):
        return np.ones((1, 1))

    def _dintegrate_dv(self, q, v):
        return np.ones((1, 1))

    def _ddifference(self, q0, q1, arg):
        sign = -1.0 if arg is ArgumentPosition.ARG0 else 1.0
        return np.full((1, 1), sign)


class _MatrixLieGroup(LieGroupOperation):
    """Operations of a group through its matrix representation."""

    def _integrate(self, q, v):
        return self._from_matrix(self._to_matrix(q) @ self._exp(v), q)

    def _relative(self, q0, q1):
        return np.linalg.inv(self._to_matrix(q0)) @ self._to_matrix(q1)

    def _difference(self, q0, q1):
        return self._log(self._relative(q0, q1))

    def _dintegrate_dq(self, q, v):
        return self._adjoint(np.linalg.inv(self._exp(v)))

    def _dintegrate_dv(self, q, v):
        return _right_jacobian(self._ad(v))

    def _ddifference(self, q0, q1, arg):
        relative = self._relative(q0, q1)
        jlog = np.linalg.inv(_right_jacobian(self._ad(self._log(relative))))
        if arg is ArgumentPosition.ARG1:
            return jlog
        return -jlog @ self._adjoint(np.linalg.inv(relative))

    @abstractmethod
    def _to_matrix(self, q) -> np.ndarray: ...

    @abstractmethod
    def _from_matrix(self, m, reference) -> np.ndarray: ...

    @abstractmethod
    def _exp(self, v) -> np.ndarray: ...

    @abstractmethod
    def _log(self, m) -> np.ndarray: ...

    @abstractmethod
    def _ad(self, v) -> np.ndarray: ...

    @abstractmethod
    def _adjoint(self, m) -> np.ndarray: ...


@dataclass(frozen=True)
class SpecialOrthogonal3(_MatrixLieGroup):
    """SO(3), stored as a unit quaternion ``(x, y, z, w)``."""

    @property
    def nq(self) -> int:
        return 4

    @property
    def nv(self) -> int:
        return 3

    @property
    def name(self) -> str:
        return "SO(3)"

    def _neutral(self):
        return np.array([0.0, 0.0, 0.0, 1.0])

    def _integrate(self, q, v):
        result = _quat_mul(q, _quat_exp(v))
        return result / np.linalg.norm(result)

    def _difference(self, q0, q1):
        return _quat_log(_quat_mul(_quat_conj(q0), q1))

    def _to_matrix(self, q):
        return _quat_to_matrix(q)

    def _from_matrix(self, m, reference):
        quat = _matrix_to_quat(m)
        return -quat if quat @ reference < 0 else quat

    def _exp(self, v):
        return _exp3(v)

    def _log(self, m):
        return _log3(m)

    def _ad(self, v):
        return _skew(v)

    def _adjoint(self, m):
        return m


@dataclass(frozen=True)
class SpecialEuclidean2(_MatrixLieGroup):
    """SE(2), stored as ``(x, y, cos, sin)``."""

    @property
    def nq(self) -> int:
        return 4

    @property
    def nv(self) -> int:
        return 3

    @property
    def name(self) -> str:
        return "SE(2)"

    def _neutral(self):
        return np.array([0.0, 0.0, 1.0, 0.0])

    def _to_matrix(self, q):
        c, s = q[2:] / np.linalg.norm(q[2:])
        return np.array([[c, -s, q[0]], [s, c, q[1]], [0.0, 0.0, 1.0]])

    def _from_matrix(self, m, reference):
        cs = m[:2, 0] / np.linalg.norm(m[:2, 0])
        return np.array([m[0, 2], m[1, 2], cs[0], cs[1]])

    def _exp(self, v):
        theta = v[2]
        m = np.eye(3)
        m[:2, :2] = _rotation2(theta)
        m[:2, 2] = _se2_v(theta) @ v[:2]
        return m

    def _log(self, m):
        theta = math.atan2(m[1, 0], m[0, 0])
        linear = np.linalg.solve(_se2_v(theta), m[:2, 2])
        return np.append(linear, theta)

    def _ad(self, v):
        vx, vy, w = v
        return np.array([[0.0, -w, vy], [w, 0.0, -vx], [0.0, 0.0, 0.0]])

    def _adjoint(self, m):
        a = np.eye(3)
        a[:2, :2] = m[:2, :2]
        a[0, 2] = m[1, 2]
        a[1, 2] = -m[0, 2]
        return a


@dataclass(frozen=True)
class SpecialEuclidean3(_MatrixLieGroup):
    """SE(3), stored as a translation followed by a quaternion."""

    @property
    def nq(self) -> int:
        return 7

    @property
    def nv(self) -> int:
        return 6

    @property
    def name(self) -> str:
        return "SE(3)"

    def _neutral(self):
        return np.array([0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 1.0])

    def _to_matrix(self, q):
        m = np.eye(4)
        m[:3, :3] = _quat_to_matrix(q[3:])
        m[:3, 3] = q[:3]
        return m

    def _from_matrix(self, m, reference):
        quat = _matrix_to_quat(m[:3, :3])
        if quat @ reference[3:] < 0:
            quat = -quat
        return np.concatenate([m[:3, 3], quat])

    def _exp(self, v):
        angular = v[3:]
        m = np.eye(4)
        m[:3, :3] = _exp3(angular)
        m[:3, 3] = _se3_v(angular) @ v[:3]
        return m

    def _log(self, m):
        angular = _log3(m[:3, :3])
        linear = np.linalg.solve(_se3_v(angular), m[:3, 3])
        return np.concatenate([linear, angular])

    def _ad(self, v):
        a = np.zeros((6, 6))
        w_hat = _skew(v[3:])
        a[:3, :3] = w_hat
        a[:3, 3:] = _skew(v[:3])
        a[3:, 3:] = w_hat
        return a

    def _adjoint(self, m):
        rotation = m[:3, :3]
        a = np.zeros((6, 6))
        a[:3, :3] = rotation
        a[:3, 3:] = _skew(m[:3, 3]) @ rotation
        a[3:, 3:] = rotation
        return a


def _block_diagonal(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    result = np.zeros((a.shape[0] + b.shape[0], a.shape[1] + b.shape[1]))
    result[: a.shape[0], : a.shape[1]] = a
    result[a.shape[0] :, a.shape[1] :] = b
    return result


@dataclass(frozen=True)
class CartesianProduct(LieGroupOperation):
    """Cartesian product of two groups, acting component-wise."""

    first: LieGroupOperation
    second: LieGroupOperation

    @property
    def nq(self) -> int:
        return self.first.nq + self.second.nq

    @property
    def nv(self) -> int:
        return self.first.nv + self.second.nv

    @property
    def name(self) -> str:
        return f"{self.first.name}*{self.second.name}"

    def _split_q(self, q):
        return q[: self.first.nq], q[self.first.nq :]

    def _split_v(self, v):
        return v[: self.first.nv], v[self.first.nv :]

    def _neutral(self):
        return np.concatenate([self.first.neutral(), self.second.neutral()])

    def _integrate(self, q, v):
        qa, qb = self._split_q(q)
        va, vb = self._split_v(v)
        return np.concatenate(
            [self.first.integrate(qa, va), self.second.integrate(qb, vb)]
        )

    def _difference(self, q0, q1):
        a0, b0 = self._split_q(q0)
        a1, b1 = self._split_q(q1)
        return np.concatenate(
            [self.first.difference(a0, a1), self.second.difference(b0, b1)]
        )

    def _interpolate(self, q0, q1, u):
        a0, b0 = self._split_q(q0)
        a1, b1 = self._split_q(q1)
        return np.concatenate(
            [self.first.interpolate(a0, a1, u), self.second.interpolate(b0, b1, u)]
        )

    def _dintegrate_dq(self, q, v):
        qa, qb = self._split_q(q)
        va, vb = self._split_v(v)
        return _block_diagonal(
            self.first.dintegrate_dq(qa, va), self.second.dintegrate_dq(qb, vb)
        )

    def _dintegrate_dv(self, q, v):
        qa, qb = self._split_q(q)
        va, vb = self._split_v(v)
        return _block_diagonal(
            self.first.dintegrate_dv(qa, va), self.second.dintegrate_dv(qb, vb)
        )

    def _ddifference(self, q0, q1, arg):
        a0, b0 = self._split_q(q0)
        a1, b1 = self._split_q(q1)
        return _block_diagonal(
            self.first.ddifference(a0, a1, arg), self.second.ddifference(b0, b1, arg)
        )


# ---------------------------------------------------------------------------
# Joint type to Lie group


_BOUNDED_ROTATION = VectorSpace(1, True)
_UNBOUNDED_ROTATION = SpecialOrthogonal2()
_TRANSLATION_1D = VectorSpace(1, False)

_JOINT_OPERATIONS: dict[str, LieGroupOperation] = {
    "revolute_x": _BOUNDED_ROTATION,
    "revolute_y": _BOUNDED_ROTATION,
    "revolute_z": _BOUNDED_ROTATION,
    "rx": _BOUNDED_ROTATION,
    "ry": _BOUNDED_ROTATION,
    "rz": _BOUNDED_ROTATION,
    "revolute_unaligned": _BOUNDED_ROTATION,
    "revolute_unbounded_x": _UNBOUNDED_ROTATION,
    "revolute_unbounded_y": _UNBOUNDED_ROTATION,
    "revolute_unbounded_z": _UNBOUNDED_ROTATION,
    "rubx": _UNBOUNDED_ROTATION,
    "ruby": _UNBOUNDED_ROTATION,
    "rubz": _UNBOUNDED_ROTATION,
    "revolute_unbounded_unaligned": _UNBOUNDED_ROTATION,
    "prismatic_x": _TRANSLATION_1D,
    "prismatic_y": _TRANSLATION_1D,
    "prismatic_z": _TRANSLATION_1D,
    "px": _TRANSLATION_1D,
    "py": _TRANSLATION_1D,
    "pz": _TRANSLATION_1D,
    "prismatic_unaligned": _TRANSLATION_1D,
    "translation": VectorSpace(3, False),
    "spherical": SpecialOrthogonal3(),
    "spherical_zyx": VectorSpace(3, True),
}

_ROOT_OPERATIONS: dict[tuple[str, LieGroupMap], LieGroupOperation] = {
    ("freeflyer", LieGroupMap.RNXSON): CartesianProduct(
        VectorSpace(3, False), SpecialOrthogonal3()
    ),
    ("freeflyer", LieGroupMap.DEFAULT): SpecialEuclidean3(),
    ("planar", LieGroupMap.RNXSON): CartesianProduct(
        VectorSpace(2, False), SpecialOrthogonal2()
    ),
    ("planar", LieGroupMap.DEFAULT): SpecialEuclidean2(),
}


def operation_for_joint(
    joint_type, lie_group_map=LieGroupMap.RNXSON
) -> LieGroupOperation:
    """Return the Lie group of a joint type under the given map.

    Free-flyer and planar joints map to R^n x SO(n) under
    ``LieGroupMap.RNXSON`` and to SE(n) under ``LieGroupMap.DEFAULT``.
    """
    lie_group_map = LieGroupMap(lie_group_map)
    key = str(getattr(joint_type, "value", joint_type)).lower()
    root = _ROOT_OPERATIONS.get((key, lie_group_map))
    if root is not None:
        return root
    try:
        return _JOINT_OPERATIONS[key]
    except KeyError:
        raise ValueError(f"no Lie group for joint type {joint_type!r}") from None