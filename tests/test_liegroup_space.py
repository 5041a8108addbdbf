import numpy as np
import pytest

from rigidspace.liegroup_space import LiegroupSpace
from rigidspace.liegroups import (
    DerivativeProduct,
    SpecialOrthogonal2,
    SpecialOrthogonal3,
    VectorSpace,
)

EPS = 1e-6


def _random_config(space, seed=0):
    rng = np.random.default_rng(seed)
    return space.integrate(space.neutral(), rng.uniform(-1.0, 1.0, space.nv))


def _mixed_space():
    return LiegroupSpace.r3() * LiegroupSpace.so3() * LiegroupSpace.se2()


@pytest.mark.parametrize(
    "factory, nq, nv",
    [
        (LiegroupSpace.so2, 2, 1),
        (LiegroupSpace.so3, 4, 3),
        (LiegroupSpace.se2, 4, 3),
        (LiegroupSpace.se3, 7, 6),
        (LiegroupSpace.r2xso2, 4, 3),
        (LiegroupSpace.r3xso3, 7, 6),
        (LiegroupSpace.r3, 3, 3),
        (LiegroupSpace.empty, 0, 0),
    ],
)
def test_factory_sizes(factory, nq, nv):
    space = factory()
    assert space.nq == nq
    assert space.nv == nv
    assert space.neutral().shape == (nq,)


def test_rn_equals_fixed_size_spaces():
    assert LiegroupSpace.rn(3) == LiegroupSpace.r3()
    assert LiegroupSpace.rn(2) == LiegroupSpace.r2()
    assert LiegroupSpace.r1(True) != LiegroupSpace.r1(False)


def test_neutral_of_se3_is_identity():
    np.testing.assert_allclose(
        LiegroupSpace.se3().neutral(), [0, 0, 0, 0, 0, 0, 1]
    )


def test_name_joins_components():
    space = LiegroupSpace([VectorSpace(2), SpecialOrthogonal3()])
    assert space.name == "R^2*SO(3)"
    assert LiegroupSpace.empty().name == ""


def test_component_sizes_and_bad_rank():
    space = _mixed_space()
    assert [space.nq_of(i) for i in range(3)] == [3, 4, 4]
    assert [space.nv_of(i) for i in range(3)] == [3, 3, 3]
    with pytest.raises(IndexError):
        space.nq_of(3)


def test_integrate_difference_round_trip():
    space = _mixed_space()
    q0 = _random_config(space, 1)
    q1 = _random_config(space, 2)
    v = space.difference(q0, q1)
    assert v.shape == (space.nv,)
    np.testing.assert_allclose(space.integrate(q0, v), q1, atol=1e-9)


def test_exp_is_integration_from_neutral():
    space = LiegroupSpace.se3()
    v = np.array([0.1, -0.2, 0.3, 0.4, 0.0, -0.1])
    np.testing.assert_allclose(space.exp(v), space.integrate(space.neutral(), v))
    np.testing.assert_allclose(space.difference(space.neutral(), space.exp(v)), v, atol=1e-9)


def test_interpolate_endpoints_and_midpoint():
    space = _mixed_space()
    q0 = _random_config(space, 3)
    q1 = _random_config(space, 4)
    np.testing.assert_allclose(space.interpolate(q0, q1, 0.0), q0)
    np.testing.assert_allclose(space.interpolate(q0, q1, 1.0), q1, atol=1e-9)
    mid = space.interpolate(q0, q1, 0.5)
    np.testing.assert_allclose(
        space.difference(q0, mid), 0.5 * space.difference(q0, q1), atol=1e-9
    )


def test_size_mismatch_raises():
    space = LiegroupSpace.so3()
    with pytest.raises(ValueError):
        space.integrate([0, 0, 0, 1], [0.0, 0.0])
    with pytest.raises(ValueError):
        space.difference([0, 0, 1], [0, 0, 0, 1])


def test_non_operation_rejected():
    with pytest.raises(TypeError):
        LiegroupSpace(["R^3"])


def _numeric_dintegrate_dv(space, q, v):
    base = space.integrate(q, v)
    columns = []
    for i in range(space.nv):
        step = np.zeros(space.nv)
        step[i] = EPS
        columns.append(space.difference(base, space.integrate(q, v + step)) / EPS)
    return np.column_stack(columns)


def _numeric_dintegrate_dq(space, q, v):
    base = space.integrate(q, v)
    columns = []
    for i in range(space.nv):
        step = np.zeros(space.nv)
        step[i] = EPS
        moved = space.integrate(q, step)
        columns.append(space.difference(base, space.integrate(moved, v)) / EPS)
    return np.column_stack(columns)


def test_dintegrate_dv_matches_finite_differences():
    space = _mixed_space()
    q = _random_config(space, 5)
    v = np.random.default_rng(6).uniform(-0.5, 0.5, space.nv)
    jacobian = space.dintegrate_dv(q, v, np.eye(space.nv))
    np.testing.assert_allclose(
        jacobian, _numeric_dintegrate_dv(space, q, v), atol=1e-4
    )


def test_dintegrate_dq_matches_finite_differences():
    space = _mixed_space()
    q = _random_config(space, 7)
    v = np.random.default_rng(8).uniform(-0.5, 0.5, space.nv)
    jacobian = space.dintegrate_dq(q, v, np.eye(space.nv))
    np.testing.assert_allclose(
        jacobian, _numeric_dintegrate_dq(space, q, v), atol=1e-4
    )


def test_ddifference_dq1_matches_finite_differences():
    space = _mixed_space()
    q0 = _random_config(space, 9)
    q1 = _random_config(space, 10)
    base = space.difference(q0, q1)
    columns = []
    for i in range(space.nv):
        step = np.zeros(space.nv)
        step[i] = EPS
        columns.append((space.difference(q0, space.integrate(q1, step)) - base) / EPS)
    jacobian = space.ddifference_dq1(q0, q1, np.eye(space.nv))
    np.testing.assert_allclose(jacobian, np.column_stack(columns), atol=1e-4)


def test_ddifference_dq0_matches_finite_differences():
    space = _mixed_space()
    q0 = _random_config(space, 11)
    q1 = _random_config(space, 12)
    base = space.difference(q0, q1)
    columns = []
    for i in range(space.nv):
        step = np.zeros(space.nv)
        step[i] = EPS
        columns.append((space.difference(space.integrate(q0, step), q1) - base) / EPS)
    jacobian = space.ddifference_dq0(q0, q1, np.eye(space.nv))
    np.testing.assert_allclose(jacobian, np.column_stack(columns), atol=1e-4)


def test_vector_space_ddifference_dq0_negates():
    space = LiegroupSpace.rn(3)
    matrix = np.arange(6.0).reshape(3, 2)
    result = space.ddifference_dq0(np.zeros(3), np.ones(3), matrix)
    np.testing.assert_allclose(result, -matrix)
    np.testing.assert_allclose(matrix, np.arange(6.0).reshape(3, 2))


def test_side_controls_product_order():
    space = _mixed_space()
    q = _random_config(space, 13)
    v = np.random.default_rng(14).uniform(-0.5, 0.5, space.nv)
    derivative = space.dintegrate_dv(q, v, np.eye(space.nv))
    matrix = np.random.default_rng(15).normal(size=(space.nv, space.nv))
    left = space.dintegrate_dv(q, v, matrix)
    right = space.dintegrate_dv(
        q, v, matrix, DerivativeProduct.INPUT_TIMES_DERIVATIVE
    )
    np.testing.assert_allclose(left, derivative @ matrix, atol=1e-12)
    np.testing.assert_allclose(right, matrix @ derivative, atol=1e-12)


def test_jacobian_shape_checked():
    space = LiegroupSpace.so3()
    with pytest.raises(ValueError):
        space.dintegrate_dv([0, 0, 0, 1], [0, 0, 0], np.eye(2))
    with pytest.raises(ValueError):
        space.dintegrate_dv(
            [0, 0, 0, 1],
            [0, 0, 0],
            np.zeros((3, 2)),
            DerivativeProduct.INPUT_TIMES_DERIVATIVE,
        )


def test_jdifference_returns_both_derivatives():
    space = LiegroupSpace.se2()
    q0 = _random_config(space, 16)
    q1 = _random_config(space, 17)
    identity = np.eye(space.nv)
    j0, j1 = space.jdifference(q0, q1, identity, identity, False)
    np.testing.assert_allclose(j0, space.ddifference_dq0(q0, q1, identity))
    np.testing.assert_allclose(j1, space.ddifference_dq1(q0, q1, identity))


def test_merge_vector_spaces():
    space = LiegroupSpace(
        [VectorSpace(1, True), SpecialOrthogonal2(), VectorSpace(2), VectorSpace(3)]
    )
    space.merge_vector_spaces()
    assert space.types == (VectorSpace(1, True), SpecialOrthogonal2(), VectorSpace(5))
    assert space.nq == 8
    assert space.nv == 7


def test_vector_spaces_merged_leaves_original():
    space = LiegroupSpace([VectorSpace(2), VectorSpace(1)])
    merged = space.vector_spaces_merged()
    assert merged == LiegroupSpace.rn(3)
    assert len(space.types) == 2


def test_product_merges_vector_spaces():
    assert LiegroupSpace.rn(2) * LiegroupSpace.rn(3) == LiegroupSpace.rn(5)
    assert LiegroupSpace.r1() * LiegroupSpace.r1() == LiegroupSpace.r2()


def test_product_of_different_groups():
    space = LiegroupSpace.r3() * LiegroupSpace.so3()
    assert space.nq == 7
    assert space != LiegroupSpace.r3xso3()
    assert not space.is_vector_space()
    assert (LiegroupSpace.r2() * LiegroupSpace.r3()).is_vector_space()


def test_imul_mutates_in_place():
    space = LiegroupSpace.so2()
    other = LiegroupSpace.r2()
    same = space
    space *= other
    assert space is same
    assert space.nq == 4
    np.testing.assert_allclose(
        space.neutral(),
        np.concatenate([LiegroupSpace.so2().neutral(), other.neutral()]),
    )


def test_power():
    cube = LiegroupSpace.so2() ** 3
    assert cube.nq == 6
    assert cube.nv == 3
    assert cube.name == "SO(2)*SO(2)*SO(2)"
    assert LiegroupSpace.r1() ** 4 == LiegroupSpace.rn(4)
    assert LiegroupSpace.so3() ** 0 == LiegroupSpace.empty()
    with pytest.raises(ValueError):
        LiegroupSpace.so3() ** -1


def test_empty_space_is_vector_space():
    empty = LiegroupSpace.empty()
    assert empty.is_vector_space()
    assert empty.integrate([], []).shape == (0,)