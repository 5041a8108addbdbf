import sys

import numpy as np
import pytest

from rigidspace.liegroups import LieGroupMap
from rigidspace.model import (
    JointType,
    Model,
    humanoid_random,
    humanoid_simple,
)


@pytest.fixture
def humanoid():
    return humanoid_simple()


def test_humanoid_simple_requires_free_flyer():
    with pytest.raises(ValueError, match="not supported anymore"):
        humanoid_simple("robot", using_ff=False)


def test_humanoid_simple_name(humanoid):
    assert humanoid.name == "humanoidSimple"
    assert humanoid_simple("robot").name == "robot"


def test_humanoid_simple_root_limits(humanoid):
    assert np.all(humanoid.lower_position_limit[:3] == -sys.float_info.max)
    assert np.all(humanoid.upper_position_limit[:3] == sys.float_info.max)
    assert np.allclose(humanoid.lower_position_limit[3:7], -1.01)
    assert np.allclose(humanoid.upper_position_limit[3:7], 1.01)


def test_humanoid_random_quaternion_limits():
    model = Model("m")
    humanoid_random(model)
    assert np.allclose(model.lower_position_limit[3:7], -1.0)
    assert np.allclose(model.upper_position_limit[3:7], 1.0)
    assert len(model.lower_position_limit) == model.nq


def test_humanoid_tree_structure(humanoid):
    chest = humanoid.get_joint_id("chest_joint")
    torso = humanoid.get_joint_id("torso1_joint")
    assert humanoid.joints[chest].parent == torso
    root = humanoid.get_joint_id("root_joint")
    assert humanoid.joints[root].parent == humanoid.get_joint_id("universe")
    assert humanoid.joints[root].joint_type is JointType.FREEFLYER
    assert humanoid.joints[humanoid.get_joint_id("larm1_joint")].parent == chest


def test_configuration_indices_are_contiguous(humanoid):
    joints = humanoid.joints[1:]
    for before, after in zip(joints, joints[1:]):
        assert after.idx_q == before.idx_q + before.nq
        assert after.idx_v == before.idx_v + before.nv
    last = joints[-1]
    assert last.idx_q + last.nq == humanoid.nq


def test_neutral_configuration(humanoid):
    q = humanoid.neutral_configuration()
    assert q.shape == (humanoid.nq,)
    assert np.allclose(q[:7], [0, 0, 0, 0, 0, 0, 1])
    assert np.allclose(q[7:], 0.0)


def test_configuration_space_matches_model(humanoid):
    space = humanoid.configuration_space()
    assert space.nq == humanoid.nq
    assert space.nv == humanoid.nv
    assert not space.is_vector_space()
    assert np.allclose(space.neutral(), humanoid.neutral_configuration())


def test_configuration_space_default_map(humanoid):
    space = humanoid.configuration_space(LieGroupMap.DEFAULT)
    assert space.name.startswith("SE(3)*")
    assert space.nq == humanoid.nq


def test_bodies(humanoid):
    assert humanoid.exist_body_name("chest")
    assert not humanoid.exist_body_name("chest_joint")
    frame = humanoid.frames[humanoid.get_body_id("chest")]
    assert frame.is_body
    assert frame.parent_joint == humanoid.get_joint_id("chest_joint")


def test_unknown_names_raise(humanoid):
    with pytest.raises(KeyError):
        humanoid.get_body_id("missing")
    with pytest.raises(KeyError):
        humanoid.get_joint_id("missing")
    with pytest.raises(KeyError):
        humanoid.add_joint(JointType.RX, "missing", "j")


def test_add_joint_extends_limits():
    model = Model("m")
    index = model.add_joint(JointType.PLANAR, "universe", "base")
    assert model.get_joint_id("base") == index
    assert model.nq == JointType.PLANAR.nq
    assert np.all(np.isinf(model.lower_position_limit))
    assert np.all(model.upper_position_limit > 0)


def test_collision_pairs_skip_same_joint():
    model = Model("m")
    model.add_joint_and_body(JointType.RX, "universe", "a")
    model.add_joint_and_body(JointType.RY, "a_joint", "b")
    fa = model.get_body_id("a")
    fb = model.get_body_id("b")
    model.add_geometry("ga1", fa)
    model.add_geometry("ga2", fa)
    model.add_geometry("gb", fb)
    model.add_all_collision_pairs()
    assert model.collision_pairs == [(0, 2), (1, 2)]


def test_add_geometry_bad_frame():
    model = Model("m")
    with pytest.raises(IndexError):
        model.add_geometry("g", 5)


def test_empty_model_neutral():
    model = Model("m")
    assert model.neutral_configuration().shape == (0,)
    assert model.configuration_space().nq == 0