"""Kinematic tree of a robot: joints, frames, geometries and bounds."""

from __future__ import annotations

import enum
import sys
from dataclasses import dataclass
from itertools import combinations

import numpy as np

from rigidspace.liegroup_space import LiegroupSpace
from rigidspace.liegroups import LieGroupMap, LieGroupOperation, operation_for_joint

__all__ = [
    "JointType",
    "Joint",
    "Frame",
    "GeometryObject",
    "Model",
    "humanoid_random",
    "humanoid_simple",
]

UNIVERSE = "universe"


class JointType(enum.Enum):
    """Kinds of joints a model can hold."""

    FREEFLYER = "freeflyer"
    PLANAR = "planar"
    RX = "rx"
    RY = "ry"
    RZ = "rz"
    RUBX = "rubx"
    RUBY = "ruby"
    RUBZ = "rubz"
    PX = "px"
    PY = "py"
    PZ = "pz"
    TRANSLATION = "translation"
    SPHERICAL = "spherical"
    SPHERICAL_ZYX = "spherical_zyx"

    def operation(self, lie_group_map=LieGroupMap.RNXSON) -> LieGroupOperation:
        """Lie group of the joint configuration under the given map."""
        return operation_for_joint(self.value, lie_group_map)

    @property
    def nq(self) -> int:
        """Size of the joint configuration."""
        return self.operation().nq

    @property
    def nv(self) -> int:
        """Size of the joint velocity."""
        return self.operation().nv


@dataclass
class Joint:
    """A joint of the tree; the universe has no type and no parent."""

    name: str
    joint_type: JointType | None
    parent: int | None
    idx_q: int
    idx_v: int
    nq: int
    nv: int


@dataclass
class Frame:
    """A named frame attached to a joint."""

    name: str
    parent_joint: int
    previous_frame: int
    is_body: bool


@dataclass
class GeometryObject:
    """A collision geometry attached to a frame."""

    name: str
    parent_frame: int
    parent_joint: int


class Model:
    """Tree of joints with bodies, frames, geometries and position limits."""

    def __init__(self, name=""):
        self.name = name
        self.joints: list[Joint] = [Joint(UNIVERSE, None, None, 0, 0, 0, 0)]
        self.frames: list[Frame] = [Frame(UNIVERSE, 0, 0, False)]
        self.geometry_objects: list[GeometryObject] = []
        self.collision_pairs: list[tuple[int, int]] = []
        self.lower_position_limit = np.zeros(0)
        self.upper_position_limit = np.zeros(0)

    def __repr__(self) -> str:
        return f"Model({self.name!r}, joints={len(self.joints)})"

    @property
    def nq(self) -> int:
        """Size of a configuration of the whole tree."""
        return sum(joint.nq for joint in self.joints)

    @property
    def nv(self) -> int:
        """Size of a velocity of the whole tree."""
        return sum(joint.nv for joint in self.joints)

    @property
    def names(self) -> list[str]:
        """Joint names, the universe first."""
        return [joint.name for joint in self.joints]

    def get_joint_id(self, name) -> int:
        """Index of the joint called ``name``."""
        for index, joint in enumerate(self.joints):
            if joint.name == name:
                return index
        raise KeyError(f"no joint named {name!r}")

    def _joint_frame(self, joint_index: int) -> int:
        for index, frame in enumerate(self.frames):
            if frame.parent_joint == joint_index and not frame.is_body:
                return index
        raise KeyError(f"no frame for joint {joint_index}")

    def add_joint(self, joint_type, parent_name, name) -> int:
        """Add a joint below the joint ``parent_name`` and return its index."""
        joint_type = JointType(joint_type)
        parent = self.get_joint_id(parent_name)
        joint = Joint(
            name=name,
            joint_type=joint_type,
            parent=parent,
            idx_q=self.nq,
            idx_v=self.nv,
            nq=joint_type.nq,
            nv=joint_type.nv,
        )
        self.joints.append(joint)
        index = len(self.joints) - 1
        self.lower_position_limit = np.concatenate(
            [self.lower_position_limit, np.full(joint.nq, -np.inf)]
        )
        self.upper_position_limit = np.concatenate(
            [self.upper_position_limit, np.full(joint.nq, np.inf)]
        )
        self.frames.append(Frame(name, index, self._joint_frame(parent), False))
        return index

    def add_body(self, joint_name, body_name) -> int:
        """Attach a body frame to the joint ``joint_name``; return the frame index."""
        joint = self.get_joint_id(joint_name)
        self.frames.append(Frame(body_name, joint, self._joint_frame(joint), True))
        return len(self.frames) - 1

    def add_joint_and_body(self, joint_type, parent_name, body_name) -> int:
        """Add joint ``<body_name>_joint`` below the joint ``parent_name``
        and body ``body_name`` on it; return the joint index."""
        joint_name = f"{body_name}_joint"
        index = self.add_joint(joint_type, parent_name, joint_name)
        self.add_body(joint_name, body_name)
        return index

    def exist_body_name(self, name) -> bool:
        """Whether a body frame is called ``name``."""
        return any(frame.is_body and frame.name == name for frame in self.frames)

    def get_body_id(self, name) -> int:
        """Frame index of the body called ``name``."""
        for index, frame in enumerate(self.frames):
            if frame.is_body and frame.name == name:
                return index
        raise KeyError(f"no body named {name!r}")

    def add_geometry(self, name, parent_frame) -> int:
        """Attach a geometry to frame ``parent_frame``; return its index."""
        if not 0 <= parent_frame < len(self.frames):
            raise IndexError(f"frame {parent_frame} out of range")
        joint = self.frames[parent_frame].parent_joint
        self.geometry_objects.append(GeometryObject(name, parent_frame, joint))
        return len(self.geometry_objects) - 1

    def add_all_collision_pairs(self) -> None:
        """Pair every two geometries that do not move with the same joint."""
        self.collision_pairs = [
            (i, j)
            for (i, a), (j, b) in combinations(enumerate(self.geometry_objects), 2)
            if a.parent_joint != b.parent_joint
        ]

    def _operations(self, lie_group_map):
        return [
            joint.joint_type.operation(lie_group_map)
            for joint in self.joints
            if joint.joint_type is not None
        ]

    def neutral_configuration(self) -> np.ndarray:
        """Configuration with every joint at its neutral element."""
        neutrals = [op.neutral() for op in self._operations(LieGroupMap.RNXSON)]
        return np.concatenate(neutrals) if neutrals else np.zeros(0)

    def configuration_space(self, lie_group_map=LieGroupMap.RNXSON) -> LiegroupSpace:
        """Lie group of the whole configuration, vector spaces merged."""
        space = LiegroupSpace(self._operations(lie_group_map))
        space.merge_vector_spaces()
        return space


_LIMB = (JointType.RX, JointType.RY, JointType.RZ, JointType.RY, JointType.RY, JointType.RX)


def humanoid_random(model: Model) -> None:
    """Add a humanoid tree with a free-flying root to ``model``."""
    model.add_joint_and_body(JointType.FREEFLYER, UNIVERSE, "root")
    model.lower_position_limit[3:7] = -1.0
    model.upper_position_limit[3:7] = 1.0

    def limb(parent: str, prefix: str, types) -> None:
        for rank, joint_type in enumerate(types, start=1):
            model.add_joint_and_body(joint_type, parent, f"{prefix}{rank}")
            parent = f"{prefix}{rank}_joint"

    limb("root_joint", "lleg", _LIMB)
    limb("root_joint", "rleg", _LIMB)
    model.add_joint_and_body(JointType.RY, "root_joint", "torso1")
    model.add_joint_and_body(JointType.RZ, "torso1_joint", "chest")
    limb("chest_joint", "rarm", _LIMB)
    limb("chest_joint", "larm", _LIMB)


def humanoid_simple(name="humanoidSimple", using_ff=True) -> Model:
    """Return a simple humanoid with bounded root position and quaternion."""
    if not using_ff:
        raise ValueError(
            "Humanoid simple without freefloating base is not supported anymore."
        )
    model = Model(name)
    humanoid_random(model)
    largest = sys.float_info.max
    model.lower_position_limit[0:3] = -largest
    model.upper_position_limit[0:3] = largest
    model.lower_position_limit[3:7] = -1.01
    model.upper_position_limit[3:7] = 1.01
    return model