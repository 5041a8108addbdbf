"""Helpers used when a robot description is loaded into a model."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from rigidspace.model import JointType, Model

__all__ = [
    "JointLinearConstraint",
    "MimicSpec",
    "make_model_path",
    "build_root_joint",
    "normalize_prefix",
    "set_prefix",
    "set_root_joint_bounds",
    "mimic_constraints",
]

_ROOT_JOINTS = {
    "freeflyer": JointType.FREEFLYER,
    "planar": JointType.PLANAR,
    "prismatic_x": JointType.PX,
    "prismatic_y": JointType.PY,
    "translation3d": JointType.TRANSLATION,
}

# Bound on the components of a unit quaternion or unit complex number.
_UNIT_BOUND = 1.01


@dataclass(frozen=True)
class JointLinearConstraint:
    """Joint whose value is ``multiplier * reference + offset``."""

    joint: int
    reference: int
    multiplier: float = 1.0
    offset: float = 0.0


@dataclass(frozen=True)
class MimicSpec:
    """A joint of a robot description, with the joint it mimics if any."""

    name: str
    mimicked: str | None = None
    multiplier: float = 1.0
    offset: float = 0.0
    fixed: bool = False


def make_model_path(package, kind, model_name, suffix="") -> str:
    """Return ``package://<package>/<kind>/<model_name><suffix>.<kind>``."""
    return f"package://{package}/{kind}/{model_name}{suffix}.{kind}"


def build_root_joint(root_type) -> JointType:
    """Return the joint type of a root joint named as in robot descriptions."""
    try:
        return _ROOT_JOINTS[root_type]
    except (KeyError, TypeError):
        raise ValueError(
            f'Root joint type "{root_type}" is currently not available.'
        ) from None


def normalize_prefix(prefix) -> str:
    """Return ``prefix`` ending with ``/``, or the empty string."""
    if prefix and not prefix.endswith("/"):
        return prefix + "/"
    return prefix or ""


def set_prefix(prefix, model: Model, first_joint, first_frame) -> None:
    """Prefix the names of joints and frames from the given indices on,
    and the names of every geometry object."""
    for joint in model.joints[first_joint:]:
        joint.name = prefix + joint.name
    for frame in model.frames[first_frame:]:
        frame.name = prefix + frame.name
    for geometry in model.geometry_objects:
        geometry.name = prefix + geometry.name


def set_root_joint_bounds(model: Model, root_index, root_type) -> None:
    """Unbound the root translation and bound its rotation components.

    Only free-flyer and planar roots are changed.
    """
    if root_type == "freeflyer":
        translation, rotation = 3, 4
    elif root_type == "planar":
        translation, rotation = 2, 2
    else:
        return
    start = model.joints[root_index].idx_q
    middle = start + translation
    end = middle + rotation
    model.upper_position_limit[start:middle] = math.inf
    model.lower_position_limit[start:middle] = -math.inf
    model.upper_position_limit[middle:end] = _UNIT_BOUND
    model.lower_position_limit[middle:end] = -_UNIT_BOUND


def mimic_constraints(mimics, prefix, model: Model) -> list[JointLinearConstraint]:
    """Return the constraints of the non-fixed joints that mimic another.

    ``mimics`` is a mapping from joint name to :class:`MimicSpec` or an
    iterable of specs; they are handled in order of joint name. Names are
    looked up in ``model`` with ``prefix`` prepended.
    """
    if isinstance(mimics, Mapping):
        specs: Iterable[MimicSpec | None] = (
            mimics[name] for name in sorted(mimics)
        )
    else:
        specs = sorted(
            (spec for spec in mimics if spec is not None), key=lambda s: s.name
        )
    return [
        JointLinearConstraint(
            joint=model.get_joint_id(prefix + spec.name),
            reference=model.get_joint_id(prefix + spec.mimicked),
            multiplier=spec.multiplier,
            offset=spec.offset,
        )
        for spec in specs
        if spec is not None and not spec.fixed and spec.mimicked is not None
    ]