# rigidspace

Lie group configuration spaces and kinematic tree models for rigid-body
robots, built on numpy.

## Modules

- `rigidspace.liegroups`: elementary Lie groups. These are `VectorSpace`,
  `SpecialOrthogonal2` (stored as `(cos, sin)`), `SpecialOrthogonal3`
  (a quaternion `(x, y, z, w)`), `CartesianProduct`, `SpecialEuclidean2`
  and `SpecialEuclidean3`. Each one provides `neutral`, `integrate`,
  `difference`, `interpolate`, `dintegrate_dq`, `dintegrate_dv` and
  `ddifference`. `operation_for_joint` maps a joint type name to its
  group. Under `LieGroupMap.RNXSON`, free-flyer and planar joints map to
  R^n x SO(n). Under `LieGroupMap.DEFAULT` they map to SE(n).
- `rigidspace.liegroup_space`: `LiegroupSpace`, a Cartesian product of
  elementary groups.
  - Constructors: `rn`, `r1`, `r2`, `r3`, `so2`, `so3`, `r2xso2`,
    `r3xso3`, `se2`, `se3` and `empty`.
  - Element operations: `integrate`, `difference`, `interpolate` and
    `exp`.
  - Jacobian products: `dintegrate_dq`, `dintegrate_dv`,
    `ddifference_dq0`, `ddifference_dq1` and `jdifference`. Each takes a
    `DerivativeProduct` side.
  - Products: `*`, `*=` and `**`. They merge neighbouring vector spaces,
    and so does `merge_vector_spaces`.
- `rigidspace.pool`: `Pool`, a thread-safe pool of reusable objects. It
  offers `acquire`, `release`, `push_back`, `extend`, `clear`, and
  `borrowed` for use in a `with` block.
- `rigidspace.extra_config_space`: `ExtraConfigSpace`, extra degrees of
  freedom whose `lower` and `upper` bounds start at minus and plus
  infinity.
- `rigidspace.formatting`: `display_config`, `format_transform` (with
  `OutputFormat.PRETTY`, `CONDENSED` or `ONE_LINE`) and
  `rotation_to_quaternion`.
- `rigidspace.model`: `Model`, a tree of joints (`JointType`), body and
  joint frames, collision geometries and position limits.
  - `add_all_collision_pairs` pairs every two geometries that are
    attached to different joints.
  - `configuration_space` returns the `LiegroupSpace` of the model.
  - `humanoid_simple` builds a test humanoid with a free-flying root.
- `rigidspace.srdf`: `remove_collision_pairs_from_xml` and
  `remove_collision_pairs` drop the collision pairs that the
  `disable_collisions` elements of an SRDF document list. Both return the
  number of pairs removed. The file variant requires a `.srdf`
  extension.
- `rigidspace.loading`: helpers for building a model from a robot
  description. They cover:
  - `make_model_path` for `package://` paths;
  - `build_root_joint` and `set_root_joint_bounds` for the root joint;
  - `normalize_prefix` and `set_prefix` for name prefixes;
  - `mimic_constraints`, which turns `MimicSpec` entries into
    `JointLinearConstraint`s.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Example

```python
import numpy as np
from rigidspace.liegroup_space import LiegroupSpace

space = LiegroupSpace.r3() * LiegroupSpace.so3()
print(space.name)  # R^3*SO(3)

q0 = space.neutral()
v = np.array([0.1, 0.0, 0.0, 0.0, 0.0, 0.2])
q1 = space.integrate(q0, v)
assert np.allclose(space.difference(q0, q1), v)

mid = space.interpolate(q0, q1, 0.5)
```

Building the simple humanoid and removing a collision pair:

```python
from rigidspace.model import humanoid_simple
from rigidspace.srdf import remove_collision_pairs_from_xml

robot = humanoid_simple("simple-humanoid")
q = robot.neutral_configuration()

robot.add_geometry("chest_box", robot.get_body_id("chest"))
robot.add_geometry("arm_box", robot.get_body_id("rarm1"))
robot.add_all_collision_pairs()

removed = remove_collision_pairs_from_xml(
    robot,
    "",
    '<robot><disable_collisions link1="chest" link2="rarm1"/></robot>',
)
print(removed)  # 1
```

## What it does not do

- There is no URDF parser. `rigidspace.loading` holds the helpers used
  around loading, but it reads no URDF file and resolves no `package://`
  path.
- There is no mesh loading.
- `Model` keeps the structure, sizes and limits of a tree. It stores no
  joint placements, inertias or shapes, so it computes no forward
  kinematics, Jacobians, centre of mass or collision checks.
- No command-line program is installed.