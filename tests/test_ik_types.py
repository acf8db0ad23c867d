import math

import numpy as np
import pytest

from prbtkit.ik_types import (
    DiscretizationMethod,
    IkParameterizationType,
    IkSolution,
    JointLimits,
    KinematicError,
    KinematicsError,
    Pose,
    enforce_limits,
    next_count,
)


def _count_sequence(max_count, min_count):
    counts = [0]
    while True:
        nxt = next_count(counts[-1], max_count, min_count)
        if nxt is None:
            return counts
        counts.append(nxt)


def test_parameterization_values_fixed_by_source():
    assert IkParameterizationType(0x67000001) is IkParameterizationType.TRANSFORM_6D
    assert (
        IkParameterizationType(0x44000010)
        is IkParameterizationType.TRANSLATION_Z_AXIS_ANGLE_Y_NORM_4D
    )
    assert IkParameterizationType(16) is IkParameterizationType.NUMBER_OF_PARAMETERIZATIONS


def test_velocity_types_carry_velocity_bit():
    vel = IkParameterizationType(0x67000001 | 0x00008000)
    assert vel is IkParameterizationType.TRANSFORM_6D_VELOCITY
    assert vel.is_velocity
    assert not IkParameterizationType(0x67000001).is_velocity


def test_parameterization_bit_fields():
    t6d = IkParameterizationType(0x67000001)
    assert t6d.dof == 6
    assert t6d.value_count == 7
    ray = IkParameterizationType(0x46000005)
    assert (ray & IkParameterizationType.UNIQUE_ID_MASK) == 5


def test_discretization_methods_distinct():
    members = list(DiscretizationMethod)
    assert [DiscretizationMethod(m.value) for m in members] == members
    assert len({m.value for m in members}) == len(members)


def test_kinematics_error_carries_reason():
    err = KinematicsError(KinematicError.NO_SOLUTION, "nothing found")
    assert err.error is KinematicError.NO_SOLUTION
    assert str(err) == "nothing found"
    with pytest.raises(KinematicsError) as info:
        raise KinematicsError(KinematicError.EMPTY_TIP_POSES)
    assert info.value.error is KinematicError.EMPTY_TIP_POSES
    assert str(info.value) == "EMPTY_TIP_POSES"


def test_identity_pose_to_matrix():
    assert np.allclose(Pose().to_matrix(), np.eye(4))


def test_pose_matrix_translation():
    matrix = Pose(position=(1.0, 2.0, 3.0)).to_matrix()
    assert np.allclose(matrix[:3, 3], [1.0, 2.0, 3.0])
    assert np.allclose(matrix[:3, :3], np.eye(3))


def test_from_matrix_rotation_about_z():
    c = math.cos(math.pi / 2)
    s = math.sin(math.pi / 2)
    matrix = np.array([[c, -s, 0, 0], [s, c, 0, 0], [0, 0, 1, 0], [0, 0, 0, 1]])
    pose = Pose.from_matrix(matrix)
    half = math.sqrt(0.5)
    assert np.allclose(pose.orientation, (0.0, 0.0, half, half))


@pytest.mark.parametrize(
    "orientation",
    [
        (0.0, 0.0, 0.0, 1.0),
        (1.0, 0.0, 0.0, 0.0),
        (0.0, 1.0, 0.0, 0.0),
        (0.0, 0.0, 1.0, 0.0),
        (0.3, -0.5, 0.2, 0.7),
        (-0.6, 0.1, 0.4, -0.2),
    ],
)
def test_matrix_round_trip(orientation):
    pose = Pose(position=(0.1, -0.2, 0.3), orientation=orientation)
    matrix = pose.to_matrix()
    restored = Pose.from_matrix(matrix)
    assert np.allclose(restored.to_matrix(), matrix)
    rot = matrix[:3, :3]
    assert np.allclose(rot @ rot.T, np.eye(3))
    assert math.isclose(np.linalg.det(rot), 1.0, rel_tol=1e-9)


def test_from_matrix_rejects_wrong_shape():
    with pytest.raises(ValueError):
        Pose.from_matrix(np.eye(3))


def test_zero_quaternion_rejected():
    with pytest.raises(ValueError):
        Pose(orientation=(0.0, 0.0, 0.0, 0.0)).to_matrix()


def test_pose_rejects_wrong_length():
    with pytest.raises(ValueError):
        Pose(position=(1.0, 2.0))


def test_joint_limits_and_solution_fields():
    limits = JointLimits(-1.0, 1.0)
    assert limits.has_limits
    solution = IkSolution([1, 2, 3], [0])
    assert solution.values == (1.0, 2.0, 3.0)
    assert solution.free_indices == (0,)


def test_enforce_limits_inside_range_unchanged():
    assert enforce_limits(0.5, -1.0, 1.0) == 0.5


def test_enforce_limits_wraps_down():
    result = enforce_limits(3.5, -math.pi, math.pi)
    assert math.isclose(result, 3.5 - 2 * math.pi)


def test_enforce_limits_wraps_up_several_times():
    result = enforce_limits(-20.0, -math.pi, math.pi)
    assert -math.pi <= result <= math.pi
    assert math.isclose((result + 20.0) / (2 * math.pi), round((result + 20.0) / (2 * math.pi)))


def test_enforce_limits_rejects_infinity():
    with pytest.raises(ValueError):
        enforce_limits(math.inf, -1.0, 1.0)


def test_next_count_alternates_symmetric():
    assert _count_sequence(2, -2) == [0, 1, -1, 2, -2]


@pytest.mark.parametrize("max_count,min_count", [(3, -1), (0, -3), (4, 0), (0, 0), (5, -5)])
def test_next_count_covers_range_once(max_count, min_count):
    counts = _count_sequence(max_count, min_count)
    assert sorted(counts) == list(range(min_count, max_count + 1))


def test_next_count_exhausted():
    assert next_count(0, 0, 0) is None