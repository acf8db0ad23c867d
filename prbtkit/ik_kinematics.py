"""Kinematics front end around an analytic inverse kinematics solver."""

from __future__ import annotations

import logging
import math
import random
from collections.abc import Mapping, Sequence
from typing import Optional, Union

import numpy as np

from prbtkit.ik_types import (
    DiscretizationMethod,
    IkParameterizationType,
    IkSolution,
    IkSolverBackend,
    JointLimits,
    KinematicError,
    KinematicsError,
    Pose,
    enforce_limits,
)

_LOGGER = logging.getLogger("ikfast")

#: Tolerance used when checking joint limits, in case a joint starts at its limit.
LIMIT_TOLERANCE = 0.0000001

#: Frames at the ends of the chain the analytic solution was generated for.
IKFAST_TIP_FRAME = "flange"
IKFAST_BASE_FRAME = "base_link"

DEFAULT_SEARCH_DISCRETIZATION = 0.1

_TWO_PI = 2.0 * math.pi

_P = IkParameterizationType

_MATRIX_TYPES = {_P.TRANSFORM_6D, _P.TRANSLATION_3D}
_DIRECTION_TYPES = {_P.DIRECTION_3D, _P.RAY_4D, _P.TRANSLATION_DIRECTION_5D}
_UNSUPPORTED_TYPES = {
    _P.TRANSLATION_X_AXIS_ANGLE_4D,
    _P.TRANSLATION_Y_AXIS_ANGLE_4D,
    _P.TRANSLATION_Z_AXIS_ANGLE_4D,
    _P.TRANSLATION_LOCAL_GLOBAL_6D,
    _P.ROTATION_3D,
    _P.LOOKAT_3D,
    _P.TRANSLATION_XY_2D,
    _P.TRANSLATION_XY_ORIENTATION_3D,
}


def _rpy(rotation: np.ndarray) -> tuple[float, float, float]:
    """Return roll, pitch and yaw of a 3x3 rotation matrix."""
    epsilon = 1e-12
    pitch = math.atan2(-rotation[2, 0], math.sqrt(rotation[0, 0] ** 2 + rotation[1, 0] ** 2))
    if abs(pitch) > math.pi / 2.0 - epsilon:
        yaw = math.atan2(-rotation[0, 1], rotation[1, 1])
        roll = 0.0
    else:
        roll = math.atan2(rotation[2, 1], rotation[2, 2])
        yaw = math.atan2(rotation[1, 0], rotation[0, 0])
    return roll, pitch, yaw


def _transform(matrix, name: str) -> tuple[np.ndarray, bool]:
    if matrix is None:
        return np.eye(4), False
    m = np.asarray(matrix, dtype=float)
    if m.shape != (4, 4):
        raise ValueError(f"{name} must be a 4x4 matrix, got shape {m.shape}")
    return m, not np.allclose(m, np.eye(4), rtol=0.0, atol=1e-12)


class IKFastKinematics:
    """Joint limits, frames and redundancy handling for an analytic IK solver.

    ``joint_names`` and ``joint_limits`` are ordered from the base to the tip.
    ``group_tip_to_chain_tip`` and ``chain_base_to_group_base`` are fixed
    transforms between the group's frames and the solver chain's frames;
    ``None`` means identity.
    """

    supported_methods = (
        DiscretizationMethod.NO_DISCRETIZATION,
        DiscretizationMethod.ALL_DISCRETIZED,
        DiscretizationMethod.ALL_RANDOM_SAMPLED,
    )

    def __init__(
        self,
        backend: IkSolverBackend,
        joint_names: Sequence[str],
        joint_limits: Sequence[JointLimits],
        tip_frame: str,
        base_frame: str,
        search_discretization: float = DEFAULT_SEARCH_DISCRETIZATION,
        *,
        link_names: Sequence[str] = (),
        link_prefix: str = "",
        group_tip_to_chain_tip=None,
        chain_base_to_group_base=None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.backend = backend
        self.num_joints = int(backend.num_joints)
        self.tip_frame = tip_frame
        self.base_frame = base_frame
        self.link_prefix = link_prefix
        self.link_names = list(link_names)
        self._rng = rng if rng is not None else random.Random()

        self.group_tip_to_chain_tip, self.tip_transform_required = _transform(
            group_tip_to_chain_tip, "group_tip_to_chain_tip"
        )
        self.chain_base_to_group_base, self.base_transform_required = _transform(
            chain_base_to_group_base, "chain_base_to_group_base"
        )

        self.free_params = [int(p) for p in backend.free_parameters]
        self.redundant_joint_indices: list[int] = []
        self.redundant_joint_discretization: dict[int, float] = {}
        if len(self.free_params) > 1:
            raise ValueError("Only one free joint parameter supported!")
        if len(self.free_params) == 1:
            self.redundant_joint_indices = [self.free_params[0]]
            self.redundant_joint_discretization = {self.free_params[0]: float(search_discretization)}

        self.joint_names = list(joint_names)
        self.joint_limits = list(joint_limits)
        if len(self.joint_names) != len(self.joint_limits):
            raise ValueError("Every joint needs exactly one set of limits")
        if len(self.joint_names) != self.num_joints:
            raise ValueError(
                f"Joint numbers of robot model ({len(self.joint_names)}) and "
                f"IKFast solver ({self.num_joints}) do not match"
            )
        for name, limits in zip(self.joint_names, self.joint_limits):
            _LOGGER.debug("%s %s %s %s", name, limits.minimum, limits.maximum, limits.has_limits)

        self.initialized = True

    @property
    def chain_tip_frame(self) -> str:
        return self.link_prefix + IKFAST_TIP_FRAME

    @property
    def chain_base_frame(self) -> str:
        return self.link_prefix + IKFAST_BASE_FRAME

    def set_search_discretization(self, discretization: Mapping[int, float]) -> None:
        """Replace the discretization of the redundant joint.

        Only the entry with the smallest joint index is used.
        """
        if not discretization:
            raise ValueError("The 'discretization' map is empty")
        if not self.redundant_joint_indices:
            raise ValueError("This group's solver doesn't support redundant joints")
        index = min(discretization)
        value = float(discretization[index])
        redundant = self.redundant_joint_indices[0]
        if index != redundant:
            raise ValueError(
                f"Attempted to discretize a non-redundant joint {index}, only joint "
                f"'{self.joint_names[self.free_params[0]]}' with index {redundant} is redundant."
            )
        if value <= 0.0:
            raise ValueError("Discretization can not takes values that are <= 0")
        self.redundant_joint_discretization = {redundant: value}

    def set_redundant_joints(self, indices: Sequence[int]) -> None:
        """Always refused: the redundant joint is fixed by the solver."""
        raise RuntimeError("Changing the redundant joints isn't permitted by this group's solver")

    def transform_to_chain_frame(self, pose: Pose) -> np.ndarray:
        """Return ``pose``, given in the group's frames, as a 4x4 matrix in the chain's frames."""
        matrix = pose.to_matrix()
        if self.tip_transform_required:
            matrix = matrix @ self.group_tip_to_chain_tip
        if self.base_transform_required:
            matrix = self.chain_base_to_group_base @ matrix
        return matrix

    def solve(self, pose: Union[Pose, np.ndarray], free_values: Sequence[float]) -> list[IkSolution]:
        """Call the analytic solver for a pose in the chain frame.

        Parameterizations that cannot be served from a pose give no solutions.
        """
        frame = pose.to_matrix() if isinstance(pose, Pose) else np.asarray(pose, dtype=float)
        if frame.shape != (4, 4):
            raise ValueError(f"expected a 4x4 matrix, got shape {frame.shape}")
        translation = [float(v) for v in frame[:3, 3]]
        rotation = frame[:3, :3]
        free = [float(v) for v in free_values]

        try:
            ik_type = IkParameterizationType(int(self.backend.ik_type))
        except ValueError:
            ik_type = None

        if ik_type in _MATRIX_TYPES:
            data = [float(v) for v in rotation.reshape(9)]
        elif ik_type in _DIRECTION_TYPES:
            data = [float(v) for v in rotation @ np.array([0.0, 0.0, 1.0])]
        elif ik_type in _UNSUPPORTED_TYPES:
            _LOGGER.error("IK for this IkParameterizationType not implemented yet.")
            return []
        elif ik_type is _P.TRANSLATION_X_AXIS_ANGLE_Z_NORM_4D:
            data = [_rpy(rotation)[2]]
        elif ik_type is _P.TRANSLATION_Y_AXIS_ANGLE_X_NORM_4D:
            data = [_rpy(rotation)[0]]
        elif ik_type is _P.TRANSLATION_Z_AXIS_ANGLE_Y_NORM_4D:
            data = [_rpy(rotation)[1]]
        else:
            _LOGGER.error(
                "Unknown IkParameterizationType! "
                "Was the solver generated with an incompatible version of Openrave?"
            )
            return []
        return list(self.backend.compute_ik(translation, data, free))

    def solution(self, ik_solution: IkSolution, seed: Optional[Sequence[float]] = None) -> list[float]:
        """Return joint values of a solution, wrapped into the joint limits.

        With a ``seed``, limited joints are further rotated by 2*pi where this
        brings them nearer to the seed without leaving their limits.
        """
        values = list(ik_solution.values)
        if len(values) != self.num_joints:
            raise ValueError(f"solution must have {self.num_joints} values, got {len(values)}")
        for i, limits in enumerate(self.joint_limits):
            if not limits.has_limits:
                continue
            value = enforce_limits(values[i], limits.minimum, limits.maximum)
            if seed is not None:
                distance = value - seed[i]
                while distance > math.pi and value - _TWO_PI > limits.minimum - LIMIT_TOLERANCE:
                    distance -= _TWO_PI
                    value -= _TWO_PI
                while distance < -math.pi and value + _TWO_PI < limits.maximum + LIMIT_TOLERANCE:
                    distance += _TWO_PI
                    value += _TWO_PI
            values[i] = value
        return values

    def obeys_limits(self, values: Sequence[float], tolerance: float = LIMIT_TOLERANCE) -> bool:
        """Whether every limited joint lies within its bounds widened by ``tolerance``."""
        return all(
            not limits.has_limits
            or not (value < limits.minimum - tolerance or value > limits.maximum + tolerance)
            for value, limits in zip(values, self.joint_limits)
        )

    def sample_redundant_joint(self, method: DiscretizationMethod, seed_value: float) -> list[float]:
        """Return values of the redundant joint to try, starting with ``seed_value``."""
        if not self.redundant_joint_indices:
            raise ValueError("This group's solver doesn't support redundant joints")
        index = self.redundant_joint_indices[0]
        step = self.redundant_joint_discretization[index]
        limits = self.joint_limits[index]
        samples = [float(seed_value)]

        if method is DiscretizationMethod.ALL_DISCRETIZED:
            steps = max(0, math.ceil((limits.maximum - limits.minimum) / step))
            samples.extend(limits.minimum + step * i for i in range(steps))
            samples.append(limits.maximum)
        elif method is DiscretizationMethod.ALL_RANDOM_SAMPLED:
            steps = max(1, math.ceil((limits.maximum - limits.minimum) / step))
            samples.extend(self._rng.uniform(limits.minimum, limits.maximum) for _ in range(steps))
        elif method is not DiscretizationMethod.NO_DISCRETIZATION:
            raise KinematicsError(
                KinematicError.UNSUPPORTED_DISCRETIZATION_REQUESTED,
                f"Discretization method {method} is not supported",
            )
        return samples

    def get_position_fk(self, link_names: Sequence[str], joint_angles: Sequence[float]) -> list[Pose]:
        """Return the pose of the tip frame for the given joint angles."""
        ik_type = self.backend.ik_type
        if int(ik_type) != int(IkParameterizationType.TRANSFORM_6D):
            raise ValueError("Can only compute FK for Transform6D IK type!")
        if not link_names:
            raise ValueError("Link names with nothing")
        if len(link_names) != 1 or link_names[0] != self.tip_frame:
            raise ValueError(f"Can compute FK for {self.tip_frame} only")
        if len(joint_angles) != self.num_joints:
            raise ValueError("Unexpected number of joint angles")

        translation, rotation = self.backend.compute_fk([float(a) for a in joint_angles])
        matrix = np.eye(4)
        matrix[:3, 3] = [float(v) for v in translation]
        matrix[:3, :3] = np.asarray(rotation, dtype=float).reshape(3, 3)
        return [Pose.from_matrix(matrix)]