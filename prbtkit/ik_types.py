"""Value types shared by the analytic inverse kinematics solver."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum, IntEnum, auto
from typing import Optional, Protocol

import numpy as np

_TWO_PI = 2.0 * math.pi


class IkParameterizationType(IntEnum):
    """Kinds of inverse kinematics parameterization.

    The upper 4 bits hold the minimum degrees of freedom, the next 4 bits
    the number of values used to represent the parameterization and the
    lower bits a unique id.
    """

    NONE = 0
    TRANSFORM_6D = 0x67000001
    ROTATION_3D = 0x34000002
    TRANSLATION_3D = 0x33000003
    DIRECTION_3D = 0x23000004
    RAY_4D = 0x46000005
    LOOKAT_3D = 0x23000006
    TRANSLATION_DIRECTION_5D = 0x56000007
    TRANSLATION_XY_2D = 0x22000008
    TRANSLATION_XY_ORIENTATION_3D = 0x33000009
    TRANSLATION_LOCAL_GLOBAL_6D = 0x3600000A
    TRANSLATION_X_AXIS_ANGLE_4D = 0x4400000B
    TRANSLATION_Y_AXIS_ANGLE_4D = 0x4400000C
    TRANSLATION_Z_AXIS_ANGLE_4D = 0x4400000D
    TRANSLATION_X_AXIS_ANGLE_Z_NORM_4D = 0x4400000E
    TRANSLATION_Y_AXIS_ANGLE_X_NORM_4D = 0x4400000F
    TRANSLATION_Z_AXIS_ANGLE_Y_NORM_4D = 0x44000010

    NUMBER_OF_PARAMETERIZATIONS = 16

    VELOCITY_DATA_BIT = 0x00008000
    TRANSFORM_6D_VELOCITY = 0x67000001 | 0x00008000
    ROTATION_3D_VELOCITY = 0x34000002 | 0x00008000
    TRANSLATION_3D_VELOCITY = 0x33000003 | 0x00008000
    DIRECTION_3D_VELOCITY = 0x23000004 | 0x00008000
    RAY_4D_VELOCITY = 0x46000005 | 0x00008000
    LOOKAT_3D_VELOCITY = 0x23000006 | 0x00008000
    TRANSLATION_DIRECTION_5D_VELOCITY = 0x56000007 | 0x00008000
    TRANSLATION_XY_2D_VELOCITY = 0x22000008 | 0x00008000
    TRANSLATION_XY_ORIENTATION_3D_VELOCITY = 0x33000009 | 0x00008000
    TRANSLATION_LOCAL_GLOBAL_6D_VELOCITY = 0x3600000A | 0x00008000
    TRANSLATION_X_AXIS_ANGLE_4D_VELOCITY = 0x4400000B | 0x00008000
    TRANSLATION_Y_AXIS_ANGLE_4D_VELOCITY = 0x4400000C | 0x00008000
    TRANSLATION_Z_AXIS_ANGLE_4D_VELOCITY = 0x4400000D | 0x00008000
    TRANSLATION_X_AXIS_ANGLE_Z_NORM_4D_VELOCITY = 0x4400000E | 0x00008000
    TRANSLATION_Y_AXIS_ANGLE_X_NORM_4D_VELOCITY = 0x4400000F | 0x00008000
    TRANSLATION_Z_AXIS_ANGLE_Y_NORM_4D_VELOCITY = 0x44000010 | 0x00008000

    UNIQUE_ID_MASK = 0x0000FFFF
    CUSTOM_DATA_BIT = 0x00010000

    @property
    def dof(self) -> int:
        """Minimum degrees of freedom required by this parameterization."""
        return (int(self) >> 28) & 0xF

    @property
    def value_count(self) -> int:
        """Number of values used to represent this parameterization."""
        return (int(self) >> 24) & 0xF

    @property
    def is_velocity(self) -> bool:
        """Whether the data is the time derivative of a parameterization."""
        return self.dof > 0 and bool(int(self) & 0x00008000)


class DiscretizationMethod(Enum):
    """How the redundant joint is discretized when collecting solutions."""

    NO_DISCRETIZATION = auto()
    ALL_DISCRETIZED = auto()
    SOME_DISCRETIZED = auto()
    ALL_RANDOM_SAMPLED = auto()
    SOME_RANDOM_SAMPLED = auto()


class KinematicError(Enum):
    """Reasons reported by a kinematics query."""

    OK = auto()
    UNSUPPORTED_DISCRETIZATION_REQUESTED = auto()
    DISCRETIZATION_NOT_INITIALIZED = auto()
    MULTIPLE_TIPS_NOT_SUPPORTED = auto()
    EMPTY_TIP_POSES = auto()
    IK_SEED_OUTSIDE_LIMITS = auto()
    SOLVER_NOT_ACTIVE = auto()
    NO_SOLUTION = auto()


class KinematicsError(Exception):
    """Raised when a kinematics query fails; carries the reason."""

    def __init__(self, error: KinematicError, message: Optional[str] = None) -> None:
        super().__init__(message if message is not None else error.name)
        self.error = error


def _as_vector(values: Sequence[float], size: int, name: str) -> tuple[float, ...]:
    result = tuple(float(v) for v in values)
    if len(result) != size:
        raise ValueError(f"{name} must have {size} entries, got {len(result)}")
    return result


@dataclass(frozen=True)
class Pose:
    """A position and a unit quaternion orientation given as (x, y, z, w)."""

    position: tuple[float, float, float] = (0.0, 0.0, 0.0)
    orientation: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 1.0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", _as_vector(self.position, 3, "position"))
        object.__setattr__(self, "orientation", _as_vector(self.orientation, 4, "orientation"))

    def to_matrix(self) -> np.ndarray:
        """Return the pose as a 4x4 homogeneous transformation matrix."""
        x, y, z, w = self.orientation
        norm = math.sqrt(x * x + y * y + z * z + w * w)
        if norm == 0.0:
            raise ValueError("orientation quaternion must not be zero")
        x, y, z, w = x / norm, y / norm, z / norm, w / norm
        matrix = np.eye(4)
        matrix[:3, :3] = [
            [1 - 2 * (y * y + z * z), 2 * (x * y - z * w), 2 * (x * z + y * w)],
            [2 * (x * y + z * w), 1 - 2 * (x * x + z * z), 2 * (y * z - x * w)],
            [2 * (x * z - y * w), 2 * (y * z + x * w), 1 - 2 * (x * x + y * y)],
        ]
        matrix[:3, 3] = self.position
        return matrix

    @staticmethod
    def from_matrix(matrix) -> Pose:
        """Build a pose from a 4x4 homogeneous transformation matrix."""
        m = np.asarray(matrix, dtype=float)
        if m.shape != (4, 4):
            raise ValueError(f"expected a 4x4 matrix, got shape {m.shape}")
        r = m[:3, :3]
        trace = r[0, 0] + r[1, 1] + r[2, 2]
        if trace > 0.0:
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
        return Pose(position=tuple(m[:3, 3]), orientation=(x, y, z, w))


@dataclass(frozen=True)
class JointLimits:
    """Position bounds of a single joint."""

    minimum: float
    maximum: float
    has_limits: bool = True


@dataclass(frozen=True)
class IkSolution:
    """One solution of the analytic solver.

    ``free_indices`` names the joints whose values were given as free
    parameters rather than computed.
    """

    values: tuple[float, ...]
    free_indices: tuple[int, ...] = field(default=())

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(float(v) for v in self.values))
        object.__setattr__(self, "free_indices", tuple(int(i) for i in self.free_indices))


class IkSolverBackend(Protocol):
    """The analytic solver generated for a particular kinematic chain."""

    @property
    def num_joints(self) -> int:
        """Number of joints in the chain."""
        ...

    @property
    def free_parameters(self) -> Sequence[int]:
        """Indices of the joints that are free parameters."""
        ...

    @property
    def ik_type(self) -> IkParameterizationType:
        """The parameterization the solver was generated for."""
        ...

    def compute_ik(
        self,
        translation: Sequence[float],
        rotation: Sequence[float],
        free_values: Sequence[float],
    ) -> list[IkSolution]:
        """Return all solutions for the target; ``rotation`` depends on ``ik_type``."""
        ...

    def compute_fk(self, joint_values: Sequence[float]) -> tuple[Sequence[float], Sequence[float]]:
        """Return the translation (3 values) and row-major rotation (9 values)."""
        ...


def enforce_limits(value: float, minimum: float, maximum: float) -> float:
    """Shift ``value`` by multiples of 2*pi towards [minimum, maximum]."""
    if math.isinf(value):
        raise ValueError("joint value must be finite")
    while value > maximum:
        value -= _TWO_PI
    while value < minimum:
        value += _TWO_PI
    return value


def next_count(count: int, max_count: int, min_count: int) -> Optional[int]:
    """Return the next search step, alternating around zero, or None when exhausted."""
    if count > 0:
        if -count >= min_count:
            return -count
        if count + 1 <= max_count:
            return count + 1
        return None
    if 1 - count <= max_count:
        return 1 - count
    if count - 1 >= min_count:
        return count - 1
    return None