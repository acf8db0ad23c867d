# prbtkit

Building blocks for a six-axis manipulator. The package wraps an analytic inverse-kinematics solver and defines the error types used by the safety components. It does not depend on any robot middleware.

## What it contains

- `prbtkit.exceptions`: the error types.
  - `BrakeTestExecutorException`, `BrakeTestUtilsException` and its subclass `GetCurrentJointStatesException`.
  - `CANOpenBrakeTestAdapterException`. It carries an `error_value`, which defaults to `BrakeTestErrorCode.FAILURE`.
  - `ModbusMsgWrapperException` and its subclasses `ModbusMsgOperationModeWrapperException` and `ModbusMsgBrakeTestWrapperException`.
  - `PilzModbusClientException`.
- `prbtkit.ik_types`: the value types for inverse kinematics.
  - `Pose` holds a position and an `(x, y, z, w)` quaternion. It converts to and from 4x4 matrices with `to_matrix` and `from_matrix`.
  - `JointLimits`, `IkSolution` and `IkParameterizationType`. The parameterization type has `dof`, `value_count` and `is_velocity`.
  - `DiscretizationMethod`, `KinematicError`, and the exception `KinematicsError`, which carries a `KinematicError`.
  - `enforce_limits(value, minimum, maximum)` shifts a value by multiples of 2π towards its bounds.
  - `next_count(count, max_count, min_count)` yields the search steps 1, -1, 2, -2, … and returns `None` once both bounds are exhausted.
  - `IkSolverBackend` is the protocol an analytic solver implements.
- `prbtkit.ik_kinematics`: `IKFastKinematics` wraps a solver backend. It handles:
  - joint limits (`solution`, `obeys_limits`, with `LIMIT_TOLERANCE`),
  - fixed transforms between the group frames and the solver chain frames (`transform_to_chain_frame`),
  - calling the solver for the backend's parameterization (`solve`),
  - the redundant joint (`set_search_discretization`, `sample_redundant_joint`),
  - forward kinematics of the tip frame (`get_position_fk`).

## Install

```
pip install .
```

## Example

```python
import math

from prbtkit.ik_kinematics import IKFastKinematics
from prbtkit.ik_types import (
    IkParameterizationType, IkSolution, JointLimits, Pose, next_count,
)


class FixedBackend:
    num_joints = 2
    free_parameters = ()
    ik_type = IkParameterizationType.TRANSFORM_6D

    def compute_ik(self, translation, rotation, free_values):
        return [IkSolution((4.0, 0.5))]

    def compute_fk(self, joint_values):
        return (0.1, 0.2, 0.3), (1, 0, 0, 0, 1, 0, 0, 0, 1)


kin = IKFastKinematics(
    FixedBackend(),
    ["joint_1", "joint_2"],
    [JointLimits(-3.0, 3.0), JointLimits(-1.0, 1.0)],
    tip_frame="tool",
    base_frame="world",
)

values = kin.solution(kin.solve(Pose(), [])[0], seed=[0.0, 0.0])
assert math.isclose(values[0], 4.0 - 2 * math.pi)
assert kin.obeys_limits(values)

pose = kin.get_position_fk(["tool"], [0.0, 0.0])[0]
assert pose.position == (0.1, 0.2, 0.3)

steps, count = [], 0
while (count := next_count(count, 2, -2)) is not None:
    steps.append(count)
assert steps == [1, -1, 2, -2]
```

## What it does not do

- It has no inverse-kinematics query functions. Nothing picks the solution closest to a seed, collects all solutions within limits, or searches the redundant joint with a validity callback. `IKFastKinematics` provides the pieces that such a query would be built from.
- It contains no solver. A backend implementing `IkSolverBackend` has to be supplied.
- It does not read Modbus messages or run a run-permitted state machine. Only the exception types for those components are defined here.
- It has no command-line program.

## Running the tests

```
pip install .[test]
pytest
```