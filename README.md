# legguide

Building blocks for controlling a four-legged robot in Python:

- `legguide.quadprog` - a dense Goldfarb-Idnani solver for strictly convex
  quadratic programs with equality and inequality constraints
  (`solve_quadprog`), the Cholesky helpers `cholesky_decomposition` and
  `cholesky_solve`, and the errors `QuadProgError`, `LinearDependenceError`
  and `CholeskyError`.
- `legguide.filters` - a first-order `LowPassFilter` whose first sample
  seeds its output.
- `legguide.leg` - forward and inverse kinematics, Jacobian, joint
  velocities and joint torques for one three-joint leg (`QuadrupedLeg`,
  `FrameType`).
- `legguide.robot` - a whole robot (`QuadrupedRobot`), with ready-made
  `a1_robot` and `go1_robot` models and a `RobotState` snapshot that can be
  built from an IMU quaternion with `RobotState.from_quaternion`.
- `legguide.balance` - `BalanceCtrl`, which spreads a desired body
  acceleration over the standing feet under friction-pyramid limits;
  `BalanceCtrl.from_robot` gives one with standard weights.
- `legguide.estimator` - a Kalman-filter `Estimator` of body position and
  velocity from leg kinematics and the IMU.
- `legguide.keyboard` - `KeyboardPanel`, which turns key presses handed to
  it (`press`, `feed`) into a `UserCommand` and `UserValue` stick values.
- `legguide.wireless` - `RemoteData` and `RemoteButtons` for the 40-byte
  wireless remote packet, and `WirelessHandle`, which turns such packets
  into a `UserCommand` and stick values with a dead zone (`dead_zone`).
- `legguide.sdk_const` - robot types (`LeggedType`, `HighLevelType`),
  receive modes (`RecvMode`), leg and joint indices (`joint_index`), joint
  limits (`joint_limits`, `JointLimits.clamp`), default UDP ports and
  addresses, and LCM channel names.
- `legguide.sdk_v32` - packed little-endian low- and high-level messages
  (`LowState`, `LowCmd`, `HighState`, `HighCmd` and their parts) with
  `pack` and `unpack`.

## Installing

```
pip install .
```

The only runtime dependency is numpy.

## Example

```python
import numpy as np
from legguide.quadprog import solve_quadprog

# minimise 0.5 x'Gx + g0'x subject to x0 + x1 - 1 = 0 and x >= 0
g = np.eye(2)
g0 = np.array([-1.0, -1.0])
ce = np.array([[1.0], [1.0]])
ce0 = np.array([-1.0])
ci = np.eye(2)
ci0 = np.zeros(2)
x, value = solve_quadprog(g, g0, ce, ce0, ci, ci0)
```

Constraint matrices hold one constraint per column, as `CE.T @ x + ce0 = 0`
and `CI.T @ x + ci0 >= 0`. The returned value is `inf` when the problem is
infeasible.

## What it does not do

The package computes and encodes; it does not talk to a robot. There is no
UDP or LCM transport, no link to a simulator, no control loop or state
machine to run, and no command to start. `KeyboardPanel` does not read the
terminal itself; keys must be passed to it. Message layouts are provided
for protocol version 3.2 only.

## Tests

```
pip install .[test]
pytest
```