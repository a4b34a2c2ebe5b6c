import math

import numpy as np
import pytest

from legguide.leg import FrameType
from legguide.robot import QuadrupedRobot, RobotState, a1_robot, go1_robot

LENGTHS = (0.08, 0.2, 0.2)
Q = np.array([0.1, 0.7, -1.4, -0.1, 0.8, -1.5, 0.05, 0.9, -1.6, -0.05, 0.6, -1.3])
QD = np.array([0.2, -0.3, 0.5, -0.1, 0.4, -0.6, 0.3, 0.1, -0.2, 0.0, -0.5, 0.7])


def make_state(**kwargs):
    return RobotState(q=Q, qd=QD, **kwargs)


def test_state_columns_follow_leg_order():
    state = make_state()
    np.testing.assert_allclose(state.q[:, 1], Q[3:6])
    np.testing.assert_allclose(state.qd[:, 3], QD[9:12])


def test_state_rejects_wrong_shape():
    with pytest.raises(ValueError):
        RobotState(q=np.zeros(10), qd=np.zeros(12))


def test_from_quaternion_identity():
    state = RobotState.from_quaternion(Q, QD, [1, 0, 0, 0], [0, 0, 0], [0, 0, 9.81])
    np.testing.assert_allclose(state.rot_mat, np.eye(3), atol=1e-12)


def test_from_quaternion_quarter_turn_about_z():
    h = math.sqrt(0.5)
    state = RobotState.from_quaternion(Q, QD, [h, 0, 0, h], [0, 0, 0], [0, 0, 0])
    np.testing.assert_allclose(state.rot_mat @ [1, 0, 0], [0, 1, 0], atol=1e-12)
    np.testing.assert_allclose(state.rot_mat @ state.rot_mat.T, np.eye(3), atol=1e-12)


def test_mass_properties_for_real_and_simulated():
    assert a1_robot(*LENGTHS, real_robot=True).mass == pytest.approx(12.5)
    assert a1_robot(*LENGTHS, real_robot=False).mass == pytest.approx(13.4)
    assert go1_robot(*LENGTHS, real_robot=True).mass == pytest.approx(10.5)
    assert go1_robot(*LENGTHS, real_robot=False).mass == pytest.approx(12.0)
    np.testing.assert_allclose(go1_robot(*LENGTHS, real_robot=True).pcb, [0.04, 0.0, 0.0])
    np.testing.assert_allclose(np.diag(a1_robot(*LENGTHS).inertia), [0.132, 0.3475, 0.3775])


def test_stand_positions_and_limits():
    robot = go1_robot(*LENGTHS)
    np.testing.assert_allclose(robot.feet_pos_normal_stand[:, 0], [0.1881, -0.13, -0.32])
    np.testing.assert_allclose(robot.vel_limit_yaw, [-0.5, 0.5])
    np.testing.assert_allclose(robot.legs[3].p_hip2b, [-0.1881, 0.04675, 0.0])


def test_robot_needs_four_legs():
    legs = a1_robot(*LENGTHS).legs[:3]
    with pytest.raises(ValueError):
        QuadrupedRobot(legs, np.zeros((3, 4)), (-1, 1), (-1, 1), (-1, 1), 1.0, np.zeros(3), np.eye(3))


def test_foot_position_rejects_global():
    with pytest.raises(ValueError):
        a1_robot(*LENGTHS).foot_position(make_state(), 0, FrameType.GLOBAL)


def test_vec_xp_is_relative_to_first_foot():
    robot = a1_robot(*LENGTHS)
    state = make_state()
    xp = robot.vec_xp(state)
    np.testing.assert_allclose(xp[:, 0], 0.0, atol=1e-12)
    body = robot.feet_positions(state, FrameType.BODY)
    np.testing.assert_allclose(xp[:, 2], body[:, 2] - body[:, 0], atol=1e-12)


def test_global_positions_rotate_body_positions():
    robot = a1_robot(*LENGTHS)
    h = math.sqrt(0.5)
    state = RobotState.from_quaternion(Q, QD, [h, h, 0, 0], [0, 0, 0], [0, 0, 0])
    body = robot.feet_positions(state, FrameType.BODY)
    glob = robot.feet_positions(state, FrameType.GLOBAL)
    np.testing.assert_allclose(glob, state.rot_mat @ body, atol=1e-12)
    np.testing.assert_allclose(np.linalg.norm(glob, axis=0), np.linalg.norm(body, axis=0))


def test_joint_angles_round_trip():
    robot = a1_robot(*LENGTHS)
    state = make_state()
    for frame in (FrameType.BODY, FrameType.HIP):
        feet = robot.feet_positions(state, frame)
        np.testing.assert_allclose(robot.joint_angles(feet, frame), Q, atol=1e-9)


def test_joint_velocities_round_trip():
    robot = go1_robot(*LENGTHS)
    state = make_state()
    pos = robot.feet_positions(state, FrameType.BODY)
    vel = robot.feet_velocities(state, FrameType.BODY)
    np.testing.assert_allclose(robot.joint_velocities(pos, vel, FrameType.BODY), QD, atol=1e-8)


def test_global_velocity_without_rotation_or_spin_equals_body():
    robot = a1_robot(*LENGTHS)
    state = make_state()
    np.testing.assert_allclose(
        robot.feet_velocities(state, FrameType.GLOBAL),
        robot.feet_velocities(state, FrameType.BODY),
        atol=1e-12,
    )


def test_global_velocity_includes_body_spin():
    robot = a1_robot(*LENGTHS)
    gyro = np.array([0.0, 0.0, 1.0])
    state = make_state(gyro=gyro)
    body_vel = robot.feet_velocities(state, FrameType.BODY)
    body_pos = robot.feet_positions(state, FrameType.BODY)
    glob = robot.feet_velocities(state, FrameType.GLOBAL)
    expected = body_vel + np.cross(gyro, body_pos.T).T
    np.testing.assert_allclose(glob, expected, atol=1e-12)


def test_joint_torques_match_leg_jacobians():
    robot = a1_robot(*LENGTHS)
    state = make_state()
    force = np.array([[1.0, 0.0, -1.0, 2.0], [0.5, -0.5, 0.0, 1.0], [30.0, 25.0, 28.0, 32.0]])
    tau = robot.joint_torques(Q, force)
    for i in range(4):
        np.testing.assert_allclose(tau[3 * i:3 * i + 3], robot.jacobian(state, i).T @ force[:, i])


def test_foot_velocity_matches_jacobian():
    robot = go1_robot(*LENGTHS)
    state = make_state()
    np.testing.assert_allclose(
        robot.foot_velocity(state, 2), robot.jacobian(state, 2) @ state.qd[:, 2]
    )