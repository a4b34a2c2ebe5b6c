import numpy as np
import pytest

from legguide.leg import FrameType, QuadrupedLeg

ABAD, HIP, KNEE = 0.08, 0.2, 0.2
OFFSET = (0.1805, -0.047, 0.0)


def make_leg(leg_id=0):
    return QuadrupedLeg(leg_id, ABAD, HIP, KNEE, OFFSET)


@pytest.mark.parametrize("leg_id", [-1, 4, 7])
def test_invalid_leg_id_raises(leg_id):
    with pytest.raises(ValueError):
        QuadrupedLeg(leg_id, ABAD, HIP, KNEE, OFFSET)


@pytest.mark.parametrize("leg_id,sign", [(0, -1), (1, 1), (2, -1), (3, 1)])
def test_side_sign(leg_id, sign):
    assert make_leg(leg_id).side_sign == sign


def test_zero_angles_hang_leg_straight_down():
    p = make_leg(0).foot_position_hip([0.0, 0.0, 0.0])
    np.testing.assert_allclose(p, [0.0, -ABAD, -(HIP + KNEE)], atol=1e-12)


def test_body_position_adds_hip_offset():
    leg = make_leg(1)
    q = [0.1, 0.7, -1.4]
    np.testing.assert_allclose(
        leg.foot_position_body(q) - leg.foot_position_hip(q), OFFSET, atol=1e-12
    )


@pytest.mark.parametrize("leg_id", [0, 1, 2, 3])
@pytest.mark.parametrize("q", [(0.1, 0.7, -1.4), (-0.2, 0.9, -1.8), (0.0, 0.5, -1.0)])
def test_inverse_kinematics_round_trip_hip(leg_id, q):
    leg = make_leg(leg_id)
    p = leg.foot_position_hip(q)
    np.testing.assert_allclose(leg.inverse_kinematics(p, FrameType.HIP), q, atol=1e-9)


def test_inverse_kinematics_round_trip_body():
    leg = make_leg(2)
    q = (0.05, 0.8, -1.5)
    p = leg.foot_position_body(q)
    np.testing.assert_allclose(leg.inverse_kinematics(p, FrameType.BODY), q, atol=1e-9)


def test_inverse_kinematics_rejects_global_frame():
    with pytest.raises(ValueError):
        make_leg().inverse_kinematics([0.0, 0.0, -0.3], FrameType.GLOBAL)


def test_jacobian_matches_finite_differences():
    leg = make_leg(3)
    q = np.array([0.15, 0.6, -1.3])
    jac = leg.jacobian(q)
    h = 1e-6
    for k in range(3):
        dq = np.zeros(3)
        dq[k] = h
        numeric = (leg.foot_position_hip(q + dq) - leg.foot_position_hip(q - dq)) / (2 * h)
        np.testing.assert_allclose(jac[:, k], numeric, atol=1e-7)


def test_joint_velocity_inverts_foot_velocity():
    leg = make_leg(0)
    q = [0.1, 0.7, -1.4]
    qd = np.array([0.3, -0.5, 1.2])
    v = leg.foot_velocity(q, qd)
    np.testing.assert_allclose(leg.joint_velocity(q, v), qd, atol=1e-9)


def test_joint_velocity_at_position():
    leg = make_leg(1)
    q = [-0.1, 0.8, -1.6]
    qd = np.array([-0.4, 0.2, 0.9])
    v = leg.foot_velocity(q, qd)
    p = leg.foot_position_body(q)
    np.testing.assert_allclose(leg.joint_velocity_at(p, v, FrameType.BODY), qd, atol=1e-8)


def test_joint_torque_is_jacobian_transpose_times_force():
    leg = make_leg(2)
    q = [0.1, 0.7, -1.4]
    force = np.array([1.0, -2.0, 30.0])
    tau = leg.joint_torque(q, force)
    # Virtual work: tau . qd equals force . v for any qd.
    qd = np.array([0.2, -0.7, 0.5])
    assert tau @ qd == pytest.approx(force @ leg.foot_velocity(q, qd))


def test_wrong_vector_length_raises():
    with pytest.raises(ValueError):
        make_leg().foot_position_hip([0.0, 0.0])