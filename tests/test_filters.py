import math

import pytest

from legguide.filters import LowPassFilter


def test_first_value_seeds_filter():
    lpf = LowPassFilter(0.002, 3.0)
    lpf.add_value(5.0)
    assert lpf.value() == pytest.approx(5.0)


def test_weight_half_when_period_times_frequency_is_one_over_two_pi():
    lpf = LowPassFilter(1.0 / (2.0 * math.pi), 1.0)
    assert lpf.weight == pytest.approx(0.5)
    lpf.add_value(0.0)
    lpf.add_value(1.0)
    assert lpf.value() == pytest.approx(0.5)


def test_output_stays_between_old_value_and_new_sample():
    lpf = LowPassFilter(0.002, 3.0)
    lpf.add_value(0.0)
    previous = lpf.value()
    for _ in range(20):
        lpf.add_value(10.0)
        current = lpf.value()
        assert previous < current < 10.0
        previous = current


def test_converges_to_constant_input():
    lpf = LowPassFilter(0.01, 5.0)
    lpf.add_value(-3.0)
    for _ in range(2000):
        lpf.add_value(2.0)
    assert lpf.value() == pytest.approx(2.0, abs=1e-9)


def test_clear_reseeds_with_next_value():
    lpf = LowPassFilter(0.002, 3.0)
    lpf.add_value(1.0)
    lpf.add_value(4.0)
    lpf.clear()
    lpf.add_value(-7.5)
    assert lpf.value() == pytest.approx(-7.5)


def test_weight_grows_with_cut_frequency():
    slow = LowPassFilter(0.002, 1.0)
    fast = LowPassFilter(0.002, 50.0)
    assert 0.0 < slow.weight < fast.weight < 1.0