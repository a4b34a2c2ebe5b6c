import pytest

from legguide.keyboard import KeyboardPanel, UserCommand, UserValue


@pytest.mark.parametrize("key, command", [
    ("1", UserCommand.L2_B),
    ("2", UserCommand.L2_A),
    ("3", UserCommand.L2_X),
    ("4", UserCommand.START),
    ("0", UserCommand.L1_X),
    ("9", UserCommand.L1_A),
    ("8", UserCommand.L1_Y),
])
def test_command_keys(key, command):
    panel = KeyboardPanel()
    assert panel.press(key) is command
    assert panel.user_cmd is command


def test_key_five_needs_move_base():
    assert KeyboardPanel(move_base=False).press("5") is UserCommand.NONE
    assert KeyboardPanel(move_base=True).press("5") is UserCommand.L2_Y


def test_left_stick_steps_by_sensitivity():
    panel = KeyboardPanel(sensitivity_left=0.25, sensitivity_right=0.5)
    panel.press("w")
    assert panel.user_value.ly == 0.25
    panel.press("a")
    assert panel.user_value.lx == -0.25
    assert panel.user_value.rx == 0.0


def test_right_stick_uses_right_sensitivity():
    panel = KeyboardPanel(sensitivity_left=0.25, sensitivity_right=0.5)
    panel.press("l")
    panel.press("k")
    assert panel.user_value.rx == 0.5
    assert panel.user_value.ry == -0.5


def test_upper_case_matches_lower_case():
    upper = KeyboardPanel(sensitivity_left=0.25)
    lower = KeyboardPanel(sensitivity_left=0.25)
    upper.feed("WD")
    lower.feed("wd")
    assert upper.user_value == lower.user_value


@pytest.mark.parametrize("key, axis, limit", [
    ("w", "ly", 1.0), ("s", "ly", -1.0), ("d", "lx", 1.0), ("a", "lx", -1.0),
    ("i", "ry", 1.0), ("k", "ry", -1.0), ("l", "rx", 1.0), ("j", "rx", -1.0),
])
def test_axes_clamp_to_unit_range(key, axis, limit):
    panel = KeyboardPanel(sensitivity_left=0.3, sensitivity_right=0.3)
    panel.feed(key * 10)
    assert getattr(panel.user_value, axis) == limit


def test_space_centres_sticks():
    panel = KeyboardPanel(sensitivity_left=0.25, sensitivity_right=0.25)
    panel.feed("wdil")
    assert panel.press(" ") is UserCommand.NONE
    assert panel.user_value == UserValue()


def test_movement_key_clears_command():
    panel = KeyboardPanel()
    panel.press("4")
    assert panel.press("w") is UserCommand.NONE


def test_command_key_does_not_move_sticks():
    panel = KeyboardPanel(sensitivity_left=0.25)
    panel.press("1")
    assert panel.user_value == UserValue()


def test_feed_matches_individual_presses():
    fed = KeyboardPanel(sensitivity_left=0.25)
    pressed = KeyboardPanel(sensitivity_left=0.25)
    result = fed.feed("wwa2")
    for key in "wwa2":
        pressed.press(key)
    assert result is UserCommand.L2_A
    assert fed.user_value == pressed.user_value


def test_unknown_key_changes_nothing():
    panel = KeyboardPanel()
    assert panel.press("z") is UserCommand.NONE
    assert panel.user_value == UserValue()


def test_press_rejects_multiple_characters():
    with pytest.raises(ValueError):
        KeyboardPanel().press("ww")


def test_user_value_reset():
    value = UserValue(lx=0.5, ly=-0.5, rx=0.25, ry=1.0, l2=0.75)
    value.reset()
    assert value == UserValue()