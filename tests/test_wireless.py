import pytest

from legguide.keyboard import UserCommand, UserValue
from legguide.wireless import RemoteButtons, RemoteData, WirelessHandle, dead_zone


def _packet(**buttons):
    return RemoteData(buttons=RemoteButtons(**buttons)).pack()


def test_dead_zone_inside_is_zero():
    assert dead_zone(0.05, 0.08) == 0.0
    assert dead_zone(-0.05, 0.08) == 0.0


def test_dead_zone_outside_and_boundary_kept():
    assert dead_zone(0.5, 0.08) == 0.5
    assert dead_zone(-0.08, 0.08) == -0.08


def test_button_bits():
    assert RemoteButtons.from_value(1 << 5) == RemoteButtons(l2=True)
    assert RemoteButtons.from_value(1 << 2).start
    assert RemoteButtons.from_value(1 << 9).b


@pytest.mark.parametrize("value", [0, 1, 0x0220, 0xFFFF, 0x8001])
def test_button_word_round_trip(value):
    assert int(RemoteButtons.from_value(value)) == value


def test_button_word_out_of_range():
    with pytest.raises(ValueError):
        RemoteButtons.from_value(0x10000)


def test_packet_size_and_button_bytes():
    raw = _packet(l2=True, b=True)
    assert len(raw) == 40
    assert raw[2:4] == bytes([0x20, 0x02])


def test_remote_data_round_trip():
    data = RemoteData(head=b"\xfe\xef", buttons=RemoteButtons(l1=True, y=True),
                      lx=0.5, rx=-0.25, ry=1.0, l2=0.75, ly=-1.0, idle=bytes(range(16)))
    assert RemoteData.unpack(data.pack()) == data


def test_unpack_uses_first_forty_bytes():
    data = RemoteData(lx=0.5)
    assert RemoteData.unpack(data.pack() + b"extra") == data


def test_unpack_short_packet():
    with pytest.raises(ValueError):
        RemoteData.unpack(bytes(39))


@pytest.mark.parametrize("buttons, command", [
    ({"l2": True, "b": True}, UserCommand.L2_B),
    ({"l2": True, "a": True}, UserCommand.L2_A),
    ({"l2": True, "x": True}, UserCommand.L2_X),
    ({"l1": True, "x": True}, UserCommand.L1_X),
    ({"l1": True, "a": True}, UserCommand.L1_A),
    ({"l1": True, "y": True}, UserCommand.L1_Y),
    ({"start": True}, UserCommand.START),
])
def test_button_combinations(buttons, command):
    assert WirelessHandle().receive(_packet(**buttons)) is command


def test_priority_order():
    handle = WirelessHandle()
    assert handle.receive(_packet(l2=True, a=True, b=True, start=True)) is UserCommand.L2_B


def test_l2_y_needs_move_base():
    assert WirelessHandle(move_base=False).receive(_packet(l2=True, y=True)) is UserCommand.NONE
    assert WirelessHandle(move_base=True).receive(_packet(l2=True, y=True)) is UserCommand.L2_Y


def test_command_persists_without_buttons():
    handle = WirelessHandle()
    handle.receive(_packet(start=True))
    assert handle.receive(_packet()) is UserCommand.START


def test_single_button_without_modifier_keeps_command():
    handle = WirelessHandle()
    assert handle.receive(_packet(b=True)) is UserCommand.NONE


def test_stick_values_pass_dead_zone():
    raw = RemoteData(lx=0.5, rx=0.03125, ry=-0.75, l2=1.0, ly=-0.0625).pack()
    handle = WirelessHandle()
    handle.receive(raw)
    assert handle.user_value == UserValue(lx=0.5, ly=0.0, rx=0.0, ry=-0.75, l2=1.0)
    assert handle.user_cmd is UserCommand.NONE