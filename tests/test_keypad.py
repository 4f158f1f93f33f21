import pytest

from chip8 import Keypad


def test_starts_with_nothing_pressed():
    pad = Keypad()
    assert pad.no_keys_pressed()
    assert pad.get_first_key_pressed() is None


def test_set_and_release_key():
    pad = Keypad()
    pad.set_key(0xA, True)
    assert pad.is_pressed(0xA)
    assert not pad.is_pressed(0xB)
    assert pad.mask == 1 << 0xA
    pad.set_key(0xA, False)
    assert pad.no_keys_pressed()


def test_first_pressed_is_lowest_index():
    pad = Keypad()
    pad.set_key(0xF, True)
    pad.set_key(0x3, True)
    pad.set_key(0x7, True)
    assert pad.get_first_key_pressed() == 0x3


def test_key_zero_counts_as_pressed():
    pad = Keypad()
    pad.set_key(0, True)
    assert not pad.no_keys_pressed()
    assert pad.get_first_key_pressed() == 0


def test_set_keys_overwrites_whole_mask():
    pad = Keypad()
    pad.set_key(1, True)
    pad.set_keys(0b1000_0000_0000_0100)
    assert not pad.is_pressed(1)
    assert pad.is_pressed(2)
    assert pad.is_pressed(15)
    pad.reset_keys()
    assert pad.no_keys_pressed()


@pytest.mark.parametrize("index", [-1, 16, 255])
def test_out_of_range_index_rejected(index):
    pad = Keypad()
    with pytest.raises(ValueError):
        pad.set_key(index, True)
    with pytest.raises(ValueError):
        pad.is_pressed(index)
