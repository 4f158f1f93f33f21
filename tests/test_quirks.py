import pytest

from chip8 import Quirks
from chip8.config import PRESETS


def test_default_is_modern_profile():
    q = Quirks()
    assert q == Quirks.modern()
    assert not q.shift_uses_vy
    assert not q.jump_uses_vx
    assert not q.index_overflow_sets_vf
    assert q.stack_limit == 16


def test_presets():
    assert PRESETS["vip"]().shift_uses_vy
    assert PRESETS["vip"]().memory_increments_index
    assert PRESETS["chip48"]().jump_uses_vx


def test_overrides_skip_none():
    q = Quirks.cosmac_vip().with_overrides(shift_uses_vy=None, jump_uses_vx=True)
    assert q.shift_uses_vy
    assert q.jump_uses_vx


class TestShiftSource:
    @pytest.mark.parametrize("shift_uses_vy, expected", [(False, 0x02), (True, 0x40)])
    def test_shift_right(self, make_vm, load, shift_uses_vy, expected):
        vm = make_vm(shift_uses_vy=shift_uses_vy)
        load(vm, 0x6105, 0x6281, 0x8126)
        vm.run(3)
        assert vm.V[1] == expected
        assert vm.V[0xF] == 1

    @pytest.mark.parametrize("shift_uses_vy, expected, flag", [(False, 0x0A, 0), (True, 0x02, 1)])
    def test_shift_left(self, make_vm, load, shift_uses_vy, expected, flag):
        vm = make_vm(shift_uses_vy=shift_uses_vy)
        load(vm, 0x6105, 0x6281, 0x812E)
        vm.run(3)
        assert vm.V[1] == expected
        assert vm.V[0xF] == flag

    def test_vy_unchanged(self, make_vm, load):
        vm = make_vm(shift_uses_vy=True)
        load(vm, 0x6105, 0x6281, 0x8126)
        vm.run(3)
        assert vm.V[2] == 0x81


class TestJumpOffset:
    @pytest.mark.parametrize("jump_uses_vx, expected", [(False, 0x304), (True, 0x320)])
    def test_register_choice(self, make_vm, load, jump_uses_vx, expected):
        vm = make_vm(jump_uses_vx=jump_uses_vx)
        load(vm, 0x6004, 0x6320, 0xB300)
        vm.run(3)
        assert vm.pc == expected


class TestIndexOverflow:
    def test_flag_set_on_overflow(self, make_vm, load):
        vm = make_vm(index_overflow_sets_vf=True)
        load(vm, 0xAFFF, 0x6A01, 0xFA1E)
        vm.run(3)
        assert vm.I == 0x1000
        assert vm.V[0xF] == 1

    def test_flag_cleared_without_overflow(self, make_vm, load):
        vm = make_vm(index_overflow_sets_vf=True)
        load(vm, 0x6F01, 0xA100, 0x6A01, 0xFA1E)
        vm.run(4)
        assert vm.I == 0x101
        assert vm.V[0xF] == 0

    def test_index_wraps_at_16_bits(self, make_vm, load):
        vm = make_vm()
        load(vm, 0x6AFF, 0xFA1E)
        vm.I = 0xFFFF
        vm.run(2)
        assert vm.I == 0x00FE


@pytest.mark.parametrize("low", [0x1, 0x2, 0x3])
def test_logic_resets_vf(make_vm, load, low):
    vm = make_vm(logic_resets_vf=True)
    load(vm, 0x6F05, 0x8AB0 | low)
    vm.run(2)
    assert vm.V[0xF] == 0


def test_memory_increments_index(make_vm, load):
    vm = make_vm(memory_increments_index=True)
    load(vm, 0xA400, 0xF255, 0xF165)
    vm.run(2)
    assert vm.I == 0x403
    vm.run(1)
    assert vm.I == 0x405


def test_smaller_stack_limit(make_vm, load):
    from chip8 import StackOverflow
    vm = make_vm(stack_limit=2)
    load(vm, 0x2200)
    vm.run(2)
    with pytest.raises(StackOverflow):
        vm.emulate_cycle()
