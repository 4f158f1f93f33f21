import logging

import pytest

from chip8 import VM, cli


@pytest.fixture
def rom(tmp_path):
    def _write(data):
        path = tmp_path / "prog.ch8"
        path.write_bytes(bytes(data))
        return path
    return _write


def test_headless_prints_screen_and_registers(rom, capsys):
    path = rom([0x60, 0x00, 0x61, 0x00, 0xA0, 0x50, 0xD0, 0x15, 0x12, 0x08])
    assert cli.main([str(path), "--headless", "20"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out[0].startswith("####    ")
    assert out[1].startswith("#  #    ")
    assert out[4].startswith("####    ")
    assert out[32] == "PC:    0x208"


def test_headless_fault_exits_nonzero(rom, caplog):
    path = rom([0x00, 0xEE])
    with caplog.at_level(logging.ERROR):
        assert cli.main([str(path), "--headless", "1"]) == 1
    assert "Return with empty call stack" in caplog.text


def test_oversized_rom_exits_nonzero(rom):
    path = rom([0] * (4096 - 0x200 + 1))
    assert cli.main([str(path), "--headless", "1"]) == 1


def test_missing_rom_exits_2(tmp_path, capsys):
    assert cli.main([str(tmp_path / "nope.ch8"), "--headless", "1"]) == 2
    assert "cannot read" in capsys.readouterr().err


def test_headless_ticks_timers(rom):
    # delay = 0x3C, then spin
    path = rom([0x60, 0x3C, 0xF0, 0x15, 0x12, 0x04])
    vm = VM()
    vm.load_program(path.read_bytes())
    # 500 // 60 = one tick every 8 cycles
    cli.run_headless(vm, 240, cpu_hz=500)
    assert vm.delay_timer == 0x3C - 30


@pytest.mark.parametrize("argv, field, value", [
    ([], "stack_limit", 16),
    (["--stack-limit", "0"], "stack_limit", None),
    (["--stack-limit", "4"], "stack_limit", 4),
    (["--shift-vy"], "shift_uses_vy", True),
    (["--preset", "vip"], "shift_uses_vy", True),
    (["--preset", "chip48"], "jump_uses_vx", True),
    (["--jump-vx"], "jump_uses_vx", True),
    (["--index-overflow-vf"], "index_overflow_sets_vf", True),
])
def test_quirk_flags(argv, field, value):
    args = cli.build_parser().parse_args(["rom.ch8"] + argv)
    assert getattr(cli.quirks_from_args(args), field) == value
