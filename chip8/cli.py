"""Command line entry point: load a ROM and run it in a window or headless."""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from .config import CPU_HZ, PRESETS, SCALE, TIMER_HZ
from .display import render_text
from .errors import Chip8Error
from .vm import VM

log = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="chip8",
        description="Run a CHIP-8 ROM.",
    )
    parser.add_argument("rom", help="path to a raw CHIP-8 program image")
    parser.add_argument("--cpu-hz", type=int, default=CPU_HZ, metavar="N",
                        help=f"instructions per second (default {CPU_HZ})")
    parser.add_argument("--scale", type=int, default=SCALE, metavar="N",
                        help=f"window pixels per CHIP-8 pixel (default {SCALE})")
    parser.add_argument("--preset", choices=sorted(PRESETS), default="modern",
                        help="interpreter quirk profile (default modern)")
    parser.add_argument("--shift-vy", action="store_true", default=None,
                        help="8XY6/8XYE shift VY into VX")
    parser.add_argument("--jump-vx", action="store_true", default=None,
                        help="BNNN jumps to NNN + VX instead of NNN + V0")
    parser.add_argument("--index-overflow-vf", action="store_true", default=None,
                        help="FX1E sets VF when I passes 0xFFF")
    parser.add_argument("--stack-limit", type=int, default=None, metavar="N",
                        help="maximum call depth, 0 for unbounded (default 16)")
    parser.add_argument("--headless", type=int, default=None, metavar="CYCLES",
                        help="run CYCLES instructions without a window and print the screen")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="logging threshold (DEBUG traces every instruction)")
    parser.add_argument("--log-file", default=None, metavar="PATH",
                        help="write log output to PATH instead of stderr")
    return parser


def quirks_from_args(args):
    quirks = PRESETS[args.preset]().with_overrides(
        shift_uses_vy=args.shift_vy,
        jump_uses_vx=args.jump_vx,
        index_overflow_sets_vf=args.index_overflow_vf,
    )
    if args.stack_limit is not None:
        # 0 lifts the limit
        quirks = replace(quirks, stack_limit=args.stack_limit or None)
    return quirks


def run_headless(vm, cycles, cpu_hz=CPU_HZ):
    """Run ``cycles`` instructions, ticking the timers at the 60Hz ratio."""
    per_tick = max(1, cpu_hz // TIMER_HZ)
    for count in range(1, cycles + 1):
        vm.emulate_cycle()
        if count % per_tick == 0:
            vm.decrement_timers()


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        filename=args.log_file,
        format='%(asctime)s,%(msecs)d %(name)s %(levelname)s %(message)s',
        datefmt='%H:%M:%S',
        level=getattr(logging, args.log_level),
    )

    rom_path = Path(args.rom)
    try:
        rom = rom_path.read_bytes()
    except OSError as e:
        print(f"chip8: cannot read {rom_path}: {e.strerror}", file=sys.stderr)
        return 2

    vm = VM(quirks=quirks_from_args(args))
    try:
        vm.load_program(rom)
    except Chip8Error as e:
        log.error("%s: %s", rom_path, e)
        return 1

    if args.headless is not None:
        try:
            run_headless(vm, args.headless, cpu_hz=args.cpu_hz)
        except Chip8Error as e:
            log.error("Emulation halted at %#05x: %s\n%s", e.pc, e, vm.debug_snapshot())
            return 1
        print(render_text(vm.get_display()))
        print(vm.debug_snapshot())
        return 0

    from . import frontend
    fault = frontend.run(vm, cpu_hz=args.cpu_hz, scale=args.scale,
                         caption=f"CHIP-8 Emulator - {rom_path.name}")
    return 1 if fault is not None else 0


if __name__ == "__main__":
    sys.exit(main())
