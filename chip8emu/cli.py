import argparse
import logging
import sys

from . import config
from .errors import Chip8Error
from .rom import load_rom

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s,%(msecs)d %(name)s %(levelname)s %(message)s'


def _positive_int(value):
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError("must be a positive integer, got %s" % value)
    return number


def _non_negative_int(value):
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError("must not be negative, got %s" % value)
    return number


def build_parser():
    parser = argparse.ArgumentParser(
        prog="chip8emu",
        description="CHIP-8 emulator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Keys:\n"
               "  1 2 3 4      1 2 3 C\n"
               "  Q W E R  ->  4 5 6 D\n"
               "  A S D F      7 8 9 E\n"
               "  Z X C V      A 0 B F\n"
               "  F1 toggles instruction logs, Esc quits.",
    )
    parser.add_argument("rom", help="CHIP-8 program image to run")
    parser.add_argument("--scale", type=_positive_int, default=config.scale, metavar="N",
                        help="Window pixels per CHIP-8 pixel (default: %d)" % config.scale)
    parser.add_argument("--cpu-hz", type=_positive_int, default=config.cpu_hz, metavar="N",
                        help="Instructions per second (default: %d)" % config.cpu_hz)
    parser.add_argument("--timer-hz", type=_non_negative_int, default=0, metavar="N",
                        help="Tick timers at a fixed rate, e.g. %d; 0 ticks them once "
                             "per instruction (default: 0)" % config.timer_hz)
    parser.add_argument("--key-hold", type=_non_negative_int,
                        default=int(config.key_hold * 1000), metavar="MS",
                        help="How long a released key stays pressed (default: %d)"
                             % int(config.key_hold * 1000))
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging level (default: WARNING)")
    parser.add_argument("--log-file", default=None,
                        help="Append logs to this file instead of stderr")
    return parser


def setup_logging(level, filename=None):
    logging.basicConfig(filename=filename,
                        filemode='a',
                        format=LOG_FORMAT,
                        datefmt='%H:%M:%S',
                        level=getattr(logging, level))


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    try:
        program = load_rom(args.rom)
    except Chip8Error as e:
        logger.error("%s", e)
        print("Error:", e, file=sys.stderr)
        return 1

    # pyglet opens a display connection on import
    from .window import run

    try:
        error = run(program,
                    scale=args.scale,
                    cpu_hz=args.cpu_hz,
                    timer_hz=args.timer_hz,
                    key_hold=args.key_hold / 1000.0)
    except Chip8Error as e:
        error = e
    if error is not None:
        print("Emulation stopped:", error, file=sys.stderr)
        return 1
    return 0
