# retro6502/ui/app.py
"""
コンソールエントリポイント。

システムを構築し（デフォルトは64KiB RAM、$0600 にdata.binをロード）、
レジスタを表示してから指定サイクル数だけ実行し、スタック・レジスタ・フラグを表示します。
"""
import argparse
import logging
import sys
from typing import List, Optional

import yaml

from retro6502.common.errors import AddressOutOfRangeError, ConfigError, ResourceExhaustedError
from retro6502.config.builder import SystemBuilder
from retro6502.config.loader import ConfigLoader
from retro6502.config.models import SystemConfig
from retro6502.ui.text_views import BANNER, format_flags, format_registers, format_stack

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _int_literal(text: str) -> int:
    # "0x0600" / "1536" の両方を受け付ける
    return int(text, 0)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="retro6502",
        description="MOS 6502 processor emulator",
    )
    parser.add_argument(
        "--config",
        help="YAML system configuration file",
    )
    parser.add_argument(
        "--image",
        help="Raw program image to load (overrides program.path; default: data.bin)",
    )
    parser.add_argument(
        "--load-address",
        type=_int_literal,
        help="Address the program image is copied to (default: 0x0600)",
    )
    parser.add_argument(
        "--cycles",
        type=int,
        help="Cycle budget to run (default: 1000)",
    )
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Log every executed instruction (DEBUG level)",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default="WARNING",
        type=str.upper,
        help="Logging level (default: WARNING)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    level = logging.DEBUG if args.trace else getattr(logging, args.log_level)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        config = ConfigLoader().load_from_file(args.config) if args.config else SystemConfig()
    except (OSError, yaml.YAMLError, ConfigError) as exc:
        parser.exit(2, f"retro6502: {exc}\n")

    if args.image is not None:
        config.program.path = args.image
    if args.load_address is not None:
        config.program.load_address = args.load_address
    if args.cycles is not None:
        config.run.cycles = args.cycles

    print(BANNER)
    try:
        cpu, bus = SystemBuilder().build_system(config)
    except ResourceExhaustedError as exc:
        logger.critical("%s", exc)
        return 1

    print(format_registers(cpu))
    try:
        cpu.step(config.run.cycles)
        # スタックページがマップされていない構成ではダンプ自体が失敗し得る
        print(format_stack(bus))
    except AddressOutOfRangeError as exc:
        logger.error("Execution stopped: %s", exc)
        return 1

    print(format_registers(cpu))
    print(format_flags(cpu))
    return 0


if __name__ == "__main__":
    sys.exit(main())
