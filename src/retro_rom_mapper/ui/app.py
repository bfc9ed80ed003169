# src/retro_rom_mapper/ui/app.py
"""
アプリケーションのエントリポイント。
コマンドライン引数と設定ファイルからセッションを構築し、メインウィンドウを起動します。
"""
import argparse
import logging
import os
import sys
from typing import List, Optional

from PySide6.QtWidgets import QApplication

from retro_rom_mapper.config.builder import ARCHITECTURES, SessionBuilder
from retro_rom_mapper.config.loader import ConfigLoader, ConfigError
from retro_rom_mapper.config.models import LOG_LEVELS, MapperConfig
from retro_rom_mapper.loader.loader import RomLoader, RomLoadError
from retro_rom_mapper.session.commands import build_keymap
from retro_rom_mapper.session.session import InvalidInputError, parse_hex
from .main_window import MainWindow

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="retro-rom-mapper",
                                     description="Interactive code/data mapper for retro ROM images")
    parser.add_argument("rom", help="ROM image file")
    parser.add_argument("--config", help="YAML configuration file")
    parser.add_argument("--arch", type=str.upper, choices=sorted(ARCHITECTURES),
                        help="CPU architecture (overrides config)")
    parser.add_argument("--origin", help="load origin in hex (MOS6502)")
    parser.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS,
                        help="logging level (overrides config)")
    return parser


# @intent:responsibility 設定ファイルとコマンドライン引数を統合した設定を返します。
# @intent:rationale コマンドライン引数は設定ファイルの値より優先されます。
def resolve_config(args: argparse.Namespace) -> MapperConfig:
    config = ConfigLoader().load_from_file(args.config) if args.config else MapperConfig()
    if args.arch:
        config.architecture = args.arch
    if args.origin:
        config.origin = parse_hex(args.origin)
    if args.log_level:
        config.log_level = args.log_level
    return config


# @intent:responsibility アプリケーションを起動し、メインウィンドウを表示します。
def main(argv: Optional[List[str]] = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = resolve_config(args)
    except (ConfigError, InvalidInputError, OSError) as e:
        parser.error(str(e))

    logging.basicConfig(level=getattr(logging, config.log_level),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        rom = RomLoader().load_binary(args.rom)
        session = SessionBuilder().build_session(config, rom)
        keymap = build_keymap(config.keymap)
    except (RomLoadError, ValueError) as e:
        parser.error(str(e))

    logger.info("Starting session for %s (%s, %d bytes)", args.rom, config.architecture, len(rom))

    app = QApplication(sys.argv[:1])
    main_win = MainWindow(session, keymap, config.view.rows,
                          title=f"Retro ROM Mapper - {os.path.basename(args.rom)}")
    main_win.show()
    sys.exit(app.exec())

if __name__ == '__main__':
    main()
