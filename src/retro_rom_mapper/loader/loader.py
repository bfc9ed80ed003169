# retro_rom_mapper/loader/loader.py
"""
ROMローダーモジュール。
ROMイメージはヘッダーを解釈せず、ファイル全体をそのままバイト列として読み込みます。
"""
import logging
import os

logger = logging.getLogger(__name__)


# @intent:responsibility ROMファイルを読み込めない、または空であることを表します。
class RomLoadError(Exception):
    pass


class RomLoader:
    """
    バイナリROMイメージを一度だけ全体読み込みするローダー。
    """
    def load_binary(self, file_path: str) -> bytes:
        if not os.path.isfile(file_path):
            raise RomLoadError(f"ROM file not found: {file_path}")
        try:
            with open(file_path, 'rb') as f:
                data = f.read()
        except OSError as e:
            raise RomLoadError(f"Cannot read ROM file {file_path}: {e}")

        if not data:
            raise RomLoadError(f"ROM file is empty: {file_path}")

        logger.info("Loaded %d bytes from %s", len(data), file_path)
        return data
