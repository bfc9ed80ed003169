from dataclasses import dataclass, field
from typing import Dict, Optional

from retro_rom_mapper.navigation.labels import DEFAULT_LABEL_FORMAT

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]

@dataclass
class ViewConfig:
    rows: int = 32

@dataclass
class MapperConfig:
    architecture: str = "GB"
    origin: Optional[int] = None  # MOS6502のロード原点。Noneならアーキテクチャの既定値
    label_format: str = DEFAULT_LABEL_FORMAT
    log_level: str = "WARNING"
    view: ViewConfig = field(default_factory=ViewConfig)
    keymap: Dict[str, str] = field(default_factory=dict)  # コマンド名 -> キー
