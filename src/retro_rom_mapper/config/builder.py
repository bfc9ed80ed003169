from typing import Dict, Type
from retro_rom_mapper.core.architecture import Architecture
from retro_rom_mapper.arch.gb import GameBoyArchitecture
from retro_rom_mapper.arch.mos6502 import Mos6502Architecture
from retro_rom_mapper.session.session import Session
from .models import MapperConfig

ARCHITECTURES: Dict[str, Type[Architecture]] = {
    GameBoyArchitecture.name: GameBoyArchitecture,
    Mos6502Architecture.name: Mos6502Architecture,
}

# @intent:responsibility 設定（Config）に基づいてアーキテクチャを選択し、ROMに対するセッションを生成します。
class SessionBuilder:
    def build_architecture(self, config: MapperConfig) -> Architecture:
        if config.architecture == "GB":
            if config.origin is not None:
                raise ValueError("The GB architecture does not take a load origin.")
            return GameBoyArchitecture()
        elif config.architecture == "MOS6502":
            if config.origin is None:
                return Mos6502Architecture()
            return Mos6502Architecture(config.origin)
        else:
            raise ValueError(f"Unsupported architecture: {config.architecture}")

    def build_session(self, config: MapperConfig, rom: bytes) -> Session:
        architecture = self.build_architecture(config)
        return Session(rom, architecture, config.label_format)
