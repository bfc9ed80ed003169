"""
Game Boy (Sharp LR35902) アーキテクチャ実装。
"""
from typing import Optional

from retro_rom_mapper.common.types import LogicalAddress, ResolvedAddress
from retro_rom_mapper.core.architecture import Architecture, Instruction, ResolutionContext
from retro_rom_mapper.arch.gb.instructions import MAX_INSTRUCTION_SIZE, decode_instruction
from retro_rom_mapper.arch.gb.resolver import resolve_logical


# @intent:responsibility LR35902のデコード表とバンク切り替えメモリモデルをエンジンに提供します。
class GameBoyArchitecture(Architecture):
    name = "GB"

    @property
    def max_instruction_size(self) -> int:
        return MAX_INSTRUCTION_SIZE

    def decode(self, window: bytes) -> Optional[Instruction]:
        return decode_instruction(window)

    def resolve_address(self, address: LogicalAddress, origin: int,
                        context: ResolutionContext) -> ResolvedAddress:
        return resolve_logical(address, origin, context)
