# src/retro_rom_mapper/arch/mos6502/architecture.py
"""
MOS 6502 アーキテクチャ実装。
ROMイメージはロード原点(origin)から連続してマップされる、バンク切り替えのない平坦なモデルです。
"""
from typing import Optional

from retro_rom_mapper.common.types import LogicalAddress, ResolvedAddress
from retro_rom_mapper.core.architecture import Architecture, Instruction, ResolutionContext
from retro_rom_mapper.arch.mos6502.instructions import MAX_INSTRUCTION_SIZE, decode_instruction
from retro_rom_mapper.arch.mos6502.resolver import resolve_logical

DEFAULT_ORIGIN = 0x8000


# @intent:responsibility 6502のデコード表と、原点オフセットによる平坦なアドレス解決を提供します。
class Mos6502Architecture(Architecture):
    name = "MOS6502"

    # @intent:pre-condition originは16bitアドレス空間内である必要があります。
    def __init__(self, origin: int = DEFAULT_ORIGIN):
        if not 0 <= origin <= 0xFFFF:
            raise ValueError(f"Origin {origin:#x} is outside the 16-bit address space.")
        self.origin = origin

    @property
    def max_instruction_size(self) -> int:
        return MAX_INSTRUCTION_SIZE

    def decode(self, window: bytes) -> Optional[Instruction]:
        return decode_instruction(window)

    def resolve_address(self, address: LogicalAddress, origin: int,
                        context: ResolutionContext) -> ResolvedAddress:
        return resolve_logical(address, origin, self.origin, context)
