# tests/arch/mos6502/test_mos6502_architecture.py
"""
MOS 6502 のデコード表と平坦なアドレス解決の単体テスト。
"""
import pytest

from retro_rom_mapper.common.types import (
    AbsoluteAddress, RelativeAddress, PhysicalAddress, SystemAddress,
)
from retro_rom_mapper.core.architecture import Operand, OperandKind
from retro_rom_mapper.core.store import ByteStore
from retro_rom_mapper.arch.mos6502 import Mos6502Architecture, DEFAULT_ORIGIN
from retro_rom_mapper.arch.mos6502.instructions import OPCODE_MAP, decode_instruction

# @intent:test_suite 6502の命令デコードとロード原点に基づくアドレス解決を検証します。

class TestMos6502Decode:
    def test_official_opcode_count(self):
        assert len(OPCODE_MAP) == 151

    @pytest.mark.parametrize("opcode", [0x02, 0x03, 0x80, 0xFF])
    def test_unofficial_opcodes_are_illegal(self, opcode):
        assert decode_instruction(bytes([opcode, 0x00, 0x00])) is None

    def test_truncated_window(self):
        assert decode_instruction(bytes([0x4C, 0x00])) is None
        assert decode_instruction(bytes([0xA9])) is None
        assert decode_instruction(b"") is None

    def test_lda_immediate(self):
        instruction = decode_instruction(bytes([0xA9, 0x42]))
        assert instruction.mnemonic == "LDA"
        assert instruction.size == 2
        assert instruction.operands == (Operand(OperandKind.IMM8, 0x42),)

    def test_indexed_absolute(self):
        instruction = decode_instruction(bytes([0xBD, 0x00, 0x02]))
        assert instruction.operands == (
            Operand(OperandKind.ADDRESS, AbsoluteAddress(0x0200)),
            Operand(OperandKind.REG8, "X"),
        )

    def test_indirect_modes(self):
        assert decode_instruction(bytes([0xB1, 0x10])).operands == (Operand(OperandKind.SPECIAL, "($10),Y"),)
        assert decode_instruction(bytes([0x6C, 0xFC, 0xFF])).operands == (Operand(OperandKind.SPECIAL, "($FFFC)"),)

    def test_accumulator_mode(self):
        instruction = decode_instruction(bytes([0x0A]))
        assert instruction.mnemonic == "ASL"
        assert instruction.operands == (Operand(OperandKind.REG8, "A"),)

    # @intent:test_case_control_flow 分岐・ジャンプ・復帰命令のフォールスルーと分岐先を検証します。
    def test_jmp_and_jsr(self):
        jmp = decode_instruction(bytes([0x4C, 0x00, 0x80]))
        assert not jmp.falls_through
        assert jmp.branch_target == AbsoluteAddress(0x8000)

        jsr = decode_instruction(bytes([0x20, 0x10, 0x80]))
        assert jsr.falls_through
        assert jsr.branch_target == AbsoluteAddress(0x8010)

    def test_indirect_jmp_has_no_static_target(self):
        instruction = decode_instruction(bytes([0x6C, 0x00, 0x02]))
        assert not instruction.falls_through
        assert instruction.branch_target is None

    def test_branch_relative(self):
        instruction = decode_instruction(bytes([0xD0, 0xFC]))
        assert instruction.mnemonic == "BNE"
        assert instruction.falls_through
        assert instruction.branch_target == RelativeAddress(-4, 2)

    @pytest.mark.parametrize("opcode", [0x60, 0x40, 0x00])
    def test_terminal_instructions(self, opcode):
        assert not decode_instruction(bytes([opcode])).falls_through


class TestMos6502Resolution:
    @pytest.fixture
    def setup_arch(self):
        arch = Mos6502Architecture()
        store = ByteStore(bytes(0x1000), arch)
        return arch, store

    def test_default_origin(self, setup_arch):
        arch, _ = setup_arch
        assert arch.origin == DEFAULT_ORIGIN == 0x8000

    def test_absolute_inside_image(self, setup_arch):
        arch, store = setup_arch
        assert arch.resolve_address(AbsoluteAddress(0x8123), 0, store) == PhysicalAddress(0x123)
        assert arch.resolve(AbsoluteAddress(0x8FFF), 0, store) == 0xFFF

    # @intent:test_case_system ROMの外側（ゼロページ、RAM、I/O）がシステムアドレスとして解決されることを検証します。
    def test_outside_image_is_system(self, setup_arch):
        arch, store = setup_arch
        assert arch.resolve_address(AbsoluteAddress(0x0010), 0, store) == SystemAddress(0x0010)
        assert arch.resolve_address(AbsoluteAddress(0x9000), 0, store) == SystemAddress(0x9000)
        assert arch.resolve(AbsoluteAddress(0x2000), 0, store) is None

    def test_relative(self, setup_arch):
        arch, store = setup_arch
        assert arch.resolve(RelativeAddress(-4, 2), 0x10, store) == 0x0E
        assert arch.resolve(RelativeAddress(0x7F, 2), 0x10, store) == 0x91

    def test_relative_before_image_start(self, setup_arch):
        arch, store = setup_arch
        assert arch.resolve_address(RelativeAddress(-8, 2), 0, store) == SystemAddress(0x7FFA)

    def test_custom_origin(self):
        arch = Mos6502Architecture(origin=0xC000)
        store = ByteStore(bytes(0x4000), arch)
        assert arch.resolve(AbsoluteAddress(0xFFFC), 0, store) == 0x3FFC
        assert arch.resolve(AbsoluteAddress(0x8000), 0, store) is None

    def test_invalid_origin(self):
        with pytest.raises(ValueError):
            Mos6502Architecture(origin=0x10000)
