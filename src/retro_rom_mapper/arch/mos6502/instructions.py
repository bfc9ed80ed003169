# src/retro_rom_mapper/arch/mos6502/instructions.py
"""
MOS 6502 命令マップとデコードロジック。
公式オペコードのみをサポートし、未定義オペコードは不正命令として扱います。
"""
from typing import Callable, Dict, Optional, Tuple

from retro_rom_mapper.common.types import AbsoluteAddress, RelativeAddress
from retro_rom_mapper.core.architecture import DecodedInstruction, Operand, OperandKind

MAX_INSTRUCTION_SIZE = 3

# Addressing modes
IMP = "IMP"  # Implied
ACC = "ACC"  # Accumulator
IMM = "IMM"  # #$xx
ZP = "ZP"    # $xx
ZPX = "ZPX"  # $xx,X
ZPY = "ZPY"  # $xx,Y
ABS = "ABS"  # $xxxx
ABX = "ABX"  # $xxxx,X
ABY = "ABY"  # $xxxx,Y
IND = "IND"  # ($xxxx)
IZX = "IZX"  # ($xx,X)
IZY = "IZY"  # ($xx),Y
REL = "REL"  # 相対分岐

MODE_SIZES: Dict[str, int] = {
    IMP: 1, ACC: 1,
    IMM: 2, ZP: 2, ZPX: 2, ZPY: 2, IZX: 2, IZY: 2, REL: 2,
    ABS: 3, ABX: 3, ABY: 3, IND: 3,
}

# Opcode Entry: (Mnemonic, Addressing Mode)
OpcodeEntry = Tuple[str, str]

# @intent:data_structure 8種類のアドレッシングモードを持つ命令群（ORA, AND, EOR, ADC, STA, LDA, CMP, SBC）の配置。
_GROUP_ONE_LAYOUT = {0x09: IMM, 0x05: ZP, 0x15: ZPX, 0x0D: ABS, 0x1D: ABX, 0x19: ABY, 0x01: IZX, 0x11: IZY}
_GROUP_ONE = {"ORA": 0x00, "AND": 0x20, "EOR": 0x40, "ADC": 0x60, "STA": 0x80, "LDA": 0xA0, "CMP": 0xC0, "SBC": 0xE0}

# @intent:data_structure シフト/ローテート命令群（ASL, ROL, LSR, ROR）の配置。
_SHIFT_LAYOUT = {0x0A: ACC, 0x06: ZP, 0x16: ZPX, 0x0E: ABS, 0x1E: ABX}
_SHIFT = {"ASL": 0x00, "ROL": 0x20, "LSR": 0x40, "ROR": 0x60}


def _build_opcode_map() -> Dict[int, OpcodeEntry]:
    opcode_map: Dict[int, OpcodeEntry] = {}
    for mnemonic, base in _GROUP_ONE.items():
        for delta, mode in _GROUP_ONE_LAYOUT.items():
            if mnemonic == "STA" and mode == IMM:
                continue  # STA #imm は存在しない
            opcode_map[base + delta] = (mnemonic, mode)
    for mnemonic, base in _SHIFT.items():
        for delta, mode in _SHIFT_LAYOUT.items():
            opcode_map[base + delta] = (mnemonic, mode)

    opcode_map.update({
        # --- Branch ---
        0x10: ("BPL", REL), 0x30: ("BMI", REL), 0x50: ("BVC", REL), 0x70: ("BVS", REL),
        0x90: ("BCC", REL), 0xB0: ("BCS", REL), 0xD0: ("BNE", REL), 0xF0: ("BEQ", REL),
        # --- Jump / Subroutine / Interrupt ---
        0x4C: ("JMP", ABS), 0x6C: ("JMP", IND), 0x20: ("JSR", ABS),
        0x60: ("RTS", IMP), 0x40: ("RTI", IMP), 0x00: ("BRK", IMP),
        # --- Load/Store X, Y ---
        0xA2: ("LDX", IMM), 0xA6: ("LDX", ZP), 0xB6: ("LDX", ZPY), 0xAE: ("LDX", ABS), 0xBE: ("LDX", ABY),
        0xA0: ("LDY", IMM), 0xA4: ("LDY", ZP), 0xB4: ("LDY", ZPX), 0xAC: ("LDY", ABS), 0xBC: ("LDY", ABX),
        0x86: ("STX", ZP), 0x96: ("STX", ZPY), 0x8E: ("STX", ABS),
        0x84: ("STY", ZP), 0x94: ("STY", ZPX), 0x8C: ("STY", ABS),
        # --- Compare X, Y / BIT ---
        0xE0: ("CPX", IMM), 0xE4: ("CPX", ZP), 0xEC: ("CPX", ABS),
        0xC0: ("CPY", IMM), 0xC4: ("CPY", ZP), 0xCC: ("CPY", ABS),
        0x24: ("BIT", ZP), 0x2C: ("BIT", ABS),
        # --- Increment / Decrement ---
        0xE6: ("INC", ZP), 0xF6: ("INC", ZPX), 0xEE: ("INC", ABS), 0xFE: ("INC", ABX),
        0xC6: ("DEC", ZP), 0xD6: ("DEC", ZPX), 0xCE: ("DEC", ABS), 0xDE: ("DEC", ABX),
        0xE8: ("INX", IMP), 0xC8: ("INY", IMP), 0xCA: ("DEX", IMP), 0x88: ("DEY", IMP),
        # --- Transfer / Stack ---
        0xAA: ("TAX", IMP), 0xA8: ("TAY", IMP), 0xBA: ("TSX", IMP),
        0x8A: ("TXA", IMP), 0x9A: ("TXS", IMP), 0x98: ("TYA", IMP),
        0x48: ("PHA", IMP), 0x08: ("PHP", IMP), 0x68: ("PLA", IMP), 0x28: ("PLP", IMP),
        # --- Flags ---
        0x18: ("CLC", IMP), 0x38: ("SEC", IMP), 0x58: ("CLI", IMP), 0x78: ("SEI", IMP),
        0xB8: ("CLV", IMP), 0xD8: ("CLD", IMP), 0xF8: ("SED", IMP),
        0xEA: ("NOP", IMP),
    })
    return opcode_map


OPCODE_MAP: Dict[int, OpcodeEntry] = _build_opcode_map()

# 実行が次の命令に継続しない命令
NO_FALLTHROUGH = {"JMP", "RTS", "RTI", "BRK"}


def _operands(mode: str, window: bytes) -> Tuple[Operand, ...]:
    if mode == IMP:
        return ()
    if mode == ACC:
        return (Operand(OperandKind.REG8, "A"),)
    if mode == IMM:
        return (Operand(OperandKind.IMM8, window[1]),)
    if mode == REL:
        return (Operand(OperandKind.REL8, _to_signed8(window[1])),)
    if mode in (ZP, ZPX, ZPY):
        operand = Operand(OperandKind.ADDRESS, AbsoluteAddress(window[1]))
    elif mode in (ABS, ABX, ABY):
        operand = Operand(OperandKind.ADDRESS, AbsoluteAddress(window[1] | (window[2] << 8)))
    elif mode == IND:
        return (Operand(OperandKind.SPECIAL, f"(${window[1] | (window[2] << 8):04X})"),)
    elif mode == IZX:
        return (Operand(OperandKind.SPECIAL, f"(${window[1]:02X},X)"),)
    elif mode == IZY:
        return (Operand(OperandKind.SPECIAL, f"(${window[1]:02X}),Y"),)
    else:
        raise ValueError(f"Unknown addressing mode: {mode}")

    if mode in (ZPX, ABX):
        return (operand, Operand(OperandKind.REG8, "X"))
    if mode in (ZPY, ABY):
        return (operand, Operand(OperandKind.REG8, "Y"))
    return (operand,)


def _to_signed8(value: int) -> int:
    return value - 0x100 if value & 0x80 else value


# @intent:responsibility バイト窓の先頭から1命令をデコードします。
def decode_instruction(window: bytes) -> Optional[DecodedInstruction]:
    if not window:
        return None
    entry = OPCODE_MAP.get(window[0])
    if entry is None:
        return None
    mnemonic, mode = entry
    size = MODE_SIZES[mode]
    if len(window) < size:
        return None

    branch_target = None
    if mode == REL:
        branch_target = RelativeAddress(_to_signed8(window[1]), size)
    elif mnemonic in ("JMP", "JSR") and mode == ABS:
        branch_target = AbsoluteAddress(window[1] | (window[2] << 8))

    return DecodedInstruction(
        mnemonic,
        size,
        _operands(mode, window),
        falls_through=mnemonic not in NO_FALLTHROUGH,
        branch_target=branch_target,
    )
