"""
Sharp LR35902 (Game Boy) 命令デコード表。
各オペコードに対応するデコード関数を登録し、バイト窓から命令を生成します。
"""
from typing import Callable, Dict, Optional

from retro_rom_mapper.common.types import AbsoluteAddress, RelativeAddress
from retro_rom_mapper.core.architecture import DecodedInstruction, Operand, OperandKind

MAX_INSTRUCTION_SIZE = 3

# Helper tables for register mapping
REGISTERS_8 = ["B", "C", "D", "E", "H", "L", "(HL)", "A"]
REGISTERS_16 = ["BC", "DE", "HL", "SP"]
REGISTERS_16_STACK = ["BC", "DE", "HL", "AF"]
CONDITIONS = ["NZ", "Z", "NC", "C"]
ALU_MNEMONICS = ["ADD", "ADC", "SUB", "SBC", "AND", "XOR", "OR", "CP"]
ROTATE_MNEMONICS = ["RLC", "RRC", "RL", "RR", "SLA", "SRA", "SWAP", "SRL"]
ILLEGAL_OPCODES = {0xD3, 0xDB, 0xDD, 0xE3, 0xE4, 0xEB, 0xEC, 0xED, 0xF4, 0xFC, 0xFD}

Decoder = Callable[[int, bytes], Optional[DecodedInstruction]]


# --- Operand helpers ---

def reg8(code: int) -> Operand:
    return Operand(OperandKind.REG8, REGISTERS_8[code])

def reg16(name: str) -> Operand:
    return Operand(OperandKind.REG16, name)

def indirect16(name: str) -> Operand:
    return Operand(OperandKind.INDIRECT_REG16, name)

def imm8(value: int) -> Operand:
    return Operand(OperandKind.IMM8, value)

def imm16(value: int) -> Operand:
    return Operand(OperandKind.IMM16, value)

def address(value: int) -> Operand:
    return Operand(OperandKind.ADDRESS, AbsoluteAddress(value))

def special(text: str) -> Operand:
    return Operand(OperandKind.SPECIAL, text)

A = reg8(7)


# @intent:utility_function 符号なし8bit値を符号付きに変換します。
def to_signed8(value: int) -> int:
    return value - 0x100 if value & 0x80 else value

# @intent:utility_function リトルエンディアンの16bit値を読み取ります。
def read16(window: bytes) -> int:
    return window[1] | (window[2] << 8)


# --- Decoding Functions ---
# 全てのデコード関数は (opcode, window) を受け取り、窓の長さが命令長に満たない場合はNoneを返します。

def fixed(mnemonic: str, *operands: Operand, falls_through: bool = True) -> Decoder:
    """オペランドバイトを持たない1バイト命令のデコーダを生成します。"""
    def decode(opcode: int, window: bytes) -> Optional[DecodedInstruction]:
        return DecodedInstruction(mnemonic, 1, operands, falls_through=falls_through)
    return decode

def decode_ld_rp_d16(opcode: int, window: bytes) -> Optional[DecodedInstruction]:
    if len(window) < 3:
        return None
    return DecodedInstruction("LD", 3, (reg16(REGISTERS_16[opcode >> 4]), imm16(read16(window))))

def decode_ld_r_d8(opcode: int, window: bytes) -> Optional[DecodedInstruction]:
    if len(window) < 2:
        return None
    return DecodedInstruction("LD", 2, (reg8((opcode >> 3) & 0x07), imm8(window[1])))

def decode_inc_dec8(opcode: int, window: bytes) -> Optional[DecodedInstruction]:
    mnemonic = "INC" if opcode & 0x01 == 0 else "DEC"
    return DecodedInstruction(mnemonic, 1, (reg8((opcode >> 3) & 0x07),))

def decode_inc_dec16(opcode: int, window: bytes) -> Optional[DecodedInstruction]:
    mnemonic = "INC" if opcode & 0x08 == 0 else "DEC"
    return DecodedInstruction(mnemonic, 1, (reg16(REGISTERS_16[opcode >> 4]),))

def decode_add_hl_rp(opcode: int, window: bytes) -> Optional[DecodedInstruction]:
    return DecodedInstruction("ADD", 1, (reg16("HL"), reg16(REGISTERS_16[opcode >> 4])))

def decode_ld_a16_sp(opcode: int, window: bytes) -> Optional[DecodedInstruction]:
    if len(window) < 3:
        return None
    return DecodedInstruction("LD", 3, (address(read16(window)), reg16("SP")))

def decode_stop(opcode: int, window: bytes) -> Optional[DecodedInstruction]:
    if len(window) < 2:
        return None
    return DecodedInstruction("STOP", 2)

def decode_jr(opcode: int, window: bytes) -> Optional[DecodedInstruction]:
    if len(window) < 2:
        return None
    displacement = to_signed8(window[1])
    target = RelativeAddress(displacement, 2)
    if opcode == 0x18:
        return DecodedInstruction("JR", 2, (Operand(OperandKind.REL8, displacement),),
                                  falls_through=False, branch_target=target)
    condition = CONDITIONS[(opcode >> 3) & 0x03]
    return DecodedInstruction(f"JR {condition}", 2, (Operand(OperandKind.REL8, displacement),),
                              branch_target=target)

def decode_ld_r_r(opcode: int, window: bytes) -> Optional[DecodedInstruction]:
    return DecodedInstruction("LD", 1, (reg8((opcode >> 3) & 0x07), reg8(opcode & 0x07)))

def decode_alu_r(opcode: int, window: bytes) -> Optional[DecodedInstruction]:
    mnemonic = ALU_MNEMONICS[(opcode >> 3) & 0x07]
    source = reg8(opcode & 0x07)
    if mnemonic in ("ADD", "ADC", "SBC"):
        return DecodedInstruction(mnemonic, 1, (A, source))
    return DecodedInstruction(mnemonic, 1, (source,))

def decode_alu_d8(opcode: int, window: bytes) -> Optional[DecodedInstruction]:
    if len(window) < 2:
        return None
    mnemonic = ALU_MNEMONICS[(opcode >> 3) & 0x07]
    if mnemonic in ("ADD", "ADC", "SBC"):
        return DecodedInstruction(mnemonic, 2, (A, imm8(window[1])))
    return DecodedInstruction(mnemonic, 2, (imm8(window[1]),))

def decode_ret_cc(opcode: int, window: bytes) -> Optional[DecodedInstruction]:
    return DecodedInstruction(f"RET {CONDITIONS[(opcode >> 3) & 0x03]}", 1)

def decode_push_pop(opcode: int, window: bytes) -> Optional[DecodedInstruction]:
    mnemonic = "PUSH" if opcode & 0x04 else "POP"
    return DecodedInstruction(mnemonic, 1, (reg16(REGISTERS_16_STACK[(opcode >> 4) & 0x03]),))

def decode_jp(opcode: int, window: bytes) -> Optional[DecodedInstruction]:
    if len(window) < 3:
        return None
    target = read16(window)
    if opcode == 0xC3:
        return DecodedInstruction("JP", 3, (address(target),), falls_through=False,
                                  branch_target=AbsoluteAddress(target))
    condition = CONDITIONS[(opcode >> 3) & 0x03]
    return DecodedInstruction(f"JP {condition}", 3, (address(target),),
                              branch_target=AbsoluteAddress(target))

def decode_call(opcode: int, window: bytes) -> Optional[DecodedInstruction]:
    if len(window) < 3:
        return None
    target = read16(window)
    mnemonic = "CALL" if opcode == 0xCD else f"CALL {CONDITIONS[(opcode >> 3) & 0x03]}"
    return DecodedInstruction(mnemonic, 3, (address(target),), branch_target=AbsoluteAddress(target))

# @intent:responsibility RST命令をデコードします。固定ベクタへの呼び出しとして扱います。
def decode_rst(opcode: int, window: bytes) -> Optional[DecodedInstruction]:
    vector = opcode & 0x38
    return DecodedInstruction("RST", 1, (address(vector),), branch_target=AbsoluteAddress(vector))

def decode_ldh(opcode: int, window: bytes) -> Optional[DecodedInstruction]:
    if len(window) < 2:
        return None
    port = address(0xFF00 | window[1])
    if opcode == 0xE0:
        return DecodedInstruction("LDH", 2, (port, A))
    return DecodedInstruction("LDH", 2, (A, port))

def decode_ld_a16_a(opcode: int, window: bytes) -> Optional[DecodedInstruction]:
    if len(window) < 3:
        return None
    target = address(read16(window))
    if opcode == 0xEA:
        return DecodedInstruction("LD", 3, (target, A))
    return DecodedInstruction("LD", 3, (A, target))

def decode_add_sp_r8(opcode: int, window: bytes) -> Optional[DecodedInstruction]:
    if len(window) < 2:
        return None
    return DecodedInstruction("ADD", 2, (reg16("SP"), special(f"{to_signed8(window[1]):+d}")))

def decode_ld_hl_sp_r8(opcode: int, window: bytes) -> Optional[DecodedInstruction]:
    if len(window) < 2:
        return None
    return DecodedInstruction("LD", 2, (reg16("HL"), special(f"SP{to_signed8(window[1]):+d}")))

# @intent:responsibility 0xCBプレフィックス命令（ローテート/シフト、ビット操作）をデコードします。
def decode_cb(opcode: int, window: bytes) -> Optional[DecodedInstruction]:
    if len(window) < 2:
        return None
    sub = window[1]
    group = sub >> 6
    bit = (sub >> 3) & 0x07
    register = reg8(sub & 0x07)
    if group == 0:
        return DecodedInstruction(ROTATE_MNEMONICS[bit], 2, (register,))
    mnemonic = ("BIT", "RES", "SET")[group - 1]
    return DecodedInstruction(mnemonic, 2, (imm8(bit), register))


DECODE_MAP: Dict[int, Decoder] = {
    0x00: fixed("NOP"),
    0x02: fixed("LD", indirect16("BC"), A),
    0x12: fixed("LD", indirect16("DE"), A),
    0x22: fixed("LD", special("(HL+)"), A),
    0x32: fixed("LD", special("(HL-)"), A),
    0x0A: fixed("LD", A, indirect16("BC")),
    0x1A: fixed("LD", A, indirect16("DE")),
    0x2A: fixed("LD", A, special("(HL+)")),
    0x3A: fixed("LD", A, special("(HL-)")),
    0x07: fixed("RLCA"),
    0x0F: fixed("RRCA"),
    0x17: fixed("RLA"),
    0x1F: fixed("RRA"),
    0x27: fixed("DAA"),
    0x2F: fixed("CPL"),
    0x37: fixed("SCF"),
    0x3F: fixed("CCF"),
    0x08: decode_ld_a16_sp,
    0x10: decode_stop,
    0x18: decode_jr,
    0x76: fixed("HALT"),
    0xC3: decode_jp,
    0xC9: fixed("RET", falls_through=False),
    0xD9: fixed("RETI", falls_through=False),
    0xCB: decode_cb,
    0xCD: decode_call,
    0xE0: decode_ldh,
    0xF0: decode_ldh,
    0xE2: fixed("LD", special("(C)"), A),
    0xF2: fixed("LD", A, special("(C)")),
    0xE8: decode_add_sp_r8,
    0xE9: fixed("JP", indirect16("HL"), falls_through=False),
    0xEA: decode_ld_a16_a,
    0xFA: decode_ld_a16_a,
    0xF3: fixed("DI"),
    0xFB: fixed("EI"),
    0xF8: decode_ld_hl_sp_r8,
    0xF9: fixed("LD", reg16("SP"), reg16("HL")),
    **{op: decode_ld_rp_d16 for op in range(0x01, 0x40, 0x10)},  # LD rp,d16
    **{op: decode_inc_dec16 for op in range(0x03, 0x40, 0x10)},  # INC rp
    **{op: decode_inc_dec16 for op in range(0x0B, 0x40, 0x10)},  # DEC rp
    **{op: decode_add_hl_rp for op in range(0x09, 0x40, 0x10)},  # ADD HL,rp
    **{op: decode_inc_dec8 for op in range(0x04, 0x40, 0x08)},   # INC r
    **{op: decode_inc_dec8 for op in range(0x05, 0x40, 0x08)},   # DEC r
    **{op: decode_ld_r_d8 for op in range(0x06, 0x40, 0x08)},    # LD r,d8
    **{op: decode_jr for op in range(0x20, 0x40, 0x08)},         # JR cc,r8
    **{op: decode_ld_r_r for op in range(0x40, 0x80) if op != 0x76},
    **{op: decode_alu_r for op in range(0x80, 0xC0)},
    **{op: decode_ret_cc for op in range(0xC0, 0xE0, 0x08)},
    **{op: decode_push_pop for op in range(0xC1, 0x100, 0x10)},  # POP
    **{op: decode_push_pop for op in range(0xC5, 0x100, 0x10)},  # PUSH
    **{op: decode_jp for op in range(0xC2, 0xE0, 0x08)},         # JP cc,a16
    **{op: decode_call for op in range(0xC4, 0xE0, 0x08)},       # CALL cc,a16
    **{op: decode_alu_d8 for op in range(0xC6, 0x100, 0x08)},
    **{op: decode_rst for op in range(0xC7, 0x100, 0x08)},
}


# @intent:responsibility バイト窓の先頭から1命令をデコードします。
def decode_instruction(window: bytes) -> Optional[DecodedInstruction]:
    """
    不正なオペコード、または窓の長さが命令長に満たない場合はNoneを返します。
    """
    if not window:
        return None
    opcode = window[0]
    if opcode in ILLEGAL_OPCODES:
        return None
    decoder = DECODE_MAP.get(opcode)
    if decoder is None:
        return None
    return decoder(opcode, window)
