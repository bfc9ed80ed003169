# retro_rom_mapper/core/listing.py
"""
リスティング行の不変データ構造

このモジュールは、分類済みバイトを表示するためにUIへ提供する行データを定義します。
UIはデコードやアドレス解決を再実装することなく、この行データだけで描画できます。
"""
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from retro_rom_mapper.common.types import (
    ByteType, AbsoluteAddress, RelativeAddress, ResolvedAddress,
    PhysicalAddress, UnknownBankAddress, SystemAddress,
)
from retro_rom_mapper.core.architecture import Instruction, Operand, OperandKind
from retro_rom_mapper.core.store import ByteStore


# @intent:responsibility 表示用に解決・整形済みのオペランドを記録します。
@dataclass(frozen=True)
class RenderedOperand:
    operand: Operand
    text: str
    resolved: Optional[ResolvedAddress] = None  # ADDRESS / REL8 の場合のみ
    label: Optional[str] = None


# @intent:responsibility リスティングの1行（1命令または1バイト）を不変に記録します。
@dataclass(frozen=True)
class ListingLine:
    """
    Codeかつデコード可能な行はmnemonicとoperandsを持ちます。
    Codeだがデコードできない行はillegal=Trueとなり、1バイトとして扱われます。
    """
    offset: int
    tag: ByteType
    raw: bytes
    label: Optional[str] = None
    mnemonic: Optional[str] = None
    operands: Tuple[RenderedOperand, ...] = field(default_factory=tuple)
    illegal: bool = False

    @property
    def size(self) -> int:
        return len(self.raw)

    @property
    def hex_bytes(self) -> str:
        return " ".join(f"{b:02x}" for b in self.raw)

    # @intent:responsibility 行の本文（ニーモニックとオペランド、またはdb/??）を返します。
    @property
    def text(self) -> str:
        if self.tag == ByteType.UNKNOWN:
            return "??"
        if self.tag == ByteType.DATA:
            return "db"
        if self.illegal or self.mnemonic is None:
            return "Illegal instruction"
        return format_instruction(self.mnemonic, self.operands)


# @intent:utility_function ニーモニックとオペランドを1行の文字列に整形します。
def format_instruction(mnemonic: str, operands: Tuple[RenderedOperand, ...]) -> str:
    if not operands:
        return mnemonic
    return f"{mnemonic:<6}" + ", ".join(op.text for op in operands)


# @intent:responsibility 現在位置のヘッダー表示（命令と利用可能な操作）を記録します。
@dataclass(frozen=True)
class HeaderInfo:
    offset: int
    tag: ByteType
    instruction_text: Optional[str] = None
    follow_target: Optional[int] = None
    actions: List[str] = field(default_factory=list)


# @intent:utility_function 解決済みアドレスを表示用文字列に変換します。
def format_resolved(resolved: ResolvedAddress, label: Optional[str] = None) -> str:
    if isinstance(resolved, PhysicalAddress):
        if label:
            return label
        return f"({resolved.offset:06x})"
    if isinstance(resolved, UnknownBankAddress):
        return f"(??:{resolved.offset:04x})"
    if isinstance(resolved, SystemAddress):
        return f"(SYS:{resolved.address:04x})"
    raise TypeError(f"Unsupported resolved address: {resolved!r}")


# @intent:responsibility オペランドを解決し、表示用の文字列を生成します。
def render_operand(store: ByteStore, labels, origin: int, instruction: Instruction,
                   operand: Operand) -> RenderedOperand:
    kind = operand.kind
    if kind == OperandKind.IMM8:
        return RenderedOperand(operand, f"{operand.value:02x}")
    if kind == OperandKind.IMM16:
        return RenderedOperand(operand, f"{operand.value:04x}")
    if kind in (OperandKind.REG8, OperandKind.REG16, OperandKind.SPECIAL):
        return RenderedOperand(operand, str(operand.value))
    if kind == OperandKind.INDIRECT_REG16:
        return RenderedOperand(operand, f"({operand.value})")

    if kind == OperandKind.REL8:
        address = RelativeAddress(operand.value, instruction.size)
    elif kind == OperandKind.ADDRESS:
        address = operand.value
        if not isinstance(address, (AbsoluteAddress, RelativeAddress)):
            raise TypeError(f"ADDRESS operand requires a logical address: {address!r}")
    else:
        raise ValueError(f"Unknown operand kind: {kind}")

    resolved = store.architecture.resolve_address(address, origin, store)
    label = None
    if isinstance(resolved, PhysicalAddress) and labels is not None:
        label = labels.label_for(resolved.offset)
    return RenderedOperand(operand, format_resolved(resolved, label), resolved, label)


def render_operands(store: ByteStore, labels, origin: int,
                    instruction: Instruction) -> Tuple[RenderedOperand, ...]:
    return tuple(render_operand(store, labels, origin, instruction, op) for op in instruction.operands)


# @intent:responsibility 指定オフセットの1行分のリスティングデータを生成します。
def build_line(store: ByteStore, labels, offset: int) -> ListingLine:
    tag = store.tag_at(offset)
    label = labels.label_for(offset) if labels is not None else None

    if tag == ByteType.CODE:
        instruction = store.instruction_at(offset)
        if instruction is not None:
            operands = render_operands(store, labels, offset, instruction)
            return ListingLine(
                offset=offset,
                tag=tag,
                raw=store.rom[offset:offset + instruction.size],
                label=label,
                mnemonic=instruction.mnemonic,
                operands=operands,
            )
        return ListingLine(offset=offset, tag=tag, raw=store.rom[offset:offset + 1],
                           label=label, illegal=True)

    return ListingLine(offset=offset, tag=tag, raw=store.rom[offset:offset + 1], label=label)


# @intent:responsibility 指定オフセットから最大count行のリスティングを生成します。
def build_listing(store: ByteStore, labels, start: int, count: int) -> List[ListingLine]:
    lines: List[ListingLine] = []
    offset = start
    while len(lines) < count and offset < len(store):
        line = build_line(store, labels, offset)
        lines.append(line)
        offset += line.size
    return lines
