# retro_rom_mapper/core/architecture.py
"""
Core Layer (抽象アーキテクチャ)

このモジュールは、コード探索エンジンが特定の命令セットに依存しないための
アーキテクチャ抽象化を提供します。具体的なデコード表とアドレス解決は
Architecture Layer (arch/*) に委譲されます。
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

from retro_rom_mapper.common.types import (
    ByteType, LogicalAddress, ResolvedAddress, PhysicalAddress,
    AbsoluteAddress, RelativeAddress,
)


# @intent:responsibility 命令オペランドの種類を定義します。
class OperandKind(Enum):
    IMM8 = "IMM8"                     # 8bit即値
    IMM16 = "IMM16"                   # 16bit即値
    REL8 = "REL8"                     # 符号付き相対変位
    REG8 = "REG8"                     # 8bitレジスタ
    REG16 = "REG16"                   # 16bitレジスタ
    INDIRECT_REG16 = "INDIRECT_REG16" # レジスタ間接
    ADDRESS = "ADDRESS"               # 論理アドレス（解決済み/未解決）
    SPECIAL = "SPECIAL"               # アーキテクチャ固有のオペランド


# @intent:data_structure デコードされた命令の単一オペランド。
@dataclass(frozen=True)
class Operand:
    """
    valueの型はkindに依存します。
    IMM8/IMM16/REL8: int, REG8/REG16/INDIRECT_REG16/SPECIAL: str,
    ADDRESS: LogicalAddress
    """
    kind: OperandKind
    value: Union[int, str, AbsoluteAddress, RelativeAddress]


# @intent:responsibility 解決処理が参照する読み取り専用の分類状態を定義します。
class ResolutionContext(ABC):
    """
    アドレス解決に必要な状態（分類タグ、バンク割り当て、イメージサイズ）への
    読み取り専用のビュー。
    """
    @abstractmethod
    def tag_at(self, offset: int) -> ByteType:
        pass

    @abstractmethod
    def bank_at(self, location: int) -> Optional[int]:
        pass

    @abstractmethod
    def image_size(self) -> int:
        pass


# @intent:responsibility デコード済み命令が公開すべきインターフェースを定義します。
class Instruction(ABC):
    """
    アーキテクチャ固有の命令の抽象基底クラス。
    """
    # @intent:responsibility 命令のバイト長を返します。常に1以上です。
    @property
    @abstractmethod
    def size(self) -> int:
        pass

    # @intent:responsibility 命令の実行後、直後のバイトに実行が継続するかを返します。
    @property
    @abstractmethod
    def falls_through(self) -> bool:
        pass

    # @intent:responsibility 分岐命令であればジャンプ先の論理アドレスを返します。
    @property
    @abstractmethod
    def branch_target(self) -> Optional[LogicalAddress]:
        pass

    @property
    @abstractmethod
    def mnemonic(self) -> str:
        pass

    @property
    @abstractmethod
    def operands(self) -> Tuple[Operand, ...]:
        pass


# @intent:responsibility デコード表から生成される汎用の命令実装です。
class DecodedInstruction(Instruction):
    """
    各アーキテクチャのデコーダが返す不変の命令オブジェクト。
    """
    __slots__ = ("_mnemonic", "_size", "_operands", "_falls_through", "_branch_target")

    def __init__(self, mnemonic: str, size: int, operands: Tuple[Operand, ...] = (),
                 falls_through: bool = True, branch_target: Optional[LogicalAddress] = None):
        if size < 1:
            raise ValueError("Instruction size must be at least 1.")
        if len(operands) > 2:
            raise ValueError("An instruction has at most two operands.")
        self._mnemonic = mnemonic
        self._size = size
        self._operands = tuple(operands)
        self._falls_through = falls_through
        self._branch_target = branch_target

    @property
    def size(self) -> int:
        return self._size

    @property
    def falls_through(self) -> bool:
        return self._falls_through

    @property
    def branch_target(self) -> Optional[LogicalAddress]:
        return self._branch_target

    @property
    def mnemonic(self) -> str:
        return self._mnemonic

    @property
    def operands(self) -> Tuple[Operand, ...]:
        return self._operands

    def __eq__(self, other) -> bool:
        if not isinstance(other, DecodedInstruction):
            return NotImplemented
        return (self._mnemonic, self._size, self._operands, self._falls_through, self._branch_target) == \
            (other._mnemonic, other._size, other._operands, other._falls_through, other._branch_target)

    def __hash__(self) -> int:
        return hash((self._mnemonic, self._size, self._operands, self._falls_through, self._branch_target))

    def __repr__(self) -> str:
        return (f"DecodedInstruction({self._mnemonic!r}, size={self._size}, operands={self._operands!r}, "
                f"falls_through={self._falls_through}, branch_target={self._branch_target!r})")


# @intent:responsibility 特定のCPUに対するデコードとアドレス解決の戦略を定義します。
# @intent:rationale エンジンはこのクラスのインスタンスのみを参照するため、
#                  実行時にアーキテクチャを差し替えることができます。
class Architecture(ABC):
    """
    全てのアーキテクチャ実装の基底となる抽象クラス。
    """
    name: str = ""

    # @intent:responsibility 最長命令のバイト長を返します。アラインメント補正の探索範囲に使用されます。
    @property
    @abstractmethod
    def max_instruction_size(self) -> int:
        pass

    # @intent:responsibility バイト列の先頭から1命令をデコードします。
    # @intent:post-condition 不正なオペコード、または末尾のバイトが不足する場合はNoneを返します。
    @abstractmethod
    def decode(self, window: bytes) -> Optional[Instruction]:
        """
        windowの先頭バイトから1命令をデコードします。
        window外のバイトを読むことはありません。
        """
        pass

    # @intent:responsibility 論理アドレスを、解決済みアドレス（物理/バンク不明/システム）に変換します。
    @abstractmethod
    def resolve_address(self, address: LogicalAddress, origin: int,
                        context: ResolutionContext) -> ResolvedAddress:
        """
        originは命令が置かれているROMオフセットです。
        解決できない場合は推測せず、未解決を表すバリアントを返します。
        """
        pass

    # @intent:responsibility 論理アドレスをROMオフセットに解決します。
    # @intent:post-condition 物理アドレスに解決され、かつイメージ範囲内の場合のみ値を返します。
    def resolve(self, address: LogicalAddress, origin: int,
                context: ResolutionContext) -> Optional[int]:
        resolved = self.resolve_address(address, origin, context)
        if isinstance(resolved, PhysicalAddress) and 0 <= resolved.offset < context.image_size():
            return resolved.offset
        return None
