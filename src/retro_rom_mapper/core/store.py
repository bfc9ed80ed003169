# retro_rom_mapper/core/store.py
"""
Core Layer (バイト分類ストア)

このモジュールは、ROMイメージ全体に対するバイトごとの分類タグ
（Unknown / Data / Code）を保持する唯一の正とされるストアを定義します。
タグの変更はコード探索エンジン（discovery.py）を介して行われます。
"""
from typing import List, Optional

from retro_rom_mapper.common.types import ByteType
from retro_rom_mapper.core.architecture import Architecture, Instruction, ResolutionContext


# @intent:responsibility ROMイメージと、その各オフセットの分類タグを保持します。
# @intent:rationale ROMイメージは不変(bytes)として保持し、タグのみを可変リストで管理します。
class ByteStore(ResolutionContext):
    """
    ROMイメージとバイト分類タグを保持するストア。
    アドレス解決のための読み取り専用ビュー(ResolutionContext)も兼ねます。
    """
    # @intent:pre-condition `rom`は1バイト以上のバイト列である必要があります。
    def __init__(self, rom: bytes, architecture: Architecture, banks=None):
        if len(rom) == 0:
            raise ValueError("ROM image must not be empty.")
        self._rom = bytes(rom)
        self._types: List[ByteType] = [ByteType.UNKNOWN] * len(self._rom)
        self._architecture = architecture
        # @intent:rationale バンク割り当てはNavigation層が所有する。ストアは参照のみ行う。
        self._banks = banks

    def __len__(self) -> int:
        return len(self._rom)

    @property
    def architecture(self) -> Architecture:
        return self._architecture

    @property
    def rom(self) -> bytes:
        return self._rom

    # @intent:responsibility オフセットが有効範囲内であることを検証します。
    def _check_offset(self, offset: int) -> None:
        if not 0 <= offset < len(self._rom):
            raise IndexError(f"Offset {offset:#08x} out of bounds for ROM of size {len(self._rom):#x}.")

    def byte_at(self, offset: int) -> int:
        self._check_offset(offset)
        return self._rom[offset]

    # @intent:responsibility 指定オフセットの分類タグを返します。
    def tag_at(self, offset: int) -> ByteType:
        self._check_offset(offset)
        return self._types[offset]

    # @intent:responsibility タグを直接書き換えます。コード探索エンジンのみが呼び出します。
    def _set_tag(self, offset: int, byte_type: ByteType) -> None:
        self._check_offset(offset)
        self._types[offset] = byte_type

    def count(self, byte_type: ByteType) -> int:
        return self._types.count(byte_type)

    # --- ResolutionContext ---

    def bank_at(self, location: int) -> Optional[int]:
        if self._banks is None:
            return None
        return self._banks.bank_at(location)

    def image_size(self) -> int:
        return len(self._rom)

    # --- Decoding helpers ---

    # @intent:responsibility デコーダに渡すバイト窓を切り出します。
    # @intent:post-condition 窓はイメージ末尾を越えないため、デコーダが範囲外を読むことはありません。
    def window(self, offset: int) -> bytes:
        self._check_offset(offset)
        return self._rom[offset:offset + self._architecture.max_instruction_size]

    def instruction_at(self, offset: int) -> Optional[Instruction]:
        """
        指定オフセットから1命令をデコードします。分類タグは考慮しません。
        """
        return self._architecture.decode(self.window(offset))

    # --- Cursor alignment ---

    # @intent:responsibility 任意のカーソル位置を、その位置以前の命令境界に補正します。
    def align_to_valid(self, offset: int) -> int:
        """
        DataまたはCodeのオフセットはそのまま返します。
        Unknownの場合、最大 (最長命令長 - 1) バイト手前までCodeの命令開始位置を探し、
        その命令がoffsetをまたいでいれば、最も手前の開始位置を返します。
        """
        if self.tag_at(offset) != ByteType.UNKNOWN:
            return offset
        start = self.enclosing_instruction(offset)
        return offset if start is None else start

    # @intent:responsibility 指定オフセットをまたぐCode命令の開始位置を返します。
    def enclosing_instruction(self, offset: int) -> Optional[int]:
        self._check_offset(offset)
        max_back = min(self._architecture.max_instruction_size - 1, offset)
        for back_offset in range(max_back, 0, -1):
            start = offset - back_offset
            if self._types[start] != ByteType.CODE:
                continue
            instruction = self.instruction_at(start)
            if instruction is not None and instruction.size > back_offset:
                return start
        return None

    # @intent:responsibility カーソルを次の分類単位の先頭へ進めた位置を返します。
    def next_aligned(self, offset: int) -> int:
        if self.tag_at(offset) == ByteType.CODE:
            instruction = self.instruction_at(offset)
            if instruction is not None:
                return offset + instruction.size
        return offset + 1
