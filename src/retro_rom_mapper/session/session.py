# retro_rom_mapper/session/session.py
"""
セッションモジュール。

ROMイメージ、バイト分類ストア、コード探索エンジン、ラベル/バンク/履歴を1つの状態オブジェクトに
まとめ、対話コマンドごとのメソッドを提供します。UIに依存しないため、ヘッドレスで駆動・テストできます。
"""
import logging
from typing import List, Optional

from retro_rom_mapper.common.types import ByteType
from retro_rom_mapper.core.architecture import Architecture
from retro_rom_mapper.core.discovery import CodeDiscoveryEngine
from retro_rom_mapper.core.listing import (
    HeaderInfo, ListingLine, build_line, build_listing, format_instruction, render_operands,
)
from retro_rom_mapper.core.store import ByteStore
from retro_rom_mapper.navigation.history import NavigationHistory
from retro_rom_mapper.navigation.labels import DEFAULT_LABEL_FORMAT, BankTable, LabelTable

logger = logging.getLogger(__name__)


# @intent:responsibility ユーザー入力（16進数、ラベル名など）が不正であることを表します。
class InvalidInputError(ValueError):
    pass


# @intent:utility_function ユーザーが入力した16進数文字列を整数に変換します。
def parse_hex(text: str) -> int:
    """
    "1234", "0x1234", "$1234" の形式を受け付けます。
    """
    value = text.strip()
    if value.lower().startswith("0x"):
        value = value[2:]
    elif value.startswith("$"):
        value = value[1:]
    if not value:
        raise InvalidInputError("Empty hexadecimal value.")
    try:
        return int(value, 16)
    except ValueError:
        raise InvalidInputError(f"Invalid hexadecimal value: {text!r}")


# @intent:responsibility 1つのROMに対する解析セッションの全状態を保持し、コマンドを実行します。
# @intent:rationale 各コマンドは完了するまで同期的に実行され、戻った時点で保留中の分類要求は全て処理済みです。
class Session:
    """
    解析セッション。selectedは現在選択中のオフセット、baseは表示先頭のオフセットです。
    """
    def __init__(self, rom: bytes, architecture: Architecture,
                 label_format: str = DEFAULT_LABEL_FORMAT):
        self.labels = LabelTable(label_format)
        self.banks = BankTable()
        self.history = NavigationHistory()
        self.store = ByteStore(rom, architecture, self.banks)
        self.engine = CodeDiscoveryEngine(self.store, self.labels)
        self.selected = 0
        self.base = 0

    @property
    def architecture(self) -> Architecture:
        return self.store.architecture

    def __len__(self) -> int:
        return len(self.store)

    # --- Cursor movement ---

    # @intent:responsibility カーソルを次の分類単位（命令またはバイト）へ移動します。
    def move_next(self) -> int:
        next_offset = self.store.next_aligned(self.selected)
        if next_offset < len(self.store):
            self.selected = next_offset
        return self.selected

    # @intent:responsibility カーソルを1つ前の分類単位へ移動します。命令の途中には止まりません。
    def move_previous(self) -> int:
        if self.selected > 0:
            self.selected = self.store.align_to_valid(self.selected - 1)
        return self.selected

    def _jump_to(self, offset: int) -> None:
        self.base = offset
        self.selected = offset

    # --- Classification ---

    def _offset_or_selected(self, offset: Optional[int]) -> int:
        return self.selected if offset is None else offset

    def mark_code(self, offset: Optional[int] = None) -> List[int]:
        offset = self._offset_or_selected(offset)
        newly_coded = self.engine.mark(offset, ByteType.CODE)
        logger.info("Marked %#08x as code (%d new code offsets)", offset, len(newly_coded))
        return newly_coded

    def mark_data(self, offset: Optional[int] = None) -> None:
        self.engine.mark(self._offset_or_selected(offset), ByteType.DATA)

    def mark_unknown(self, offset: Optional[int] = None) -> None:
        self.engine.mark(self._offset_or_selected(offset), ByteType.UNKNOWN)

    # --- Navigation ---

    # @intent:responsibility 入力された16進オフセットへジャンプし、履歴に記録します。
    # @intent:pre-condition 入力が不正な場合は状態を一切変更せずにInvalidInputErrorを送出します。
    def goto(self, text: str) -> int:
        offset = parse_hex(text)
        if not 0 <= offset < len(self.store):
            raise InvalidInputError(f"Offset {offset:#x} is outside the ROM image (size {len(self.store):#x}).")
        self.history.follow(self.selected, offset)
        self._jump_to(offset)
        return offset

    # @intent:responsibility カーソル位置の命令の分岐先へジャンプします。
    # @intent:post-condition 分岐先を解決できない場合は何もせずNoneを返します。
    def follow_branch(self) -> Optional[int]:
        if self.store.tag_at(self.selected) != ByteType.CODE:
            return None
        target = self.engine.resolve_branch(self.selected)
        if target is None:
            return None
        self.history.follow(self.selected, target)
        self._jump_to(target)
        return target

    def back(self) -> Optional[int]:
        offset = self.history.back(self.selected)
        if offset is not None:
            self._jump_to(offset)
        return offset

    def forward(self) -> Optional[int]:
        offset = self.history.forward(self.selected)
        if offset is not None:
            self._jump_to(offset)
        return offset

    # --- Labels / Banks ---

    def assign_bank(self, text: str) -> int:
        bank = parse_hex(text)
        self.banks.assign(self.selected, bank)
        logger.info("Assigned bank %#x to read location %#08x", bank, self.selected)
        return bank

    def set_label(self, text: str) -> str:
        name = text.strip()
        if not name:
            raise InvalidInputError("Label name must not be empty.")
        self.labels.set_label(self.selected, name)
        return name

    # --- Presentation ---

    def line_at(self, offset: int) -> ListingLine:
        return build_line(self.store, self.labels, offset)

    def listing(self, start: Optional[int] = None, count: int = 32) -> List[ListingLine]:
        return build_listing(self.store, self.labels, self.base if start is None else start, count)

    # @intent:responsibility 選択中のオフセットが表示範囲(rows行)に収まるよう表示先頭を調整します。
    def ensure_visible(self, rows: int) -> int:
        if self.selected < self.base:
            self.base = self.selected
            return self.base
        while True:
            lines = self.listing(self.base, rows)
            if not lines or self.selected < lines[-1].offset + lines[-1].size:
                return self.base
            self.base += lines[0].size

    # @intent:responsibility 現在位置のヘッダー表示（命令、分岐先、利用可能な操作）を生成します。
    def describe(self, offset: Optional[int] = None) -> HeaderInfo:
        """
        タグに関わらず、カーソル位置をデコードできればその命令を表示します。
        """
        offset = self._offset_or_selected(offset)
        tag = self.store.tag_at(offset)
        instruction = self.store.instruction_at(offset)
        actions: List[str] = []
        instruction_text = None
        follow_target = None

        if instruction is not None:
            operands = render_operands(self.store, self.labels, offset, instruction)
            instruction_text = format_instruction(instruction.mnemonic, operands)
            if tag != ByteType.CODE:
                actions.append("[c]ode")
            else:
                follow_target = self.engine.resolve_branch(offset)
                if follow_target is not None:
                    actions.append(f"[f]ollow ({follow_target:04x})")
        if tag != ByteType.DATA:
            actions.append("[d]ata")
        actions.extend(["[G]oto", "[b]ank", "[l]abel"])
        return HeaderInfo(offset=offset, tag=tag, instruction_text=instruction_text,
                          follow_target=follow_target, actions=actions)
