# retro_rom_mapper/navigation/history.py
"""
ナビゲーション履歴モジュール。

ジャンプ（Goto / Follow）で訪れたオフセットの履歴を保持し、
戻る・進むの操作を提供します。
"""
from typing import List, Optional


# @intent:responsibility 訪問したオフセットの順序付き履歴とカーソルを管理します。
# @intent:rationale 一般的なUndo/Redoと同じく、戻った後に新しいジャンプを行うと
#                  それより先の「進む」履歴は破棄されます。
class NavigationHistory:
    """
    ジャンプ履歴。`_entries[_cursor]` が現在位置を表します。
    """
    def __init__(self):
        self._entries: List[int] = []
        self._cursor: int = -1

    # @intent:responsibility ジャンプ元を記録し、ジャンプ先を新しい現在位置として追加します。
    def follow(self, from_offset: int, to_offset: int) -> None:
        """
        from_offsetを現在の履歴エントリとして記録し、カーソルより先の履歴を切り捨てた上で
        to_offsetを追加します。呼び出し元はビューをto_offsetへ移動させます。
        """
        if self._cursor < 0:
            self._entries = [from_offset]
            self._cursor = 0
        else:
            del self._entries[self._cursor + 1:]
            self._entries[self._cursor] = from_offset
        self._entries.append(to_offset)
        self._cursor += 1

    # @intent:responsibility 履歴を1つ戻ります。
    # @intent:post-condition 最古のエントリにいる場合は何もせずNoneを返します。
    def back(self, current: Optional[int] = None) -> Optional[int]:
        """
        currentが与えられた場合、戻る前に現在位置をエントリに記録します
        （Follow後にカーソルを移動していた場合、「進む」でその位置に戻れるように）。
        """
        if self._cursor <= 0:
            return None
        if current is not None:
            self._entries[self._cursor] = current
        self._cursor -= 1
        return self._entries[self._cursor]

    # @intent:responsibility 履歴を1つ進みます。
    # @intent:post-condition 最新のエントリにいる場合は何もせずNoneを返します。
    def forward(self, current: Optional[int] = None) -> Optional[int]:
        if self._cursor < 0 or self._cursor >= len(self._entries) - 1:
            return None
        if current is not None:
            self._entries[self._cursor] = current
        self._cursor += 1
        return self._entries[self._cursor]

    def can_go_back(self) -> bool:
        return self._cursor > 0

    def can_go_forward(self) -> bool:
        return 0 <= self._cursor < len(self._entries) - 1

    def entries(self) -> List[int]:
        return list(self._entries)

    @property
    def cursor(self) -> int:
        return self._cursor
