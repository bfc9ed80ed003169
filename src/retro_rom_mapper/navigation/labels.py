# retro_rom_mapper/navigation/labels.py
"""
ラベル管理モジュール。

分岐先オフセットに対するラベル名と、読み出し位置ごとのバンク割り当てを保持します。
"""
from typing import Dict, Iterator, Optional, Tuple

from retro_rom_mapper.common.types import BankMap, LabelMap

DEFAULT_LABEL_FORMAT = "LOC_{:06X}"


# @intent:responsibility オフセットとラベル名の対応を管理します。
class LabelTable:
    """
    ラベル表。ユーザーが設定したラベルは常に優先され、
    自動生成のデフォルトラベルによって上書きされることはありません。
    """
    def __init__(self, label_format: str = DEFAULT_LABEL_FORMAT):
        self._labels: LabelMap = {}
        self._label_format = label_format

    def label_for(self, offset: int) -> Optional[str]:
        return self._labels.get(offset)

    # @intent:responsibility ユーザー指定のラベルを設定します。既存のラベルは上書きされます。
    # @intent:pre-condition nameは空白以外の文字を含む必要があります。
    def set_label(self, offset: int, name: str) -> None:
        name = name.strip()
        if not name:
            raise ValueError("Label name must not be empty.")
        self._labels[offset] = name

    # @intent:responsibility ラベルが未設定の場合に限り、デフォルト名のラベルを登録します。
    def ensure_default_label(self, offset: int) -> str:
        """
        コード探索が分岐先を解決するたびに呼び出されます。
        既存のラベル（ユーザー設定を含む）は変更しません。
        """
        if offset not in self._labels:
            self._labels[offset] = self._label_format.format(offset)
        return self._labels[offset]

    def remove(self, offset: int) -> None:
        self._labels.pop(offset, None)

    def __contains__(self, offset: int) -> bool:
        return offset in self._labels

    def __len__(self) -> int:
        return len(self._labels)

    def __iter__(self) -> Iterator[Tuple[int, str]]:
        return iter(sorted(self._labels.items()))


# @intent:responsibility 読み出し位置ごとのバンク番号の割り当てを管理します。
# @intent:rationale バンク番号はバイト内容から推論できないため、明示的なユーザー操作でのみ登録されます。
class BankTable:
    def __init__(self):
        self._banks: BankMap = {}

    # @intent:pre-condition bankは0以上である必要があります。
    def assign(self, location: int, bank: int) -> None:
        if bank < 0:
            raise ValueError(f"Bank number must be non-negative: {bank}")
        self._banks[location] = bank

    def bank_at(self, location: int) -> Optional[int]:
        return self._banks.get(location)

    def clear(self, location: int) -> None:
        self._banks.pop(location, None)

    def items(self) -> Dict[int, int]:
        return dict(self._banks)
