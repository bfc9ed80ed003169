"""
リスティングを表示するウィジェット。
"""
from typing import List

from PySide6.QtWidgets import QWidget, QVBoxLayout, QTableWidget, QTableWidgetItem, QHeaderView
from PySide6.QtGui import QColor

from retro_rom_mapper.common.types import ByteType
from retro_rom_mapper.core.listing import ListingLine
from retro_rom_mapper.ui.fonts import get_monospace_font

# タグごとの文字色
TAG_COLORS = {
    ByteType.UNKNOWN: QColor("#707070"),
    ByteType.DATA: QColor("#D7BA7D"),
    ByteType.CODE: QColor("#BBBBBB"),
}
BG_COLOR_HIGHLIGHT = QColor("#404000")
BG_COLOR_NORMAL = QColor("#101010")

COLUMNS = ["Label", "Offset", "Bytes", "Instruction"]

# @intent:responsibility セッションが生成したリスティング行を表形式で表示し、選択中の行をハイライトします。
class ListingView(QWidget):
    """
    ListingLineをそのまま描画するだけのビュー。デコードやアドレス解決は行いません。
    """
    def __init__(self, parent=None):
        super().__init__(parent)
        self.layout = QVBoxLayout(self)
        self.layout.setContentsMargins(0, 0, 0, 0)

        self.table = QTableWidget()
        self.table.setColumnCount(len(COLUMNS))
        self.table.setHorizontalHeaderLabels(COLUMNS)
        header = self.table.horizontalHeader()
        for column in range(len(COLUMNS) - 1):
            header.setSectionResizeMode(column, QHeaderView.ResizeToContents)
        header.setSectionResizeMode(len(COLUMNS) - 1, QHeaderView.Stretch)

        self.table.setFont(get_monospace_font(10))
        self.table.verticalHeader().setVisible(False)
        self.table.setEditTriggers(QTableWidget.NoEditTriggers)
        self.table.setSelectionMode(QTableWidget.NoSelection)
        self.table.setShowGrid(False)
        self.table.setStyleSheet("background-color: #101010; color: #BBBBBB; gridline-color: #303030;")

        self.layout.addWidget(self.table)

        self.lines: List[ListingLine] = []
        self.selected_row = -1

    # @intent:responsibility 行データでテーブルを再構築し、selectedを含む行をハイライトします。
    def update_listing(self, lines: List[ListingLine], selected: int):
        self.lines = list(lines)
        self.selected_row = -1
        self.table.setRowCount(len(self.lines))

        for row, line in enumerate(self.lines):
            cells = [
                f"{line.label}:" if line.label else "",
                f"{line.offset:06x}",
                line.hex_bytes,
                line.text,
            ]
            if line.offset <= selected < line.offset + line.size:
                self.selected_row = row
            background = BG_COLOR_HIGHLIGHT if row == self.selected_row else BG_COLOR_NORMAL
            for column, text in enumerate(cells):
                item = QTableWidgetItem(text)
                item.setForeground(TAG_COLORS[line.tag])
                item.setBackground(background)
                self.table.setItem(row, column, item)

        if self.selected_row != -1:
            self.table.scrollToItem(self.table.item(self.selected_row, 0), QTableWidget.EnsureVisible)

    # @intent:utility_function 指定行のセル文字列を返します。
    def row_text(self, row: int) -> List[str]:
        return [self.table.item(row, column).text() for column in range(self.table.columnCount())]
