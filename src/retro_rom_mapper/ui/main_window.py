# src/retro_rom_mapper/ui/main_window.py
"""
メインウィンドウの実装。
ヘッダー、リスティング、ステータス行を配置し、キー入力をセッションのコマンドに変換します。
"""
import logging
from typing import Dict, Optional

from PySide6.QtWidgets import QMainWindow, QApplication, QWidget, QVBoxLayout, QLabel, QInputDialog, QMessageBox, QLineEdit
from PySide6.QtGui import QPalette, QColor, QKeyEvent
from PySide6.QtCore import Qt

from retro_rom_mapper.common.types import ByteType
from retro_rom_mapper.session.session import Session, InvalidInputError
from retro_rom_mapper.session.commands import Command, DEFAULT_KEYMAP, PROMPTS, dispatch
from .listing_view import ListingView
from .fonts import get_monospace_font_family, get_monospace_font

logger = logging.getLogger(__name__)

ESCAPE_KEY = "\x1b"

# @intent:responsibility アプリケーションのメインウィンドウを定義し、セッションと表示を結び付けます。
class MainWindow(QMainWindow):
    """
    各コマンドは同期的に完了し、その後に表示を再構築します。
    """
    def __init__(self, session: Session, keymap: Optional[Dict[str, Command]] = None,
                 rows: int = 32, title: str = "Retro ROM Mapper", parent=None):
        super(MainWindow, self).__init__(parent)
        self.session = session
        self.keymap = dict(DEFAULT_KEYMAP if keymap is None else keymap)
        self.rows = rows
        self.setWindowTitle(title)
        self.setGeometry(100, 100, 1000, 700)

        self._set_dark_theme()
        self._create_widgets()
        self.refresh()

    def _create_widgets(self):
        central_widget = QWidget()
        layout = QVBoxLayout(central_widget)

        self.header_label = QLabel()
        self.header_label.setFont(get_monospace_font(11, bold=True))
        self.header_label.setTextInteractionFlags(Qt.NoTextInteraction)
        layout.addWidget(self.header_label)

        self.listing_view = ListingView()
        self.listing_view.table.setFocusPolicy(Qt.NoFocus)
        layout.addWidget(self.listing_view)

        self.status_label = QLabel()
        layout.addWidget(self.status_label)

        self.setCentralWidget(central_widget)
        self.setFocusPolicy(Qt.StrongFocus)

    # @intent:responsibility セッションの現在状態からヘッダー、リスティング、ステータスを再描画します。
    def refresh(self):
        self.session.ensure_visible(self.rows)
        info = self.session.describe()

        header = f"{info.offset:06x} [{info.tag.value}]"
        if info.instruction_text:
            header += f"  {info.instruction_text}"
        self.header_label.setText(header + "    " + " ".join(info.actions))

        self.listing_view.update_listing(self.session.listing(count=self.rows), self.session.selected)

        store = self.session.store
        self.status_label.setText(
            f"{self.session.architecture.name}  size {len(store):#x}  "
            f"code {store.count(ByteType.CODE)}  data {store.count(ByteType.DATA)}  "
            f"unknown {store.count(ByteType.UNKNOWN)}  labels {len(self.session.labels)}"
        )

    # @intent:responsibility キー文字列に対応するコマンドを返します。
    def command_for_key(self, text: str) -> Optional[Command]:
        return self.keymap.get(text)

    # @intent:responsibility コマンドを実行して表示を更新します。入力が必要な場合は入力を求めます。
    # @intent:post-condition 不正な入力ではメッセージを表示して再入力を求め、キャンセルされるまで繰り返します。
    def execute(self, command: Command, argument: Optional[str] = None):
        if command == Command.QUIT:
            self.close()
            return None

        while True:
            if command in PROMPTS and argument is None:
                argument = self._prompt(PROMPTS[command])
                if argument is None:
                    return None
            try:
                result = dispatch(self.session, command, argument)
            except InvalidInputError as e:
                logger.info("Rejected input for %s: %s", command.value, e)
                QMessageBox.warning(self, "Invalid input", str(e))
                argument = None
                if command not in PROMPTS:
                    return None
                continue
            self.refresh()
            return result

    def _prompt(self, label: str) -> Optional[str]:
        text, ok = QInputDialog.getText(self, "Retro ROM Mapper", label, QLineEdit.Normal, "")
        if not ok:
            return None
        return text

    def keyPressEvent(self, event: QKeyEvent):
        text = ESCAPE_KEY if event.key() == Qt.Key_Escape else event.text()
        command = self.command_for_key(text)
        if command is None:
            super().keyPressEvent(event)
            return
        self.execute(command)

    # @intent:responsibility アプリケーションにダークテーマのスタイルシートを適用します。
    def _set_dark_theme(self):
        dark_palette = QPalette()
        dark_palette.setColor(QPalette.Window, QColor(29, 29, 29))
        dark_palette.setColor(QPalette.WindowText, QColor(224, 224, 224))
        dark_palette.setColor(QPalette.Base, QColor(30, 30, 30))
        dark_palette.setColor(QPalette.Text, QColor(224, 224, 224))
        dark_palette.setColor(QPalette.Button, QColor(53, 53, 53))
        dark_palette.setColor(QPalette.ButtonText, QColor(224, 224, 224))
        dark_palette.setColor(QPalette.Highlight, QColor(42, 130, 218))
        dark_palette.setColor(QPalette.HighlightedText, QColor(0, 0, 0))
        QApplication.setPalette(dark_palette)

        font_family = get_monospace_font_family()
        self.setStyleSheet(f"""
            QWidget {{ font-family: '{font_family}', monospace; font-size: 10pt; }}
            QMainWindow {{ background-color: #1D1D1D; }}
            QLabel {{ color: #E0E0E0; padding: 4px; }}
        """)
