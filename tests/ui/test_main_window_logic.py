# tests/ui/test_main_window_logic.py
"""
MainWindowのキー入力処理とコマンド実行を検証するテスト。
ダイアログはモーダルになるため、テストでは差し替えます。
"""
import pytest
from PySide6.QtCore import Qt, QEvent
from PySide6.QtGui import QKeyEvent

from retro_rom_mapper.common.types import ByteType
from retro_rom_mapper.session.commands import Command, build_keymap
from retro_rom_mapper.session.session import Session
from retro_rom_mapper.arch.gb import GameBoyArchitecture
from retro_rom_mapper.ui import main_window
from retro_rom_mapper.ui.main_window import MainWindow


def press(window: MainWindow, key: int, text: str):
    window.keyPressEvent(QKeyEvent(QEvent.KeyPress, key, Qt.NoModifier, text))


class TestMainWindowLogic:
    @pytest.fixture
    def setup_window(self, qapp, monkeypatch):
        warnings = []
        monkeypatch.setattr(main_window.QMessageBox, "warning",
                            lambda parent, title, text: warnings.append(text))
        rom = bytes([0x00, 0xC3, 0x05, 0x00, 0xD3, 0xC9])  # NOP / JP $0005 / ?? / RET
        session = Session(rom, GameBoyArchitecture())
        window = MainWindow(session, rows=4)
        return window, session, warnings

    def test_initial_render(self, setup_window):
        window, _, _ = setup_window
        assert window.header_label.text().startswith("000000 [UNKNOWN]  NOP")
        assert "[c]ode" in window.header_label.text()
        assert window.listing_view.table.rowCount() == 4
        assert "unknown 6" in window.status_label.text()

    # @intent:test_case_keys キー入力がキーマップを通じてセッションのコマンドになることを検証します。
    def test_keys_drive_session(self, setup_window):
        window, session, _ = setup_window
        press(window, Qt.Key_C, "c")
        assert session.store.count(ByteType.CODE) == 3
        assert "code 3" in window.status_label.text()

        press(window, Qt.Key_J, "j")
        assert session.selected == 1
        press(window, Qt.Key_F, "f")
        assert session.selected == 5
        press(window, Qt.Key_O, "o")
        assert session.selected == 1
        assert session.base == 1
        assert window.listing_view.selected_row == 0

    def test_unmapped_key_is_ignored(self, setup_window):
        window, session, _ = setup_window
        press(window, Qt.Key_Z, "z")
        assert session.selected == 0
        assert session.store.count(ByteType.UNKNOWN) == 6

    def test_custom_keymap(self, qapp):
        session = Session(bytes([0x00, 0x00]), GameBoyArchitecture())
        window = MainWindow(session, build_keymap({"move_next": "n"}))
        assert window.command_for_key("n") == Command.MOVE_NEXT
        assert window.command_for_key("j") is None

    # @intent:test_case_prompt 不正な入力では警告を表示して再入力を求めることを検証します。
    def test_prompt_reprompts_on_invalid_input(self, setup_window):
        window, session, warnings = setup_window
        answers = iter(["zz", "99", "4"])
        window._prompt = lambda label: next(answers)

        assert window.execute(Command.GOTO) == 4
        assert session.selected == 4
        assert len(warnings) == 2

    def test_prompt_cancelled(self, setup_window):
        window, session, warnings = setup_window
        window._prompt = lambda label: None

        assert window.execute(Command.SET_LABEL) is None
        assert len(session.labels) == 0
        assert warnings == []

    def test_execute_with_argument(self, setup_window):
        window, session, _ = setup_window
        window.execute(Command.SET_LABEL, "entry")
        assert session.labels.label_for(0) == "entry"
        assert window.listing_view.row_text(0)[0] == "entry:"

    def test_escape_quits(self, setup_window):
        window, _, _ = setup_window
        window.show()
        press(window, Qt.Key_Escape, "\x1b")
        assert not window.isVisible()
