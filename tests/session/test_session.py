# tests/session/test_session.py
"""
retro_rom_mapper.session.sessionモジュールの単体テスト。
セッションはUIに依存しないため、コマンドメソッドを直接呼び出して検証します。
"""
import pytest

from retro_rom_mapper.common.types import ByteType
from retro_rom_mapper.session.session import Session, InvalidInputError, parse_hex
from retro_rom_mapper.arch.gb import GameBoyArchitecture

# @intent:test_suite セッションの各コマンドと表示用データの生成を検証します。

def make_rom() -> bytes:
    rom = bytearray([0xD3] * 0x20)  # 0xD3は不正オペコード
    rom[0x00:0x04] = bytes([0x00, 0xC3, 0x10, 0x00])  # NOP / JP $0010
    rom[0x10:0x13] = bytes([0x3E, 0x42, 0xC9])        # LD A,$42 / RET
    return bytes(rom)


class TestParseHex:
    @pytest.mark.parametrize("text, value", [
        ("10", 0x10), ("0x1F", 0x1F), ("$ff", 0xFF), ("  4000 ", 0x4000),
    ])
    def test_valid(self, text, value):
        assert parse_hex(text) == value

    @pytest.mark.parametrize("text", ["", "0x", "$", "zz", "12g"])
    def test_invalid(self, text):
        with pytest.raises(InvalidInputError):
            parse_hex(text)

    def test_invalid_input_is_value_error(self):
        assert issubclass(InvalidInputError, ValueError)


class TestSession:
    @pytest.fixture
    def session(self):
        return Session(make_rom(), GameBoyArchitecture())

    def test_initial_state(self, session):
        assert len(session) == 0x20
        assert session.selected == 0
        assert session.base == 0
        assert session.architecture.name == "GB"

    # @intent:test_case_movement カーソル移動が分類単位（命令またはバイト）で行われることを検証します。
    def test_move_next(self, session):
        assert session.move_next() == 1
        session.mark_code(0)
        assert session.move_next() == 4
        assert session.move_next() == 5

    def test_move_previous_aligns_to_instruction(self, session):
        session.mark_code(0)
        session.selected = 4
        assert session.move_previous() == 1
        assert session.move_previous() == 0
        assert session.move_previous() == 0

    def test_move_next_stops_at_last_offset(self, session):
        session.selected = 0x1F
        assert session.move_next() == 0x1F

    # @intent:test_case_mark カーソル位置からのコード探索と、DataやUnknownへの上書きを検証します。
    def test_mark_code_at_cursor(self, session):
        newly_coded = session.mark_code()
        assert newly_coded == [0, 1, 0x10, 0x12]
        assert session.labels.label_for(0x10) == "LOC_000010"

    def test_mark_data_and_unknown(self, session):
        session.mark_code()
        session.mark_data(0x10)
        assert session.store.tag_at(0x10) == ByteType.DATA
        session.selected = 0x12
        session.mark_unknown()
        assert session.store.tag_at(0x12) == ByteType.UNKNOWN

    # @intent:test_case_goto 16進オフセットへのジャンプと履歴の記録を検証します。
    def test_goto(self, session):
        assert session.goto("0x10") == 0x10
        assert session.selected == 0x10
        assert session.base == 0x10
        assert session.back() == 0
        assert session.selected == 0

    # @intent:test_case_invalid_input 不正な入力で状態が一切変更されないことを検証します。
    @pytest.mark.parametrize("text", ["xyz", "", "20", "0x100"])
    def test_goto_invalid_input_leaves_state(self, session, text):
        session.selected = 3
        with pytest.raises(InvalidInputError):
            session.goto(text)
        assert session.selected == 3
        assert session.base == 0
        assert session.history.entries() == []

    # @intent:test_case_follow 分岐先へのジャンプと戻る・進むを検証します。
    def test_follow_back_forward(self, session):
        session.mark_code()
        session.selected = 1

        assert session.follow_branch() == 0x10
        assert session.selected == 0x10
        assert session.back() == 1
        assert session.selected == 1
        assert session.forward() == 0x10
        assert session.forward() is None
        assert session.selected == 0x10

    def test_follow_requires_code(self, session):
        session.selected = 1
        assert session.follow_branch() is None
        assert session.selected == 1

    def test_follow_without_branch(self, session):
        session.mark_code()
        assert session.follow_branch() is None

    def test_back_with_empty_history(self, session):
        assert session.back() is None
        assert session.forward() is None
        assert session.selected == 0

    def test_assign_bank(self, session):
        session.selected = 1
        assert session.assign_bank("2") == 2
        assert session.banks.bank_at(1) == 2
        assert session.store.bank_at(1) == 2
        with pytest.raises(InvalidInputError):
            session.assign_bank("bank")

    def test_set_label(self, session):
        session.selected = 0x10
        assert session.set_label(" start ") == "start"
        assert session.labels.label_for(0x10) == "start"
        with pytest.raises(InvalidInputError):
            session.set_label("  ")
        assert session.labels.label_for(0x10) == "start"

    # @intent:test_case_label_stability ユーザーが設定したラベルがコード探索で上書きされないことを検証します。
    def test_user_label_survives_discovery(self, session):
        session.selected = 0x10
        session.set_label("start")
        session.mark_code(0)
        assert session.labels.label_for(0x10) == "start"
        assert session.line_at(1).text == "JP    start"


class TestSessionPresentation:
    @pytest.fixture
    def session(self):
        return Session(make_rom(), GameBoyArchitecture())

    # @intent:test_case_describe Unknownの位置でもデコード可能なら命令とCode化の操作が表示されることを検証します。
    def test_describe_unknown(self, session):
        info = session.describe()
        assert info.offset == 0
        assert info.tag == ByteType.UNKNOWN
        assert info.instruction_text == "NOP"
        assert info.follow_target is None
        assert info.actions == ["[c]ode", "[d]ata", "[G]oto", "[b]ank", "[l]abel"]

    def test_describe_code_with_branch(self, session):
        session.mark_code()
        info = session.describe(1)
        assert info.instruction_text == "JP    LOC_000010"
        assert info.follow_target == 0x10
        assert info.actions[0] == "[f]ollow (0010)"
        assert "[c]ode" not in info.actions

    def test_describe_illegal_data(self, session):
        session.mark_data(4)
        info = session.describe(4)
        assert info.instruction_text is None
        assert info.actions == ["[G]oto", "[b]ank", "[l]abel"]

    # @intent:test_case_illegal 不正オペコードをCodeに分類すると、不正命令の行として表示されることを検証します。
    def test_mark_code_on_illegal_opcode(self, session):
        assert session.mark_code(4) == [4]
        line = session.listing(4, 1)[0]
        assert line.tag == ByteType.CODE
        assert line.illegal
        assert line.text == "Illegal instruction"
        assert session.store.tag_at(5) == ByteType.UNKNOWN

    def test_listing_from_base(self, session):
        session.mark_code()
        lines = session.listing(count=3)
        assert [line.offset for line in lines] == [0, 1, 4]
        lines = session.listing(0x10, 2)
        assert [line.text for line in lines] == ["LD    A, 42", "RET"]

    # @intent:test_case_visible 選択位置が常に表示範囲に収まるよう表示先頭が調整されることを検証します。
    def test_ensure_visible_scrolls_down(self, session):
        session.selected = 8
        assert session.ensure_visible(4) == 5
        assert session.listing(count=4)[-1].offset == 8

    def test_ensure_visible_scrolls_up(self, session):
        session.base = 0x10
        session.selected = 2
        assert session.ensure_visible(4) == 2

    def test_ensure_visible_keeps_base(self, session):
        session.selected = 3
        assert session.ensure_visible(4) == 0
