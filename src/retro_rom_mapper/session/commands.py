# retro_rom_mapper/session/commands.py
"""
対話コマンドの定義。

キー入力とセッションのメソッドを結び付けるコマンド名、デフォルトのキーマップ、
入力が必要なコマンドのプロンプト文字列を定義します。
"""
from enum import Enum
from typing import Dict, Optional

from retro_rom_mapper.session.session import Session


# @intent:responsibility ユーザーが実行できるコマンドを定義します。
class Command(Enum):
    MOVE_NEXT = "move_next"
    MOVE_PREVIOUS = "move_previous"
    MARK_CODE = "mark_code"
    MARK_DATA = "mark_data"
    MARK_UNKNOWN = "mark_unknown"
    GOTO = "goto"
    FOLLOW = "follow"
    BACK = "back"
    FORWARD = "forward"
    ASSIGN_BANK = "assign_bank"
    SET_LABEL = "set_label"
    QUIT = "quit"


DEFAULT_KEYMAP: Dict[str, Command] = {
    "j": Command.MOVE_NEXT,
    "k": Command.MOVE_PREVIOUS,
    "c": Command.MARK_CODE,
    "d": Command.MARK_DATA,
    "u": Command.MARK_UNKNOWN,
    "G": Command.GOTO,
    "f": Command.FOLLOW,
    "o": Command.BACK,
    "i": Command.FORWARD,
    "b": Command.ASSIGN_BANK,
    "l": Command.SET_LABEL,
    "q": Command.QUIT,
    "\x1b": Command.QUIT,
}

# 入力を必要とするコマンドとそのプロンプト
PROMPTS: Dict[Command, str] = {
    Command.GOTO: "Go to address: ",
    Command.ASSIGN_BANK: "Bank number: ",
    Command.SET_LABEL: "Label: ",
}


# @intent:responsibility 設定ファイルのキーマップ（コマンド名→キー）をデフォルトに重ねて適用します。
def build_keymap(overrides: Optional[Dict[str, str]] = None) -> Dict[str, Command]:
    keymap = dict(DEFAULT_KEYMAP)
    for command_name, key in (overrides or {}).items():
        try:
            command = Command(command_name)
        except ValueError:
            raise ValueError(f"Unknown command in keymap: {command_name}")
        if not key:
            raise ValueError(f"Empty key for command: {command_name}")
        for old_key in [k for k, c in keymap.items() if c == command and k != "\x1b"]:
            del keymap[old_key]
        keymap[key] = command
    return keymap


# @intent:responsibility コマンドをセッションのメソッド呼び出しに変換して実行します。
# @intent:pre-condition PROMPTSに含まれるコマンドにはargumentが必要です。
def dispatch(session: Session, command: Command, argument: Optional[str] = None):
    """
    コマンドを実行し、セッションメソッドの戻り値を返します。
    入力が不正な場合はInvalidInputErrorが送出され、状態は変更されません。
    """
    if command in PROMPTS and argument is None:
        raise ValueError(f"Command {command.value} requires an argument.")

    if command == Command.MOVE_NEXT:
        return session.move_next()
    if command == Command.MOVE_PREVIOUS:
        return session.move_previous()
    if command == Command.MARK_CODE:
        return session.mark_code()
    if command == Command.MARK_DATA:
        return session.mark_data()
    if command == Command.MARK_UNKNOWN:
        return session.mark_unknown()
    if command == Command.GOTO:
        return session.goto(argument)
    if command == Command.FOLLOW:
        return session.follow_branch()
    if command == Command.BACK:
        return session.back()
    if command == Command.FORWARD:
        return session.forward()
    if command == Command.ASSIGN_BANK:
        return session.assign_bank(argument)
    if command == Command.SET_LABEL:
        return session.set_label(argument)
    if command == Command.QUIT:
        return None
    raise ValueError(f"Unsupported command: {command}")
