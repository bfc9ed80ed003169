# tests/conftest.py
"""
テスト全体で共有するフィクスチャ。
"""
import os

import pytest

# 表示環境のないCIでもウィジェットを生成できるようにする
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


# PySide6のテストにはQApplicationのインスタンスが必要
@pytest.fixture(scope="session")
def qapp():
    from PySide6.QtWidgets import QApplication
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app
