"""
UIフォント管理モジュール。

リスティングのアドレスやバイト列の桁が揃うよう、プラットフォームごとに等幅フォントを選択します。
"""
from PySide6.QtGui import QFont, QFontDatabase

PREFERRED_FONTS = ["Consolas", "Menlo", "Monaco", "DejaVu Sans Mono", "Courier New"]

# @intent:responsibility 現在のシステムで利用可能な最適な等幅フォントファミリー名を返します。
def get_monospace_font_family() -> str:
    available_families = set(QFontDatabase.families())
    for font in PREFERRED_FONTS:
        if font in available_families:
            return font
    # 候補がなければQtのシステム既定の等幅フォント
    return QFontDatabase.systemFont(QFontDatabase.FixedFont).family()

# @intent:responsibility 等幅フォントのQFontオブジェクトを生成します。
def get_monospace_font(size: int = 10, bold: bool = False) -> QFont:
    font = QFont(get_monospace_font_family(), size)
    font.setStyleHint(QFont.Monospace)
    font.setBold(bold)
    return font
