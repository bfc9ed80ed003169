"""
共通の型定義を提供するモジュール。
バイト分類タグ、論理アドレス、解決済みアドレスなど、
コア・アーキテクチャ・UIの各レイヤーで共通して使用される型を定義します。
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Union

# @intent:data_structure ラベル名とROMオフセットの対応表。
LabelMap = Dict[int, str]

# @intent:data_structure 読み出し位置(オフセット)とバンク番号の対応表。
BankMap = Dict[int, int]


# @intent:responsibility ROMの各バイトの分類を表します。
class ByteType(Enum):
    UNKNOWN = "UNKNOWN"
    DATA = "DATA"
    CODE = "CODE"


# --- Logical Address ---

# @intent:data_structure 命令にエンコードされた絶対アドレス（バンク解決前）。
@dataclass(frozen=True)
class AbsoluteAddress:
    value: int


# @intent:data_structure 命令にエンコードされた相対アドレス。
@dataclass(frozen=True)
class RelativeAddress:
    """
    displacementは現在の命令の「次の命令」からの符号付きオフセット。
    sizeは現在の命令のバイト長で、次の命令の位置を求めるために使用します。
    """
    displacement: int
    size: int


LogicalAddress = Union[AbsoluteAddress, RelativeAddress]


# --- Resolved Address ---

# @intent:data_structure ROMイメージ内の具体的なオフセットに解決されたアドレス。
@dataclass(frozen=True)
class PhysicalAddress:
    offset: int


# @intent:data_structure バンク番号が不明なため物理オフセットを決定できないアドレス。
@dataclass(frozen=True)
class UnknownBankAddress:
    offset: int  # バンク内オフセット


# @intent:data_structure ROMの内容にマップされないシステム領域（RAM、I/Oなど）のアドレス。
@dataclass(frozen=True)
class SystemAddress:
    address: int


ResolvedAddress = Union[PhysicalAddress, UnknownBankAddress, SystemAddress]
