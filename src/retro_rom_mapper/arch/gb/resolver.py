"""
Game Boy のバンク切り替えメモリモデルに基づくアドレス解決。

論理アドレス空間は3つの窓に分かれます。
  0x0000-0x3FFF: 固定窓。ROMの先頭16KB（バンク0）に1:1で対応します。
  0x4000-0x7FFF: 切り替え窓。物理オフセットの決定にはアクティブなバンク番号が必要です。
  0x8000-0xFFFF: システム窓（VRAM、WRAM、I/Oなど）。ROMの内容には対応しません。
"""
from retro_rom_mapper.common.types import (
    ByteType, LogicalAddress, AbsoluteAddress, RelativeAddress,
    ResolvedAddress, PhysicalAddress, UnknownBankAddress, SystemAddress,
)
from retro_rom_mapper.core.architecture import ResolutionContext

BANK_SIZE = 0x4000
FIXED_WINDOW_END = 0x4000
SWITCHABLE_WINDOW_END = 0x8000


# @intent:utility_function 物理オフセットを、その位置のコードから見た論理アドレスに変換します。
def to_logical(offset: int) -> int:
    if offset < BANK_SIZE:
        return offset
    return FIXED_WINDOW_END + offset % BANK_SIZE


# @intent:utility_function 物理オフセットが属するバンク番号を返します。
def bank_of(offset: int) -> int:
    return offset // BANK_SIZE


# @intent:responsibility 16bit論理アドレスを、読み出し位置に基づいて解決します。
# @intent:rationale バンクが特定できない場合は物理オフセットを推測せず、
#                  UnknownBankAddressを返して呼び出し元に判断を委ねます。
def resolve_absolute(address: int, read_at: int, context: ResolutionContext) -> ResolvedAddress:
    """
    切り替え窓のアドレスは次の順序で解決します。
      (a) 読み出し位置自体が切り替えバンク内のCodeであれば、そのバンクを採用（自己参照）
      (b) 読み出し位置に割り当てられたバンク番号
      (c) いずれも無ければ UnknownBankAddress
    """
    address &= 0xFFFF
    if address < FIXED_WINDOW_END:
        return PhysicalAddress(address)

    if address < SWITCHABLE_WINDOW_END:
        offset = address & (BANK_SIZE - 1)
        if BANK_SIZE <= read_at < context.image_size() and context.tag_at(read_at) == ByteType.CODE:
            # 実行中のコードと同じバンクが切り替え窓にマップされている
            return PhysicalAddress(bank_of(read_at) * BANK_SIZE + offset)
        bank = context.bank_at(read_at)
        if bank is not None:
            return PhysicalAddress(bank * BANK_SIZE + offset)
        return UnknownBankAddress(offset)

    return SystemAddress(address)


def resolve_logical(address: LogicalAddress, read_at: int, context: ResolutionContext) -> ResolvedAddress:
    if isinstance(address, AbsoluteAddress):
        return resolve_absolute(address.value, read_at, context)
    if isinstance(address, RelativeAddress):
        # 相対アドレスは、読み出し位置の論理アドレス空間で計算してから解決する
        target = to_logical(read_at) + address.size + address.displacement
        return resolve_absolute(target & 0xFFFF, read_at, context)
    raise TypeError(f"Unsupported logical address: {address!r}")
