"""
MOS 6502 の平坦なメモリモデルに基づくアドレス解決。

ROMイメージはロード原点(load_origin)から連続してマップされます。
イメージの外側（ゼロページ、RAM、I/O）はシステムアドレスとして扱います。
"""
from retro_rom_mapper.common.types import (
    LogicalAddress, AbsoluteAddress, RelativeAddress,
    ResolvedAddress, PhysicalAddress, SystemAddress,
)
from retro_rom_mapper.core.architecture import ResolutionContext


# @intent:utility_function 物理オフセットを、CPUから見た16bitアドレスに変換します。
def to_cpu_address(offset: int, load_origin: int) -> int:
    return (load_origin + offset) & 0xFFFF


def resolve_absolute(address: int, load_origin: int, context: ResolutionContext) -> ResolvedAddress:
    address &= 0xFFFF
    offset = address - load_origin
    if 0 <= offset < context.image_size():
        return PhysicalAddress(offset)
    return SystemAddress(address)


# @intent:responsibility 論理アドレスを読み出し位置とロード原点に基づいて解決します。
def resolve_logical(address: LogicalAddress, read_at: int, load_origin: int,
                    context: ResolutionContext) -> ResolvedAddress:
    if isinstance(address, AbsoluteAddress):
        return resolve_absolute(address.value, load_origin, context)
    if isinstance(address, RelativeAddress):
        target = to_cpu_address(read_at, load_origin) + address.size + address.displacement
        return resolve_absolute(target, load_origin, context)
    raise TypeError(f"Unsupported logical address: {address!r}")
