# src/retro_rom_mapper/arch/mos6502/__init__.py
"""
MOS 6502 Architecture Package
"""
from .architecture import Mos6502Architecture, DEFAULT_ORIGIN
