# src/retro_rom_mapper/arch/gb/__init__.py
"""
Game Boy (Sharp LR35902) Architecture Package
"""
from .architecture import GameBoyArchitecture
