# tests/core/test_discovery_contract.py
"""
コード探索エンジンがアーキテクチャに依存しないことを、同一のテストスイートを
全ての同梱アーキテクチャに対して実行することで検証します。
"""
from dataclasses import dataclass
from typing import Callable

import pytest

from retro_rom_mapper.common.types import ByteType
from retro_rom_mapper.core.architecture import Architecture
from retro_rom_mapper.core.discovery import CodeDiscoveryEngine
from retro_rom_mapper.core.store import ByteStore
from retro_rom_mapper.navigation.labels import LabelTable
from retro_rom_mapper.arch.gb import GameBoyArchitecture
from retro_rom_mapper.arch.mos6502 import Mos6502Architecture


# @intent:data_structure アーキテクチャごとの命令バイト列の組み立て方。
@dataclass
class ArchitectureCase:
    name: str
    factory: Callable[[], Architecture]
    nop: int
    ret: int
    branch_if: int     # 条件付き相対分岐（2バイト）
    jump: Callable[[int], bytes]   # オフセットへの無条件絶対ジャンプ（3バイト）
    load_abs: int      # 3バイトのロード命令

    def engine(self, rom: bytes):
        store = ByteStore(rom, self.factory())
        labels = LabelTable()
        return CodeDiscoveryEngine(store, labels), store, labels


CASES = [
    ArchitectureCase(
        name="GB",
        factory=GameBoyArchitecture,
        nop=0x00, ret=0xC9, branch_if=0x20,
        jump=lambda offset: bytes([0xC3, offset & 0xFF, offset >> 8]),
        load_abs=0xFA,
    ),
    ArchitectureCase(
        name="MOS6502",
        factory=Mos6502Architecture,
        nop=0xEA, ret=0x60, branch_if=0xD0,
        jump=lambda offset: bytes([0x4C, offset & 0xFF, (0x8000 + offset) >> 8]),
        load_abs=0xAD,
    ),
]


@pytest.fixture(params=CASES, ids=lambda case: case.name)
def case(request) -> ArchitectureCase:
    return request.param


# @intent:test_suite 全アーキテクチャに共通するコード探索の性質を検証します。

class TestDiscoveryContract:
    # @intent:test_case_loop 命令; 先頭への無条件ジャンプ の探索結果が全アーキテクチャで同じであることを検証します。
    def test_jump_back_to_start(self, case):
        engine, store, labels = case.engine(bytes([case.nop]) + case.jump(0))

        assert engine.mark_code(0) == [0, 1]
        assert store.tag_at(2) == ByteType.UNKNOWN
        assert store.tag_at(3) == ByteType.UNKNOWN
        assert labels.label_for(0) == "LOC_000000"

    # @intent:test_case_idempotent 同じシードで2回目のmark_codeを実行しても状態が変わらないことを検証します。
    def test_idempotence(self, case):
        rom = bytes([case.branch_if, 0x02, case.nop, case.ret, case.nop, case.ret])
        engine, store, labels = case.engine(rom)

        first = engine.mark_code(0)
        tags = [store.tag_at(i) for i in range(len(store))]
        label_list = list(labels)

        assert sorted(first) == [0, 2, 3, 4, 5]
        assert engine.mark_code(0) == []
        assert [store.tag_at(i) for i in range(len(store))] == tags
        assert list(labels) == label_list

    # @intent:test_case_bounded 長い命令列でも各オフセットが高々1回だけCodeになることを検証します。
    def test_termination_and_bounded_work(self, case):
        size = 0x4000
        engine, store, _ = case.engine(bytes([case.nop] * size))

        newly_coded = engine.mark_code(0)

        assert len(newly_coded) == size
        assert len(set(newly_coded)) == size
        assert store.count(ByteType.CODE) == size

    # @intent:test_case_non_downgrade 探索がシード以外のDataを上書きしないことを検証します。
    def test_non_downgrade(self, case):
        engine, store, _ = case.engine(bytes([case.nop] * 8))
        engine.mark(4, ByteType.DATA)

        assert engine.mark(0, ByteType.CODE) == [0, 1, 2, 3]
        assert store.tag_at(4) == ByteType.DATA
        assert store.tag_at(5) == ByteType.UNKNOWN

    def test_branch_into_data_is_not_explored(self, case):
        rom = bytes([case.branch_if, 0x02, case.nop, case.ret, case.nop, case.ret])
        engine, store, labels = case.engine(rom)
        engine.mark(4, ByteType.DATA)

        engine.mark(0, ByteType.CODE)

        assert store.tag_at(4) == ByteType.DATA
        assert store.tag_at(5) == ByteType.UNKNOWN
        assert 4 in labels  # 分岐先としては解決されている

    # @intent:test_case_mid_instruction 命令の途中を指す分岐先が拒否されることを検証します。
    def test_mid_instruction_target_rejected(self, case):
        rom = bytes([case.load_abs, 0x00, 0x00]) + case.jump(2)
        engine, store, labels = case.engine(rom)

        assert engine.mark_code(0) == [0, 3]
        assert store.tag_at(2) == ByteType.UNKNOWN
        assert 2 not in labels

    # @intent:test_case_alignment 探索後のカーソル補正が常に命令の先頭を指すことを検証します。
    def test_alignment_after_discovery(self, case):
        rom = bytes([case.load_abs, 0x00, 0x00, case.nop, case.ret])
        engine, store, _ = case.engine(rom)
        engine.mark_code(0)

        assert store.align_to_valid(1) == 0
        assert store.align_to_valid(2) == 0
        assert store.next_aligned(0) == 3
        assert store.next_aligned(3) == 4
