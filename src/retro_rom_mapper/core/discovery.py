# retro_rom_mapper/core/discovery.py
"""
Core Layer (コード探索エンジン)

このモジュールは、フォールスルーと分岐の両方の経路をたどって
到達可能なバイトをCodeに分類するワークリストアルゴリズムを提供します。
バイト分類タグを変更できるのはこのエンジンのみです。
"""
import logging
from typing import List, Optional, Tuple

from retro_rom_mapper.common.types import ByteType
from retro_rom_mapper.core.store import ByteStore

logger = logging.getLogger(__name__)


# @intent:responsibility 分類要求キューを処理し、コード探索によってバイト分類タグを更新します。
class CodeDiscoveryEngine:
    """
    ByteStoreのタグを排他的に変更するコード探索エンジン。
    分岐先が見つかるたびに、ラベル層へデフォルトラベルの登録を依頼します。
    """
    def __init__(self, store: ByteStore, labels=None):
        self._store = store
        self._architecture = store.architecture
        self._labels = labels
        # @intent:data_structure 保留中の分類要求 (tag, offset)。コマンドの終了前に必ず空になる。
        self._pending: List[Tuple[ByteType, int]] = []

    @property
    def store(self) -> ByteStore:
        return self._store

    # @intent:responsibility ユーザー操作による分類の上書きを要求し、キューを処理します。
    # @intent:post-condition 戻った時点で保留キューは空になっています。
    def mark(self, offset: int, byte_type: ByteType) -> List[int]:
        """
        指定オフセットを明示的にbyte_typeに分類します。
        Codeの場合はそこからコード探索を実行します。
        新たにCodeになったオフセットのリストを返します。
        """
        self._store.tag_at(offset)  # 範囲外ならここでIndexError
        self._pending.append((byte_type, offset))
        return self.drain()

    def drain(self) -> List[int]:
        newly_coded: List[int] = []
        while self._pending:
            byte_type, offset = self._pending.pop()
            if byte_type == ByteType.CODE and self._store.instruction_at(offset) is None:
                # デコードできないシードも明示的な指定どおりCodeにする（不正命令として表示される）
                logger.info("Offset %#08x does not decode; marked as code without discovery", offset)
                if self._store.tag_at(offset) != ByteType.CODE:
                    self._store._set_tag(offset, ByteType.CODE)
                    newly_coded.append(offset)
            elif byte_type == ByteType.CODE:
                newly_coded.extend(self.mark_code(offset))
            else:
                self._store._set_tag(offset, byte_type)
        return newly_coded

    # @intent:responsibility 指定オフセットを起点にコード探索を行います。
    # @intent:rationale 再帰ではなく明示的なスタックを用いることで、長い命令列でも呼び出しスタックが溢れません。
    #                  各オフセットは1回の呼び出しにつき高々1回だけ非Code→Codeに遷移するため、
    #                  デコード試行回数はイメージサイズで抑えられます。
    def mark_code(self, seed: int) -> List[int]:
        """
        seedから到達可能な命令の先頭バイトをCodeに分類します。
        Dataのバイトは、明示的に指定されたseed自身を除き上書きしません。
        新たにCodeになったオフセットを探索順に返します。
        """
        store = self._store
        newly_coded: List[int] = []
        branches = [seed]

        while branches:
            cursor = branches.pop()
            instruction = store.instruction_at(cursor)
            while instruction is not None:
                current_type = store.tag_at(cursor)
                if current_type == ByteType.CODE:
                    break
                if current_type == ByteType.DATA and cursor != seed:
                    break
                store._set_tag(cursor, ByteType.CODE)
                newly_coded.append(cursor)

                target = instruction.branch_target
                if target is not None:
                    resolved = self._architecture.resolve(target, cursor, store)
                    if resolved is not None and self._accept_branch_target(resolved):
                        if self._labels is not None:
                            self._labels.ensure_default_label(resolved)
                        branches.append(resolved)

                if not instruction.falls_through:
                    break
                cursor += instruction.size
                if cursor >= len(store):
                    break
                instruction = store.instruction_at(cursor)

        logger.debug("mark_code(%#08x): %d offsets classified as code", seed, len(newly_coded))
        return newly_coded

    # @intent:responsibility 分岐先が既存の命令の途中を指していないかを検証します。
    # @intent:rationale タグはバイト単位であり命令単位ではないため、命令の途中への分岐は
    #                  重なり合った命令列を生んでしまう。このような分岐先は探索しない。
    def _accept_branch_target(self, target: int) -> bool:
        enclosing = self._store.enclosing_instruction(target)
        if enclosing is not None:
            logger.info("Branch target %#08x lies inside the instruction at %#08x; not explored",
                        target, enclosing)
            return False
        return True

    # @intent:responsibility 指定オフセットの命令の分岐先を解決します。
    def resolve_branch(self, offset: int) -> Optional[int]:
        instruction = self._store.instruction_at(offset)
        if instruction is None or instruction.branch_target is None:
            return None
        return self._architecture.resolve(instruction.branch_target, offset, self._store)
