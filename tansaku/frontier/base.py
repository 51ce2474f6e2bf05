# Frontier Base Types
"""
フロンティア（未展開候補のコンテナ）のプロトコル定義

探索順序（幅優先・深さ優先・最良優先など）はフロンティア側が決める。
エンジンはこのプロトコルだけに依存する。
"""

from __future__ import annotations

from typing import Any, Iterable, Protocol, runtime_checkable


@runtime_checkable
class Frontier(Protocol):
    """フロンティアプロトコル

    エンジンはラウンドの合間にのみ操作する。展開処理中に他から変更してはならない。
    """

    def add_all(self, candidates: Iterable[Any]) -> None:
        """候補をまとめて追加"""
        ...

    def __len__(self) -> int:
        """保留中の候補数"""
        ...

    def poll(self, n: int) -> list[Any]:
        """最大 n 件を取り出す（1件ずつ取り出す場合と同じ順序）"""
        ...

    def clear(self) -> None:
        """空にする"""
        ...


@runtime_checkable
class BoundedFrontier(Frontier, Protocol):
    """上限つき探索で使えるフロンティア

    max_size を設定した場合のみ truncate が必要になる。
    """

    def truncate(self, n: int) -> list[Any]:
        """先に取り出される n 件だけを残し、捨てた候補を返す"""
        ...


def check_size(n: int) -> int:
    """poll/truncate の件数引数を検証"""
    if isinstance(n, bool) or not isinstance(n, int):
        raise TypeError(f"size must be an int, got {type(n).__name__}")
    if n < 0:
        raise ValueError(f"size must be non-negative, got {n}")
    return n
