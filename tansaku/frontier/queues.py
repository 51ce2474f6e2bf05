# Frontier Implementations
"""
フロンティア実装

- FifoFrontier: 先入れ先出し（幅優先）
- LifoFrontier: 後入れ先出し（深さ優先）
- RankedFrontier: キー順（最良優先）

いずれも truncate(n) は「次に取り出される n 件」を残す。
"""

from __future__ import annotations

import heapq
import itertools
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

from tansaku.frontier.base import check_size


class FifoFrontier:
    """FIFOフロンティア（幅優先探索）"""

    def __init__(self, candidates: Iterable[Any] = ()):
        self._items: deque[Any] = deque(candidates)

    def add_all(self, candidates: Iterable[Any]) -> None:
        self._items.extend(candidates)

    def __len__(self) -> int:
        return len(self._items)

    def poll(self, n: int) -> list[Any]:
        """古い順に最大 n 件を取り出す"""
        n = min(check_size(n), len(self._items))
        return [self._items.popleft() for _ in range(n)]

    def truncate(self, n: int) -> list[Any]:
        """古い n 件を残し、新しい側を捨てる"""
        n = check_size(n)
        if len(self._items) <= n:
            return []
        items = list(self._items)
        self._items = deque(items[:n])
        return items[n:]

    def peek(self) -> Any | None:
        return self._items[0] if self._items else None

    def clear(self) -> None:
        self._items.clear()

    def __repr__(self) -> str:
        return f"FifoFrontier(size={len(self)})"


class LifoFrontier:
    """LIFOフロンティア（深さ優先探索）

    同じ add_all で追加された候補は、最後の要素から取り出される。
    """

    def __init__(self, candidates: Iterable[Any] = ()):
        self._items: list[Any] = list(candidates)

    def add_all(self, candidates: Iterable[Any]) -> None:
        self._items.extend(candidates)

    def __len__(self) -> int:
        return len(self._items)

    def poll(self, n: int) -> list[Any]:
        """新しい順に最大 n 件を取り出す"""
        n = min(check_size(n), len(self._items))
        return [self._items.pop() for _ in range(n)]

    def truncate(self, n: int) -> list[Any]:
        """新しい n 件を残し、古い側を捨てる（取り出し順で返す）"""
        n = check_size(n)
        cut = len(self._items) - n
        if cut <= 0:
            return []
        discarded = self._items[:cut]
        del self._items[:cut]
        discarded.reverse()
        return discarded

    def peek(self) -> Any | None:
        return self._items[-1] if self._items else None

    def clear(self) -> None:
        self._items.clear()

    def __repr__(self) -> str:
        return f"LifoFrontier(size={len(self)})"


@dataclass
class _RankedEntry:
    """heapq用エントリ（同順位は挿入順）"""

    rank: Any
    seq: int
    candidate: Any = field(compare=False)
    reverse: bool = field(default=False, compare=False)

    def __lt__(self, other: "_RankedEntry") -> bool:
        if self.rank != other.rank:
            if self.reverse:
                return self.rank > other.rank
            return self.rank < other.rank
        return self.seq < other.seq


class RankedFrontier:
    """ランク付きフロンティア（最良優先探索）

    key(candidate) が小さい候補から取り出す。reverse=True なら大きい順。
    truncate は上位 n 件を残す。

    Example:
        frontier = RankedFrontier(key=lambda path: cost(path))
    """

    def __init__(
        self,
        key: Callable[[Any], Any] | None = None,
        reverse: bool = False,
        candidates: Iterable[Any] = (),
    ):
        self.key = key or (lambda candidate: candidate)
        self.reverse = reverse
        self._heap: list[_RankedEntry] = []
        self._counter = itertools.count()
        self.add_all(candidates)

    def add_all(self, candidates: Iterable[Any]) -> None:
        for candidate in candidates:
            heapq.heappush(
                self._heap,
                _RankedEntry(
                    rank=self.key(candidate),
                    seq=next(self._counter),
                    candidate=candidate,
                    reverse=self.reverse,
                ),
            )

    def __len__(self) -> int:
        return len(self._heap)

    def poll(self, n: int) -> list[Any]:
        """上位から最大 n 件を取り出す"""
        n = min(check_size(n), len(self._heap))
        return [heapq.heappop(self._heap).candidate for _ in range(n)]

    def truncate(self, n: int) -> list[Any]:
        """上位 n 件を残し、残りを順位順で返す"""
        n = check_size(n)
        if len(self._heap) <= n:
            return []
        entries = sorted(self._heap)
        # ソート済みリストはそのままヒープ条件を満たす
        self._heap = entries[:n]
        return [entry.candidate for entry in entries[n:]]

    def peek(self) -> Any | None:
        return self._heap[0].candidate if self._heap else None

    def clear(self) -> None:
        self._heap.clear()

    def __repr__(self) -> str:
        return f"RankedFrontier(size={len(self)}, reverse={self.reverse})"
