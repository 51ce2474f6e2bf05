"""Consumer-side helpers for lazy async sequences.

Small async-generator combinators for applying accept/stop predicates to a
search without materializing it::

    paths = which(when(search, lambda p: len(p) > 3), lambda p: len(p) == 3)
    first = await collect(take(paths, 10))

Each helper closes its source when it finishes early, so abandoning the
pipeline abandons the underlying search as well.
"""

from __future__ import annotations

import inspect
from contextlib import aclosing, nullcontext
from typing import Any, AsyncIterable, AsyncIterator, Callable

Predicate = Callable[[Any], Any]


async def _check(predicate: Predicate, item: Any) -> bool:
    result = predicate(item)
    if inspect.isawaitable(result):
        result = await result
    return bool(result)


def _closing(source: AsyncIterable[Any]):
    iterator = aiter(source)
    if hasattr(iterator, "aclose"):
        return aclosing(iterator)
    return nullcontext(iterator)


async def which(source: AsyncIterable[Any], predicate: Predicate) -> AsyncIterator[Any]:
    """述語を満たす要素だけを生成（述語は非同期でも可）"""
    async with _closing(source) as items:
        async for item in items:
            if await _check(predicate, item):
                yield item


async def when(
    source: AsyncIterable[Any],
    predicate: Predicate,
    inclusive: bool = False,
) -> AsyncIterator[Any]:
    """述語を最初に満たした要素で停止する

    Args:
        source: 入力列
        predicate: 停止条件
        inclusive: True なら停止要素自体も生成する
    """
    async with _closing(source) as items:
        async for item in items:
            if await _check(predicate, item):
                if inclusive:
                    yield item
                return
            yield item


async def take(source: AsyncIterable[Any], n: int) -> AsyncIterator[Any]:
    """先頭 n 件を生成"""
    if n < 0:
        raise ValueError("n must be non-negative")
    if n == 0:
        return
    count = 0
    async with _closing(source) as items:
        async for item in items:
            yield item
            count += 1
            if count >= n:
                return


async def collect(source: AsyncIterable[Any]) -> list[Any]:
    """全要素をリストに集める"""
    async with _closing(source) as items:
        return [item async for item in items]
