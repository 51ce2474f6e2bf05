"""Normalization of start sources and expansion results.

Both the starting candidates and every expansion result may arrive in several
shapes: a plain collection, a sync or async iterable, an awaitable resolving to
one of those, or ``None``. Everything is reduced here to one concrete ``list``
before the engine touches the frontier.
"""

from __future__ import annotations

import inspect
from typing import Any

from tansaku.errors import MalformedResultError

_TEXT_TYPES = (str, bytes, bytearray)


async def resolve_collection(value: Any, *, what: str = "expansion result") -> list[Any]:
    """値を有限コレクション（list）に解決する

    Args:
        value: コレクション / イテラブル / 非同期イテラブル / awaitable / None
        what: エラーメッセージ用の説明

    Returns:
        解決済みの候補リスト

    Raises:
        MalformedResultError: コレクションとして解釈できない場合
    """
    while inspect.isawaitable(value):
        value = await value

    if value is None:
        return []

    if isinstance(value, _TEXT_TYPES):
        raise MalformedResultError(
            f"{what} is a {type(value).__name__}, not a collection of candidates",
            value=value,
        )

    if hasattr(value, "__aiter__"):
        return [item async for item in value]

    try:
        iterator = iter(value)
    except TypeError as e:
        raise MalformedResultError(
            f"{what} of type {type(value).__name__} is not iterable",
            value=value,
            cause=e,
        ) from e

    return list(iterator)


async def resolve_source(source: Any) -> list[Any]:
    """開始候補ソースを解決する（引数なしの呼び出し可能オブジェクトも受け付ける）"""
    if (
        callable(source)
        and not inspect.isawaitable(source)
        and not hasattr(source, "__iter__")
        and not hasattr(source, "__aiter__")
    ):
        source = source()
    return await resolve_collection(source, what="start source")
