# Batched Search Engine
"""
AsyncSearch - 並列バッチ展開による遅延状態空間探索

ラウンドごとに
  フロンティアからバッチ取得 → 並列展開 → 後続候補をマージ → 上限で切り詰め → バッチを出力
を繰り返す。結果はバッチ列 (batches) と、それを平坦化した候補列 (__aiter__) の
2通りで遅延的に取り出せる。

Example:
    >>> search = (
    ...     AsyncSearch()
    ...     .from_candidates(1)
    ...     .through(lambda n: [n + 1, n + 2] if n < 4 else [])
    ...     .via(FifoFrontier(), max_size=20)
    ...     .in_parallel(2)
    ... )
    >>> await search.collect(limit=7)
    [1, 2, 3, 3, 4, 4, 5]
"""

from __future__ import annotations

import asyncio
import logging
import time
from contextlib import aclosing
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, AsyncGenerator, AsyncIterator, Callable

from tansaku.errors import (
    ConfigurationError,
    ExpansionError,
    MalformedResultError,
    StartResolutionError,
    ValidationError,
)
from tansaku.frontier.base import BoundedFrontier, Frontier
from tansaku.search.resolve import resolve_collection, resolve_source

if TYPE_CHECKING:
    from tansaku.config import EngineSettings
    from tansaku.observability import SearchMetrics

logger = logging.getLogger(__name__)

DEFAULT_CORES = 16

_UNSET: Any = object()


# === Data Classes ===


@dataclass(frozen=True)
class SearchConfig:
    """凍結済み探索設定

    イテレーション開始時に AsyncSearch.freeze() で生成される。
    max_size が None の場合、フロンティアは無制限に成長しうる。
    """

    start: Any
    space: Callable[[Any], Any]
    frontier: Frontier
    max_size: int | None = None
    cores: int = DEFAULT_CORES

    def to_dict(self) -> dict[str, Any]:
        """辞書に変換"""
        return {
            "space": getattr(self.space, "__qualname__", repr(self.space)),
            "frontier": repr(self.frontier),
            "max_size": self.max_size,
            "cores": self.cores,
        }


# === Engine ===


class AsyncSearch:
    """並列バッチ探索エンジン

    Attributes:
        start: 開始候補（コレクション、または解決可能なソース）
        space: 展開ルール candidate -> 後続候補
        frontier: 探索順序を決めるフロンティア
        max_size: ラウンド後のフロンティア上限（None で無制限）
        cores: 1ラウンドで並列展開する最大候補数
        metrics: ラウンド統計の記録先（任意）
    """

    def __init__(
        self,
        start: Any = _UNSET,
        space: Callable[[Any], Any] | None = None,
        frontier: Frontier | None = None,
        max_size: int | None = None,
        cores: int = DEFAULT_CORES,
    ):
        self.start = start
        self.space = space
        self.frontier = frontier
        self.max_size = max_size
        self.cores = cores
        self.metrics: SearchMetrics | None = None

    # === Fluent Builder ===

    def from_candidates(self, *candidates: Any) -> AsyncSearch:
        """開始候補を直接指定"""
        self.start = candidates
        return self

    def from_source(self, source: Any) -> AsyncSearch:
        """開始候補ソースを指定

        イテラブル、非同期イテラブル、awaitable、またはそれらを返す引数なしの
        呼び出し可能オブジェクト。イテレーションごとに一度だけ評価される。
        """
        self.start = source
        return self

    def through(self, space: Callable[[Any], Any]) -> AsyncSearch:
        """展開ルールを指定"""
        self.space = space
        return self

    def via(self, frontier: Frontier, max_size: int | None = None) -> AsyncSearch:
        """フロンティアと（任意で）その上限を指定"""
        self.frontier = frontier
        if max_size is not None:
            self.max_size = max_size
        return self

    def in_parallel(self, cores: int) -> AsyncSearch:
        """ラウンドあたりの並列数を指定"""
        self.cores = cores
        return self

    def configure(self, settings: EngineSettings) -> AsyncSearch:
        """EngineSettings の cores / max_size を適用"""
        self.cores = settings.cores
        if settings.max_size is not None:
            self.max_size = settings.max_size
        return self

    def observe(self, metrics: SearchMetrics | None) -> AsyncSearch:
        """メトリクスコレクターを接続"""
        self.metrics = metrics
        return self

    def freeze(self) -> SearchConfig:
        """設定を検証して凍結する

        Raises:
            ConfigurationError: 設定が不完全または不正な場合
        """
        if self.start is _UNSET:
            raise ConfigurationError(
                "No starting candidates; call from_candidates() or from_source()",
                field="start",
            )
        if self.space is None or not callable(self.space):
            raise ConfigurationError(
                "Expansion rule must be callable; call through()",
                field="space",
            )
        if self.frontier is None or not isinstance(self.frontier, Frontier):
            raise ConfigurationError(
                f"{self.frontier!r} does not implement the Frontier protocol",
                field="frontier",
            )
        if isinstance(self.cores, bool) or not isinstance(self.cores, int) or self.cores < 1:
            raise ConfigurationError(
                f"cores must be a positive integer, got {self.cores!r}",
                field="cores",
            )
        if self.max_size is not None and (
            isinstance(self.max_size, bool)
            or not isinstance(self.max_size, int)
            or self.max_size < 0
        ):
            raise ConfigurationError(
                f"max_size must be a non-negative integer, got {self.max_size!r}",
                field="max_size",
            )
        if self.max_size is not None and not isinstance(self.frontier, BoundedFrontier):
            raise ConfigurationError(
                f"{self.frontier!r} has no truncate(); it cannot enforce max_size",
                field="frontier",
            )

        return SearchConfig(
            start=self.start,
            space=self.space,
            frontier=self.frontier,
            max_size=self.max_size,
            cores=self.cores,
        )

    # === Iteration ===

    async def batches(self) -> AsyncGenerator[list[Any], None]:
        """ラウンドごとのバッチを遅延的に生成する

        各バッチの長さは 1 以上 cores 以下。フロンティアが空になると終了する。

        Yields:
            展開前のバッチ（フロンティアから取り出した順）

        Raises:
            ConfigurationError: 設定が不正な場合
            StartResolutionError: 開始候補の解決に失敗した場合
            ExpansionError: バッチ内の展開が1つでも失敗した場合
        """
        config = self.freeze()
        frontier = config.frontier

        frontier.clear()
        try:
            starts = await resolve_source(config.start)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Failed to resolve starting candidates: {e!r}")
            raise StartResolutionError(
                "Failed to resolve starting candidates",
                cause=e,
                component="AsyncSearch",
                operation="initialize",
            ) from e
        frontier.add_all(starts)

        logger.info(
            f"Search started: {len(starts)} starting candidates, "
            f"cores={config.cores}, max_size={config.max_size}"
        )
        if config.max_size is None:
            logger.debug("No max_size set; frontier growth is unbounded")

        rounds = 0
        while len(frontier) > 0:
            batch = frontier.poll(config.cores)
            if not batch:
                raise ValidationError(
                    f"{frontier!r} reported {len(frontier)} pending candidates "
                    "but returned an empty batch",
                    field="frontier",
                )

            started = time.perf_counter()
            successors = await self._expand_batch(config.space, batch)

            frontier.add_all(successors)
            discarded = 0
            if config.max_size is not None:
                discarded = len(frontier.truncate(config.max_size))

            rounds += 1
            elapsed_ms = (time.perf_counter() - started) * 1000
            self._record_round(batch, successors, discarded, len(frontier), elapsed_ms)
            logger.debug(
                f"Round {rounds}: expanded {len(batch)}, merged {len(successors)}, "
                f"discarded {discarded}, frontier {len(frontier)} ({elapsed_ms:.1f}ms)"
            )

            yield batch

        logger.info(f"Search exhausted after {rounds} rounds")

    async def __aiter__(self) -> AsyncIterator[Any]:
        """バッチを平坦化して候補を1件ずつ生成する"""
        async with aclosing(self.batches()) as batches:
            async for batch in batches:
                for candidate in batch:
                    yield candidate

    async def collect(self, limit: int | None = None) -> list[Any]:
        """平坦化した候補をリストに集める

        Args:
            limit: 最大件数（None なら探索が尽きるまで）
        """
        if limit is not None and limit < 0:
            raise ValueError("limit must be non-negative")

        results: list[Any] = []
        if limit == 0:
            return results

        async with aclosing(self.__aiter__()) as candidates:
            async for candidate in candidates:
                results.append(candidate)
                if limit is not None and len(results) >= limit:
                    break
        return results

    # === Internal ===

    async def _expand_batch(
        self, space: Callable[[Any], Any], batch: list[Any]
    ) -> list[Any]:
        """バッチ全体を並列展開し、後続候補をバッチ順に連結する

        全呼び出しの完了を待ってから失敗を判定する。1件でも失敗すれば
        何も返さず ExpansionError を送出する。
        """
        results = await asyncio.gather(
            *(self._expand_one(space, candidate) for candidate in batch),
            return_exceptions=True,
        )

        successors: list[Any] = []
        for candidate, result in zip(batch, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                raise self._batch_failure(batch, candidate, result) from result
            successors.extend(result)
        return successors

    @staticmethod
    async def _expand_one(space: Callable[[Any], Any], candidate: Any) -> list[Any]:
        return await resolve_collection(space(candidate))

    def _batch_failure(
        self, batch: list[Any], candidate: Any, error: Exception
    ) -> ExpansionError:
        if self.metrics is not None:
            self.metrics.increment("failures")
        logger.error(f"Expansion failed at batch {batch!r}: {error!r}")

        error_cls = (
            MalformedResultError
            if isinstance(error, MalformedResultError)
            else ExpansionError
        )
        return error_cls(
            f"Expansion failed at batch {batch!r}",
            batch=batch,
            candidate=candidate,
            cause=error,
            component="AsyncSearch",
            operation="expand",
        )

    def _record_round(
        self,
        batch: list[Any],
        successors: list[Any],
        discarded: int,
        frontier_size: int,
        elapsed_ms: float,
    ) -> None:
        if self.metrics is None:
            return
        self.metrics.increment("rounds")
        self.metrics.increment("expanded", len(batch))
        self.metrics.increment("successors", len(successors))
        self.metrics.increment("discarded", discarded)
        self.metrics.gauge("frontier_size", frontier_size)
        self.metrics.histogram("batch_size", len(batch))
        self.metrics.histogram("round_ms", elapsed_ms)

    def __repr__(self) -> str:
        return (
            f"AsyncSearch(frontier={self.frontier!r}, "
            f"max_size={self.max_size!r}, cores={self.cores!r})"
        )
