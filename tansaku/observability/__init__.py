# tansaku Observability Module
"""
tansaku.observability - ロギングとメトリクス

ライブラリとして使われることを前提に、標準 logging の "tansaku" 階層を設定する
ヘルパーと、探索ラウンドの統計を集めるメトリクスコレクターを提供する。
"""

from __future__ import annotations

import asyncio
import functools
import logging
import statistics
import sys
import time
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, TypeVar

F = TypeVar("F", bound=Callable[..., Any])

ROOT_LOGGER_NAME = "tansaku"


# ============================================================
# Enums
# ============================================================


class LogLevel(Enum):
    """ログレベル"""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    def to_logging_level(self) -> int:
        """Python logging レベルに変換"""
        mapping = {
            LogLevel.DEBUG: logging.DEBUG,
            LogLevel.INFO: logging.INFO,
            LogLevel.WARNING: logging.WARNING,
            LogLevel.ERROR: logging.ERROR,
            LogLevel.CRITICAL: logging.CRITICAL,
        }
        return mapping[self]


class MetricType(Enum):
    """メトリクスタイプ"""

    COUNTER = "counter"
    GAUGE = "gauge"
    HISTOGRAM = "histogram"


# ============================================================
# Data Classes
# ============================================================


@dataclass
class ObservabilityConfig:
    """Observability設定"""

    log_level: LogLevel = LogLevel.INFO
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_to_console: bool = True
    log_to_file: str | None = None

    metrics_enabled: bool = True
    # 保持する MetricValue の最大件数（古いものから捨てる）
    history_size: int = 1000

    def to_dict(self) -> dict[str, Any]:
        """辞書に変換"""
        return {
            "log_level": self.log_level.value,
            "log_format": self.log_format,
            "log_to_console": self.log_to_console,
            "log_to_file": self.log_to_file,
            "metrics_enabled": self.metrics_enabled,
            "history_size": self.history_size,
        }


@dataclass
class MetricValue:
    """メトリクス値"""

    name: str
    value: float
    metric_type: MetricType
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        """辞書に変換"""
        return {
            "name": self.name,
            "value": self.value,
            "type": self.metric_type.value,
            "timestamp": self.timestamp,
        }


# ============================================================
# Logging
# ============================================================


def setup_logging(config: ObservabilityConfig | None = None) -> logging.Logger:
    """tansaku ロガー階層をセットアップ

    ハンドラが未設定の場合のみ追加するため、複数回呼んでも重複しない。
    レベルは毎回更新する。

    Args:
        config: Observability設定

    Returns:
        ルートの "tansaku" ロガー
    """
    config = config or ObservabilityConfig()
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(config.log_level.to_logging_level())

    if not root.handlers:
        formatter = logging.Formatter(config.log_format)
        if config.log_to_console:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(formatter)
            root.addHandler(handler)

        if config.log_to_file:
            file_handler = logging.FileHandler(config.log_to_file)
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)

    return root


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """ロガーを取得（"tansaku" 配下に名前空間化）"""
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


# ============================================================
# Metrics
# ============================================================


class SearchMetrics:
    """探索メトリクスコレクター

    エンジンが各ラウンドで記録する:
      counters: rounds, expanded, successors, discarded, failures
      gauges: frontier_size
      histograms: batch_size, round_ms

    Example:
        metrics = SearchMetrics()
        search.observe(metrics)
        ...
        metrics.get_counter("rounds")
    """

    def __init__(self, config: ObservabilityConfig | None = None):
        self.config = config or ObservabilityConfig()

        self._counters: dict[str, float] = {}
        self._gauges: dict[str, float] = {}
        self._histograms: dict[str, deque[float]] = {}
        self._history: deque[MetricValue] = deque(maxlen=self.config.history_size)

    def increment(self, name: str, value: float = 1.0) -> None:
        """カウンタをインクリメント"""
        if not self.config.metrics_enabled:
            return
        self._counters[name] = self._counters.get(name, 0) + value
        self._history.append(MetricValue(name, value, MetricType.COUNTER))

    def gauge(self, name: str, value: float) -> None:
        """ゲージ値を設定"""
        if not self.config.metrics_enabled:
            return
        self._gauges[name] = value
        self._history.append(MetricValue(name, value, MetricType.GAUGE))

    def histogram(self, name: str, value: float) -> None:
        """ヒストグラムに値を追加"""
        if not self.config.metrics_enabled:
            return
        samples = self._histograms.get(name)
        if samples is None:
            samples = self._histograms[name] = deque(maxlen=self.config.history_size)
        samples.append(value)
        self._history.append(MetricValue(name, value, MetricType.HISTOGRAM))

    def get_counter(self, name: str) -> float:
        return self._counters.get(name, 0)

    def get_gauge(self, name: str) -> float | None:
        return self._gauges.get(name)

    def get_histogram_stats(self, name: str) -> dict[str, float] | None:
        """ヒストグラム統計を取得（直近 history_size 件の標本）"""
        values = self._histograms.get(name)
        if not values:
            return None
        return {
            "count": len(values),
            "min": min(values),
            "max": max(values),
            "mean": statistics.mean(values),
            "median": statistics.median(values),
        }

    @property
    def history(self) -> list[MetricValue]:
        return list(self._history)

    def reset(self) -> None:
        """全メトリクスをクリア"""
        self._counters.clear()
        self._gauges.clear()
        self._histograms.clear()
        self._history.clear()

    def get_status(self) -> dict[str, Any]:
        """ステータスを取得"""
        return {
            "counters": dict(self._counters),
            "gauges": dict(self._gauges),
            "histograms": {
                name: self.get_histogram_stats(name) for name in self._histograms
            },
        }


def timed(metrics: SearchMetrics, name: str | None = None) -> Callable[[F], F]:
    """関数の実行時間(ms)をヒストグラムに記録するデコレータ

    Example:
        @timed(metrics, "expand_ms")
        async def expand(node):
            ...
    """
    def decorator(func: F) -> F:
        metric_name = name or f"{func.__qualname__}.duration_ms"

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            start = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                metrics.histogram(metric_name, (time.perf_counter() - start) * 1000)

        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            start = time.perf_counter()
            try:
                return await func(*args, **kwargs)
            finally:
                metrics.histogram(metric_name, (time.perf_counter() - start) * 1000)

        if asyncio.iscoroutinefunction(func):
            return async_wrapper  # type: ignore
        return sync_wrapper  # type: ignore

    return decorator


__all__ = [
    "LogLevel",
    "MetricType",
    "MetricValue",
    "ObservabilityConfig",
    "SearchMetrics",
    "get_logger",
    "setup_logging",
    "timed",
]
