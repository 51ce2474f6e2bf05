# Search Module
"""
tansaku.search - 並列バッチ探索エンジンと遅延列ヘルパー
"""

from tansaku.search.each import collect, take, when, which
from tansaku.search.engine import DEFAULT_CORES, AsyncSearch, SearchConfig
from tansaku.search.resolve import resolve_collection, resolve_source

__all__ = [
    # Engine
    "AsyncSearch",
    "SearchConfig",
    "DEFAULT_CORES",
    # Normalization
    "resolve_collection",
    "resolve_source",
    # Sequence helpers
    "which",
    "when",
    "take",
    "collect",
]
