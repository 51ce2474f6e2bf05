# tansaku - Lazy Batched State-Space Search
"""
tansaku: lazy, batched, concurrent state-space search for asyncio

探索 (tansaku) explores a possibly infinite space of candidates from a set of
starting points and a user-supplied expansion rule. Candidates are expanded in
bounded-parallel batches and produced on demand, never materializing the full
search tree.
"""

__version__ = "0.1.0"

from tansaku.errors import (
    ConfigurationError,
    ExpansionError,
    ExpansionTimeoutError,
    MalformedResultError,
    StartResolutionError,
    TansakuError,
    retry,
    with_timeout,
)
from tansaku.frontier import (
    BoundedFrontier,
    FifoFrontier,
    Frontier,
    LifoFrontier,
    RankedFrontier,
)
from tansaku.search import (
    AsyncSearch,
    SearchConfig,
    collect,
    take,
    when,
    which,
)
from tansaku.config import ConfigManager, EngineSettings, load_settings
from tansaku.observability import ObservabilityConfig, SearchMetrics, setup_logging

__all__ = [
    "__version__",
    # Engine
    "AsyncSearch",
    "SearchConfig",
    # Frontiers
    "Frontier",
    "BoundedFrontier",
    "FifoFrontier",
    "LifoFrontier",
    "RankedFrontier",
    # Sequence helpers
    "which",
    "when",
    "take",
    "collect",
    # Errors
    "TansakuError",
    "ConfigurationError",
    "StartResolutionError",
    "ExpansionError",
    "MalformedResultError",
    "ExpansionTimeoutError",
    "retry",
    "with_timeout",
    # Config / observability
    "EngineSettings",
    "ConfigManager",
    "load_settings",
    "ObservabilityConfig",
    "SearchMetrics",
    "setup_logging",
]
