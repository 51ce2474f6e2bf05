# Frontier Module
"""
tansaku.frontier - 探索順序を決める候補コンテナ
"""

from tansaku.frontier.base import BoundedFrontier, Frontier, check_size
from tansaku.frontier.queues import FifoFrontier, LifoFrontier, RankedFrontier

__all__ = [
    # Protocol
    "Frontier",
    "BoundedFrontier",
    "check_size",
    # Implementations
    "FifoFrontier",
    "LifoFrontier",
    "RankedFrontier",
]
