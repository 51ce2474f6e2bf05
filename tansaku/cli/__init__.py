# tansaku CLI Module
"""
tansaku.cli - コマンドラインインターフェース
"""

from tansaku.cli.main import app, main

__all__ = ["app", "main"]
