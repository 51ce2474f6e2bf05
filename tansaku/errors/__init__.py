"""tansaku Error Handling Framework.

探索エンジンの例外階層と、展開ルールを包むリトライ・タイムアウトヘルパー。

Example:
    >>> from tansaku.errors import ExpansionError, retry, with_timeout
    >>>
    >>> @retry(max_attempts=3, delay=0.5)
    ... async def neighbours(node):
    ...     return await graph_api.fetch(node)
    >>>
    >>> search.through(with_timeout(neighbours, seconds=2.0))
"""

from __future__ import annotations

import asyncio
import functools
import logging
import time
import traceback
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, TypeVar

__all__ = [
    # Base exceptions
    "TansakuError",
    "ConfigurationError",
    "ValidationError",
    "StartResolutionError",
    "ExpansionError",
    "MalformedResultError",
    "ExpansionTimeoutError",
    # Error context
    "ErrorContext",
    "ErrorSeverity",
    # Retry / timeout
    "RetryConfig",
    "retry",
    "with_timeout",
]

logger = logging.getLogger(__name__)


# ============================================================
# Error Severity
# ============================================================


class ErrorSeverity(str, Enum):
    """エラー重要度"""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    def to_logging_level(self) -> int:
        """ロギングレベルに変換"""
        mapping = {
            ErrorSeverity.DEBUG: logging.DEBUG,
            ErrorSeverity.INFO: logging.INFO,
            ErrorSeverity.WARNING: logging.WARNING,
            ErrorSeverity.ERROR: logging.ERROR,
            ErrorSeverity.CRITICAL: logging.CRITICAL,
        }
        return mapping[self]


# ============================================================
# Error Context
# ============================================================


@dataclass
class ErrorContext:
    """エラーコンテキスト情報

    Attributes:
        error_id: ユニークなエラーID
        timestamp: エラー発生時刻
        component: エラー発生コンポーネント
        operation: 実行中の操作
        details: 追加の詳細情報
        stack_trace: スタックトレース
    """

    error_id: str = field(default_factory=lambda: f"err_{int(time.time() * 1000)}")
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    component: str | None = None
    operation: str | None = None
    details: dict[str, Any] = field(default_factory=dict)
    stack_trace: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """辞書に変換"""
        return {
            "error_id": self.error_id,
            "timestamp": self.timestamp.isoformat(),
            "component": self.component,
            "operation": self.operation,
            "details": self.details,
            "stack_trace": self.stack_trace,
        }


# ============================================================
# Base Exception Classes
# ============================================================


class TansakuError(Exception):
    """tansaku基底例外クラス

    すべてのtansaku例外の基底クラス。

    Attributes:
        message: エラーメッセージ
        code: エラーコード
        severity: エラー重要度
        context: エラーコンテキスト
        cause: 原因となった例外
    """

    default_code: str = "TANSAKU_ERROR"
    default_severity: ErrorSeverity = ErrorSeverity.ERROR

    def __init__(
        self,
        message: str,
        code: str | None = None,
        severity: ErrorSeverity | None = None,
        cause: BaseException | None = None,
        component: str | None = None,
        operation: str | None = None,
        **details: Any,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.severity = severity or self.default_severity
        self.cause = cause

        stack_trace = None
        if cause is not None:
            stack_trace = "".join(
                traceback.format_exception(type(cause), cause, cause.__traceback__)
            )

        self.context = ErrorContext(
            component=component,
            operation=operation,
            details=details,
            stack_trace=stack_trace,
        )

    def __str__(self) -> str:
        parts = [f"[{self.code}] {self.message}"]
        if self.context.component:
            parts.append(f"(component: {self.context.component})")
        if self.context.operation:
            parts.append(f"(operation: {self.context.operation})")
        if self.cause:
            parts.append(f"caused by: {self.cause!r}")
        return " ".join(parts)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code!r}, "
            f"severity={self.severity.value!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """辞書に変換"""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "severity": self.severity.value,
            "context": self.context.to_dict(),
            "cause": repr(self.cause) if self.cause else None,
        }

    def with_context(self, **kwargs: Any) -> "TansakuError":
        """追加のコンテキストを設定"""
        self.context.details.update(kwargs)
        return self

    @classmethod
    def from_exception(
        cls,
        exc: BaseException,
        message: str | None = None,
        **kwargs: Any,
    ) -> "TansakuError":
        """既存の例外からTansakuErrorを作成"""
        return cls(
            message=message or str(exc),
            cause=exc,
            **kwargs,
        )


# ============================================================
# Specific Exception Classes
# ============================================================


class ConfigurationError(TansakuError):
    """設定エラー

    ビルダー設定や設定ファイルの検証に失敗した場合。
    """

    default_code = "CONFIG_ERROR"
    default_severity = ErrorSeverity.ERROR

    def __init__(
        self,
        message: str,
        field: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        if field:
            self.context.details["field"] = field


class ValidationError(TansakuError):
    """バリデーションエラー"""

    default_code = "VALIDATION_ERROR"
    default_severity = ErrorSeverity.WARNING

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        if field:
            self.context.details["field"] = field
        if value is not None:
            self.context.details["value"] = repr(value)


class StartResolutionError(TansakuError):
    """開始候補の解決に失敗した場合"""

    default_code = "START_ERROR"
    default_severity = ErrorSeverity.ERROR


class ExpansionError(TansakuError):
    """展開エラー

    バッチ内のいずれかの候補の展開（またはその結果の正規化）に失敗した場合。
    バッチ全体が失敗として扱われ、後続の候補はフロンティアにマージされない。

    Attributes:
        batch: 失敗したバッチの全候補
        candidate: 失敗の原因となった候補
    """

    default_code = "EXPANSION_ERROR"
    default_severity = ErrorSeverity.ERROR

    def __init__(
        self,
        message: str,
        batch: list[Any] | None = None,
        candidate: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.batch = list(batch) if batch is not None else []
        self.candidate = candidate
        self.context.details["batch"] = [repr(c) for c in self.batch]
        if candidate is not None:
            self.context.details["candidate"] = repr(candidate)


class MalformedResultError(ExpansionError):
    """展開結果が有限コレクションとして解釈できない場合"""

    default_code = "MALFORMED_RESULT"

    def __init__(
        self,
        message: str,
        value: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        if value is not None:
            self.context.details["value_type"] = type(value).__name__


class ExpansionTimeoutError(TansakuError):
    """展開ルールの1回の呼び出しがタイムアウトした場合"""

    default_code = "TIMEOUT_ERROR"
    default_severity = ErrorSeverity.WARNING

    def __init__(
        self,
        message: str,
        timeout_seconds: float | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        if timeout_seconds is not None:
            self.context.details["timeout_seconds"] = timeout_seconds


# ============================================================
# Retry Configuration
# ============================================================


@dataclass
class RetryConfig:
    """リトライ設定

    Attributes:
        max_attempts: 最大試行回数
        delay: 初期遅延（秒）
        backoff: バックオフ係数
        max_delay: 最大遅延（秒）
        exceptions: リトライ対象の例外タイプ
        on_retry: リトライ時のコールバック
    """

    max_attempts: int = 3
    delay: float = 1.0
    backoff: float = 2.0
    max_delay: float = 60.0
    exceptions: tuple[type[Exception], ...] = (Exception,)
    on_retry: Callable[[int, Exception, float], None] | None = None

    def calculate_delay(self, attempt: int) -> float:
        """遅延時間を計算"""
        delay = self.delay * (self.backoff ** (attempt - 1))
        return min(delay, self.max_delay)


T = TypeVar("T")
F = TypeVar("F", bound=Callable[..., Any])


def retry(
    max_attempts: int = 3,
    delay: float = 1.0,
    backoff: float = 2.0,
    max_delay: float = 60.0,
    exceptions: tuple[type[Exception], ...] = (Exception,),
    on_retry: Callable[[int, Exception, float], None] | None = None,
) -> Callable[[F], F]:
    """リトライデコレータ

    展開ルールが一時的な失敗を起こしうる場合に使う。最終試行の失敗は
    そのまま送出され、エンジン側でバッチ失敗として扱われる。

    非同期関数の待機は asyncio.sleep で行い、同じバッチの他の展開は進み続ける。
    同期関数の待機は time.sleep なのでイベントループ全体が止まる。
    エンジンに渡すルールには非同期関数を使うこと。

    Example:
        >>> @retry(max_attempts=3, delay=1.0, backoff=2.0)
        ... async def expand(node):
        ...     return await client.children(node)
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    config = RetryConfig(
        max_attempts=max_attempts,
        delay=delay,
        backoff=backoff,
        max_delay=max_delay,
        exceptions=exceptions,
        on_retry=on_retry,
    )

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            for attempt in range(1, config.max_attempts + 1):
                try:
                    return await func(*args, **kwargs)
                except config.exceptions as e:
                    if attempt == config.max_attempts:
                        raise

                    wait_time = config.calculate_delay(attempt)
                    logger.debug(
                        "Retrying %s (attempt %d/%d) in %.2fs: %r",
                        func.__qualname__, attempt, config.max_attempts, wait_time, e,
                    )
                    if config.on_retry:
                        config.on_retry(attempt, e, wait_time)

                    await asyncio.sleep(wait_time)

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            for attempt in range(1, config.max_attempts + 1):
                try:
                    return func(*args, **kwargs)
                except config.exceptions as e:
                    if attempt == config.max_attempts:
                        raise

                    wait_time = config.calculate_delay(attempt)
                    logger.debug(
                        "Retrying %s (attempt %d/%d) in %.2fs: %r",
                        func.__qualname__, attempt, config.max_attempts, wait_time, e,
                    )
                    if config.on_retry:
                        config.on_retry(attempt, e, wait_time)

                    # イベントループを止める。ループ外での呼び出し専用
                    time.sleep(wait_time)

        if asyncio.iscoroutinefunction(func):
            return async_wrapper  # type: ignore
        return sync_wrapper  # type: ignore

    return decorator


# ============================================================
# Timeout
# ============================================================


def with_timeout(
    rule: Callable[[Any], Any],
    seconds: float,
) -> Callable[[Any], Any]:
    """展開ルールの1回の呼び出しに時間制限をかける

    エンジン自体はタイムアウトを持たないため、遅い展開を打ち切りたい場合は
    ルールをこの関数で包む。制限はルールの呼び出しから結果のリスト化までに
    かかるので、非同期ジェネレータなど遅延的に生成される結果も対象になる。
    タイムアウト時は ExpansionTimeoutError を送出する。

    Args:
        rule: 展開ルール（同期/非同期どちらでも可）
        seconds: 1呼び出しあたりの制限時間（秒）

    Returns:
        後続候補のリストを返す非同期の展開ルール
    """
    if seconds <= 0:
        raise ValueError("seconds must be positive")

    @functools.wraps(rule)
    async def wrapper(candidate: Any) -> list[Any]:
        from tansaku.search.resolve import resolve_collection

        try:
            return await asyncio.wait_for(
                resolve_collection(rule(candidate)), timeout=seconds
            )
        except asyncio.TimeoutError as e:
            raise ExpansionTimeoutError(
                f"Expansion timed out after {seconds}s",
                timeout_seconds=seconds,
                cause=e,
                candidate=repr(candidate),
            ) from e

    return wrapper
