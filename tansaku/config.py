# tansaku Config Manager
"""
tansaku.config - エンジン既定値の設定マネージャー

YAML ファイル例::

    cores: 8
    max_size: 1000
    log_level: debug
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from tansaku.errors import ConfigurationError
from tansaku.observability import LogLevel
from tansaku.search.engine import DEFAULT_CORES


@dataclass
class EngineSettings:
    """エンジン設定

    max_size が None の場合、フロンティアは無制限に成長しうる。
    停止条件は呼び出し側の責任となる。
    """

    cores: int = DEFAULT_CORES
    max_size: int | None = None
    log_level: LogLevel = LogLevel.INFO

    def to_dict(self) -> dict[str, Any]:
        """辞書に変換"""
        return {
            "cores": self.cores,
            "max_size": self.max_size,
            "log_level": self.log_level.value,
        }


class ConfigManager:
    """設定マネージャー"""

    def __init__(self, config_path: str | Path | None = None):
        self.config_path = Path(config_path) if config_path else None
        self._settings: EngineSettings | None = None

    @classmethod
    def from_yaml(cls, path: str | Path) -> ConfigManager:
        """YAMLファイルから読み込み"""
        manager = cls(path)
        manager.load()
        return manager

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> ConfigManager:
        """辞書から作成"""
        manager = cls()
        manager._settings = cls._parse_settings(config_dict)
        return manager

    def load(self) -> EngineSettings:
        """設定を読み込み（ファイルがなければ既定値）"""
        if not self.config_path or not self.config_path.exists():
            self._settings = EngineSettings()
            return self._settings

        try:
            with open(self.config_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in {self.config_path}",
                cause=e,
                path=str(self.config_path),
            ) from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Config file {self.config_path} must contain a mapping",
                path=str(self.config_path),
            )

        self._settings = self._parse_settings(data)
        return self._settings

    def save(self, path: str | Path | None = None) -> None:
        """設定を保存"""
        if self._settings is None:
            return

        save_path = Path(path) if path else self.config_path
        if save_path is None:
            raise ValueError("No path specified for saving config")

        save_path.parent.mkdir(parents=True, exist_ok=True)

        with open(save_path, "w", encoding="utf-8") as f:
            yaml.dump(self._settings.to_dict(), f, default_flow_style=False)

    @staticmethod
    def _parse_settings(data: dict[str, Any]) -> EngineSettings:
        """設定をパース"""
        cores = data.get("cores", DEFAULT_CORES)
        if isinstance(cores, bool) or not isinstance(cores, int) or cores < 1:
            raise ConfigurationError(
                f"cores must be a positive integer, got {cores!r}", field="cores"
            )

        max_size = data.get("max_size")
        if max_size is not None and (
            isinstance(max_size, bool) or not isinstance(max_size, int) or max_size < 0
        ):
            raise ConfigurationError(
                f"max_size must be a non-negative integer, got {max_size!r}",
                field="max_size",
            )

        log_level_raw = data.get("log_level", LogLevel.INFO)
        if isinstance(log_level_raw, LogLevel):
            log_level = log_level_raw
        else:
            try:
                log_level = LogLevel(str(log_level_raw).lower())
            except ValueError as e:
                raise ConfigurationError(
                    f"Unknown log_level {log_level_raw!r}", field="log_level", cause=e
                ) from e

        return EngineSettings(cores=cores, max_size=max_size, log_level=log_level)

    @property
    def settings(self) -> EngineSettings:
        """設定を取得"""
        if self._settings is None:
            self._settings = self.load()
        return self._settings


def load_settings(path: str | Path | None = None) -> EngineSettings:
    """設定を読み込むヘルパー関数"""
    return ConfigManager(path).load()
