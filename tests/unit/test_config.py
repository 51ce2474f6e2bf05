# Config Unit Tests
"""
設定マネージャーの単体テスト
"""

import pytest
import yaml

from tansaku.config import ConfigManager, EngineSettings, load_settings
from tansaku.errors import ConfigurationError
from tansaku.observability import LogLevel


class TestEngineSettings:
    """EngineSettings のテスト"""

    def test_defaults(self):
        settings = EngineSettings()
        assert settings.cores == 16
        assert settings.max_size is None
        assert settings.log_level == LogLevel.INFO

    def test_to_dict(self):
        data = EngineSettings(cores=4, max_size=100).to_dict()
        assert data == {"cores": 4, "max_size": 100, "log_level": "info"}


class TestConfigManager:
    """ConfigManager のテスト"""

    def test_missing_file_gives_defaults(self, tmp_path):
        settings = ConfigManager(tmp_path / "missing.yaml").load()
        assert settings == EngineSettings()

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "tansaku.yaml"
        path.write_text(yaml.dump({"cores": 8, "max_size": 50, "log_level": "DEBUG"}))
        settings = ConfigManager.from_yaml(path).settings
        assert settings.cores == 8
        assert settings.max_size == 50
        assert settings.log_level == LogLevel.DEBUG

    def test_empty_file(self, tmp_path):
        path = tmp_path / "tansaku.yaml"
        path.write_text("")
        assert load_settings(path) == EngineSettings()

    def test_from_dict(self):
        settings = ConfigManager.from_dict({"cores": 2}).settings
        assert settings.cores == 2
        assert settings.max_size is None

    def test_round_trip(self, tmp_path):
        manager = ConfigManager.from_dict(
            {"cores": 3, "max_size": 7, "log_level": LogLevel.WARNING}
        )
        path = tmp_path / "nested" / "tansaku.yaml"
        manager.save(path)
        assert load_settings(path) == EngineSettings(
            cores=3, max_size=7, log_level=LogLevel.WARNING
        )

    def test_save_without_path(self):
        manager = ConfigManager.from_dict({})
        with pytest.raises(ValueError):
            manager.save()

    @pytest.mark.parametrize(
        "data",
        [
            {"cores": 0},
            {"cores": "many"},
            {"cores": True},
            {"max_size": -1},
            {"max_size": 1.5},
            {"log_level": "verbose"},
        ],
    )
    def test_invalid_values(self, data):
        with pytest.raises(ConfigurationError):
            ConfigManager.from_dict(data)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "tansaku.yaml"
        path.write_text("cores: [1, 2\n")
        with pytest.raises(ConfigurationError):
            ConfigManager.from_yaml(path)

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "tansaku.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigurationError):
            load_settings(path)

    def test_settings_lazy_load(self):
        assert ConfigManager().settings == EngineSettings()
