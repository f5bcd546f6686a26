"""Unit tests for settings loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from fiscaltrail.config import WindowConfig, load_settings


class TestLoadSettings:
    """Tests for load_settings."""

    def test_reads_toml_sections(self, tmp_path: Path) -> None:
        config = tmp_path / "config.toml"
        config.write_text(
            f'[store]\npath = "{tmp_path / "data" / "data.yaml"}"\n'
            "[window]\nyears_back = 6\n"
            '[reconstruction]\nactive_state = "active"\n'
        )

        settings = load_settings(config)

        assert settings.store.path == tmp_path / "data" / "data.yaml"
        assert settings.window.years_back == 6
        assert settings.window.years_forward == 1
        assert settings.reconstruction.active_state == "active"
        assert (tmp_path / "data").is_dir()

    def test_missing_sections_use_defaults(self, tmp_path: Path) -> None:
        config = tmp_path / "config.toml"
        config.write_text(f'[store]\npath = "{tmp_path / "data.yaml"}"\n')

        settings = load_settings(config)

        assert settings.window.years_back == 10
        assert settings.reconstruction.active_state == "activo"


class TestWindowConfig:
    """Tests for WindowConfig validation."""

    def test_rejects_zero_years_back(self) -> None:
        with pytest.raises(ValidationError):
            WindowConfig(years_back=0)

    def test_rejects_negative_years_forward(self) -> None:
        with pytest.raises(ValidationError):
            WindowConfig(years_forward=-1)

    def test_environment_overrides_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FISCALTRAIL_WINDOW_YEARS_BACK", "5")
        assert WindowConfig().years_back == 5
