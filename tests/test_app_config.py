"""Unit tests for the environment based configuration."""

from __future__ import annotations

import logging
from pathlib import Path

from barcodegen.config.app_config import AppConfiguration


def _config(tmp_path: Path, environ: dict, env_text: str = "") -> AppConfiguration:
    env_file = tmp_path / ".env"
    if env_text:
        env_file.write_text(env_text, encoding="utf-8")
    return AppConfiguration(env_files=[env_file], environ=environ)


def test_defaults_when_nothing_is_configured(tmp_path: Path) -> None:
    """Unset variables fall back to the documented defaults."""

    config = _config(tmp_path, {"APPDATA": str(tmp_path)})

    assert config.get_storage_backend() == "json"
    assert config.get_max_attempts() == 100
    assert config.get_log_level() == logging.INFO
    assert config.get_theme_name() == "flatly"


def test_env_file_values_are_overridden_by_environment(tmp_path: Path) -> None:
    """Operating system variables win over .env entries."""

    config = _config(
        tmp_path,
        {"BARCODEGEN_MAX_ATTEMPTS": "25"},
        env_text=(
            "# comentario\n"
            "BARCODEGEN_MAX_ATTEMPTS=10\n"
            "BARCODEGEN_DATA_DIR='/tmp/barcodes'\n"
            "BARCODEGEN_STORAGE_BACKEND=memory\n"
            "BARCODEGEN_LOG_LEVEL=debug\n"
        ),
    )

    assert config.get_max_attempts() == 25
    assert config.get_data_directory() == Path("/tmp/barcodes")
    assert config.get_storage_backend() == "memory"
    assert config.get_log_level() == logging.DEBUG


def test_invalid_values_fall_back_to_defaults(tmp_path: Path) -> None:
    """Garbage values never break the launcher."""

    config = _config(
        tmp_path,
        {
            "BARCODEGEN_MAX_ATTEMPTS": "-3",
            "BARCODEGEN_STORAGE_BACKEND": "sqlserver",
            "BARCODEGEN_LOG_LEVEL": "ruidoso",
        },
    )

    assert config.get_max_attempts() == 100
    assert config.get_storage_backend() == "json"
    assert config.get_log_level() == logging.INFO
