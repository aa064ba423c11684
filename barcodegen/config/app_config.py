"""Centralized helpers to resolve barcode generator settings from the environment."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, Iterable, Mapping, MutableMapping, Optional, Union

from barcodegen.config.storage_paths import getAppDataRoot


class AppConfiguration:
    """Load storage, allocator and UI settings from environment variables and .env files.

    Args:
        env_files: Optional iterable with names or paths of files containing key-value
            pairs (``KEY=VALUE``) to merge into the environment. Relative paths are
            resolved from the repository root.
        environ: Optional mapping used instead of ``os.environ``. Intended for tests.
    """

    DEFAULT_ENV_FILES: tuple[str, ...] = (".env",)
    DATA_DIR_KEY = "BARCODEGEN_DATA_DIR"
    BACKEND_KEY = "BARCODEGEN_STORAGE_BACKEND"
    MAX_ATTEMPTS_KEY = "BARCODEGEN_MAX_ATTEMPTS"
    LOG_LEVEL_KEY = "BARCODEGEN_LOG_LEVEL"
    THEME_KEY = "BARCODEGEN_THEME"

    JSON_BACKEND = "json"
    MEMORY_BACKEND = "memory"
    DEFAULT_MAX_ATTEMPTS = 100
    DEFAULT_LOG_LEVEL = "INFO"
    DEFAULT_THEME = "flatly"

    def __init__(
        self,
        env_files: Optional[Iterable[Union[str, Path]]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        """Persist the environment data used to resolve configuration values."""
        self._env_files = tuple(env_files) if env_files is not None else self.DEFAULT_ENV_FILES
        self._base_environ: MutableMapping[str, str] = dict(environ) if environ is not None else dict(os.environ)
        self._file_values = self._load_env_files()
        self._merged_env = self._merge_environment()

    def _merge_environment(self) -> Dict[str, str]:
        """Combine values from .env files with the active environment.

        Returns:
            A dictionary where operating system variables override the values
            defined in .env files.
        """

        merged: Dict[str, str] = dict(self._file_values)
        merged.update(self._base_environ)
        return merged

    def _load_env_files(self) -> Dict[str, str]:
        """Read the configured .env files and return their key-value pairs."""

        values: Dict[str, str] = {}
        root_dir = Path(__file__).resolve().parents[2]
        for candidate in self._env_files:
            path = Path(candidate)
            if not path.is_absolute():
                path = root_dir / path
            if not path.exists():
                continue
            try:
                text = path.read_text(encoding="utf-8")
            except OSError:
                continue
            for raw_line in text.splitlines():
                line = raw_line.strip()
                if not line or line.startswith("#"):
                    continue
                if "=" not in line:
                    continue
                key, raw_value = line.split("=", 1)
                key = key.strip()
                if not key:
                    continue
                values[key] = raw_value.strip().strip('"').strip("'")
        return values

    def _get(self, key: str) -> str:
        """Return the trimmed value for ``key`` or an empty string."""

        return self._merged_env.get(key, "").strip()

    def get_data_directory(self) -> Path:
        """Return the folder that keeps the JSON stores and exported files."""

        configured = self._get(self.DATA_DIR_KEY)
        if configured:
            return Path(configured).expanduser()
        return getAppDataRoot()

    def get_storage_backend(self) -> str:
        """Return ``json`` or ``memory``; unknown values fall back to ``json``."""

        backend = self._get(self.BACKEND_KEY).lower()
        if backend == self.MEMORY_BACKEND:
            return self.MEMORY_BACKEND
        return self.JSON_BACKEND

    def get_max_attempts(self) -> int:
        """Return the retry budget used when allocating identifiers."""

        raw = self._get(self.MAX_ATTEMPTS_KEY)
        if not raw:
            return self.DEFAULT_MAX_ATTEMPTS
        try:
            value = int(raw)
        except ValueError:
            return self.DEFAULT_MAX_ATTEMPTS
        return value if value > 0 else self.DEFAULT_MAX_ATTEMPTS

    def get_log_level(self) -> int:
        """Return the numeric logging level configured for the launcher."""

        name = (self._get(self.LOG_LEVEL_KEY) or self.DEFAULT_LOG_LEVEL).upper()
        level = logging.getLevelName(name)
        return level if isinstance(level, int) else logging.INFO

    def get_theme_name(self) -> str:
        """Return the ttkbootstrap theme used by the main window."""

        return self._get(self.THEME_KEY) or self.DEFAULT_THEME
