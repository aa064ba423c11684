"""Helpers to resolve shared storage directories for the desktop app."""

import os
from pathlib import Path
from typing import Optional


APP_FOLDER_NAME = "BarcodeGen"
STORAGE_FOLDER_NAME = "storage"
EXPORT_FOLDER_NAME = "exportaciones"


def _resolveAppDataBase() -> Path:
    """Return the root AppData directory on the current system."""

    base_path = os.environ.get("APPDATA")
    if base_path:
        return Path(base_path)
    return Path.home() / "AppData" / "Roaming"


def getAppDataRoot() -> Path:
    """Return the base directory inside AppData reserved for the app."""

    return _resolveAppDataBase() / APP_FOLDER_NAME


def getStorageDirectory(root: Optional[Path] = None, create: bool = True) -> Path:
    """Return the folder that holds the persisted history and print queue."""

    directory = (root or getAppDataRoot()) / STORAGE_FOLDER_NAME
    if create:
        directory.mkdir(parents=True, exist_ok=True)
    return directory


def getExportDirectory(root: Optional[Path] = None, create: bool = True) -> Path:
    """Return the folder used for downloaded PNG files and print sheets."""

    directory = (root or getAppDataRoot()) / EXPORT_FOLDER_NAME
    if create:
        directory.mkdir(parents=True, exist_ok=True)
    return directory
