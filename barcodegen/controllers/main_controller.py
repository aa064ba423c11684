"""Controller coordinating the desktop view with domain services."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from barcodegen.config.app_config import AppConfiguration
from barcodegen.config.storage_paths import getExportDirectory, getStorageDirectory
from barcodegen.controllers.barcode_controller import BarcodeController
from barcodegen.daos.history_dao import HistoryDAO
from barcodegen.daos.key_value_store import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
)
from barcodegen.daos.print_queue_dao import PrintQueueDAO
from barcodegen.services.barcode_renderer import BarcodeRenderer
from barcodegen.services.barcode_session_service import BarcodeSessionService
from barcodegen.services.history_service import HistoryService
from barcodegen.services.identifier_allocator import IdentifierAllocator
from barcodegen.services.naming_service import NamingService
from barcodegen.services.print_sheet_service import PrintSheetService


class MainController:
    """Aggregate specialized controllers required by the desktop GUI."""

    _logger = logging.getLogger(__name__)

    def __init__(
        self,
        configuration: Optional[AppConfiguration] = None,
        store: Optional[KeyValueStore] = None,
    ) -> None:
        """Bootstrap services and expose domain specific controllers."""

        self.configuration = configuration or AppConfiguration()
        data_dir = self.configuration.get_data_directory()
        self.store = store or self._build_store(data_dir)

        history_service = HistoryService(HistoryDAO(self.store))
        allocator = IdentifierAllocator(max_attempts=self.configuration.get_max_attempts())
        session_service = BarcodeSessionService(
            history_service,
            PrintQueueDAO(self.store),
            allocator=allocator,
        )

        renderer = BarcodeRenderer()
        self.barcodes = BarcodeController(
            session_service,
            renderer,
            PrintSheetService(renderer),
            NamingService(),
            getExportDirectory(data_dir, create=False),
        )

    def _build_store(self, data_dir: Path) -> KeyValueStore:
        """Return the backend selected in the configuration."""

        if self.configuration.get_storage_backend() == AppConfiguration.MEMORY_BACKEND:
            self._logger.warning("Almacenamiento en memoria: el historial no se conservará al cerrar.")
            return InMemoryKeyValueStore()
        directory = getStorageDirectory(data_dir, create=False)
        self._logger.info("Historial almacenado en %s", directory)
        return JsonFileKeyValueStore(directory)
