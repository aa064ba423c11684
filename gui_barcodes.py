"""Entry point for launching the barcode generator desktop GUI."""
from __future__ import annotations

import logging

from barcodegen.config.app_config import AppConfiguration
from barcodegen.controllers.main_controller import MainController
from barcodegen.views.main_view import run_gui


def main() -> None:
    """Configure logging from the environment and open the main window."""
    configuration = AppConfiguration()
    logging.basicConfig(
        level=configuration.get_log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    run_gui(MainController(configuration))


if __name__ == "__main__":
    main()
