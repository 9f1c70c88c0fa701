# app.py
import logging
import os
import sys

from dotenv import load_dotenv
from PySide6.QtWidgets import QApplication

from database import Database
from device_client import TerrarioClient
from settings import SettingsManager
from ui_main_window import MainWindow


def setup_logging() -> None:
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stdout,
    )


def main() -> None:
    load_dotenv()
    setup_logging()

    app = QApplication(sys.argv)

    db = Database()
    db.connect()

    settings = SettingsManager()

    client = TerrarioClient(
        settings.get("device_url"),
        timeout=float(settings.get("request_timeout_s", 5.0)),
    )
    logging.getLogger(__name__).info("Conectando con el terrario en %s", client.base_url)

    window = MainWindow(client=client, db=db, settings=settings)
    window.resize(1100, 750)
    window.show()

    exit_code = app.exec()

    settings.save()
    client.close()
    db.close()

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
