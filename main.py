# main.py
# Punto de entrada: lee los correos no leídos de INBOX -> imprime el informe (opcionalmente en bucle)
from __future__ import annotations
import logging
import sys
import time
from config.settings import Settings
from domain.errors import MailReaderError
from interface_adapters.controllers.report_controller import ReportController

logger = logging.getLogger(__name__)


def main() -> int:
    settings = Settings()
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    logger.info("=== Unread Mail Report ===")
    try:
        controller = ReportController(settings=settings)
    except MailReaderError:
        logger.exception("Configuración IMAP no válida")
        return 1
    logger.info("IMAP host=%s inbox=%s", settings.IMAP_HOST, settings.IMAP_FOLDER_INBOX)

    if settings.POLL_INTERVAL <= 0:
        try:
            print(controller.run_once(), end="")
        except MailReaderError:
            logger.exception("Error leyendo correos no leídos")
            return 1
        return 0

    while True:
        try:
            print(controller.run_once(), end="", flush=True)
        except Exception:
            logger.exception("Error en ciclo de polling")
        time.sleep(settings.POLL_INTERVAL)


if __name__ == "__main__":
    sys.exit(main())
