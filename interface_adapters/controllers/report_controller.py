# interface_adapters/controllers/report_controller.py
from __future__ import annotations
import logging
from config.settings import Settings
from domain.models import MailboxConfig
from domain.errors import InvalidConfigError
from application.use_cases.extract_unread_usecase import MARK_READ_POLICIES, MarkReadPolicy, UnreadMailExtractor
from infrastructure.email.imap_client import open_inbox_read_write

logger = logging.getLogger(__name__)


def read_unread_mails(config: MailboxConfig, *, mark_read: MarkReadPolicy = "eager") -> str:
    """
    Abre INBOX, genera el informe de no leídos y cierra carpeta + sesión en cualquier caso.
    Lanza MailConnectionError, MailAccessError o BodyReadError; no hay informe parcial.
    """
    extractor = UnreadMailExtractor(mark_read=mark_read)
    with open_inbox_read_write(config) as folder:
        return extractor.extract_unread(folder)


class ReportController:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.config = settings.mailbox_config()
        if settings.MARK_READ_POLICY not in MARK_READ_POLICIES:
            raise InvalidConfigError(f"MARK_READ_POLICY no válido: {settings.MARK_READ_POLICY!r}")
        self.mark_read: MarkReadPolicy = settings.MARK_READ_POLICY  # type: ignore[assignment]

    def run_once(self) -> str:
        report = read_unread_mails(self.config, mark_read=self.mark_read)
        logger.info("Informe listo (%d caracteres)", len(report))
        return report
