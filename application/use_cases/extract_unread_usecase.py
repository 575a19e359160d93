# application/use_cases/extract_unread_usecase.py
from __future__ import annotations
import logging
from typing import Literal

from application.ports import FolderHandle
from application.services.report_formatter import render_block
from domain.errors import InvalidConfigError
from domain.models import ReportBuffer

logger = logging.getLogger(__name__)

# eager:    \Seen ANTES de extraer (como mucho una vez; si falla la extracción el texto se pierde)
# deferred: \Seen DESPUÉS de extraer (si falla, el correo sigue no leído y se reintenta en la próxima ejecución)
MarkReadPolicy = Literal["eager", "deferred"]
MARK_READ_POLICIES: tuple[str, ...] = ("eager", "deferred")


class UnreadMailExtractor:
    def __init__(self, *, mark_read: MarkReadPolicy = "eager") -> None:
        if mark_read not in MARK_READ_POLICIES:
            raise InvalidConfigError(f"Política de marcado desconocida: {mark_read!r}")
        self.mark_read = mark_read

    def extract_unread(self, folder: FolderHandle) -> str:
        """
        Recorre los correos no leídos en el orden del servidor, los marca como leídos
        (siempre, entren o no en el informe) y devuelve el informe de texto.
        Los errores de la carpeta / del cuerpo se propagan sin capturar.
        """
        uids = folder.search_unseen()
        if not uids:
            logger.info("Sin correos nuevos.")
            return ""

        logger.info("Procesando %d correos no leídos (política=%s)…", len(uids), self.mark_read)
        report = ReportBuffer()
        for uid in uids:
            if self.mark_read == "eager":
                folder.mark_seen(uid)

            record = folder.fetch_message(uid)
            block = render_block(record)

            if self.mark_read == "deferred":
                folder.mark_seen(uid)

            if block is None:
                logger.info("UID=%s sin cuerpo text/plain en la primera parte; no se incluye", uid)
                continue
            report.append(block)

        logger.info("Informe generado: %d de %d correos incluidos", len(report), len(uids))
        return report.text()
