# infrastructure/email/imap_client.py
from __future__ import annotations
import logging
from imapclient import IMAPClient, SEEN
from imapclient.exceptions import IMAPClientError
from domain.errors import MailAccessError, MailConnectionError
from domain.models import MailboxConfig, MessageRecord
from infrastructure.email.message_parser import parse_message

logger = logging.getLogger(__name__)

_FETCH_KEY = b"BODY[]"


class IMAPInbox:
    """
    Sesión IMAP + carpeta abierta en lectura/escritura.
    Uso:
        with IMAPInbox(config) as inbox:
            uids = inbox.search_unseen()
    Al salir (con o sin error) se cierra la carpeta y después la sesión, una sola vez cada una.
    """
    def __init__(self, config: MailboxConfig) -> None:
        self.config = config
        self.client: IMAPClient | None = None
        self._folder_open = False

    def __enter__(self) -> "IMAPInbox":
        cfg = self.config
        try:
            self.client = IMAPClient(cfg.host, port=cfg.port_number, ssl=cfg.ssl, timeout=cfg.timeout)
            if cfg.enable_auth:
                self.client.login(cfg.username, cfg.secret)
            # comprobar que la sesión sigue viva antes de usarla
            self.client.noop()
            self.client.select_folder(cfg.folder, readonly=False)
            self._folder_open = True
        except (IMAPClientError, OSError) as exc:
            self._abort()
            raise MailConnectionError(f"No se pudo abrir {cfg.folder} en {cfg.host}:{cfg.port}: {exc}") from exc
        logger.info("IMAP conectado host=%s user=%s carpeta=%s", cfg.host, cfg.username, cfg.folder)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self.client:
            return
        try:
            if self._folder_open:
                self.client.close_folder()
        except Exception:
            logger.exception("Error cerrando la carpeta IMAP")
        finally:
            self._folder_open = False
        try:
            self.client.logout()
        except Exception:
            logger.exception("Error cerrando IMAP")
        finally:
            self.client = None

    def _abort(self) -> None:
        # fallo durante la apertura: cortar el socket sin LOGOUT
        if not self.client:
            return
        try:
            self.client.shutdown()
        except Exception:
            logger.exception("Error cortando la conexión IMAP")
        finally:
            self.client = None

    def _require_client(self) -> IMAPClient:
        if self.client is None or not self._folder_open:
            raise MailConnectionError("IMAP no está conectado. Abre la sesión con 'with IMAPInbox(...)'.")
        return self.client

    # ───────── FolderHandle ─────────
    def search_unseen(self) -> list[int]:
        client = self._require_client()
        try:
            # orden tal cual lo devuelve el servidor
            return list(client.search(["UNSEEN"]))
        except (IMAPClientError, OSError) as exc:
            raise MailAccessError(f"Fallo buscando correos no leídos: {exc}") from exc

    def mark_seen(self, uid: int) -> None:
        client = self._require_client()
        try:
            client.add_flags([uid], [SEEN])
        except (IMAPClientError, OSError) as exc:
            raise MailAccessError(f"No se pudo marcar como leído UID={uid}: {exc}") from exc

    def fetch_message(self, uid: int) -> MessageRecord:
        client = self._require_client()
        try:
            # PEEK: el fetch no toca \Seen, el marcado es siempre explícito
            resp = client.fetch([uid], ["BODY.PEEK[]"])
        except (IMAPClientError, OSError) as exc:
            raise MailAccessError(f"Fallo descargando UID={uid}: {exc}") from exc
        data = resp.get(uid) or {}
        raw = data.get(_FETCH_KEY)
        if raw is None:
            raise MailAccessError(f"El servidor no devolvió el mensaje UID={uid}")
        return parse_message(uid, raw)


def open_inbox_read_write(config: MailboxConfig) -> IMAPInbox:
    return IMAPInbox(config)
