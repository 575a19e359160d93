# config/settings.py
from __future__ import annotations
from dataclasses import dataclass
import os
from dotenv import load_dotenv

from domain.errors import InvalidConfigError
from domain.models import MailboxConfig

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class Settings:
    # IMAP (sin valores por defecto para credenciales / servidor)
    IMAP_HOST: str = os.getenv("IMAP_HOST", "")
    IMAP_PORT: str = os.getenv("IMAP_PORT", "")
    IMAP_USERNAME: str = os.getenv("IMAP_USERNAME", "")
    IMAP_PASSWORD: str = os.getenv("IMAP_PASSWORD", "")
    IMAP_AUTH: bool = _env_bool("IMAP_AUTH", "true")  # false => servidor PREAUTH, no se envía LOGIN
    IMAP_SSL: bool = _env_bool("IMAP_SSL", "true")
    IMAP_FOLDER_INBOX: str = os.getenv("IMAP_FOLDER_INBOX", "INBOX")
    IMAP_TIMEOUT: str = os.getenv("IMAP_TIMEOUT", "")  # segundos; vacío = sin timeout

    # Informe
    MARK_READ_POLICY: str = os.getenv("MARK_READ_POLICY", "eager").strip().lower()  # eager | deferred

    # Ejecución
    POLL_INTERVAL: int = int(os.getenv("POLL_INTERVAL", 0))  # 0 = una sola ejecución
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # ───────── helpers ─────────
    def timeout_seconds(self) -> float | None:
        raw = (self.IMAP_TIMEOUT or "").strip()
        if not raw:
            return None
        try:
            return float(raw)
        except ValueError as exc:
            raise InvalidConfigError(f"IMAP_TIMEOUT no válido: {raw!r}") from exc

    def mailbox_config(self) -> MailboxConfig:
        return MailboxConfig(
            username=self.IMAP_USERNAME,
            secret=self.IMAP_PASSWORD,
            host=self.IMAP_HOST,
            enable_auth=self.IMAP_AUTH,
            port=self.IMAP_PORT,
            ssl=self.IMAP_SSL,
            folder=self.IMAP_FOLDER_INBOX,
            timeout=self.timeout_seconds(),
        )
