# domain/models.py
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

from domain.errors import InvalidConfigError


@dataclass(frozen=True)
class MailboxConfig:
    username: str
    secret: str = field(repr=False)
    host: str
    enable_auth: bool
    port: str
    ssl: bool = True
    folder: str = "INBOX"
    timeout: float | None = None

    def __post_init__(self) -> None:
        for name in ("username", "secret", "host", "folder"):
            if not (getattr(self, name) or "").strip():
                raise InvalidConfigError(f"Falta el parámetro '{name}'")
        port = (self.port or "").strip()
        if not port.isdigit() or not 0 < int(port) < 65536:
            raise InvalidConfigError(f"Puerto no válido: {self.port!r}")

    @property
    def port_number(self) -> int:
        return int(self.port.strip())


class ContentKind(Enum):
    PLAIN_TEXT = "text/plain"
    OTHER = "other"

    @classmethod
    def from_mime_type(cls, mime_type: str | None) -> "ContentKind":
        if (mime_type or "").strip().lower() == cls.PLAIN_TEXT.value:
            return cls.PLAIN_TEXT
        return cls.OTHER


@dataclass(frozen=True)
class BodyContent:
    kind: ContentKind
    text: str | None = None  # solo se resuelve para text/plain


@dataclass(frozen=True)
class MessageRecord:
    uid: int
    from_addrs: tuple[str, ...]
    to_addrs: tuple[str, ...]
    cc_addrs: tuple[str, ...] = ()
    subject: str | None = None
    is_multipart: bool = False
    first_part: BodyContent | None = None


class ReportBuffer:
    """Bloques ya formateados, en el mismo orden en que el servidor devolvió los mensajes."""

    def __init__(self) -> None:
        self._blocks: list[str] = []

    def append(self, block: str) -> None:
        self._blocks.append(block)

    def __len__(self) -> int:
        return len(self._blocks)

    def text(self) -> str:
        return "".join(self._blocks)
