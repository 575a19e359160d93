# application/ports.py
from __future__ import annotations
from typing import Protocol

from domain.models import MessageRecord


class FolderHandle(Protocol):
    """Carpeta ya abierta en lectura/escritura (la implementa IMAPInbox)."""

    def search_unseen(self) -> list[int]: ...

    def mark_seen(self, uid: int) -> None: ...

    def fetch_message(self, uid: int) -> MessageRecord: ...
