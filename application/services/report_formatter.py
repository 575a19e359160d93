# application/services/report_formatter.py
from __future__ import annotations
from typing import Iterable

from domain.models import ContentKind, MessageRecord

BLOCK_SEPARATOR = "\n\n\n"


def join_addresses(addrs: Iterable[str]) -> str:
    return ",".join(addrs)


def render_block(record: MessageRecord) -> str | None:
    """
    Devuelve el bloque de texto del mensaje o None si no entra en el informe
    (no es multipart o su primera parte no es text/plain).

    Formato:
        From: a@x.com
        To: b@y.com,c@y.com
        CC: d@y.com            (solo si hay CC)
        Subject: Hola          (solo si hay asunto, seguido de línea en blanco)

        <cuerpo>               (seguido de tres saltos de línea)
    """
    part = record.first_part
    if not record.is_multipart or part is None or part.kind is not ContentKind.PLAIN_TEXT:
        return None

    lines = [
        f"From: {join_addresses(record.from_addrs)}\n",
        f"To: {join_addresses(record.to_addrs)}\n",
    ]
    if record.cc_addrs:
        lines.append(f"CC: {join_addresses(record.cc_addrs)}\n")
    if record.subject is not None:
        lines.append(f"Subject: {record.subject}\n\n")
    lines.append(part.text or "")
    lines.append(BLOCK_SEPARATOR)
    return "".join(lines)
