# infrastructure/email/message_parser.py
from __future__ import annotations
import codecs
import logging
import re
from email.utils import getaddresses

import pyzmail

from domain.errors import BodyReadError
from domain.models import BodyContent, ContentKind, MessageRecord

logger = logging.getLogger(__name__)

_FOLD = re.compile(r"\r?\n(?=[ \t])")


def _unfold(value: str | None) -> str | None:
    # RFC 5322: desplegar = quitar el CRLF, se conserva el espacio/tab siguiente
    if value is None:
        return None
    return _FOLD.sub("", value)


def _raw_header_values(msg: pyzmail.PyzMessage, header: str) -> list[str]:
    # raw_items() no pasa por Header(): los bytes 8-bit (SMTPUTF8) llegan en surrogateescape
    return [
        str(value).encode("utf-8", "surrogateescape").decode("utf-8", errors="replace")
        for name, value in msg.raw_items()
        if name.lower() == header
    ]


def _addresses(msg: pyzmail.PyzMessage, header: str) -> tuple[str, ...]:
    # solo la dirección, tal cual viene (sin pasar a minúsculas ni validar); se descarta el nombre visible
    return tuple(addr for _name, addr in getaddresses(_raw_header_values(msg, header)) if addr)


def _first_part(msg: pyzmail.PyzMessage) -> BodyContent | None:
    """
    Solo se mira la PRIMERA parte de un multipart (convención del buzón: el texto
    legible va primero). Un mensaje que no es multipart no aporta cuerpo.
    """
    if not msg.is_multipart():
        return None

    part = msg.get_payload(0)
    kind = ContentKind.from_mime_type(part.get_content_type())
    if kind is not ContentKind.PLAIN_TEXT:
        return BodyContent(kind=kind)

    payload = part.get_payload(decode=True)
    if payload is None:
        raise BodyReadError("La primera parte text/plain no tiene contenido legible")
    charset = part.get_content_charset() or "utf-8"
    try:
        codecs.lookup(charset)
    except LookupError as exc:
        raise BodyReadError(f"Charset desconocido en el cuerpo: {charset}") from exc
    return BodyContent(kind=kind, text=payload.decode(charset, errors="replace"))


def parse_message(uid: int, raw: bytes) -> MessageRecord:
    msg = pyzmail.PyzMessage.factory(raw)

    cc = _addresses(msg, "cc")
    to = _addresses(msg, "to")
    sender = _addresses(msg, "from")
    body = _first_part(msg)
    logger.debug("UID=%s from=%s to=%d cc=%d multipart=%s", uid, sender, len(to), len(cc), msg.is_multipart())

    return MessageRecord(
        uid=uid,
        from_addrs=sender,
        to_addrs=to,
        cc_addrs=cc,
        subject=_unfold(msg.get_subject(None)),
        is_multipart=msg.is_multipart(),
        first_part=body,
    )
