# domain/errors.py
from __future__ import annotations


class MailReaderError(Exception):
    """Base de todos los errores del lector de correo."""


class InvalidConfigError(MailReaderError, ValueError):
    pass


class MailConnectionError(MailReaderError, ConnectionError):
    """No se pudo abrir la sesión IMAP o la sesión ya no está conectada."""


class MailAccessError(MailReaderError):
    """Fallo al consultar o modificar la carpeta / los mensajes."""


class BodyReadError(MailReaderError, OSError):
    """No se pudo leer el contenido textual del cuerpo."""
