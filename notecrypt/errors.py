# --------------------------------------------------------------
# File: errors.py
# Description: Jerarquía de excepciones del cifrado de notas.
# --------------------------------------------------------------
"""Excepciones públicas de `notecrypt`.

Las tres categorías son recuperables en la frontera con la interfaz:
`DecryptionFailed` se muestra como "contraseña incorrecta" y `CorruptRecord`
como "esta nota no se puede leer".
"""

__all__ = [
    "NoteCryptoError",
    "InvalidInput",
    "CorruptRecord",
    "DecryptionFailed",
]


class NoteCryptoError(Exception):
    """Base común de todos los errores del subsistema de cifrado."""


class InvalidInput(NoteCryptoError, ValueError):
    """Entrada mal formada por el llamador: contraseña, clave o salt."""


class CorruptRecord(NoteCryptoError):
    """El registro almacenado no se puede separar en sus campos."""


class DecryptionFailed(NoteCryptoError):
    """La etiqueta de autenticación no verificó.

    Contraseña errónea y ciphertext manipulado producen el mismo error.
    """
