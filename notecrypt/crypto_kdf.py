# --------------------------------------------------------------
# File: crypto_kdf.py
# Description: Derivación de claves de nota a partir de contraseñas.
# --------------------------------------------------------------
"""Funciones de derivación de claves para proteger notas con contraseña.

La clave resultante tiene siempre 256 bits. PBKDF2-HMAC-SHA256 es el
algoritmo por defecto; Argon2id queda disponible por configuración cuando se
quiere resistencia a fuerza bruta con hardware dedicado.
"""

from __future__ import annotations

import logging
import os
from typing import Union

from argon2.low_level import Type, hash_secret_raw
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from notecrypt.errors import InvalidInput
from notecrypt.models import (
    ARGON2ID,
    MIN_PBKDF2_ITERATIONS,
    PBKDF2_SHA256,
    SALT_LEN,
    KdfParams,
)

logger = logging.getLogger(__name__)

KEY_LEN = 32

Password = Union[str, bytes, bytearray]


def new_salt() -> bytes:
    """Genera una salt aleatoria de 128 bits para una nota nueva."""

    return os.urandom(SALT_LEN)


def _password_buffer(password: Password) -> bytearray:
    """Copia la contraseña a un buffer mutable que se puede borrar después."""

    if isinstance(password, str):
        buf = bytearray(password.encode("utf-8"))
    elif isinstance(password, (bytes, bytearray)):
        buf = bytearray(password)
    else:
        raise InvalidInput("La contraseña debe ser str o bytes.")
    if not buf:
        raise InvalidInput("La contraseña no puede estar vacía.")
    return buf


def _wipe(buf: bytearray) -> None:
    # Solo alcanza a la copia mutable; str/bytes de Python son inmutables.
    for i in range(len(buf)):
        buf[i] = 0


def _check_salt(salt: bytes) -> None:
    if not isinstance(salt, (bytes, bytearray)) or len(salt) != SALT_LEN:
        raise InvalidInput(f"La salt debe tener exactamente {SALT_LEN} bytes.")


def derive(password: Password, salt: bytes, iterations: int) -> bytes:
    """Deriva una clave AES-256 con PBKDF2-HMAC-SHA256.

    Args:
        password (Password): Contraseña de la nota; no puede estar vacía.
        salt (bytes): Salt de 16 bytes guardada junto al registro.
        iterations (int): Coste configurado, como mínimo 100 000.

    Returns:
        bytes: Clave simétrica de 32 bytes.

    Raises:
        InvalidInput: Contraseña vacía, salt de longitud incorrecta o
            número de iteraciones por debajo del mínimo.

    """
    _check_salt(salt)
    if not isinstance(iterations, int) or iterations < MIN_PBKDF2_ITERATIONS:
        raise InvalidInput(
            f"Se requieren al menos {MIN_PBKDF2_ITERATIONS} iteraciones PBKDF2."
        )
    buf = _password_buffer(password)
    try:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=KEY_LEN,
            salt=bytes(salt),
            iterations=iterations,
        )
        return kdf.derive(buf)
    finally:
        _wipe(buf)


def derive_argon2id(
    password: Password,
    salt: bytes,
    *,
    t: int,
    m: int,
    p: int,
) -> bytes:
    """Deriva una clave AES-256 usando Argon2id.

    `hash_secret_raw` solo acepta ``bytes``, así que recibe una copia
    inmutable de la contraseña que no se puede borrar; solo el buffer
    interno se pone a cero. En esta ruta el borrado es parcial.

    Args:
        password (Password): Contraseña de la nota.
        salt (bytes): Salt de 16 bytes asociada a la nota.
        t (int): Coste temporal en iteraciones Argon2id.
        m (int): Memoria en KiB consumida durante la derivación.
        p (int): Paralelismo configurado para Argon2id.

    Returns:
        bytes: Clave simétrica derivada de 32 bytes.

    """
    _check_salt(salt)
    buf = _password_buffer(password)
    try:
        return hash_secret_raw(
            bytes(buf),
            bytes(salt),
            time_cost=t,
            memory_cost=m,
            parallelism=p,
            hash_len=KEY_LEN,
            type=Type.ID,
        )
    finally:
        _wipe(buf)


def derive_key(password: Password, salt: bytes, params: KdfParams) -> bytes:
    """Deriva la clave de una nota según los parámetros de su registro."""

    logger.debug("Derivando clave con %s", params.name)
    if params.name == PBKDF2_SHA256:
        return derive(password, salt, params.iterations)
    if params.name == ARGON2ID:
        return derive_argon2id(
            password,
            salt,
            t=params.time_cost,
            m=params.memory_cost,
            p=params.parallelism,
        )
    raise InvalidInput(f"KDF desconocida: {params.name!r}")
