# --------------------------------------------------------------
# File: codec.py
# Description: Cifrado autenticado de notas y su codificación persistente.
# --------------------------------------------------------------
"""Codec autenticado: texto de nota + contraseña <-> registro cifrado.

`encrypt`/`decrypt` trabajan con una clave ya derivada; `encrypt_note` y
`decrypt_note` son el camino completo desde la contraseña que usa la
interfaz.
"""

from __future__ import annotations

import logging
from typing import Optional

from notecrypt.config import CryptoSettings, get_settings
from notecrypt.crypto_kdf import Password, derive_key, new_salt
from notecrypt.crypto_sym import aes_gcm_decrypt_with_key, aes_gcm_encrypt_with_key
from notecrypt.errors import CorruptRecord, InvalidInput
from notecrypt.models import (
    NONCE_LEN,
    RECORD_VERSION,
    SALT_LEN,
    TAG_LEN,
    CiphertextRecord,
    KdfParams,
)
from notecrypt.record import format_record, header, parse_record, record_aad

logger = logging.getLogger(__name__)


def encrypt(key: bytes, plaintext: bytes, *, salt: bytes, kdf: KdfParams) -> CiphertextRecord:
    """Cifra ``plaintext`` con AES-256-GCM y construye el registro.

    La cabecera (versión, KDF, parámetros y salt) se autentica como AAD, de
    modo que cualquier cambio en ella se detecta al descifrar.

    Args:
        key (bytes): Clave de 32 bytes derivada con ``salt`` y ``kdf``.
        plaintext (bytes): Contenido de la nota codificado en UTF-8.
        salt (bytes): Salt con la que se derivó ``key``.
        kdf (KdfParams): Parámetros con los que se derivó ``key``.

    Returns:
        CiphertextRecord: Registro nuevo con nonce propio.

    Raises:
        InvalidInput: Clave de longitud incorrecta o plaintext no binario.

    """
    if not isinstance(plaintext, (bytes, bytearray)):
        raise InvalidInput("El texto a cifrar debe ser bytes.")
    if not isinstance(salt, (bytes, bytearray)) or len(salt) != SALT_LEN:
        raise InvalidInput(f"La salt debe tener exactamente {SALT_LEN} bytes.")
    aad = header(RECORD_VERSION, kdf, salt).encode("ascii")
    ciphertext, nonce, tag = aes_gcm_encrypt_with_key(key, bytes(plaintext), aad)
    return CiphertextRecord(
        version=RECORD_VERSION,
        kdf=kdf,
        salt=salt,
        nonce=nonce,
        ciphertext=ciphertext,
        tag=tag,
    )


def decrypt(key: bytes, record: CiphertextRecord) -> bytes:
    """Descifra un registro; no devuelve nada si la etiqueta no verifica.

    Raises:
        CorruptRecord: Nonce o tag de longitud incorrecta.
        DecryptionFailed: Contraseña incorrecta o registro manipulado.

    """
    if len(record.nonce) != NONCE_LEN or len(record.tag) != TAG_LEN:
        raise CorruptRecord("Longitud de nonce o tag incorrecta.")
    return aes_gcm_decrypt_with_key(
        key, record.nonce, record.ciphertext, record.tag, record_aad(record)
    )


def encrypt_note(
    password: Password, text: str, settings: Optional[CryptoSettings] = None
) -> str:
    """Cifra el texto de una nota con una salt nueva y devuelve el registro.

    Args:
        password (Password): Contraseña introducida por el usuario.
        text (str): Contenido de la nota.
        settings (Optional[CryptoSettings]): Coste KDF para el registro nuevo.

    Returns:
        str: Registro serializado listo para guardarse como ``text``.

    """
    if not isinstance(text, str):
        raise InvalidInput("El texto de la nota debe ser str.")
    settings = settings or get_settings()
    params = settings.kdf_params()
    salt = new_salt()
    try:
        data = text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise InvalidInput("El texto de la nota no es Unicode válido.") from exc
    key = derive_key(password, salt, params)
    record = encrypt(key, data, salt=salt, kdf=params)
    logger.debug("Nota cifrada con %s", params.name)
    return format_record(record)


def decrypt_note(password: Password, stored_text: str) -> str:
    """Recupera el texto de una nota cifrada a partir de la contraseña.

    Los parámetros KDF se leen del propio registro, por lo que los registros
    antiguos siguen siendo legibles aunque cambie la configuración.

    Raises:
        CorruptRecord: Registro mal formado o contenido no UTF-8.
        DecryptionFailed: Contraseña incorrecta o registro manipulado.

    """
    record = parse_record(stored_text)
    key = derive_key(password, record.salt, record.kdf)
    data = decrypt(key, record)
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise CorruptRecord("El contenido descifrado no es texto UTF-8.") from exc
