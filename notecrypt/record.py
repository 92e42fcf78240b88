# --------------------------------------------------------------
# File: record.py
# Description: Formato de texto versionado de las notas cifradas.
# --------------------------------------------------------------
"""Serialización de `CiphertextRecord` al texto que se guarda como nota.

Formato (inspirado en las cadenas PHC de Argon2)::

    $notecrypt$v=1$pbkdf2-sha256$i=600000$<salt>$<nonce>$<ct>$<tag>
    $notecrypt$v=1$argon2id$m=65536,t=3,p=1$<salt>$<nonce>$<ct>$<tag>

Los campos binarios van en Base64 URL-safe sin relleno. Un texto que empieza
por ``$notecrypt$`` es siempre un registro cifrado; cualquier otro texto es
una nota en claro.
"""

from __future__ import annotations

import base64
import binascii
import re
from enum import Enum
from typing import Dict, List

from pydantic import ValidationError

from notecrypt.errors import CorruptRecord
from notecrypt.models import (
    ARGON2ID,
    NONCE_LEN,
    PBKDF2_SHA256,
    RECORD_VERSION,
    SALT_LEN,
    TAG_LEN,
    CiphertextRecord,
    KdfParams,
)

MARKER = "$notecrypt$"
SEP = "$"

_B64U = re.compile(r"[A-Za-z0-9_-]*")
_INT = re.compile(r"[1-9][0-9]{0,9}")
# Nombre en el registro -> atributo de KdfParams.
_PARAM_KEYS: Dict[str, Dict[str, str]] = {
    PBKDF2_SHA256: {"i": "iterations"},
    ARGON2ID: {"m": "memory_cost", "t": "time_cost", "p": "parallelism"},
}


class NoteTextKind(str, Enum):
    """Clasificación de un texto almacenado."""

    PLAINTEXT = "plaintext"
    ENCRYPTED = "encrypted"


def _b64u(data: bytes) -> str:
    """Codifica datos binarios en Base64 URL-safe sin relleno."""

    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _unb64u(value: str, field: str) -> bytes:
    """Decodifica un campo Base64 URL-safe rechazando caracteres ajenos."""

    if not _B64U.fullmatch(value):
        raise CorruptRecord(f"Campo '{field}' con caracteres no válidos.")
    pad = "=" * (-len(value) % 4)
    try:
        data = base64.urlsafe_b64decode(value + pad)
    except (binascii.Error, ValueError) as exc:
        raise CorruptRecord(f"Campo '{field}' no es Base64 válido.") from exc
    # Una sola codificación válida por valor: los bits sobrantes deben ser cero.
    if _b64u(data) != value:
        raise CorruptRecord(f"Campo '{field}' con codificación no canónica.")
    return data


def classify(text: str) -> NoteTextKind:
    """Indica si el texto de una nota es un registro cifrado o texto plano."""

    if text.startswith(MARKER):
        return NoteTextKind.ENCRYPTED
    return NoteTextKind.PLAINTEXT


def is_encrypted(text: str) -> bool:
    return classify(text) is NoteTextKind.ENCRYPTED


def format_params(params: KdfParams) -> str:
    """Serializa los parámetros KDF, p. ej. ``m=65536,t=3,p=1``."""

    keys = _PARAM_KEYS[params.name]
    return ",".join(f"{short}={getattr(params, attr)}" for short, attr in keys.items())


def parse_params(name: str, raw: str) -> KdfParams:
    """Reconstruye `KdfParams` a partir del nombre y la lista ``k=v``."""

    keys = _PARAM_KEYS.get(name)
    if keys is None:
        raise CorruptRecord(f"KDF desconocida en el registro: {name!r}")
    values: Dict[str, int] = {}
    for item in raw.split(","):
        short, eq, value = item.partition("=")
        if not eq or short not in keys or keys[short] in values or not _INT.fullmatch(value):
            raise CorruptRecord("Parámetros KDF mal formados.")
        values[keys[short]] = int(value)
    if len(values) != len(keys):
        raise CorruptRecord("Faltan parámetros KDF.")
    try:
        params = KdfParams(name=name, **values)
    except ValidationError as exc:
        raise CorruptRecord("Parámetros KDF fuera de rango.") from exc
    if format_params(params) != raw:
        raise CorruptRecord("Parámetros KDF en orden no canónico.")
    return params


def header(version: int, params: KdfParams, salt: bytes) -> str:
    """Cabecera autenticada como AAD: todo lo anterior al nonce."""

    return SEP.join(
        [MARKER.rstrip(SEP), f"v={version}", params.name, format_params(params), _b64u(salt)]
    )


def record_aad(record: CiphertextRecord) -> bytes:
    return header(record.version, record.kdf, record.salt).encode("ascii")


def format_record(record: CiphertextRecord) -> str:
    """Convierte un registro en el texto que se guarda en la nota.

    Args:
        record (CiphertextRecord): Registro producido por el cifrado.

    Returns:
        str: Representación estable y autodescriptiva del registro.

    """
    fields: List[str] = [
        header(record.version, record.kdf, record.salt),
        _b64u(record.nonce),
        _b64u(record.ciphertext),
        _b64u(record.tag),
    ]
    return SEP.join(fields)


def parse_record(text: str) -> CiphertextRecord:
    """Separa un texto almacenado en los campos de `CiphertextRecord`.

    No intenta descifrar: solo comprueba estructura, versión y longitudes.

    Args:
        text (str): Texto de la nota tal y como lo devuelve el almacenamiento.

    Returns:
        CiphertextRecord: Registro listo para `codec.decrypt`.

    Raises:
        CorruptRecord: Si el texto no es un registro completo y conforme.

    """
    if not isinstance(text, str) or not text.startswith(MARKER):
        raise CorruptRecord("El texto no es un registro cifrado.")

    parts = text.split(SEP)
    # ['', 'notecrypt', 'v=1', kdf, params, salt, nonce, ct, tag]
    if len(parts) != 9:
        raise CorruptRecord("Número de campos inesperado en el registro.")
    _, _, version_field, kdf_name, raw_params, salt_b64, nonce_b64, ct_b64, tag_b64 = parts

    if version_field != f"v={RECORD_VERSION}":
        raise CorruptRecord(f"Versión de registro no soportada: {version_field!r}")

    kdf = parse_params(kdf_name, raw_params)
    salt = _unb64u(salt_b64, "salt")
    nonce = _unb64u(nonce_b64, "nonce")
    ciphertext = _unb64u(ct_b64, "ciphertext")
    tag = _unb64u(tag_b64, "tag")

    if len(salt) != SALT_LEN:
        raise CorruptRecord("Longitud de salt incorrecta.")
    if len(nonce) != NONCE_LEN:
        raise CorruptRecord("Longitud de nonce incorrecta.")
    if len(tag) != TAG_LEN:
        raise CorruptRecord("Longitud de tag incorrecta.")

    return CiphertextRecord(
        version=RECORD_VERSION,
        kdf=kdf,
        salt=salt,
        nonce=nonce,
        ciphertext=ciphertext,
        tag=tag,
    )
