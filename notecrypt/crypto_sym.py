# --------------------------------------------------------------
# File: crypto_sym.py
# Description: Primitivas AES-256-GCM para cifrado y descifrado de notas.
# --------------------------------------------------------------
"""Rutinas de cifrado simétrico autenticado para el contenido de las notas."""

import os
from typing import Optional, Tuple

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from notecrypt.errors import DecryptionFailed, InvalidInput
from notecrypt.models import NONCE_LEN, TAG_LEN

KEY_LEN = 32


def _check_key(key: bytes) -> None:
    if not isinstance(key, (bytes, bytearray)) or len(key) != KEY_LEN:
        raise InvalidInput(f"La clave debe tener exactamente {KEY_LEN} bytes.")


def aes_gcm_encrypt_with_key(
    key: bytes, plaintext: bytes, aad: Optional[bytes] = None
) -> Tuple[bytes, bytes, bytes]:
    """Cifra datos con AES-256-GCM bajo un nonce aleatorio nuevo.

    Args:
        key (bytes): Clave simétrica de 256 bits.
        plaintext (bytes): Datos a cifrar.
        aad (Optional[bytes]): Datos autenticados adicionales.

    Returns:
        Tuple[bytes, bytes, bytes]: Ciphertext sin etiqueta, nonce y tag.

    """
    _check_key(key)
    nonce = os.urandom(NONCE_LEN)
    aes = AESGCM(bytes(key))
    ct_full = aes.encrypt(nonce, plaintext, aad)
    tag = ct_full[-TAG_LEN:]
    ciphertext = ct_full[:-TAG_LEN]
    return ciphertext, nonce, tag


def aes_gcm_decrypt_with_key(
    key: bytes, nonce: bytes, ciphertext: bytes, tag: bytes, aad: Optional[bytes] = None
) -> bytes:
    """Descifra datos con AES-256-GCM verificando antes la etiqueta.

    Args:
        key (bytes): Clave simétrica que protege los datos.
        nonce (bytes): Vector de inicialización de 96 bits.
        ciphertext (bytes): Datos cifrados sin etiqueta.
        tag (bytes): Etiqueta de autenticación de 128 bits.
        aad (Optional[bytes]): Datos autenticados adicionales.

    Returns:
        bytes: Mensaje original en claro.

    Raises:
        DecryptionFailed: Si la etiqueta no verifica.

    """
    _check_key(key)
    aes = AESGCM(bytes(key))
    try:
        return aes.decrypt(nonce, ciphertext + tag, aad)
    except InvalidTag:
        raise DecryptionFailed("No se ha podido descifrar la nota.") from None
