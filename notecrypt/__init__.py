# --------------------------------------------------------------
# File: __init__.py
# Description: API pública del cifrado de notas con contraseña.
# --------------------------------------------------------------
"""Cifrado de notas con contraseña: derivación de clave, AES-256-GCM y
formato de registro versionado."""

from notecrypt.batch import decrypt_all, iter_decrypt_all
from notecrypt.codec import decrypt, decrypt_note, encrypt, encrypt_note
from notecrypt.crypto_kdf import derive, derive_key, new_salt
from notecrypt.errors import CorruptRecord, DecryptionFailed, InvalidInput, NoteCryptoError
from notecrypt.models import CiphertextRecord, KdfParams, Note, NoteState, NoteView
from notecrypt.record import classify, format_record, is_encrypted, parse_record
from notecrypt.session import NoteSession

__all__ = [
    "CiphertextRecord",
    "CorruptRecord",
    "DecryptionFailed",
    "InvalidInput",
    "KdfParams",
    "Note",
    "NoteCryptoError",
    "NoteSession",
    "NoteState",
    "NoteView",
    "classify",
    "decrypt",
    "decrypt_all",
    "decrypt_note",
    "derive",
    "derive_key",
    "encrypt",
    "encrypt_note",
    "format_record",
    "is_encrypted",
    "iter_decrypt_all",
    "new_salt",
    "parse_record",
]
