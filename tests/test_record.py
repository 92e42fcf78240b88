# --------------------------------------------------------------
# File: test_record.py
# Description: Pruebas del formato de texto de los registros cifrados.
# --------------------------------------------------------------

import pytest
from pydantic import ValidationError

from notecrypt.codec import decrypt_note, encrypt_note
from notecrypt.errors import CorruptRecord
from notecrypt.models import CiphertextRecord, KdfParams
from notecrypt.record import (
    MARKER,
    NoteTextKind,
    classify,
    format_record,
    is_encrypted,
    parse_record,
)

RECORD = CiphertextRecord(
    kdf=KdfParams.pbkdf2(600_000),
    salt=bytes(range(16)),
    nonce=bytes(range(12)),
    ciphertext=b"\xff" * 20,
    tag=b"\x01" * 16,
)


def test_format_layout_is_stable():
    """Comprueba la forma exacta de la cabecera del registro.

    Returns:
        None: Se verifican marcador, versión, KDF y número de campos.
    """
    text = format_record(RECORD)
    assert text.startswith("$notecrypt$v=1$pbkdf2-sha256$i=600000$")
    assert text.count("$") == 8
    assert "=" not in text.split("$", 5)[5]


def test_parse_recovers_all_fields():
    assert parse_record(format_record(RECORD)) == RECORD


def test_argon2id_params_survive_formatting():
    record = RECORD.model_copy(update={"kdf": KdfParams.argon2id(3, 65536, 2)})
    text = format_record(record)
    assert "$argon2id$m=65536,t=3,p=2$" in text
    assert parse_record(text).kdf == record.kdf


def test_empty_ciphertext_field_is_allowed():
    record = RECORD.model_copy(update={"ciphertext": b""})
    assert parse_record(format_record(record)).ciphertext == b""


def test_classify_uses_marker_prefix():
    assert classify(format_record(RECORD)) is NoteTextKind.ENCRYPTED
    assert classify("buy milk") is NoteTextKind.PLAINTEXT
    assert classify("") is NoteTextKind.PLAINTEXT
    assert not is_encrypted("notecrypt$v=1")
    assert is_encrypted(MARKER)


def _replace_field(text: str, index: int, value: str) -> str:
    parts = text.split("$")
    parts[index] = value
    return "$".join(parts)


VALID = format_record(RECORD)


@pytest.mark.parametrize(
    "text",
    [
        "buy milk",
        "",
        MARKER,
        VALID[:-5],
        VALID.rsplit("$", 1)[0],
        VALID + "$extra",
        _replace_field(VALID, 2, "v=2"),
        _replace_field(VALID, 2, "v1"),
        _replace_field(VALID, 3, "md5"),
        _replace_field(VALID, 4, "i=1000"),
        _replace_field(VALID, 4, "i=99999999999"),
        _replace_field(VALID, 4, "i=0600000"),
        _replace_field(VALID, 4, "i=600000,i=600000"),
        _replace_field(VALID, 4, "m=65536,t=3,p=1"),
        _replace_field(VALID, 5, "AAAA"),
        _replace_field(VALID, 5, "not base64!"),
        _replace_field(VALID, 6, ""),
        _replace_field(VALID, 6, "AAAAAAAAAAAAAAAAA"),
        _replace_field(VALID, 8, "AQEB"),
        _replace_field(VALID, 7, "A"),
    ],
)
def test_malformed_records_raise_corrupt_record(text):
    """Garantiza que registros truncados o no conformes se rechacen.

    Args:
        text (str): Variante malformada del registro válido.

    Returns:
        None: Se espera CorruptRecord sin intentar descifrar.
    """
    with pytest.raises(CorruptRecord):
        parse_record(text)


def test_parse_rejects_non_string():
    with pytest.raises(CorruptRecord):
        parse_record(b"$notecrypt$v=1")


_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"


def _same_bytes_other_text(field: str) -> str:
    """Cambia solo los bits de relleno del último carácter Base64."""

    return field[:-1] + _ALPHABET[_ALPHABET.index(field[-1]) ^ 1]


@pytest.mark.parametrize("index", [5, 8], ids=["salt", "tag"])
def test_non_canonical_base64_is_rejected(index):
    """Un campo que decodifica a los mismos bytes con otro texto se rechaza.

    Args:
        index (int): Posición del campo (salt o tag) dentro del registro.

    Returns:
        None: Se espera CorruptRecord y que el texto válido siga leyéndose.
    """
    field = VALID.split("$")[index]
    altered = _replace_field(VALID, index, _same_bytes_other_text(field))
    assert altered != VALID
    with pytest.raises(CorruptRecord):
        parse_record(altered)
    assert format_record(parse_record(VALID)) == VALID


def test_altered_stored_note_never_decrypts(fast_settings):
    stored = encrypt_note("hunter2", "buy milk", fast_settings)
    tag = stored.split("$")[8]
    tampered = _replace_field(stored, 8, _same_bytes_other_text(tag))
    assert tampered != stored
    with pytest.raises(CorruptRecord):
        decrypt_note("hunter2", tampered)


def test_reordered_kdf_params_are_rejected():
    record = RECORD.model_copy(update={"kdf": KdfParams.argon2id(3, 65536, 2)})
    text = format_record(record)
    reordered = text.replace("$m=65536,t=3,p=2$", "$t=3,m=65536,p=2$")
    assert reordered != text
    with pytest.raises(CorruptRecord):
        parse_record(reordered)


@pytest.mark.parametrize(
    "field,value",
    [("salt", b""), ("salt", b"S" * 17), ("nonce", b""), ("nonce", b"N" * 16), ("tag", b"T" * 15)],
)
def test_record_model_enforces_field_lengths(field, value):
    data = RECORD.model_dump()
    data[field] = value
    with pytest.raises(ValidationError):
        CiphertextRecord(**data)
