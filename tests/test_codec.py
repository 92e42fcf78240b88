# --------------------------------------------------------------
# File: test_codec.py
# Description: Pruebas del cifrado autenticado de notas y su registro.
# --------------------------------------------------------------

import os

import pytest

from notecrypt.codec import decrypt, decrypt_note, encrypt, encrypt_note
from notecrypt.crypto_kdf import derive, new_salt
from notecrypt.errors import CorruptRecord, DecryptionFailed, InvalidInput
from notecrypt.models import KdfParams, MIN_PBKDF2_ITERATIONS
from notecrypt.record import format_record, is_encrypted, parse_record

SALT = b"S" * 16
PARAMS = KdfParams.pbkdf2(MIN_PBKDF2_ITERATIONS)


def _flip(data: bytes, index: int = 0) -> bytes:
    return data[:index] + bytes([data[index] ^ 0x01]) + data[index + 1 :]


@pytest.fixture(scope="module")
def key() -> bytes:
    return derive("hunter2", SALT, MIN_PBKDF2_ITERATIONS)


def test_roundtrip_with_derived_key(key):
    """Comprueba que decrypt(derive(k), encrypt(derive(k), p)) == p.

    Returns:
        None: Las aserciones comparan el texto recuperado.
    """
    record = encrypt(key, "buy milk".encode("utf-8"), salt=SALT, kdf=PARAMS)
    same_key = derive("hunter2", SALT, MIN_PBKDF2_ITERATIONS)
    assert decrypt(same_key, record) == b"buy milk"


def test_same_plaintext_twice_gives_different_records(key):
    r1 = encrypt(key, b"buy milk", salt=SALT, kdf=PARAMS)
    r2 = encrypt(key, b"buy milk", salt=SALT, kdf=PARAMS)
    assert r1.nonce != r2.nonce
    assert format_record(r1) != format_record(r2)


def test_wrong_password_is_rejected(key):
    """Un registro cifrado con "hunter2" no se abre con "hunter3".

    Returns:
        None: Se espera DecryptionFailed, nunca texto alternativo.
    """
    record = encrypt(key, b"buy milk", salt=SALT, kdf=PARAMS)
    wrong = derive("hunter3", SALT, MIN_PBKDF2_ITERATIONS)
    with pytest.raises(DecryptionFailed):
        decrypt(wrong, record)


@pytest.mark.parametrize("field", ["ciphertext", "nonce", "tag", "salt"])
def test_single_byte_flip_is_detected(key, field):
    """Cualquier byte alterado en un campo del registro provoca DecryptionFailed.

    Args:
        key (bytes): Clave derivada compartida por el módulo.
        field (str): Campo del registro que se altera.

    Returns:
        None: Se espera DecryptionFailed en todos los casos.
    """
    record = encrypt(key, b"buy milk", salt=SALT, kdf=PARAMS)
    value = getattr(record, field)
    for index in range(len(value)):
        tampered = record.model_copy(update={field: _flip(value, index)})
        with pytest.raises(DecryptionFailed):
            decrypt(key, tampered)


def test_header_params_are_authenticated(key):
    record = encrypt(key, b"buy milk", salt=SALT, kdf=PARAMS)
    tampered = record.model_copy(
        update={"kdf": KdfParams.pbkdf2(MIN_PBKDF2_ITERATIONS + 1)}
    )
    with pytest.raises(DecryptionFailed):
        decrypt(key, tampered)


@pytest.mark.parametrize("bad_key", [b"", os.urandom(16), os.urandom(31)])
def test_encrypt_requires_32_byte_key(bad_key):
    with pytest.raises(InvalidInput):
        encrypt(bad_key, b"buy milk", salt=SALT, kdf=PARAMS)


def test_encrypt_rejects_text_plaintext(key):
    with pytest.raises(InvalidInput):
        encrypt(key, "buy milk", salt=SALT, kdf=PARAMS)


def test_encrypt_note_hunter2_scenario(fast_settings):
    """Escenario concreto: "buy milk" con "hunter2" y luego "hunter3".

    Returns:
        None: Se comprueban el descifrado correcto y el rechazo.
    """
    stored = encrypt_note("hunter2", "buy milk", fast_settings)
    assert is_encrypted(stored)
    assert "buy milk" not in stored
    assert decrypt_note("hunter2", stored) == "buy milk"
    with pytest.raises(DecryptionFailed):
        decrypt_note("hunter3", stored)


def test_encrypt_note_uses_fresh_salt_per_note(fast_settings):
    a = parse_record(encrypt_note("pw", "uno", fast_settings))
    b = parse_record(encrypt_note("pw", "uno", fast_settings))
    assert a.salt != b.salt
    assert a.nonce != b.nonce


@pytest.mark.parametrize("text", ["", "ñandú 🐦", "línea 1\nlínea 2", "x" * 10_000])
def test_encrypt_note_roundtrip_unicode(fast_settings, text):
    assert decrypt_note("pässwörd", encrypt_note("pässwörd", text, fast_settings)) == text


def test_encrypt_note_with_argon2id(argon2_settings):
    stored = encrypt_note("hunter2", "buy milk", argon2_settings)
    assert "$argon2id$" in stored
    assert decrypt_note("hunter2", stored) == "buy milk"
    with pytest.raises(DecryptionFailed):
        decrypt_note("hunter3", stored)


def test_old_records_survive_config_change(fast_settings, monkeypatch):
    """Los parámetros KDF se leen del registro, no de la configuración.

    Returns:
        None: Un registro PBKDF2 se abre aunque la configuración pase a Argon2id.
    """
    stored = encrypt_note("hunter2", "buy milk", fast_settings)
    monkeypatch.setenv("NOTECRYPT_KDF", "argon2id")
    assert decrypt_note("hunter2", stored) == "buy milk"


def test_encrypt_note_uses_environment_settings_by_default():
    stored = encrypt_note("hunter2", "buy milk")
    assert parse_record(stored).kdf == KdfParams.pbkdf2(MIN_PBKDF2_ITERATIONS)


def test_encrypt_note_rejects_empty_password(fast_settings):
    with pytest.raises(InvalidInput):
        encrypt_note("", "buy milk", fast_settings)


def test_decrypt_note_reports_corrupt_before_decrypting():
    with pytest.raises(CorruptRecord):
        decrypt_note("hunter2", "$notecrypt$v=1$pbkdf2-sha256$i=600000$AAAA")
    with pytest.raises(CorruptRecord):
        decrypt_note("hunter2", "buy milk")


def test_decrypt_note_non_utf8_payload_is_corrupt(fast_settings):
    salt = new_salt()
    key = derive("hunter2", salt, MIN_PBKDF2_ITERATIONS)
    record = encrypt(key, b"\xff\xfe\xfd", salt=salt, kdf=PARAMS)
    with pytest.raises(CorruptRecord):
        decrypt_note("hunter2", format_record(record))


@pytest.mark.parametrize("text", ["a\ud800b", "\udfff"])
def test_encrypt_note_rejects_lone_surrogates(fast_settings, text):
    """Un str que no se puede codificar en UTF-8 es un error del llamador.

    Args:
        fast_settings (CryptoSettings): Configuración con coste mínimo.
        text (str): Texto con un sustituto UTF-16 aislado.

    Returns:
        None: Se espera InvalidInput, no UnicodeEncodeError.
    """
    with pytest.raises(InvalidInput):
        encrypt_note("hunter2", text, fast_settings)


@pytest.mark.parametrize("field,value", [("nonce", b""), ("tag", b"\x00" * 8)])
def test_decrypt_rejects_record_with_bad_lengths(key, field, value):
    record = encrypt(key, b"buy milk", salt=SALT, kdf=PARAMS)
    broken = record.model_copy(update={field: value})
    with pytest.raises(CorruptRecord):
        decrypt(key, broken)
