# --------------------------------------------------------------
# File: models.py
# Description: Modelos de datos comunes utilizados por la capa criptográfica.
# --------------------------------------------------------------
"""Modelos Pydantic que encapsulan registros cifrados, notas y vistas."""

from __future__ import annotations

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

PBKDF2_SHA256 = "pbkdf2-sha256"
ARGON2ID = "argon2id"

# Límites aceptados para parámetros de derivación, tanto en configuración
# como en registros leídos del almacenamiento.
MIN_PBKDF2_ITERATIONS = 100_000
MAX_PBKDF2_ITERATIONS = 10_000_000
MIN_ARGON2_TIME_COST = 2
MAX_ARGON2_TIME_COST = 16
MIN_ARGON2_MEMORY_COST = 19 * 1024
MAX_ARGON2_MEMORY_COST = 1024 * 1024
MAX_ARGON2_PARALLELISM = 16

RECORD_VERSION = 1

SALT_LEN = 16
NONCE_LEN = 12
TAG_LEN = 16


class KdfParams(BaseModel):
    """Algoritmo y coste de la derivación de clave de un registro.

    Attributes:
        name (str): ``pbkdf2-sha256`` o ``argon2id``.
        iterations (Optional[int]): Iteraciones PBKDF2.
        time_cost (Optional[int]): Pasadas Argon2id.
        memory_cost (Optional[int]): Memoria Argon2id en KiB.
        parallelism (Optional[int]): Carriles Argon2id.

    """

    model_config = ConfigDict(frozen=True)

    name: Literal["pbkdf2-sha256", "argon2id"]
    iterations: Optional[int] = Field(
        default=None, ge=MIN_PBKDF2_ITERATIONS, le=MAX_PBKDF2_ITERATIONS
    )
    time_cost: Optional[int] = Field(
        default=None, ge=MIN_ARGON2_TIME_COST, le=MAX_ARGON2_TIME_COST
    )
    memory_cost: Optional[int] = Field(
        default=None, ge=MIN_ARGON2_MEMORY_COST, le=MAX_ARGON2_MEMORY_COST
    )
    parallelism: Optional[int] = Field(default=None, ge=1, le=MAX_ARGON2_PARALLELISM)

    @model_validator(mode="after")
    def _check_fields_for_algorithm(self) -> "KdfParams":
        if self.name == PBKDF2_SHA256:
            if self.iterations is None:
                raise ValueError("pbkdf2-sha256 requiere 'iterations'")
            if any(v is not None for v in (self.time_cost, self.memory_cost, self.parallelism)):
                raise ValueError("pbkdf2-sha256 solo admite 'iterations'")
        else:
            if None in (self.time_cost, self.memory_cost, self.parallelism):
                raise ValueError("argon2id requiere 'time_cost', 'memory_cost' y 'parallelism'")
            if self.iterations is not None:
                raise ValueError("argon2id no admite 'iterations'")
            if self.memory_cost < 8 * self.parallelism:
                raise ValueError("argon2id requiere memory_cost >= 8 * parallelism")
        return self

    @classmethod
    def pbkdf2(cls, iterations: int) -> "KdfParams":
        return cls(name=PBKDF2_SHA256, iterations=iterations)

    @classmethod
    def argon2id(cls, time_cost: int, memory_cost: int, parallelism: int) -> "KdfParams":
        return cls(
            name=ARGON2ID,
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
        )


class CiphertextRecord(BaseModel):
    """Representa una nota cifrada lista para persistir.

    Attributes:
        version (int): Versión del formato del registro.
        kdf (KdfParams): Parámetros con los que se derivó la clave.
        salt (bytes): Salt aleatoria propia de la nota.
        nonce (bytes): Nonce de 96 bits usado por AES-GCM.
        ciphertext (bytes): Datos cifrados sin etiqueta.
        tag (bytes): Etiqueta de autenticación de 128 bits.

    """

    model_config = ConfigDict(frozen=True)

    version: int = RECORD_VERSION
    kdf: KdfParams
    salt: bytes = Field(min_length=SALT_LEN, max_length=SALT_LEN)
    nonce: bytes = Field(min_length=NONCE_LEN, max_length=NONCE_LEN)
    ciphertext: bytes
    tag: bytes = Field(min_length=TAG_LEN, max_length=TAG_LEN)


class Note(BaseModel):
    """Nota tal y como la guarda la capa de almacenamiento.

    ``text`` contiene texto plano o un registro cifrado serializado.
    """

    id: str
    text: str
    completed: bool = False
    created_at: str


class NoteState(str, Enum):
    """Estado de una nota dentro de la sesión en memoria."""

    PLAINTEXT = "plaintext"
    LOCKED = "locked"
    VERIFYING = "verifying"
    UNLOCKED = "unlocked"


class NoteView(BaseModel):
    """Resultado por nota de un intento de desbloqueo.

    Attributes:
        note_id (str): Identificador de la nota.
        state (NoteState): Estado resultante.
        stored_text (str): Texto almacenado, nunca modificado.
        plaintext (Optional[str]): Texto en claro si la nota es legible.
        error (Optional[str]): ``decryption_failed`` o ``corrupt_record``.

    """

    note_id: str
    state: NoteState
    stored_text: str
    plaintext: Optional[str] = None
    error: Optional[str] = None

    @property
    def display_text(self) -> str:
        return self.plaintext if self.plaintext is not None else self.stored_text
