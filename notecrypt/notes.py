# --------------------------------------------------------------
# File: notes.py
# Description: Almacén de notas por lista sobre el fichero JSON local.
# --------------------------------------------------------------
"""Operaciones CRUD de notas y alta de notas cifradas o en claro."""

from __future__ import annotations

import logging
import os
import threading
import uuid
from datetime import UTC, datetime
from typing import List, Optional

from notecrypt.codec import encrypt_note
from notecrypt.config import CryptoSettings, get_settings
from notecrypt.crypto_kdf import Password
from notecrypt.errors import InvalidInput
from notecrypt.models import Note
from notecrypt.record import MARKER, is_encrypted
from notecrypt.storage import load_db, save_db

logger = logging.getLogger(__name__)

NOTES_FILE = "notes.json"

# Un único lock por proceso: varias instancias pueden compartir fichero.
_LOCK = threading.Lock()


class NoteNotFound(KeyError):
    """No existe ninguna nota con ese identificador en la lista."""


class NoteStore:
    """Lista de notas identificada por ``namespace`` dentro del almacén.

    Args:
        namespace (str): Identificador de la lista (p. ej. el de la URL).
        path (Optional[str]): Fichero JSON; por defecto ``STORAGE_PATH/notes.json``.

    """

    def __init__(self, namespace: str, path: Optional[str] = None) -> None:
        if not namespace:
            raise InvalidInput("El identificador de la lista no puede estar vacío.")
        self.namespace = namespace
        self.path = path or os.path.join(get_settings().storage_path, NOTES_FILE)

    def _read(self) -> List[Note]:
        db = load_db(self.path)
        return [Note(**raw) for raw in db["namespaces"].get(self.namespace, [])]

    def _write(self, notes: List[Note]) -> None:
        db = load_db(self.path)
        db["namespaces"][self.namespace] = [note.model_dump() for note in notes]
        save_db(db, self.path)

    def list(self) -> List[Note]:
        """Devuelve las notas de la lista, la más reciente primero."""

        with _LOCK:
            notes = self._read()
        return sorted(notes, key=lambda note: note.created_at, reverse=True)

    def get(self, note_id: str) -> Note:
        with _LOCK:
            for note in self._read():
                if note.id == note_id:
                    return note
        raise NoteNotFound(note_id)

    def create(self, text: str) -> Note:
        """Guarda ``text`` tal cual; no interpreta ni cifra el contenido."""

        if not isinstance(text, str) or not text:
            raise InvalidInput("El texto de la nota no puede estar vacío.")
        note = Note(
            id=str(uuid.uuid4()),
            text=text,
            completed=False,
            created_at=datetime.now(UTC).isoformat(),
        )
        with _LOCK:
            notes = self._read()
            notes.append(note)
            self._write(notes)
        logger.info("Nota %s creada en %s", note.id, self.namespace)
        return note

    def delete(self, note_id: str) -> None:
        with _LOCK:
            notes = self._read()
            remaining = [note for note in notes if note.id != note_id]
            if len(remaining) == len(notes):
                raise NoteNotFound(note_id)
            self._write(remaining)
        logger.info("Nota %s eliminada de %s", note_id, self.namespace)

    def toggle(self, note_id: str) -> Note:
        """Invierte la marca ``completed`` de una nota y devuelve la nota nueva."""

        with _LOCK:
            notes = self._read()
            for index, note in enumerate(notes):
                if note.id == note_id:
                    updated = note.model_copy(update={"completed": not note.completed})
                    notes[index] = updated
                    self._write(notes)
                    return updated
        raise NoteNotFound(note_id)


def add_note(
    store: NoteStore,
    text: str,
    password: Optional[Password] = None,
    settings: Optional[CryptoSettings] = None,
) -> Note:
    """Añade una nota, cifrada si se proporciona contraseña.

    Args:
        store (NoteStore): Lista de destino.
        text (str): Contenido introducido por el usuario.
        password (Optional[Password]): Contraseña; vacía o ``None`` guarda en claro.
        settings (Optional[CryptoSettings]): Coste KDF para el registro.

    Returns:
        Note: Nota tal y como quedó almacenada.

    Raises:
        InvalidInput: Texto vacío, o texto en claro que empieza por el
            marcador de registro cifrado y sería confundido con uno.

    """
    if not text:
        raise InvalidInput("El texto de la nota no puede estar vacío.")
    if password:
        return store.create(encrypt_note(password, text, settings))
    if is_encrypted(text):
        raise InvalidInput(f"Una nota en claro no puede empezar por {MARKER!r}.")
    return store.create(text)
