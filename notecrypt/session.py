# --------------------------------------------------------------
# File: session.py
# Description: Estado en memoria de las notas desbloqueadas de una lista.
# --------------------------------------------------------------
"""Sesión de desbloqueo: LOCKED -> VERIFYING -> UNLOCKED (o de vuelta a LOCKED).

El estado desbloqueado vive solo en memoria; nada de lo que hace esta clase
se escribe en el almacenamiento.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Iterable, List, Optional

from notecrypt.batch import CORRUPT_RECORD, DECRYPTION_FAILED, decrypt_all
from notecrypt.codec import decrypt_note
from notecrypt.crypto_kdf import Password
from notecrypt.errors import CorruptRecord, DecryptionFailed
from notecrypt.models import Note, NoteState, NoteView
from notecrypt.record import is_encrypted

logger = logging.getLogger(__name__)


def _initial_view(note: Note) -> NoteView:
    if is_encrypted(note.text):
        return NoteView(note_id=note.id, state=NoteState.LOCKED, stored_text=note.text)
    return NoteView(
        note_id=note.id,
        state=NoteState.PLAINTEXT,
        stored_text=note.text,
        plaintext=note.text,
    )


class NoteSession:
    """Vista en memoria de una lista de notas durante una sesión.

    Args:
        notes (Iterable[Note]): Notas tal y como las devuelve el almacén.

    """

    def __init__(self, notes: Iterable[Note]) -> None:
        self._lock = threading.Lock()
        self._notes: Dict[str, Note] = {note.id: note for note in notes}
        self._views: Dict[str, NoteView] = {
            note_id: _initial_view(note) for note_id, note in self._notes.items()
        }

    def views(self) -> List[NoteView]:
        with self._lock:
            return list(self._views.values())

    def note(self, note_id: str) -> Note:
        """Nota almacenada tal y como se cargó en la sesión."""

        with self._lock:
            return self._notes[note_id]

    def replace_note(self, note: Note) -> None:
        """Actualiza metadatos (p. ej. ``completed``) sin perder el desbloqueo.

        Raises:
            KeyError: Si la nota no pertenece a la sesión.
            ValueError: Si el texto almacenado cambió; los registros son inmutables.

        """
        with self._lock:
            if self._notes[note.id].text != note.text:
                raise ValueError("El texto de una nota no cambia dentro de la sesión.")
            self._notes[note.id] = note

    def view(self, note_id: str) -> NoteView:
        with self._lock:
            return self._views[note_id]

    def state(self, note_id: str) -> NoteState:
        return self.view(note_id).state

    def _set(self, view: NoteView) -> None:
        with self._lock:
            self._views[view.note_id] = view

    def _mark_verifying(self, note_ids: Iterable[str]) -> None:
        with self._lock:
            for note_id in note_ids:
                current = self._views[note_id]
                self._views[note_id] = current.model_copy(
                    update={"state": NoteState.VERIFYING, "error": None}
                )

    def unlock(self, note_id: str, password: Password) -> NoteView:
        """Desbloquea una nota concreta.

        Raises:
            KeyError: Si la nota no pertenece a la sesión.
            DecryptionFailed: Contraseña incorrecta; la nota vuelve a LOCKED.
            CorruptRecord: Registro ilegible; la nota vuelve a LOCKED.

        """
        note = self._notes[note_id]
        if self.state(note_id) in (NoteState.PLAINTEXT, NoteState.UNLOCKED):
            return self.view(note_id)

        self._mark_verifying([note_id])
        try:
            plaintext = decrypt_note(password, note.text)
        except (DecryptionFailed, CorruptRecord) as exc:
            error = DECRYPTION_FAILED if isinstance(exc, DecryptionFailed) else CORRUPT_RECORD
            self._set(
                NoteView(
                    note_id=note_id,
                    state=NoteState.LOCKED,
                    stored_text=note.text,
                    error=error,
                )
            )
            raise
        view = NoteView(
            note_id=note_id,
            state=NoteState.UNLOCKED,
            stored_text=note.text,
            plaintext=plaintext,
        )
        self._set(view)
        return view

    def unlock_all(
        self, password: Password, max_workers: Optional[int] = None
    ) -> List[NoteView]:
        """Intenta desbloquear todas las notas aún bloqueadas con ``password``.

        Las notas ya desbloqueadas con otra contraseña se conservan, de modo
        que una lista con varias contraseñas se abre en varias pasadas.

        Returns:
            List[NoteView]: Vistas de todas las notas tras el intento.

        """
        pending = [
            self._notes[view.note_id]
            for view in self.views()
            if view.state is NoteState.LOCKED
        ]
        self._mark_verifying(note.id for note in pending)
        try:
            results = decrypt_all(password, pending, max_workers=max_workers)
        except BaseException:
            self._rollback_verifying()
            raise
        for result in results:
            self._set(result)
        return self.views()

    def _rollback_verifying(self) -> None:
        with self._lock:
            for note_id, view in self._views.items():
                if view.state is NoteState.VERIFYING:
                    self._views[note_id] = view.model_copy(update={"state": NoteState.LOCKED})

    def reset(self) -> None:
        """Olvida todos los textos descifrados ("volver al original")."""

        with self._lock:
            self._views = {
                note_id: _initial_view(note) for note_id, note in self._notes.items()
            }
        logger.debug("Sesión reiniciada: %d notas bloqueadas de nuevo", len(self._notes))
