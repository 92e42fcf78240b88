# --------------------------------------------------------------
# File: batch.py
# Description: Desbloqueo en paralelo de varias notas con una contraseña.
# --------------------------------------------------------------
"""Operación "descifrar todas": cada nota se intenta por separado.

Un fallo en una nota (contraseña distinta o registro corrupto) se informa en
su `NoteView` y nunca interrumpe el resto del lote.
"""

from __future__ import annotations

import logging
from collections import Counter
from concurrent.futures import ThreadPoolExecutor, as_completed
from functools import partial
from typing import Iterable, Iterator, List, Optional

from notecrypt.codec import decrypt_note
from notecrypt.config import get_settings
from notecrypt.crypto_kdf import Password
from notecrypt.errors import CorruptRecord, DecryptionFailed, InvalidInput
from notecrypt.models import Note, NoteState, NoteView
from notecrypt.record import NoteTextKind, classify

logger = logging.getLogger(__name__)

DECRYPTION_FAILED = "decryption_failed"
CORRUPT_RECORD = "corrupt_record"


def unlock_note(password: Password, note: Note) -> NoteView:
    """Intenta descifrar una nota y devuelve su vista resultante.

    Args:
        password (Password): Contraseña a probar.
        note (Note): Nota almacenada; su texto no se modifica.

    Returns:
        NoteView: ``UNLOCKED`` con el texto en claro, ``LOCKED`` con el
        motivo del fallo, o ``PLAINTEXT`` si la nota no estaba cifrada.

    """
    kind = classify(note.text)
    if kind is NoteTextKind.PLAINTEXT:
        return NoteView(
            note_id=note.id,
            state=NoteState.PLAINTEXT,
            stored_text=note.text,
            plaintext=note.text,
        )
    try:
        plaintext = decrypt_note(password, note.text)
    except DecryptionFailed:
        error = DECRYPTION_FAILED
    except CorruptRecord:
        error = CORRUPT_RECORD
    else:
        return NoteView(
            note_id=note.id,
            state=NoteState.UNLOCKED,
            stored_text=note.text,
            plaintext=plaintext,
        )
    return NoteView(
        note_id=note.id, state=NoteState.LOCKED, stored_text=note.text, error=error
    )


def _workers(max_workers: Optional[int]) -> int:
    return max_workers or get_settings().max_workers


def _check_password(password: Password) -> None:
    if not password:
        raise InvalidInput("La contraseña no puede estar vacía.")


def _log_summary(views: Iterable[NoteView]) -> None:
    counts = Counter(view.state.value for view in views)
    logger.info(
        "Descifrado por lotes: %d desbloqueadas, %d bloqueadas, %d en claro",
        counts[NoteState.UNLOCKED.value],
        counts[NoteState.LOCKED.value],
        counts[NoteState.PLAINTEXT.value],
    )


def decrypt_all(
    password: Password, notes: Iterable[Note], max_workers: Optional[int] = None
) -> List[NoteView]:
    """Descifra todas las notas en paralelo conservando el orden de entrada."""

    _check_password(password)
    notes = list(notes)
    with ThreadPoolExecutor(
        max_workers=_workers(max_workers), thread_name_prefix="notecrypt"
    ) as executor:
        views = list(executor.map(partial(unlock_note, password), notes))
    _log_summary(views)
    return views


def iter_decrypt_all(
    password: Password, notes: Iterable[Note], max_workers: Optional[int] = None
) -> Iterator[NoteView]:
    """Produce las vistas a medida que terminan.

    Si el consumidor deja de iterar, las notas pendientes se cancelan; las
    vistas ya entregadas no se ven afectadas.
    """
    _check_password(password)
    executor = ThreadPoolExecutor(
        max_workers=_workers(max_workers), thread_name_prefix="notecrypt"
    )
    try:
        futures = [executor.submit(unlock_note, password, note) for note in notes]
        for future in as_completed(futures):
            yield future.result()
    finally:
        executor.shutdown(wait=False, cancel_futures=True)
