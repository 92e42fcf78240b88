# --------------------------------------------------------------
# File: 1_Notas.py
# Description: Alta, listado, descifrado y borrado de notas en Streamlit.
# --------------------------------------------------------------

import streamlit as st

from notecrypt.errors import InvalidInput
from notecrypt.models import NoteState
from notecrypt.notes import NoteNotFound, NoteStore, add_note
from notecrypt.password_policy import assess_passphrase
from notecrypt.session import NoteSession

st.title("📝 Notas")

list_id = st.session_state.get("list_id")
if not list_id:
    st.warning("Elige primero una lista en **Home**.")
    st.stop()

store = NoteStore(list_id)


def _refresh_session() -> NoteSession:
    """Reconstruye la sesión en memoria a partir del almacén."""

    session = NoteSession(store.list())
    st.session_state["note_session"] = session
    st.session_state["note_session_list"] = list_id
    return session


session = st.session_state.get("note_session")
if session is None or st.session_state.get("note_session_list") != list_id:
    session = _refresh_session()

# Campo de contraseña para cifrar; vacío guarda la nota en claro.
encrypt_key = st.text_input(
    "Contraseña de cifrado (opcional, vacía para texto plano)",
    type="password",
    key="encrypt_key",
)
st.caption("La contraseña no se guarda. Las notas se cifran antes de almacenarse.")
if encrypt_key:
    report = assess_passphrase(encrypt_key)
    st.progress(report.score / 100.0, text=f"Fortaleza estimada: {report.score}/100")
    if not report.strong:
        st.warning("Sugerencias:\n- " + "\n- ".join(report.warnings))

with st.form("new_note", clear_on_submit=True):
    text = st.text_area("Nueva nota", height=120)
    label = "Cifrar y añadir nota" if encrypt_key else "Añadir nota (texto plano)"
    if st.form_submit_button(label):
        try:
            with st.spinner("Guardando..."):
                add_note(store, text, password=encrypt_key or None)
        except InvalidInput as exc:
            st.error(str(exc))
        else:
            session = _refresh_session()
            st.success("Nota guardada.")

# Sección de descifrado de todas las notas con una misma contraseña.
with st.expander("Descifrar todas las notas"):
    decrypt_key = st.text_input("Contraseña de descifrado", type="password", key="decrypt_key")
    col_dec, col_reset = st.columns(2)
    with col_dec:
        if st.button("Descifrar todas", disabled=not decrypt_key):
            with st.spinner("Derivando claves..."):
                views = session.unlock_all(decrypt_key)
            failed = sum(1 for view in views if view.error == "decryption_failed")
            corrupt = sum(1 for view in views if view.error == "corrupt_record")
            if failed:
                st.warning(f"{failed} nota(s) no se abrieron con esta contraseña.")
            if corrupt:
                st.error(f"{corrupt} nota(s) no se pudieron leer.")
    with col_reset:
        if st.button("Volver al original"):
            session.reset()

st.divider()

views = session.views()
if not views:
    st.info("No hay notas en esta lista.")

for view in views:
    note = session.note(view.note_id)
    with st.container(border=True):
        st.text(view.display_text)
        badges = {
            NoteState.UNLOCKED: "🔓 Descifrada",
            NoteState.LOCKED: "🔒 Bloqueada",
            NoteState.VERIFYING: "⏳ Verificando",
            NoteState.PLAINTEXT: "",
        }
        if badges[view.state]:
            st.caption(badges[view.state])
        if view.error == "decryption_failed":
            st.caption("Contraseña incorrecta, inténtalo de nuevo.")
        elif view.error == "corrupt_record":
            st.caption("Esta nota no se pudo leer.")

        col_done, col_del = st.columns(2)
        with col_done:
            if st.checkbox("Completada", value=note.completed, key=f"done_{note.id}") != note.completed:
                try:
                    session.replace_note(store.toggle(note.id))
                except NoteNotFound:
                    # Borrada desde otra sesión del navegador.
                    _refresh_session()
                    st.rerun()
        with col_del:
            if st.button("Eliminar", key=f"del_{note.id}"):
                try:
                    store.delete(note.id)
                except NoteNotFound as exc:
                    st.error(f"No se pudo eliminar: {exc}")
                _refresh_session()
                st.rerun()
