# --------------------------------------------------------------
# File: Home.py
# Description: Define la página principal de Streamlit y la lista activa.
# --------------------------------------------------------------

import streamlit as st

from notecrypt.logger import configure_logging

configure_logging(to_file=True)

# Configura los metadatos de la página principal de la aplicación.
st.set_page_config(page_title="Notas cifradas", page_icon="🔐", layout="centered")

st.title("🔐 Notas cifradas")
st.write(
    "Notas personales que pueden protegerse con una contraseña. El cifrado "
    "(PBKDF2/Argon2id + AES-256-GCM) ocurre antes de guardar; la contraseña "
    "nunca se almacena."
)

list_id = st.text_input(
    "Identificador de la lista",
    value=st.session_state.get("list_id", "personal"),
    help="Cada identificador es una lista de notas independiente.",
)
if list_id:
    st.session_state["list_id"] = list_id.strip()
    st.info("Abre **Notas** en la barra lateral para trabajar con esta lista.")
