# --------------------------------------------------------------
# File: storage.py
# Description: Utilidades de persistencia para el almacén JSON de notas.
# --------------------------------------------------------------
"""Funciones auxiliares de entrada/salida para el almacenamiento local."""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict

__all__ = ["load_db", "save_db"]

logger = logging.getLogger(__name__)


def _default_db() -> Dict[str, Any]:
    return {"namespaces": {}}


def _ensure_parent_dir(path: str) -> None:
    """Garantiza que exista el directorio padre del archivo de destino."""

    parent = os.path.dirname(path) or "."
    os.makedirs(parent, exist_ok=True)


def load_db(path: str) -> Dict[str, Any]:
    """Carga el archivo JSON de notas.

    Args:
        path (str): Ruta del archivo JSON.

    Returns:
        Dict[str, Any]: Estructura cargada o la base vacía si aún no existe.

    Raises:
        json.JSONDecodeError: Si el archivo existe pero está corrupto; no se
            sustituye por una base vacía para no sobrescribir notas.

    """
    try:
        with open(path, "r", encoding="utf-8") as handler:
            db = json.load(handler)
    except FileNotFoundError:
        return _default_db()
    except json.JSONDecodeError:
        logger.error("Almacén de notas corrupto en %s", path)
        raise
    db.setdefault("namespaces", {})
    return db


def save_db(db: Dict[str, Any], path: str) -> None:
    """Guarda la base de datos JSON aplicando escritura atómica."""

    _ensure_parent_dir(path)
    tmp_path = f"{path}.tmp"
    with open(tmp_path, "w", encoding="utf-8") as handler:
        json.dump(db, handler, indent=2, ensure_ascii=False)
    os.replace(tmp_path, path)
