# --------------------------------------------------------------
# File: logger.py
# Description: Configuración del registro de eventos de la aplicación.
# --------------------------------------------------------------
"""Configura el logger ``notecrypt``.

Nunca se registran contraseñas, claves ni texto de notas: solo algoritmos,
parámetros de coste, identificadores y recuentos.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from notecrypt.config import CryptoSettings, get_settings

_LOG_FILE_NAME = "notecrypt.log"


def configure_logging(
    settings: Optional[CryptoSettings] = None, *, to_file: bool = False
) -> logging.Logger:
    """Instala los manejadores del logger raíz del paquete una sola vez.

    Args:
        settings (Optional[CryptoSettings]): Configuración con nivel y ruta.
        to_file (bool): Añade un fichero rotatorio dentro de ``storage_path``.

    Returns:
        logging.Logger: Logger ``notecrypt`` configurado.

    """
    logger = logging.getLogger("notecrypt")
    if logger.handlers:
        return logger

    settings = settings or get_settings()
    logger.setLevel(settings.log_level.upper())

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if to_file:
        os.makedirs(settings.storage_path, exist_ok=True)
        handler = RotatingFileHandler(
            os.path.join(settings.storage_path, _LOG_FILE_NAME),
            maxBytes=1_048_576,
            backupCount=5,
            encoding="utf-8",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.info("Logger inicializado; registros en %s", handler.baseFilename)

    return logger
