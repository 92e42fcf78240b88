# --------------------------------------------------------------
# File: conftest.py
# Description: Fixtures compartidas para aislar almacenamiento y configuración.
# --------------------------------------------------------------

from typing import Iterator

import pytest

from notecrypt.config import CryptoSettings, get_settings
from notecrypt.models import MIN_PBKDF2_ITERATIONS


@pytest.fixture(autouse=True)
def _isolate_storage(tmp_path, monkeypatch) -> Iterator[None]:
    """Aísla STORAGE_PATH y fija un coste KDF mínimo para cada prueba.

    Args:
        tmp_path (Path): Carpeta temporal proporcionada por pytest.
        monkeypatch (pytest.MonkeyPatch): Fixture para ajustar variables de entorno.

    Returns:
        Iterator[None]: Control del fixture autouse durante la ejecución de cada test.
    """
    data_dir = tmp_path / "_data"
    data_dir.mkdir()
    monkeypatch.setenv("STORAGE_PATH", str(data_dir))
    monkeypatch.setenv("NOTECRYPT_KDF", "pbkdf2-sha256")
    monkeypatch.setenv("NOTECRYPT_PBKDF2_ITERATIONS", str(MIN_PBKDF2_ITERATIONS))
    get_settings.cache_clear()

    yield

    get_settings.cache_clear()


@pytest.fixture
def fast_settings(tmp_path) -> CryptoSettings:
    """Configuración PBKDF2 con el mínimo de iteraciones permitido."""

    return CryptoSettings(
        pbkdf2_iterations=MIN_PBKDF2_ITERATIONS,
        storage_path=str(tmp_path / "_data"),
        max_workers=3,
    )


@pytest.fixture
def argon2_settings(tmp_path) -> CryptoSettings:
    """Configuración Argon2id con el coste mínimo aceptado."""

    return CryptoSettings(
        kdf="argon2id",
        argon2_time_cost=2,
        argon2_memory_cost=19 * 1024,
        argon2_parallelism=1,
        storage_path=str(tmp_path / "_data"),
    )
