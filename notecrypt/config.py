import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from notecrypt.errors import InvalidInput
from notecrypt.models import (
    ARGON2ID,
    MIN_PBKDF2_ITERATIONS,
    PBKDF2_SHA256,
    KdfParams,
)

load_dotenv()


class CryptoSettings(BaseModel):
    """Parámetros de coste y rutas leídos del entorno."""

    kdf: str = PBKDF2_SHA256
    pbkdf2_iterations: int = Field(default=600_000, ge=MIN_PBKDF2_ITERATIONS)
    argon2_time_cost: int = 3
    argon2_memory_cost: int = 64 * 1024
    argon2_parallelism: int = 1
    max_workers: int = Field(default=4, ge=1, le=64)
    storage_path: str = "./_data"
    log_level: str = "INFO"

    def kdf_params(self) -> KdfParams:
        """Construye los parámetros que se escribirán en los registros nuevos."""

        try:
            if self.kdf == PBKDF2_SHA256:
                return KdfParams.pbkdf2(self.pbkdf2_iterations)
            if self.kdf == ARGON2ID:
                return KdfParams.argon2id(
                    self.argon2_time_cost,
                    self.argon2_memory_cost,
                    self.argon2_parallelism,
                )
        except ValidationError as exc:
            raise InvalidInput(f"Parámetros KDF no válidos: {exc}") from exc
        raise InvalidInput(f"KDF desconocida: {self.kdf!r}")


def load_settings() -> CryptoSettings:
    """Lee la configuración actual del entorno (y de `.env`)."""

    env = {
        "kdf": os.getenv("NOTECRYPT_KDF"),
        "pbkdf2_iterations": os.getenv("NOTECRYPT_PBKDF2_ITERATIONS"),
        "argon2_time_cost": os.getenv("NOTECRYPT_ARGON2_TIME_COST"),
        "argon2_memory_cost": os.getenv("NOTECRYPT_ARGON2_MEMORY_COST"),
        "argon2_parallelism": os.getenv("NOTECRYPT_ARGON2_PARALLELISM"),
        "max_workers": os.getenv("NOTECRYPT_MAX_WORKERS"),
        "storage_path": os.getenv("STORAGE_PATH"),
        "log_level": os.getenv("NOTECRYPT_LOG_LEVEL"),
    }
    try:
        settings = CryptoSettings(**{k: v for k, v in env.items() if v is not None})
    except ValidationError as exc:
        raise InvalidInput(f"Configuración no válida: {exc}") from exc
    # Falla al arrancar, no al cifrar la primera nota.
    settings.kdf_params()
    return settings


@lru_cache(maxsize=1)
def get_settings() -> CryptoSettings:
    return load_settings()
