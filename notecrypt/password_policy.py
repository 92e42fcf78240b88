# --------------------------------------------------------------
# File: password_policy.py
# Description: Consejos de robustez para las contraseñas de notas.
# --------------------------------------------------------------
"""Evaluación orientativa de contraseñas antes de cifrar una nota.

El resultado es solo un aviso para la interfaz: nunca bloquea el cifrado.
"""

from __future__ import annotations

import re
from typing import List

from pydantic import BaseModel, Field

COMMON = frozenset(
    {
        "123456",
        "123456789",
        "12345678",
        "qwerty",
        "password",
        "111111",
        "123123",
        "abc123",
        "letmein",
        "iloveyou",
        "admin",
        "welcome",
        "monkey",
        "dragon",
        "hunter2",
        "qwertyuiop",
        "passw0rd",
        "contraseña",
    }
)

MIN_LENGTH = 12

_CLASSES = (
    re.compile(r"[a-z]"),
    re.compile(r"[A-Z]"),
    re.compile(r"\d"),
    re.compile(r"[^\w\s]"),
)


class PassphraseReport(BaseModel):
    """Resultado de la evaluación.

    Attributes:
        strong (bool): ``True`` si no hay ninguna advertencia.
        warnings (List[str]): Motivos legibles para mostrar al usuario.
        score (int): Puntuación entre 0 y 100.

    """

    strong: bool
    warnings: List[str] = Field(default_factory=list)
    score: int = Field(ge=0, le=100)


def class_count(passphrase: str) -> int:
    """Cuenta los grupos de caracteres presentes en la contraseña."""

    return sum(1 for pattern in _CLASSES if pattern.search(passphrase))


def has_long_repetition(passphrase: str, max_run: int = 3) -> bool:
    return re.search(rf"(.)\1{{{max_run},}}", passphrase) is not None


def assess_passphrase(passphrase: str) -> PassphraseReport:
    """Evalúa una contraseña de nota y devuelve advertencias y puntuación.

    Las frases largas con espacios se aceptan: la longitud pesa más que la
    variedad de caracteres.

    Args:
        passphrase (str): Contraseña propuesta por el usuario.

    Returns:
        PassphraseReport: Advertencias y puntuación entre 0 y 100.

    """
    warnings: List[str] = []
    score = 0

    length = len(passphrase)
    if length < MIN_LENGTH:
        warnings.append(f"Usa al menos {MIN_LENGTH} caracteres.")
    score += min(50, length * 3)

    classes = class_count(passphrase)
    if classes < 3 and length < 20:
        warnings.append("Combina minúsculas, mayúsculas, dígitos y símbolos, o usa una frase más larga.")
    score += classes * 7

    if passphrase.lower() in COMMON:
        warnings.append("Contraseña demasiado común.")
        score = min(score, 10)

    if has_long_repetition(passphrase):
        warnings.append("Evita repeticiones largas del mismo carácter.")
        score -= 15

    score = max(0, min(100, score))
    return PassphraseReport(strong=not warnings, warnings=warnings, score=score)
