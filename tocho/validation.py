"""Pre-submission checks shared by the services and the form drafts."""
from __future__ import annotations

import math
from datetime import date
from typing import Any, Iterable, Optional

from .errors import ValidationError

MIN_CATEGORY_LEVEL = 1
MAX_CATEGORY_LEVEL = 10
MIN_JERSEY_NUMBER = 1
MAX_JERSEY_NUMBER = 99


def required(value: Optional[str], message: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(message)
    return text


def category_name(name: Optional[str]) -> str:
    """Category names are a single letter, stored in upper case."""
    text = (name or "").strip()
    if len(text) != 1:
        raise ValidationError("El nombre de la categoría debe tener exactamente un carácter.")
    return text.upper()


def category_level(level: Any) -> int:
    try:
        value = int(level)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError("El nivel de la categoría debe ser un número entero.") from None
    if not MIN_CATEGORY_LEVEL <= value <= MAX_CATEGORY_LEVEL:
        raise ValidationError(
            f"El nivel debe estar entre {MIN_CATEGORY_LEVEL} y {MAX_CATEGORY_LEVEL}."
        )
    return value


def non_negative(value: Any, label: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{label} debe ser un número.") from None
    if not math.isfinite(number):
        raise ValidationError(f"{label} debe ser un número finito.")
    if number < 0:
        raise ValidationError(f"{label} no puede ser negativo.")
    return number


def whole_number(value: Any, label: str) -> int:
    """Non-negative count such as a score, a limit or a capacity."""
    return int(non_negative(value, label))


def positive_amount(amount: Any) -> float:
    value = non_negative(amount, "El monto")
    if value <= 0:
        raise ValidationError("El monto del pago debe ser mayor que cero.")
    return round(value, 2)


def jersey_number(number: Any) -> Optional[int]:
    if number in (None, ""):
        return None
    try:
        value = int(number)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError("El número de camiseta debe ser un entero.") from None
    if not MIN_JERSEY_NUMBER <= value <= MAX_JERSEY_NUMBER:
        raise ValidationError(
            f"El número de camiseta debe estar entre {MIN_JERSEY_NUMBER} y {MAX_JERSEY_NUMBER}."
        )
    return value


def choice(value: Optional[str], options: Iterable[str], label: str) -> str:
    allowed = tuple(options)
    if value not in allowed:
        raise ValidationError(f"{label} inválido: {value!r}. Opciones: {', '.join(allowed)}.")
    return value  # type: ignore[return-value]


def date_range(start: Optional[date], end: Optional[date]) -> None:
    if start and end and end < start:
        raise ValidationError("La fecha de fin debe ser posterior a la fecha de inicio.")
