"""Persistent storage helpers for the league document store."""
from __future__ import annotations

import json
import os
from dataclasses import fields as dataclass_fields, is_dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Optional, Type, TypeVar, Union, get_args, get_origin, get_type_hints
from uuid import uuid4

from .errors import GatewayError

DATA_FILE = Path(os.environ.get("TOCHO_DATA_FILE", "data/league.json"))
COLLECTIONS = (
    "seasons",
    "divisions",
    "categories",
    "fields",
    "players",
    "teams",
    "matches",
    "payments",
    "referees",
)
DEFAULT_STRUCTURE: Dict[str, Any] = {key: [] for key in COLLECTIONS}

T = TypeVar("T")


def ensure_storage(path: Optional[Path] = None) -> Path:
    """Create the storage file if it does not exist."""
    target = Path(path or DATA_FILE)
    try:
        if not target.parent.exists():
            target.parent.mkdir(parents=True, exist_ok=True)
        if not target.exists():
            target.write_text(json.dumps(DEFAULT_STRUCTURE, indent=2), encoding="utf-8")
    except OSError as exc:
        raise GatewayError(f"No se pudo preparar el almacenamiento en {target}") from exc
    return target


def load_data(path: Optional[Path] = None) -> Dict[str, Any]:
    target = ensure_storage(path)
    try:
        data = json.loads(target.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise GatewayError(f"No se pudo leer {target}") from exc
    for key in COLLECTIONS:
        data.setdefault(key, [])
    return data


def save_data(data: Dict[str, Any], path: Optional[Path] = None) -> None:
    target = ensure_storage(path)
    tmp = target.with_suffix(target.suffix + ".tmp")
    try:
        tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        tmp.replace(target)
    except OSError as exc:
        raise GatewayError(f"No se pudo escribir {target}") from exc


def new_id() -> str:
    """Return a fresh opaque document identifier."""
    return uuid4().hex


def parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    return date.fromisoformat(value)


def _unwrap_optional(annotation: Any) -> Any:
    if get_origin(annotation) is Union:
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def _coerce(annotation: Any, value: Any) -> Any:
    target = _unwrap_optional(annotation)
    if value is None:
        return None
    if is_dataclass(target) and isinstance(value, dict):
        return instantiate(target, value)
    if target is datetime and isinstance(value, str):
        return datetime.fromisoformat(value) if value else None
    if target is date and isinstance(value, str):
        return date.fromisoformat(value[:10]) if value else None
    return value


def instantiate(model_cls: Type[T], payload: Dict[str, Any]) -> T:
    """Create a dataclass instance from the stored payload.

    Unknown keys are ignored so documents written by newer versions still load.
    Nested dataclasses and ISO dates are rebuilt from their JSON form.
    """

    type_hints = get_type_hints(model_cls)
    kwargs: Dict[str, Any] = {}
    for item in dataclass_fields(model_cls):  # type: ignore[arg-type]
        if item.name not in payload:
            continue
        kwargs[item.name] = _coerce(type_hints.get(item.name), payload[item.name])
    return model_cls(**kwargs)  # type: ignore[call-arg]
