"""Preset data: the default divisions, the category ladder and the 16-field venue catalog."""
from __future__ import annotations

import re
from typing import Dict, List, Optional

from . import models

DEFAULT_TEAM_LIMIT = 10
DEFAULT_PLAYER_LIMIT = 15

# (name, level, registration price per team)
DEFAULT_CATEGORY_SET = (
    ("A", 1, 2500.0),
    ("B", 2, 2200.0),
    ("C", 3, 2000.0),
    ("D", 4, 1800.0),
    ("E", 5, 1600.0),
    ("F", 6, 1400.0),
    ("G", 7, 1200.0),
)

# (name, color, description) in display order
DEFAULT_DIVISION_SET = (
    ("Varonil", "#3b82f6", "División exclusiva para equipos masculinos"),
    ("Femenil", "#ec4899", "División exclusiva para equipos femeninos"),
    ("Mixto", "#8b5cf6", "División para equipos mixtos"),
)

FIELD_CATALOG_SIZE = 16

_ZONE_BY_NUMBER = {
    7: "top_row",
    8: "top_row",
    9: "top_row",
    1: "bottom_row",
    2: "bottom_row",
    3: "bottom_row",
    4: "left_side",
    5: "left_side",
    6: "left_side",
    10: "right_side",
    11: "right_side",
    12: "right_side",
    13: "right_side",
}

_CODE_NUMBER = re.compile(r"(\d+)")


def zone_for_code(code: Optional[str]) -> str:
    """Map a field code such as ``"CAMPO 9"`` to its zone on the venue map."""
    if not code:
        return "center"
    found = _CODE_NUMBER.search(code)
    if found is None:
        return "center"
    return _ZONE_BY_NUMBER.get(int(found.group(1)), "center")


def facilities_for_index(index: int) -> List[str]:
    facilities = ["iluminación"]
    if index % 3 == 0:
        facilities.append("vestuarios")
    if index % 4 == 0:
        facilities.append("gradas")
    if index % 5 == 0:
        facilities.append("baños")
    if index % 2 == 0:
        facilities.append("estacionamiento")
    return facilities


def field_catalog() -> List[Dict]:
    """Return the preset venue as field payloads without identifiers."""
    catalog: List[Dict] = []
    for index in range(FIELD_CATALOG_SIZE):
        number = index + 1
        code = f"CAMPO {number}"
        catalog.append(
            {
                "code": code,
                "name": f"Campo Deportivo {number}",
                "type": "sintético" if index % 2 == 0 else "césped",
                "capacity": 100 + index * 10,
                "status": "available",
                "priority": index // 2 + 1,
                "zone": zone_for_code(code),
                "facilities": facilities_for_index(index),
                "location": {
                    "address": f"Calle Deportes {number}, Col. Deportiva",
                    "city": "Ciudad Deportiva",
                },
                "notes": "",
                "is_active": True,
            }
        )
    return catalog


def fallback_fields() -> List[models.Field]:
    """Catalog shown when the store holds no fields; never persisted."""
    result = []
    for number, payload in enumerate(field_catalog(), start=1):
        location = models.Location(**payload.pop("location"))
        result.append(models.Field(id=f"fallback-{number}", location=location, **payload))
    return result
