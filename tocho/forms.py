"""Dialog and notification contracts plus the immutable drafts behind each form.

A draft is built fresh every time a dialog opens, either empty (create) or
from the entity being edited, and is never mutated afterwards; changes produce
a new draft through :func:`dataclasses.replace`.
"""
from __future__ import annotations

from dataclasses import dataclass, fields as dataclass_fields, replace
from datetime import date
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Tuple

from . import models, validation
from .errors import ValidationError
from .storage import parse_date

DIALOG_SIZES = ("sm", "md", "lg", "xl", "full")
NOTIFICATION_KINDS = ("success", "error", "info")
_TRUTHY = {"on", "1", "true", "yes", "si", "sí"}


@dataclass(frozen=True)
class Notification:
    kind: str
    message: str

    def __post_init__(self) -> None:
        if self.kind not in NOTIFICATION_KINDS:
            raise ValueError(f"Unknown notification kind {self.kind!r}")

    def to_dict(self) -> Dict[str, str]:
        return {"kind": self.kind, "message": self.message}


@dataclass(frozen=True)
class Dialog:
    title: str
    close_url: str
    size: str = "md"
    open: bool = True
    draft: Optional["FormDraft"] = None

    def __post_init__(self) -> None:
        if self.size not in DIALOG_SIZES:
            raise ValueError(f"Unknown dialog size {self.size!r}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "open": self.open,
            "title": self.title,
            "size": self.size,
            "close_url": self.close_url,
            "draft": self.draft.to_dict() if self.draft else None,
            "can_submit": self.draft.can_submit if self.draft else True,
            "problems": self.draft.problems() if self.draft else [],
        }


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _date(value: str, label: str) -> Optional[date]:
    try:
        return parse_date(value.strip() or None)
    except ValueError:
        raise ValidationError(f"{label} inválida.") from None


@dataclass(frozen=True)
class FormDraft:
    """Form values as typed by the user, bound to the entity being edited."""

    entity_id: Optional[str] = None

    create_title: ClassVar[str] = ""
    edit_title: ClassVar[str] = ""
    size: ClassVar[str] = "md"

    @property
    def is_edit(self) -> bool:
        return self.entity_id is not None

    @property
    def title(self) -> str:
        return self.edit_title if self.is_edit else self.create_title

    @classmethod
    def from_form(cls, form: Mapping[str, Any], entity_id: Optional[str] = None):
        values: Dict[str, Any] = {}
        for item in dataclass_fields(cls):
            if item.name == "entity_id":
                continue
            if isinstance(item.default, bool):
                values[item.name] = str(form.get(item.name, "")).strip().lower() in _TRUTHY
            elif isinstance(item.default, tuple):
                raw = str(form.get(item.name, ""))
                values[item.name] = tuple(line.strip() for line in raw.splitlines() if line.strip())
            elif item.name in form:
                values[item.name] = str(form.get(item.name) or "").strip()
        return cls(entity_id=entity_id or None, **values)

    def with_changes(self, **changes: Any):
        return replace(self, **changes)

    def to_fields(self) -> Dict[str, Any]:
        raise NotImplementedError

    def problems(self) -> List[str]:
        try:
            self.to_fields()
        except ValidationError as exc:
            return [str(exc)]
        return []

    @property
    def can_submit(self) -> bool:
        return not self.problems()

    def to_dict(self) -> Dict[str, Any]:
        return {item.name: getattr(self, item.name) for item in dataclass_fields(self)}

    def dialog(self, close_url: str) -> Dialog:
        return Dialog(title=self.title, close_url=close_url, size=self.size, draft=self)


@dataclass(frozen=True)
class SeasonDraft(FormDraft):
    name: str = ""
    start_date: str = ""
    end_date: str = ""
    status: str = "upcoming"
    description: str = ""

    create_title: ClassVar[str] = "Nueva temporada"
    edit_title: ClassVar[str] = "Editar temporada"

    @classmethod
    def from_entity(cls, season: models.Season) -> "SeasonDraft":
        return cls(
            entity_id=season.id,
            name=season.name,
            start_date=_text(season.start_date),
            end_date=_text(season.end_date),
            status=season.status,
            description=season.description,
        )

    def to_fields(self) -> Dict[str, Any]:
        start = _date(self.start_date, "Fecha de inicio")
        end = _date(self.end_date, "Fecha de fin")
        validation.date_range(start, end)
        return {
            "name": validation.required(self.name, "El nombre de la temporada es obligatorio."),
            "start_date": start,
            "end_date": end,
            "status": validation.choice(self.status, models.SEASON_STATUSES, "Estado de temporada"),
            "description": self.description,
        }


@dataclass(frozen=True)
class DivisionDraft(FormDraft):
    name: str = ""
    color: str = "#3b82f6"
    description: str = ""
    order: str = "0"

    create_title: ClassVar[str] = "Nueva división"
    edit_title: ClassVar[str] = "Editar división"
    size: ClassVar[str] = "sm"

    @classmethod
    def from_entity(cls, division: models.Division) -> "DivisionDraft":
        return cls(
            entity_id=division.id,
            name=division.name,
            color=division.color,
            description=division.description,
            order=_text(division.order),
        )

    def to_fields(self) -> Dict[str, Any]:
        try:
            order = int(self.order or 0)
        except ValueError:
            raise ValidationError("El orden debe ser un número entero.") from None
        return {
            "name": validation.required(self.name, "El nombre de la división es obligatorio."),
            "color": self.color,
            "description": self.description,
            "order": order,
        }


@dataclass(frozen=True)
class CategoryDraft(FormDraft):
    name: str = ""
    level: str = "1"
    team_limit: str = "10"
    player_limit: str = "15"
    price: str = "0"
    rules: Tuple[str, ...] = ()
    is_active: bool = True

    create_title: ClassVar[str] = "Nueva categoría"
    edit_title: ClassVar[str] = "Editar categoría"

    @classmethod
    def from_entity(cls, category: models.Category) -> "CategoryDraft":
        return cls(
            entity_id=category.id,
            name=category.name,
            level=_text(category.level),
            team_limit=_text(category.team_limit),
            player_limit=_text(category.player_limit),
            price=_text(category.price),
            rules=tuple(category.rules),
            is_active=category.is_active,
        )

    def to_fields(self) -> Dict[str, Any]:
        return {
            "name": validation.category_name(self.name),
            "level": validation.category_level(self.level),
            "team_limit": validation.whole_number(self.team_limit, "El límite de equipos"),
            "player_limit": validation.whole_number(self.player_limit, "El límite de jugadores"),
            "price": validation.non_negative(self.price, "El precio"),
            "rules": list(self.rules),
            "is_active": self.is_active,
        }


@dataclass(frozen=True)
class FieldDraft(FormDraft):
    code: str = ""
    name: str = ""
    type: str = "césped"
    capacity: str = "100"
    status: str = "available"
    priority: str = "1"
    zone: str = ""
    facilities: Tuple[str, ...] = ("iluminación",)
    address: str = ""
    city: str = ""
    notes: str = ""
    is_active: bool = True

    create_title: ClassVar[str] = "Nuevo campo"
    edit_title: ClassVar[str] = "Editar campo"
    size: ClassVar[str] = "lg"

    @classmethod
    def from_entity(cls, item: models.Field) -> "FieldDraft":
        return cls(
            entity_id=item.id,
            code=item.code,
            name=item.name,
            type=item.type,
            capacity=_text(item.capacity),
            status=item.status,
            priority=_text(item.priority),
            zone=item.zone,
            facilities=tuple(item.facilities),
            address=item.location.address,
            city=item.location.city,
            notes=item.notes,
            is_active=item.is_active,
        )

    def to_fields(self) -> Dict[str, Any]:
        values: Dict[str, Any] = {
            "code": validation.required(self.code, "El código del campo es obligatorio."),
            "name": validation.required(self.name, "El nombre del campo es obligatorio."),
            "type": validation.choice(self.type, models.FIELD_TYPES, "Tipo de campo"),
            "capacity": validation.whole_number(self.capacity, "La capacidad"),
            "status": validation.choice(self.status, models.FIELD_STATUSES, "Estado de campo"),
            "priority": validation.whole_number(self.priority, "La prioridad"),
            "facilities": list(self.facilities),
            "location": {"address": self.address, "city": self.city},
            "notes": self.notes,
            "is_active": self.is_active,
        }
        if self.zone:
            values["zone"] = validation.choice(self.zone, models.FIELD_ZONES, "Zona")
        return values


@dataclass(frozen=True)
class PlayerDraft(FormDraft):
    """Player form of the global directory (generic positions)."""

    name: str = ""
    last_name: str = ""
    number: str = ""
    position: str = "mediocampista"
    email: str = ""
    phone: str = ""
    date_of_birth: str = ""
    team_id: str = ""
    status: str = "pending"
    contact_name: str = ""
    contact_phone: str = ""
    contact_relationship: str = ""

    create_title: ClassVar[str] = "Nuevo jugador"
    edit_title: ClassVar[str] = "Editar jugador"
    size: ClassVar[str] = "lg"
    positions: ClassVar[Tuple[str, ...]] = models.GENERIC_POSITIONS

    @classmethod
    def from_entity(cls, player: models.Player):
        return cls(
            entity_id=player.id,
            name=player.name,
            last_name=player.last_name,
            number=_text(player.number),
            position=player.position,
            email=player.email,
            phone=player.phone,
            date_of_birth=_text(player.date_of_birth),
            team_id=player.team_id,
            status=player.status,
            contact_name=player.emergency_contact.name,
            contact_phone=player.emergency_contact.phone,
            contact_relationship=player.emergency_contact.relationship,
        )

    def to_fields(self) -> Dict[str, Any]:
        return {
            "name": validation.required(self.name, "El nombre del jugador es obligatorio."),
            "team_id": validation.required(self.team_id, "Seleccione un equipo para el jugador."),
            "last_name": self.last_name,
            "number": validation.jersey_number(self.number),
            "position": validation.choice(self.position, self.positions, "Posición"),
            "email": self.email,
            "phone": self.phone,
            "date_of_birth": _date(self.date_of_birth, "Fecha de nacimiento"),
            "emergency_contact": models.EmergencyContact(
                name=self.contact_name, phone=self.contact_phone, relationship=self.contact_relationship
            ),
            "status": validation.choice(self.status, models.PLAYER_STATUSES, "Estado de jugador"),
        }


@dataclass(frozen=True)
class RosterPlayerDraft(PlayerDraft):
    """Player form of the team roster (flag-football positions)."""

    position: str = "wide_receiver"

    positions: ClassVar[Tuple[str, ...]] = models.FLAG_FOOTBALL_POSITIONS


@dataclass(frozen=True)
class TeamDraft(FormDraft):
    name: str = ""
    short_name: str = ""
    primary_color: str = "#3b82f6"
    secondary_color: str = "#f3f4f6"
    coach_name: str = ""
    coach_phone: str = ""
    coach_email: str = ""
    notes: str = ""
    category_id: str = ""

    create_title: ClassVar[str] = "Nuevo equipo"
    edit_title: ClassVar[str] = "Editar equipo"
    size: ClassVar[str] = "lg"

    @classmethod
    def from_entity(cls, team: models.Team) -> "TeamDraft":
        return cls(
            entity_id=team.id,
            name=team.name,
            short_name=team.short_name,
            primary_color=team.primary_color,
            secondary_color=team.secondary_color,
            coach_name=team.coach.name,
            coach_phone=team.coach.phone,
            coach_email=team.coach.email,
            notes=team.notes,
            category_id=team.category_id,
        )

    def to_fields(self) -> Dict[str, Any]:
        values: Dict[str, Any] = {
            "name": validation.required(self.name, "El nombre del equipo es obligatorio."),
            "short_name": self.short_name,
            "primary_color": self.primary_color,
            "secondary_color": self.secondary_color,
            "coach": models.Coach(name=self.coach_name, phone=self.coach_phone, email=self.coach_email),
            "notes": self.notes,
        }
        if not self.is_edit:
            values["category_id"] = validation.required(
                self.category_id, "Seleccione una categoría para el equipo."
            )
        return values


@dataclass(frozen=True)
class PaymentDraft(FormDraft):
    amount: str = ""
    payment_date: str = ""
    method: str = "cash"
    reference: str = ""
    notes: str = ""
    status: str = "paid"
    invoice_number: str = ""

    create_title: ClassVar[str] = "Registrar pago"
    size: ClassVar[str] = "sm"

    def to_fields(self) -> Dict[str, Any]:
        return {
            "amount": validation.positive_amount(self.amount),
            "payment_date": _date(self.payment_date, "Fecha de pago"),
            "method": validation.choice(self.method, models.PAYMENT_METHODS, "Método de pago"),
            "reference": self.reference,
            "notes": self.notes,
            "status": validation.choice(self.status, models.PAYMENT_STATUSES, "Estado de pago"),
            "invoice_number": self.invoice_number,
        }


@dataclass(frozen=True)
class MatchDraft(FormDraft):
    """Manual match form; the score is recorded separately."""

    season_id: str = ""
    division_id: str = ""
    home_team_id: str = ""
    away_team_id: str = ""
    match_date: str = ""
    match_time: str = ""
    round: str = "1"
    field_id: str = ""
    referee_id: str = ""
    status: str = "scheduled"
    is_playoff: bool = False
    playoff_stage: str = ""
    notes: str = ""

    create_title: ClassVar[str] = "Crear nuevo partido"
    edit_title: ClassVar[str] = "Editar partido"
    size: ClassVar[str] = "lg"

    @classmethod
    def from_entity(cls, match: models.Match) -> "MatchDraft":
        return cls(
            entity_id=match.id,
            season_id=match.season_id,
            division_id=match.division_id,
            home_team_id=match.home_team_id,
            away_team_id=match.away_team_id,
            match_date=_text(match.match_date),
            match_time=match.match_time,
            round=_text(match.round),
            field_id=match.field_id,
            referee_id=match.referee_id,
            status=match.status,
            is_playoff=match.is_playoff,
            playoff_stage=match.playoff_stage or "",
            notes=match.notes,
        )

    def to_fields(self) -> Dict[str, Any]:
        message = "Por favor complete todos los campos requeridos."
        values: Dict[str, Any] = {
            "home_team_id": validation.required(self.home_team_id, message),
            "away_team_id": validation.required(self.away_team_id, message),
        }
        if not self.is_edit:
            values["season_id"] = validation.required(self.season_id, message)
            values["division_id"] = validation.required(self.division_id, message)
        if values["home_team_id"] == values["away_team_id"]:
            raise ValidationError("El equipo local y visitante no pueden ser el mismo.")
        match_date = _date(self.match_date, "Fecha del partido")
        if match_date is None or not self.match_time:
            raise ValidationError("Por favor ingrese fecha y hora del partido.")
        try:
            match_round = int(self.round or 1)
        except ValueError:
            raise ValidationError("La jornada debe ser un número entero.") from None
        if match_round < 1:
            raise ValidationError("La jornada debe ser mayor o igual a 1.")
        values.update(
            {
                "match_date": match_date,
                "match_time": self.match_time,
                "round": match_round,
                "field_id": self.field_id,
                "referee_id": self.referee_id,
                "status": validation.choice(self.status, models.MATCH_STATUSES, "Estado de partido"),
                "is_playoff": self.is_playoff,
                "playoff_stage": self.playoff_stage or None,
                "notes": self.notes,
            }
        )
        if self.playoff_stage:
            validation.choice(self.playoff_stage, models.PLAYOFF_STAGES, "Fase de eliminación")
        return values


@dataclass(frozen=True)
class RefereeDraft(FormDraft):
    name: str = ""
    email: str = ""
    phone: str = ""
    level: str = "beginner"
    specialization: str = "main"

    create_title: ClassVar[str] = "Nuevo árbitro"
    edit_title: ClassVar[str] = "Editar árbitro"

    @classmethod
    def from_entity(cls, referee: models.Referee) -> "RefereeDraft":
        return cls(
            entity_id=referee.id,
            name=referee.name,
            email=referee.email,
            phone=referee.phone,
            level=referee.level,
            specialization=referee.specialization,
        )

    def to_fields(self) -> Dict[str, Any]:
        return {
            "name": validation.required(self.name, "El nombre del árbitro es obligatorio."),
            "email": self.email,
            "phone": self.phone,
            "level": validation.choice(self.level, models.REFEREE_LEVELS, "Nivel de árbitro"),
            "specialization": validation.choice(
                self.specialization, models.REFEREE_SPECIALIZATIONS, "Especialización"
            ),
        }
