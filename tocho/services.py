"""Screen controllers for the league console.

Each controller owns the list it shows, loads it from the gateway and loads it
again after every successful mutation. A failed call raises before the reload,
so the list on screen stays as it was.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from . import catalog, derived, models, scheduling, validation
from .errors import ValidationError
from .gateway import LeagueGateway

log = logging.getLogger(__name__)

NO_FILTER = (None, "", "all")

MATCH_STATUS_LABELS = {
    "scheduled": "Programado",
    "in_progress": "En curso",
    "completed": "Finalizado",
    "postponed": "Suspendido",
    "cancelled": "Cancelado",
}
# Values used by the status drop-down on the match board.
MATCH_STATUS_FILTER_VALUES = {
    "scheduled": "programado",
    "in_progress": "en_curso",
    "completed": "finalizado",
    "cancelled": "cancelado",
    "postponed": "suspendido",
}

RECENT_MATCHES_SHOWN = 5
TEAM_EDITABLE_FIELDS = {"name", "short_name", "primary_color", "secondary_color", "coach", "notes"}


def _is_unset(value: Any) -> bool:
    return value in NO_FILTER


def _contains(term: str, *values: Optional[str]) -> bool:
    return any(term in (value or "").lower() for value in values)


def _now() -> datetime:
    return datetime.now().replace(microsecond=0)


# Seasons, divisions and team registration ---------------------------
class LeagueStructure:
    """Upper levels of the hierarchy: seasons, divisions and team registration.

    Deleting a parent that still has children is refused.
    """

    def __init__(self, gateway: LeagueGateway) -> None:
        self.gateway = gateway

    def list_seasons(self) -> List[models.Season]:
        seasons = self.gateway.get_seasons()
        return sorted(seasons, key=lambda season: (season.start_date or date.min), reverse=True)

    def create_season(
        self,
        name: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: str = "upcoming",
        description: str = "",
    ) -> models.Season:
        name = validation.required(name, "El nombre de la temporada es obligatorio.")
        validation.date_range(start_date, end_date)
        validation.choice(status, models.SEASON_STATUSES, "Estado de temporada")
        return self.gateway.create_season(
            models.Season(
                id="",
                name=name,
                start_date=start_date,
                end_date=end_date,
                status=status,
                description=description,
            )
        )

    def update_season(self, season_id: str, **fields: Any) -> models.Season:
        current = self.gateway.get_season_by_id(season_id)
        if "name" in fields:
            fields["name"] = validation.required(fields["name"], "El nombre de la temporada es obligatorio.")
        if "status" in fields:
            validation.choice(fields["status"], models.SEASON_STATUSES, "Estado de temporada")
        validation.date_range(
            fields.get("start_date", current.start_date), fields.get("end_date", current.end_date)
        )
        return self.gateway.update_season(season_id, fields)

    def delete_season(self, season_id: str) -> None:
        if self.gateway.get_divisions_by_season(season_id):
            raise ValidationError("No se puede eliminar una temporada que tiene divisiones.")
        self.gateway.delete_season(season_id)

    def archive_season(self, season_id: str) -> models.Season:
        return self.gateway.update_season(season_id, {"status": "archived", "is_active": False})

    def unarchive_season(self, season_id: str) -> models.Season:
        """An archived season comes back as completed, never as active."""
        return self.gateway.update_season(season_id, {"status": "completed"})

    def duplicate_season(self, season_id: str, name: Optional[str] = None) -> models.Season:
        source = self.gateway.get_season_by_id(season_id)
        if name is None:
            name = f"{source.name} - Copia"
        name = validation.required(name, "El nombre de la temporada es obligatorio.")
        return self.gateway.duplicate_season(season_id, name)

    def list_divisions(self, season_id: str) -> List[models.Division]:
        return self.gateway.get_divisions_by_season(season_id)

    def create_division(
        self, season_id: str, name: str, color: str = "#3b82f6", description: str = "", order: int = 0
    ) -> models.Division:
        name = validation.required(name, "El nombre de la división es obligatorio.")
        return self.gateway.create_division(
            models.Division(
                id="", season_id=season_id, name=name, color=color, description=description, order=order
            )
        )

    def update_division(self, division_id: str, **fields: Any) -> models.Division:
        if "name" in fields:
            fields["name"] = validation.required(fields["name"], "El nombre de la división es obligatorio.")
        fields.pop("season_id", None)
        return self.gateway.update_division(division_id, fields)

    def delete_division(self, division_id: str) -> None:
        if self.gateway.get_categories_by_division(division_id):
            raise ValidationError("No se puede eliminar una división que tiene categorías.")
        self.gateway.delete_division(division_id)

    def can_create_default_divisions(self, season_id: str) -> bool:
        return not self.list_divisions(season_id)

    def create_default_divisions(self, season_id: str) -> List[models.Division]:
        """Create Varonil, Femenil and Mixto for a season that has no divisions yet."""
        self.gateway.get_season_by_id(season_id)
        if not self.can_create_default_divisions(season_id):
            raise ValidationError("La temporada ya tiene divisiones.")
        return self.gateway.create_default_divisions(season_id)

    def list_teams(
        self,
        category_id: Optional[str] = None,
        status: Optional[str] = None,
        payment_status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[models.Team]:
        if category_id:
            teams = self.gateway.get_teams_by_category(category_id)
        else:
            teams = self.gateway.get_all_teams()
        term = (search or "").strip().lower()
        teams = [
            team
            for team in teams
            if (not term or _contains(term, team.name, team.coach.name))
            and (_is_unset(status) or team.status == status)
            and (_is_unset(payment_status) or team.payment_status == payment_status)
        ]
        return sorted(teams, key=lambda team: team.name.lower())

    def update_team_status(self, team_id: str, status: str) -> models.Team:
        validation.choice(status, models.TEAM_STATUSES, "Estado de equipo")
        return self.gateway.update_team_status(team_id, status)

    def set_payment_status(self, team_id: str, payment_status: str) -> models.Team:
        """Set the payment status by hand; the next recorded payment derives it again."""
        validation.choice(payment_status, models.TEAM_PAYMENT_STATUSES, "Estado de pago del equipo")
        return self.gateway.update_payment_status(team_id, payment_status)

    def create_team(
        self,
        name: str,
        category_id: str,
        short_name: str = "",
        primary_color: str = "#3b82f6",
        secondary_color: str = "#f3f4f6",
        coach: Optional[models.Coach] = None,
        notes: str = "",
    ) -> models.Team:
        name = validation.required(name, "El nombre del equipo es obligatorio.")
        category_id = validation.required(category_id, "Seleccione una categoría para el equipo.")
        category = self.gateway.get_category_by_id(category_id)
        division = self.gateway.get_division_by_id(category.division_id)
        return self.gateway.create_team(
            models.Team(
                id="",
                name=name,
                category_id=category.id,
                season_id=category.season_id,
                division_id=division.id,
                short_name=short_name,
                primary_color=primary_color,
                secondary_color=secondary_color,
                coach=coach or models.Coach(),
                notes=notes,
                registration_date=_now(),
            )
        )

    def delete_team(self, team_id: str) -> None:
        if self.gateway.get_players_by_team(team_id):
            raise ValidationError("No se puede eliminar un equipo con jugadores registrados.")
        if self.gateway.get_payments_by_team(team_id):
            raise ValidationError("No se puede eliminar un equipo con pagos registrados.")
        if self.gateway.get_matches_by_team(team_id):
            raise ValidationError("No se puede eliminar un equipo con partidos programados.")
        self.gateway.delete_team(team_id)

    def list_referees(self, season_id: Optional[str] = None) -> List[models.Referee]:
        return self.gateway.get_referees(season_id)

    def _check_referee(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        if "name" in fields:
            fields["name"] = validation.required(fields["name"], "El nombre del árbitro es obligatorio.")
        if "level" in fields:
            validation.choice(fields["level"], models.REFEREE_LEVELS, "Nivel de árbitro")
        if "specialization" in fields:
            validation.choice(fields["specialization"], models.REFEREE_SPECIALIZATIONS, "Especialización")
        return fields

    def create_referee(
        self,
        season_id: str,
        name: str,
        email: str = "",
        phone: str = "",
        level: str = "beginner",
        specialization: str = "main",
    ) -> models.Referee:
        fields = self._check_referee(
            {"name": name, "email": email, "phone": phone, "level": level, "specialization": specialization}
        )
        self.gateway.get_season_by_id(season_id)
        return self.gateway.create_referee(models.Referee(id="", season_id=season_id, **fields))

    def update_referee(self, referee_id: str, **fields: Any) -> models.Referee:
        fields.pop("season_id", None)
        fields.pop("matches_assigned", None)
        return self.gateway.update_referee(referee_id, self._check_referee(fields))

    def delete_referee(self, referee_id: str) -> None:
        self.gateway.delete_referee(referee_id)


# Categories ---------------------------------------------------------
class CategoryManager:
    def __init__(self, gateway: LeagueGateway) -> None:
        self.gateway = gateway
        self.categories: List[models.Category] = []

    def list_by_division(self, division_id: str) -> List[models.Category]:
        categories = self.gateway.get_categories_by_division(division_id)
        self.categories = sorted(categories, key=lambda category: (category.level, category.name))
        return self.categories

    def can_create_default_set(self, division_id: str) -> bool:
        """The default ladder is offered only while the division has no categories."""
        return not self.list_by_division(division_id)

    def create(
        self,
        division_id: str,
        season_id: str,
        name: str,
        level: int = 1,
        team_limit: int = catalog.DEFAULT_TEAM_LIMIT,
        player_limit: int = catalog.DEFAULT_PLAYER_LIMIT,
        price: float = 0.0,
        rules: Optional[Sequence[str]] = None,
        is_active: bool = True,
    ) -> models.Category:
        category = models.Category(
            id="",
            division_id=division_id,
            season_id=season_id,
            name=validation.category_name(name),
            level=validation.category_level(level),
            team_limit=validation.whole_number(team_limit, "El límite de equipos"),
            player_limit=validation.whole_number(player_limit, "El límite de jugadores"),
            price=validation.non_negative(price, "El precio"),
            rules=[rule.strip() for rule in rules or [] if rule.strip()],
            is_active=is_active,
        )
        created = self.gateway.create_category(category)
        self.list_by_division(division_id)
        return created

    def update(self, category_id: str, **fields: Any) -> models.Category:
        if "name" in fields:
            fields["name"] = validation.category_name(fields["name"])
        if "level" in fields:
            fields["level"] = validation.category_level(fields["level"])
        if "price" in fields:
            fields["price"] = validation.non_negative(fields["price"], "El precio")
        for key, label in (("team_limit", "El límite de equipos"), ("player_limit", "El límite de jugadores")):
            if key in fields:
                fields[key] = validation.whole_number(fields[key], label)
        if "rules" in fields:
            fields["rules"] = [rule.strip() for rule in fields["rules"] if rule.strip()]
        fields.pop("division_id", None)
        fields.pop("season_id", None)
        updated = self.gateway.update_category(category_id, fields)
        self.list_by_division(updated.division_id)
        return updated

    def create_default_set(self, division_id: str, season_id: str) -> List[models.Category]:
        """Create categories A-G; callers gate this with :meth:`can_create_default_set`."""
        created = self.gateway.create_default_categories(division_id, season_id)
        self.list_by_division(division_id)
        return created

    def delete(self, category_id: str) -> None:
        category = self.gateway.get_category_by_id(category_id)
        if self.gateway.get_teams_by_category(category_id):
            raise ValidationError("No se puede eliminar una categoría con equipos inscritos.")
        self.gateway.delete_category(category_id)
        self.list_by_division(category.division_id)


# Fields -------------------------------------------------------------
class FieldBoard:
    def __init__(self, gateway: LeagueGateway) -> None:
        self.gateway = gateway
        self.fields: List[models.Field] = []
        self.using_fallback = False

    def list(self) -> List[models.Field]:
        fields = self.gateway.get_fields()
        self.using_fallback = not fields
        self.fields = fields or catalog.fallback_fields()
        return self.fields

    def _check(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        if "code" in fields:
            fields["code"] = validation.required(fields["code"], "El código del campo es obligatorio.")
        if "name" in fields:
            fields["name"] = validation.required(fields["name"], "El nombre del campo es obligatorio.")
        if "type" in fields:
            validation.choice(fields["type"], models.FIELD_TYPES, "Tipo de campo")
        if "status" in fields:
            validation.choice(fields["status"], models.FIELD_STATUSES, "Estado de campo")
        if "zone" in fields:
            validation.choice(fields["zone"], models.FIELD_ZONES, "Zona")
        for key, label in (("capacity", "La capacidad"), ("priority", "La prioridad")):
            if key in fields:
                fields[key] = validation.whole_number(fields[key], label)
        return fields

    def create(self, code: str, name: str, **fields: Any) -> models.Field:
        fields = self._check({"code": code, "name": name, **fields})
        fields.setdefault("zone", catalog.zone_for_code(fields["code"]))
        location = fields.pop("location", None) or models.Location()
        if isinstance(location, dict):
            location = models.Location(**location)
        created = self.gateway.create_field(models.Field(id="", location=location, **fields))
        self.list()
        return created

    def update(self, field_id: str, **fields: Any) -> models.Field:
        updated = self.gateway.update_field(field_id, self._check(fields))
        self.list()
        return updated

    def set_status(self, field_id: str, status: str) -> models.Field:
        validation.choice(status, models.FIELD_STATUSES, "Estado de campo")
        updated = self.gateway.update_field(field_id, {"status": status})
        self.list()
        return updated

    def delete(self, field_id: str) -> None:
        self.gateway.delete_field(field_id)
        self.list()

    def filter(
        self, search: Optional[str] = None, status: Optional[str] = None, field_type: Optional[str] = None
    ) -> List[models.Field]:
        term = (search or "").strip().lower()
        result = []
        for item in self.fields:
            if term and not _contains(term, item.code, item.name, item.location.address):
                continue
            if not _is_unset(status) and item.status != status:
                continue
            if not _is_unset(field_type) and item.type != field_type:
                continue
            result.append(item)
        return result

    def map_layout(self) -> Dict[str, List[models.Field]]:
        layout: Dict[str, List[models.Field]] = {zone: [] for zone in models.FIELD_ZONES}
        for item in self.fields:
            layout.setdefault(item.zone, []).append(item)
        for zone_fields in layout.values():
            zone_fields.sort(key=lambda item: item.code)
        return layout


# Player directory ----------------------------------------------------
class PlayerDirectory:
    def __init__(self, gateway: LeagueGateway) -> None:
        self.gateway = gateway
        self.players: List[models.Player] = []

    def list_all(self) -> List[models.Player]:
        players = self.gateway.get_all_players()
        self.players = sorted(players, key=lambda player: player.full_name.lower())
        return self.players

    def create(
        self,
        name: str,
        team_id: str,
        last_name: str = "",
        number: Any = None,
        position: str = "mediocampista",
        email: str = "",
        phone: str = "",
        date_of_birth: Optional[date] = None,
        emergency_contact: Optional[models.EmergencyContact] = None,
        status: str = "pending",
    ) -> models.Player:
        team_id = validation.required(team_id, "Seleccione un equipo para el jugador.")
        player = models.Player(
            id="",
            team_id=team_id,
            name=validation.required(name, "El nombre del jugador es obligatorio."),
            last_name=last_name.strip(),
            number=validation.jersey_number(number),
            position=validation.choice(position, models.GENERIC_POSITIONS, "Posición"),
            email=email.strip(),
            phone=phone.strip(),
            date_of_birth=date_of_birth,
            emergency_contact=emergency_contact or models.EmergencyContact(),
            status=validation.choice(status, models.PLAYER_STATUSES, "Estado de jugador"),
            registration_date=_now(),
        )
        created = self.gateway.create_player(player)
        self.list_all()
        return created

    def delete(self, player_id: str) -> None:
        self.gateway.delete_player(player_id)
        self.list_all()

    def update_status(self, player_id: str, status: str) -> models.Player:
        validation.choice(status, models.PLAYER_STATUSES, "Estado de jugador")
        updated = self.gateway.update_player_status(player_id, status)
        self.list_all()
        return updated

    def filter(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        position: Optional[str] = None,
        team_id: Optional[str] = None,
    ) -> List[models.Player]:
        term = (search or "").strip().lower()
        return [
            player
            for player in self.players
            if (not term or _contains(term, player.name, player.last_name, player.email, player.phone))
            and (_is_unset(status) or player.status == status)
            and (_is_unset(position) or player.position == position)
            and (_is_unset(team_id) or player.team_id == team_id)
        ]


# Team detail ----------------------------------------------------------
@dataclass
class TeamDetailView:
    team: models.Team
    players: List[models.Player]
    payments: List[models.Payment]
    recent_matches: List[models.Match]
    category: Optional[models.Category] = None
    division: Optional[models.Division] = None
    season: Optional[models.Season] = None
    payment_summary: Dict[str, float] = field(default_factory=dict)

    @property
    def record(self) -> models.TeamRecord:
        return derived.team_record(self.team)

    @property
    def captain(self) -> Optional[models.Player]:
        return next((player for player in self.players if player.is_captain), None)


class TeamDetail:
    """Roster and payment ledger of one team, with its category ancestry."""

    def __init__(self, gateway: LeagueGateway) -> None:
        self.gateway = gateway
        self.view: Optional[TeamDetailView] = None

    def load(self, team_id: str) -> TeamDetailView:
        team = self.gateway.get_team_by_id(team_id)
        players = sorted(
            self.gateway.get_players_by_team(team_id),
            key=lambda player: (player.number is None, player.number or 0, player.name),
        )
        payments = self.gateway.get_payments_by_team(team_id)
        completed = [match for match in self.gateway.get_matches_by_team(team_id) if match.status == "completed"]
        completed.sort(key=lambda match: (match.match_date or date.min, match.match_time), reverse=True)
        view = TeamDetailView(
            team=team,
            players=players,
            payments=payments,
            recent_matches=completed[:RECENT_MATCHES_SHOWN],
            payment_summary=self.gateway.payment_summary(team_id),
        )
        # Category -> Division and Category -> Season must resolve in order.
        view.category = self.gateway.get_category_by_id(team.category_id)
        view.division = self.gateway.get_division_by_id(view.category.division_id)
        view.season = self.gateway.get_season_by_id(view.category.season_id)
        self.view = view
        return view

    def add_player(
        self,
        team_id: str,
        name: str,
        last_name: str = "",
        number: Any = None,
        position: str = "wide_receiver",
        email: str = "",
        phone: str = "",
        date_of_birth: Optional[date] = None,
        emergency_contact: Optional[models.EmergencyContact] = None,
        status: str = "pending",
    ) -> models.Player:
        player = models.Player(
            id="",
            team_id=team_id,
            name=validation.required(name, "El nombre del jugador es obligatorio."),
            last_name=last_name.strip(),
            number=validation.jersey_number(number),
            position=validation.choice(position, models.FLAG_FOOTBALL_POSITIONS, "Posición"),
            email=email.strip(),
            phone=phone.strip(),
            date_of_birth=date_of_birth,
            emergency_contact=emergency_contact or models.EmergencyContact(),
            status=validation.choice(status, models.PLAYER_STATUSES, "Estado de jugador"),
            is_captain=False,
            is_vice_captain=False,
            registration_date=_now(),
        )
        created = self.gateway.create_player(player)
        self.load(team_id)
        return created

    def set_captain(self, team_id: str, player_id: str) -> models.Player:
        captain = self.gateway.set_team_captain(team_id, player_id)
        self.load(team_id)
        return captain

    def set_vice_captain(self, team_id: str, player_id: str) -> models.Player:
        vice = self.gateway.set_team_vice_captain(team_id, player_id)
        self.load(team_id)
        return vice

    def add_payment(
        self,
        team_id: str,
        amount: Any,
        payment_date: Optional[date] = None,
        method: str = "cash",
        reference: str = "",
        notes: str = "",
        status: str = "paid",
        invoice_number: str = "",
        created_by: str = "",
    ) -> models.Team:
        """Record a payment; the returned team carries the recomputed payment status."""
        amount = validation.positive_amount(amount)
        validation.choice(method, models.PAYMENT_METHODS, "Método de pago")
        validation.choice(status, models.PAYMENT_STATUSES, "Estado de pago")
        team = self.gateway.get_team_by_id(team_id)
        payment_date = payment_date or date.today()
        payment = models.Payment(
            id="",
            team_id=team_id,
            season_id=team.season_id,
            amount=amount,
            payment_date=payment_date,
            method=method,
            reference=reference,
            notes=notes,
            status=status,
            paid_date=payment_date if status == "paid" else None,
            invoice_number=invoice_number,
            created_by=created_by,
        )
        updated = self.gateway.record_payment(payment)
        self.load(team_id)
        return updated

    def update_team(self, team_id: str, **fields: Any) -> models.Team:
        blocked = set(fields) - TEAM_EDITABLE_FIELDS
        if blocked:
            raise ValidationError(f"Campos no editables desde la ficha del equipo: {', '.join(sorted(blocked))}.")
        if "name" in fields:
            fields["name"] = validation.required(fields["name"], "El nombre del equipo es obligatorio.")
        updated = self.gateway.update_team(team_id, fields)
        self.load(team_id)
        return updated

    def record(self, team_id: str) -> models.TeamRecord:
        return derived.team_record(self.gateway.get_team_by_id(team_id))


# Matches ------------------------------------------------------------
def group_by_round(matches: Iterable[models.Match]) -> List[Tuple[int, List[models.Match]]]:
    """Partition matches by round number, rounds in ascending numeric order."""
    rounds: Dict[int, List[models.Match]] = {}
    for match in matches:
        rounds.setdefault(int(match.round), []).append(match)
    return sorted(rounds.items())


class MatchBoard:
    def __init__(self, gateway: LeagueGateway) -> None:
        self.gateway = gateway
        self.seasons: List[models.Season] = []
        self.divisions: List[models.Division] = []
        self.referees: List[models.Referee] = []
        self.teams: List[models.Team] = []
        self.matches: List[models.Match] = []
        self.season_id: Optional[str] = None
        self.division_id: Optional[str] = None

    def load(self) -> List[models.Season]:
        self.seasons = self.gateway.get_seasons()
        return self.seasons

    def select_season(self, season_id: str) -> None:
        self.season_id = season_id
        self.division_id = None
        self.teams = []
        self.divisions = self.gateway.get_divisions_by_season(season_id)
        self.matches = self.gateway.get_matches(season_id)
        self.referees = self.gateway.get_referees(season_id)

    def select_division(self, division_id: str) -> None:
        """Narrow the board to one division; replaces the season-wide match list."""
        self.division_id = division_id
        self.teams = sorted(self.gateway.get_teams_by_division(division_id), key=lambda team: team.name)
        self.matches = self.gateway.get_matches_by_division(division_id)

    def team_name(self, match: models.Match, side: str) -> str:
        snapshot = match.home_team if side == "home" else match.away_team
        if snapshot and snapshot.name:
            return snapshot.name
        team_id = match.home_team_id if side == "home" else match.away_team_id
        team = next((team for team in self.teams if team.id == team_id), None)
        return team.name if team else "Equipo"

    def filter(
        self,
        status: Optional[str] = None,
        search: Optional[str] = None,
        category_id: Optional[str] = None,
    ) -> List[models.Match]:
        """``status`` is a drop-down value such as ``"finalizado"``."""
        term = (search or "").strip().lower()
        result = []
        for match in self.matches:
            if not _is_unset(category_id) and match.category_id != category_id:
                continue
            if not _is_unset(status) and MATCH_STATUS_FILTER_VALUES.get(match.status) != status:
                continue
            if term and not _contains(
                term,
                self.team_name(match, "home"),
                self.team_name(match, "away"),
                match.referee_name,
                match.notes,
            ):
                continue
            result.append(match)
        return result

    def rounds(self, **filters: Any) -> List[Tuple[int, List[models.Match]]]:
        return group_by_round(self.filter(**filters))

    def generate_calendar(
        self,
        season_id: str,
        division_id: str,
        teams: Sequence[models.Team],
        start_date: date,
        fields_only: bool = True,
        double_round_robin: bool = False,
    ) -> List[models.Match]:
        if len(teams) < 2:
            raise ValidationError("Se necesitan al menos 2 equipos para generar el calendario.")
        created = self.gateway.generate_season_calendar(
            season_id,
            division_id,
            teams,
            scheduling.next_sunday(start_date),
            fields_only,
            double_round_robin,
        )
        self.select_division(division_id)
        return created

    def _check_match(self, fields: Dict[str, Any], match_id: Optional[str] = None) -> Dict[str, Any]:
        """Validate a manual match and fill the values taken from its teams."""
        home = self.gateway.get_team_by_id(fields["home_team_id"])
        away = self.gateway.get_team_by_id(fields["away_team_id"])
        if home.id == away.id:
            raise ValidationError("El equipo local y visitante no pueden ser el mismo.")
        try:
            fields["round"] = int(fields.get("round", 1))
        except (TypeError, ValueError, OverflowError):
            raise ValidationError("La jornada debe ser un número entero.") from None
        if fields["round"] < 1:
            raise ValidationError("La jornada debe ser mayor o igual a 1.")
        validation.choice(fields.get("status", "scheduled"), models.MATCH_STATUSES, "Estado de partido")
        if fields.get("playoff_stage"):
            validation.choice(fields["playoff_stage"], models.PLAYOFF_STAGES, "Fase de eliminación")
        else:
            fields["playoff_stage"] = None
        if fields.get("field_id"):
            self._check_field_slot(fields, match_id)
        if fields.get("referee_id"):
            fields["referee_name"] = self.gateway.get_referee_by_id(fields["referee_id"]).name
        elif "referee_id" in fields:
            fields["referee_name"] = ""
        fields["category_id"] = home.category_id
        fields["home_team"] = models.TeamSnapshot(home.name, home.primary_color)
        fields["away_team"] = models.TeamSnapshot(away.name, away.primary_color)
        return fields

    def _check_field_slot(self, fields: Dict[str, Any], match_id: Optional[str]) -> None:
        self.gateway.get_field_by_id(fields["field_id"])
        for other in self.gateway.get_matches(fields["season_id"]):
            if (
                other.id != match_id
                and other.status != "cancelled"
                and other.field_id == fields["field_id"]
                and other.match_date == fields.get("match_date")
                and other.match_time == fields.get("match_time")
            ):
                raise ValidationError("Ya existe un partido programado en este campo a la misma hora.")

    def create_match(
        self,
        season_id: str,
        division_id: str,
        home_team_id: str,
        away_team_id: str,
        match_date: date,
        match_time: str,
        round: Any = 1,
        field_id: str = "",
        referee_id: str = "",
        status: str = "scheduled",
        is_playoff: bool = False,
        playoff_stage: Optional[str] = None,
        notes: str = "",
    ) -> models.Match:
        """Schedule one match by hand; results are recorded through :meth:`record_result`."""
        if status == "completed":
            raise ValidationError("Registre el resultado para finalizar un partido.")
        self.gateway.get_division_by_id(division_id)
        fields = self._check_match(
            {
                "season_id": season_id,
                "division_id": division_id,
                "home_team_id": home_team_id,
                "away_team_id": away_team_id,
                "match_date": match_date,
                "match_time": match_time,
                "round": round,
                "field_id": field_id,
                "referee_id": referee_id,
                "status": status,
                "is_playoff": is_playoff,
                "playoff_stage": playoff_stage,
                "notes": notes,
            }
        )
        created = self.gateway.create_match(models.Match(id="", **fields))
        if self.division_id == division_id:
            self.select_division(division_id)
        return created

    def update_match(self, match_id: str, **fields: Any) -> models.Match:
        current = self.gateway.get_match_by_id(match_id)
        for key in ("home_score", "away_score", "winner", "id"):
            fields.pop(key, None)
        merged = {
            "season_id": current.season_id,
            "home_team_id": current.home_team_id,
            "away_team_id": current.away_team_id,
            "match_date": current.match_date,
            "match_time": current.match_time,
            "round": current.round,
            "field_id": current.field_id,
            "status": current.status,
            "is_playoff": current.is_playoff,
            "playoff_stage": current.playoff_stage,
            **fields,
        }
        updated = self.gateway.update_match(match_id, self._check_match(merged, match_id))
        self.matches = [updated if item.id == match_id else item for item in self.matches]
        return updated

    def assign_referee(self, match_id: str, referee_id: str) -> models.Match:
        match = self.gateway.assign_referee(match_id, referee_id)
        self.matches = [match if item.id == match_id else item for item in self.matches]
        return match

    def delete_match(self, match_id: str) -> None:
        self.gateway.delete_match(match_id)
        self.matches = [match for match in self.matches if match.id != match_id]

    def record_result(
        self, match_id: str, home_score: Any, away_score: Any, notes: Optional[str] = None
    ) -> models.Match:
        home = validation.whole_number(home_score, "El marcador local")
        away = validation.whole_number(away_score, "El marcador visitante")
        match = self.gateway.update_match_result(match_id, home, away, notes)
        self.matches = [match if item.id == match_id else item for item in self.matches]
        return match

    def standings(self, division_id: str) -> List[models.Standing]:
        teams = self.gateway.get_teams_by_division(division_id)
        return derived.compute_standings(teams, self.gateway.get_matches_by_division(division_id))


def format_team(team: models.Team) -> str:
    return f"[{team.id}] {team.name} | {team.status} | pago: {team.payment_status}"


def format_match(match: models.Match) -> str:
    when = match.match_date.isoformat() if match.match_date else "-"
    score = "vs"
    if match.status == "completed":
        score = f"{match.home_score}-{match.away_score}"
    home = match.home_team.name if match.home_team else match.home_team_id
    away = match.away_team.name if match.away_team else match.away_team_id
    return f"J{match.round} {when} {match.match_time} | {home} {score} {away} | {MATCH_STATUS_LABELS[match.status]}"
