"""Domain models for the Tocho Prime league administration console."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field, is_dataclass
from datetime import date, datetime
from typing import Dict, List, Optional

FIELD_TYPES = ("césped", "sintético", "arena", "otros")
FIELD_STATUSES = ("available", "maintenance", "reserved", "unavailable")
FIELD_ZONES = ("top_row", "bottom_row", "left_side", "right_side", "center")

SEASON_STATUSES = ("active", "upcoming", "completed", "archived")
PLAYER_STATUSES = ("active", "pending", "suspended", "injured", "inactive")
# The global player directory and the team roster use different vocabularies.
GENERIC_POSITIONS = ("portero", "defensa", "mediocampista", "delantero", "utility")
FLAG_FOOTBALL_POSITIONS = (
    "quarterback",
    "runningback",
    "wide_receiver",
    "cornerback",
    "safety",
    "linebacker",
)

TEAM_STATUSES = ("pending", "approved", "active", "suspended", "rejected")
TEAM_PAYMENT_STATUSES = ("paid", "partial", "pending", "overdue")

MATCH_STATUSES = ("scheduled", "in_progress", "completed", "cancelled", "postponed")
MATCH_WINNERS = ("home", "away", "draw")
PLAYOFF_STAGES = ("quarterfinals", "semifinals", "final", "third_place")

PAYMENT_METHODS = ("cash", "transfer", "card", "check")
PAYMENT_STATUSES = ("pending", "paid", "cancelled", "refunded", "overdue")

REFEREE_LEVELS = ("beginner", "intermediate", "advanced", "fifa")
REFEREE_SPECIALIZATIONS = ("main", "assistant", "fourth_official", "var")


def to_document(value):
    if is_dataclass(value) and not isinstance(value, type):
        return to_document(asdict(value))
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: to_document(item) for key, item in value.items()}
    if isinstance(value, list):
        return [to_document(item) for item in value]
    return value


class Entity:
    """Mixin providing the JSON friendly representation of a document."""

    def to_dict(self) -> Dict:
        return to_document(asdict(self))  # type: ignore[call-overload]


@dataclass
class Season(Entity):
    id: str
    name: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: str = "upcoming"
    description: str = ""
    is_active: bool = True


@dataclass
class Division(Entity):
    id: str
    season_id: str
    name: str
    color: str = "#3b82f6"
    description: str = ""
    order: int = 0
    is_active: bool = True


@dataclass
class Category(Entity):
    id: str
    division_id: str
    season_id: str
    name: str
    level: int = 1
    team_limit: int = 10
    player_limit: int = 15
    price: float = 0.0
    rules: List[str] = field(default_factory=list)
    is_active: bool = True


@dataclass
class Location:
    address: str = ""
    city: str = ""


@dataclass
class Field(Entity):
    id: str
    code: str
    name: str
    type: str = "césped"
    capacity: int = 100
    status: str = "available"
    priority: int = 1
    zone: str = "center"
    facilities: List[str] = field(default_factory=list)
    location: Location = field(default_factory=Location)
    notes: str = ""
    is_active: bool = True


@dataclass
class EmergencyContact:
    name: str = ""
    phone: str = ""
    relationship: str = ""


@dataclass
class Player(Entity):
    id: str
    team_id: str
    name: str
    last_name: str = ""
    number: Optional[int] = None
    position: str = "utility"
    email: str = ""
    phone: str = ""
    date_of_birth: Optional[date] = None
    emergency_contact: EmergencyContact = field(default_factory=EmergencyContact)
    status: str = "pending"
    is_captain: bool = False
    is_vice_captain: bool = False
    registration_date: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.name} {self.last_name}".strip()


@dataclass
class Coach:
    name: str = ""
    phone: str = ""
    email: str = ""


@dataclass
class TeamStats:
    matches_played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    points_for: int = 0
    points_against: int = 0
    penalties: int = 0
    points: int = 0


@dataclass
class Team(Entity):
    id: str
    name: str
    category_id: str
    season_id: str
    division_id: str = ""
    short_name: str = ""
    primary_color: str = "#3b82f6"
    secondary_color: str = "#f3f4f6"
    coach: Coach = field(default_factory=Coach)
    status: str = "pending"
    payment_status: str = "pending"
    stats: TeamStats = field(default_factory=TeamStats)
    captain_id: Optional[str] = None
    vice_captain_id: Optional[str] = None
    notes: str = ""
    registration_date: Optional[datetime] = None


@dataclass
class TeamSnapshot:
    name: str = ""
    primary_color: str = ""


@dataclass
class Match(Entity):
    id: str
    season_id: str
    division_id: str
    home_team_id: str
    away_team_id: str
    round: int = 1
    category_id: str = ""
    field_id: str = ""
    match_date: Optional[date] = None
    match_time: str = ""
    status: str = "scheduled"
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    winner: Optional[str] = None
    home_team: Optional[TeamSnapshot] = None
    away_team: Optional[TeamSnapshot] = None
    referee_id: str = ""
    referee_name: str = ""
    is_playoff: bool = False
    playoff_stage: Optional[str] = None
    notes: str = ""

    def involves(self, team_id: str) -> bool:
        return team_id in (self.home_team_id, self.away_team_id)


@dataclass
class Payment(Entity):
    id: str
    team_id: str
    season_id: str
    amount: float
    payment_date: date
    method: str = "cash"
    reference: str = ""
    notes: str = ""
    status: str = "paid"
    paid_date: Optional[date] = None
    invoice_number: str = ""
    created_by: str = ""


@dataclass
class Referee(Entity):
    id: str
    season_id: str
    name: str
    email: str = ""
    phone: str = ""
    level: str = "beginner"
    specialization: str = "main"
    matches_assigned: int = 0
    is_active: bool = True


@dataclass
class TeamRecord:
    """Win/draw/loss line shown on the team page; never persisted."""

    wins: int
    draws: int
    losses: int

    @property
    def total_games(self) -> int:
        return self.wins + self.draws + self.losses


@dataclass
class Standing:
    team_id: str
    team_name: str
    played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    points_for: int = 0
    points_against: int = 0
    points: int = 0

    @property
    def difference(self) -> int:
        return self.points_for - self.points_against
