"""Round-robin calendar generation used by the document store gateway."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence, Tuple

from . import models
from .errors import GatewayError

TIME_SLOTS = (
    "07:00",
    "08:00",
    "09:00",
    "10:00",
    "11:00",
    "12:00",
    "13:00",
    "14:00",
    "15:00",
    "16:00",
)
DAYS_BETWEEN_ROUNDS = 7
_SUNDAY = 6


@dataclass(frozen=True)
class Fixture:
    round: int
    home: models.Team
    away: models.Team
    category_id: str
    field_id: str
    match_date: date
    match_time: str


def next_sunday(day: date) -> date:
    """Return ``day`` itself when it is a Sunday, otherwise the following Sunday."""
    return day + timedelta(days=(_SUNDAY - day.weekday()) % 7)


def round_robin(team_ids: Sequence[str]) -> List[List[Tuple[str, str]]]:
    """Pair teams with the circle method; one list of (home, away) per round.

    An odd number of teams gets a rest slot, so one team sits out each round.
    """

    participants: List[Optional[str]] = list(team_ids)
    if len(participants) % 2:
        participants.append(None)
    size = len(participants)
    rounds: List[List[Tuple[str, str]]] = []
    for _ in range(size - 1):
        pairs = []
        for index in range(size // 2):
            home = participants[index]
            away = participants[size - 1 - index]
            if home is not None and away is not None:
                pairs.append((home, away))
        rounds.append(pairs)
        participants = [participants[0], participants[-1]] + participants[1:-1]
    return rounds


def _group_by_category(teams: Sequence[models.Team]) -> Dict[str, List[models.Team]]:
    groups: Dict[str, List[models.Team]] = {}
    for team in teams:
        groups.setdefault(team.category_id, []).append(team)
    return groups


def build_calendar(
    teams: Sequence[models.Team],
    fields: Sequence[models.Field],
    start_date: date,
    *,
    double_round_robin: bool = False,
) -> List[Fixture]:
    """Lay out every category's round robin on consecutive Sundays.

    Matches of the same round share a date; each one takes the next free
    (field, time) slot, fields ordered by priority, so no field is booked twice
    at the same hour.
    """

    if not fields:
        raise GatewayError("No hay campos disponibles")
    ordered_fields = sorted(fields, key=lambda item: (item.priority, item.code))
    by_id = {team.id: team for team in teams}

    pairings_by_round: Dict[int, List[Tuple[str, str, str]]] = {}
    for category_id, group in _group_by_category(teams).items():
        if len(group) < 2:
            continue
        legs = round_robin([team.id for team in group])
        if double_round_robin:
            legs = legs + [[(away, home) for home, away in pairs] for pairs in legs]
        for round_index, pairs in enumerate(legs, start=1):
            bucket = pairings_by_round.setdefault(round_index, [])
            bucket.extend((category_id, home, away) for home, away in pairs)

    first_sunday = next_sunday(start_date)
    capacity = len(ordered_fields) * len(TIME_SLOTS)
    fixtures: List[Fixture] = []
    for round_number in sorted(pairings_by_round):
        pairings = pairings_by_round[round_number]
        if len(pairings) > capacity:
            raise GatewayError(
                f"La jornada {round_number} necesita {len(pairings)} horarios y solo hay {capacity}"
            )
        match_date = first_sunday + timedelta(days=DAYS_BETWEEN_ROUNDS * (round_number - 1))
        for slot, (category_id, home_id, away_id) in enumerate(pairings):
            field = ordered_fields[slot % len(ordered_fields)]
            fixtures.append(
                Fixture(
                    round=round_number,
                    home=by_id[home_id],
                    away=by_id[away_id],
                    category_id=category_id,
                    field_id=field.id,
                    match_date=match_date,
                    match_time=TIME_SLOTS[slot // len(ordered_fields)],
                )
            )
    return fixtures
