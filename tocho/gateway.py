"""Document store gateway: collection-scoped CRUD for every league entity."""
from __future__ import annotations

import copy
import logging
import threading
from contextlib import contextmanager
from dataclasses import asdict
from datetime import date
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Type, TypeVar

from . import catalog, derived, models, scheduling, storage
from .errors import GatewayError, NotFoundError, ValidationError

log = logging.getLogger(__name__)

E = TypeVar("E")


class LeagueGateway:
    """System of record for seasons, divisions, categories, teams and the rest.

    Every public method either returns fresh model instances or raises a
    :class:`GatewayError`. Composite operations run inside :meth:`transaction`
    so that they are written to disk once, or not at all.
    """

    def __init__(self, data_file: Optional[Path] = None) -> None:
        self._path = storage.ensure_storage(data_file)
        self._data = storage.load_data(self._path)
        self._lock = threading.RLock()
        self._depth = 0
        self._migrate_legacy_fields()

    @property
    def data_file(self) -> Path:
        return self._path

    def _migrate_legacy_fields(self) -> None:
        changed = False
        for item in self._data["fields"]:
            if not item.get("zone"):
                item["zone"] = catalog.zone_for_code(item.get("code"))
                changed = True
        if changed:
            log.info("Assigned map zones to fields stored without one")
            self._persist()

    # Generic helpers -------------------------------------------------
    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Group several writes; a failure restores the previous state untouched."""
        with self._lock:
            snapshot = copy.deepcopy(self._data)
            self._depth += 1
            try:
                yield
                if self._depth == 1:
                    storage.save_data(self._data, self._path)
            except Exception:
                self._data = snapshot
                raise
            finally:
                self._depth -= 1

    def _persist(self) -> None:
        if self._depth:
            return
        storage.save_data(self._data, self._path)

    def _create_entity(self, key: str, entity: Any) -> Dict:
        payload = entity.to_dict()
        payload["id"] = storage.new_id()
        with self._lock:
            self._data[key].append(payload)
            self._persist()
        log.info("Created %s %s", key[:-1], payload["id"])
        return payload

    def _list_entities(self, key: str, **criteria: Any) -> List[Dict]:
        return [
            item
            for item in self._data[key]
            if all(item.get(name) == value for name, value in criteria.items())
        ]

    def _find_entity(self, key: str, entity_id: str) -> Dict:
        for item in self._data[key]:
            if item.get("id") == entity_id:
                return item
        raise NotFoundError(key, entity_id)

    def _update_entity(self, key: str, entity_id: str, updates: Dict) -> Dict:
        with self._lock:
            item = self._find_entity(key, entity_id)
            item.update(models.to_document({k: v for k, v in updates.items() if k != "id"}))
            self._persist()
        return item

    def _remove_entity(self, key: str, entity_id: str) -> None:
        with self._lock:
            collection = self._data[key]
            for index, item in enumerate(collection):
                if item.get("id") == entity_id:
                    del collection[index]
                    self._persist()
                    log.info("Deleted %s %s", key[:-1], entity_id)
                    return
        raise NotFoundError(key, entity_id)

    @staticmethod
    def _load(model_cls: Type[E], items: Sequence[Dict]) -> List[E]:
        return [storage.instantiate(model_cls, item) for item in items]

    # Seasons ---------------------------------------------------------
    def get_seasons(self) -> List[models.Season]:
        return self._load(models.Season, self._data["seasons"])

    def get_season_by_id(self, season_id: str) -> models.Season:
        return storage.instantiate(models.Season, self._find_entity("seasons", season_id))

    def create_season(self, season: models.Season) -> models.Season:
        return storage.instantiate(models.Season, self._create_entity("seasons", season))

    def update_season(self, season_id: str, updates: Dict) -> models.Season:
        return storage.instantiate(models.Season, self._update_entity("seasons", season_id, updates))

    def delete_season(self, season_id: str) -> None:
        self._remove_entity("seasons", season_id)

    def duplicate_season(self, source_id: str, name: str) -> models.Season:
        """Copy a season with its divisions and categories; teams and matches stay behind."""
        with self.transaction():
            source = self.get_season_by_id(source_id)
            season = self.create_season(
                models.Season(
                    id="",
                    name=name,
                    start_date=source.start_date,
                    end_date=source.end_date,
                    status="upcoming",
                    description=source.description,
                    is_active=False,
                )
            )
            for division in self.get_divisions_by_season(source_id):
                copy_division = self.create_division(
                    models.Division(
                        id="",
                        season_id=season.id,
                        name=division.name,
                        color=division.color,
                        description=division.description,
                        order=division.order,
                        is_active=division.is_active,
                    )
                )
                for category in self.get_categories_by_division(division.id):
                    category.id = ""
                    category.division_id = copy_division.id
                    category.season_id = season.id
                    self.create_category(category)
        log.info("Season %s duplicated as %s", source_id, season.id)
        return season

    # Divisions -------------------------------------------------------
    def get_divisions_by_season(self, season_id: str) -> List[models.Division]:
        items = self._list_entities("divisions", season_id=season_id)
        return sorted(self._load(models.Division, items), key=lambda item: (item.order, item.name))

    def get_division_by_id(self, division_id: str) -> models.Division:
        return storage.instantiate(models.Division, self._find_entity("divisions", division_id))

    def create_division(self, division: models.Division) -> models.Division:
        self._find_entity("seasons", division.season_id)
        return storage.instantiate(models.Division, self._create_entity("divisions", division))

    def update_division(self, division_id: str, updates: Dict) -> models.Division:
        return storage.instantiate(models.Division, self._update_entity("divisions", division_id, updates))

    def delete_division(self, division_id: str) -> None:
        self._remove_entity("divisions", division_id)

    def create_default_divisions(self, season_id: str) -> List[models.Division]:
        created = []
        with self.transaction():
            for order, (name, color, description) in enumerate(catalog.DEFAULT_DIVISION_SET, start=1):
                created.append(
                    self.create_division(
                        models.Division(
                            id="",
                            season_id=season_id,
                            name=name,
                            color=color,
                            description=description,
                            order=order,
                        )
                    )
                )
        return created

    # Categories ------------------------------------------------------
    def get_categories_by_division(self, division_id: str) -> List[models.Category]:
        return self._load(models.Category, self._list_entities("categories", division_id=division_id))

    def get_category_by_id(self, category_id: str) -> models.Category:
        return storage.instantiate(models.Category, self._find_entity("categories", category_id))

    def create_category(self, category: models.Category) -> models.Category:
        self._find_entity("divisions", category.division_id)
        return storage.instantiate(models.Category, self._create_entity("categories", category))

    def create_default_categories(self, division_id: str, season_id: str) -> List[models.Category]:
        """Create the A-G ladder. Does not look at existing categories."""
        created = []
        with self.transaction():
            for name, level, price in catalog.DEFAULT_CATEGORY_SET:
                created.append(
                    self.create_category(
                        models.Category(
                            id="",
                            division_id=division_id,
                            season_id=season_id,
                            name=name,
                            level=level,
                            team_limit=catalog.DEFAULT_TEAM_LIMIT,
                            player_limit=catalog.DEFAULT_PLAYER_LIMIT,
                            price=price,
                        )
                    )
                )
        return created

    def update_category(self, category_id: str, updates: Dict) -> models.Category:
        return storage.instantiate(models.Category, self._update_entity("categories", category_id, updates))

    def delete_category(self, category_id: str) -> None:
        self._remove_entity("categories", category_id)

    # Fields ----------------------------------------------------------
    def get_fields(self) -> List[models.Field]:
        fields = self._load(models.Field, self._data["fields"])
        return sorted(fields, key=lambda item: (item.priority, item.code))

    def get_field_by_id(self, field_id: str) -> models.Field:
        return storage.instantiate(models.Field, self._find_entity("fields", field_id))

    def create_field(self, field: models.Field) -> models.Field:
        return storage.instantiate(models.Field, self._create_entity("fields", field))

    def create_default_fields(self) -> List[models.Field]:
        created = []
        with self.transaction():
            for placeholder in catalog.fallback_fields():
                created.append(self.create_field(placeholder))
        return created

    def update_field(self, field_id: str, updates: Dict) -> models.Field:
        return storage.instantiate(models.Field, self._update_entity("fields", field_id, updates))

    def delete_field(self, field_id: str) -> None:
        self._remove_entity("fields", field_id)

    # Teams -----------------------------------------------------------
    def get_all_teams(self) -> List[models.Team]:
        return self._load(models.Team, self._data["teams"])

    def get_teams_by_category(self, category_id: str) -> List[models.Team]:
        return self._load(models.Team, self._list_entities("teams", category_id=category_id))

    def get_teams_by_division(self, division_id: str) -> List[models.Team]:
        return self._load(models.Team, self._list_entities("teams", division_id=division_id))

    def get_teams_by_season(self, season_id: str) -> List[models.Team]:
        return self._load(models.Team, self._list_entities("teams", season_id=season_id))

    def get_team_by_id(self, team_id: str) -> models.Team:
        return storage.instantiate(models.Team, self._find_entity("teams", team_id))

    def create_team(self, team: models.Team) -> models.Team:
        self._find_entity("categories", team.category_id)
        return storage.instantiate(models.Team, self._create_entity("teams", team))

    def update_team(self, team_id: str, updates: Dict) -> models.Team:
        return storage.instantiate(models.Team, self._update_entity("teams", team_id, updates))

    def update_team_stats(self, team_id: str, stats: models.TeamStats) -> models.Team:
        return self.update_team(team_id, {"stats": asdict(stats)})

    def update_payment_status(self, team_id: str, payment_status: str) -> models.Team:
        return self.update_team(team_id, {"payment_status": payment_status})

    def update_team_status(self, team_id: str, status: str) -> models.Team:
        team = self.update_team(team_id, {"status": status})
        log.info("Team %s is now %s", team_id, status)
        return team

    def delete_team(self, team_id: str) -> None:
        self._remove_entity("teams", team_id)

    # Players ---------------------------------------------------------
    def get_all_players(self) -> List[models.Player]:
        return self._load(models.Player, self._data["players"])

    def get_players_by_team(self, team_id: str) -> List[models.Player]:
        return self._load(models.Player, self._list_entities("players", team_id=team_id))

    def get_player_by_id(self, player_id: str) -> models.Player:
        return storage.instantiate(models.Player, self._find_entity("players", player_id))

    def create_player(self, player: models.Player) -> models.Player:
        self._find_entity("teams", player.team_id)
        return storage.instantiate(models.Player, self._create_entity("players", player))

    def update_player(self, player_id: str, updates: Dict) -> models.Player:
        return storage.instantiate(models.Player, self._update_entity("players", player_id, updates))

    def update_player_status(self, player_id: str, status: str) -> models.Player:
        return self.update_player(player_id, {"status": status})

    def delete_player(self, player_id: str) -> None:
        self._remove_entity("players", player_id)

    def _set_team_role(self, team_id: str, player_id: str, flag: str, team_key: str) -> models.Player:
        with self.transaction():
            self._find_entity("teams", team_id)
            target = self._find_entity("players", player_id)
            if target.get("team_id") != team_id:
                raise GatewayError(f"El jugador {player_id} no pertenece al equipo {team_id}")
            for item in self._list_entities("players", team_id=team_id):
                item[flag] = item["id"] == player_id
            self._update_entity("teams", team_id, {team_key: player_id})
        log.info("Player %s is now %s of team %s", player_id, flag, team_id)
        return storage.instantiate(models.Player, target)

    def set_team_captain(self, team_id: str, player_id: str) -> models.Player:
        return self._set_team_role(team_id, player_id, "is_captain", "captain_id")

    def set_team_vice_captain(self, team_id: str, player_id: str) -> models.Player:
        return self._set_team_role(team_id, player_id, "is_vice_captain", "vice_captain_id")

    # Matches ---------------------------------------------------------
    def get_matches(self, season_id: Optional[str] = None) -> List[models.Match]:
        items = self._list_entities("matches", season_id=season_id) if season_id else self._data["matches"]
        return self._load(models.Match, items)

    def get_matches_by_division(self, division_id: str) -> List[models.Match]:
        return self._load(models.Match, self._list_entities("matches", division_id=division_id))

    def get_matches_by_team(self, team_id: str) -> List[models.Match]:
        matches = [match for match in self.get_matches() if match.involves(team_id)]
        return sorted(matches, key=lambda match: (match.match_date or date.min, match.match_time))

    def get_match_by_id(self, match_id: str) -> models.Match:
        return storage.instantiate(models.Match, self._find_entity("matches", match_id))

    def create_match(self, match: models.Match) -> models.Match:
        self._find_entity("teams", match.home_team_id)
        self._find_entity("teams", match.away_team_id)
        return storage.instantiate(models.Match, self._create_entity("matches", match))

    def _refresh_team_stats(self, team_ids: Sequence[str]) -> None:
        matches = self.get_matches()
        for team_id in team_ids:
            try:
                team = self.get_team_by_id(team_id)
            except NotFoundError:
                log.warning("Match references missing team %s; stats not refreshed", team_id)
                continue
            self.update_team_stats(team_id, derived.fold_team_stats(team_id, matches, base=team.stats))

    def update_match(self, match_id: str, updates: Dict) -> models.Match:
        """Patch a match and keep its result consistent with the status.

        A completed match must carry both scores and its winner is derived from
        them; any other status clears the result.
        """
        with self.transaction():
            previous = self.get_match_by_id(match_id)
            record = self._update_entity("matches", match_id, updates)
            if record.get("status") == "completed":
                home, away = record.get("home_score"), record.get("away_score")
                if home is None or away is None:
                    raise ValidationError("Un partido finalizado necesita ambos marcadores.")
                record["winner"] = derived.match_winner(home, away)
            else:
                record.update({"home_score": None, "away_score": None, "winner": None})
            match = storage.instantiate(models.Match, record)
            team_ids = {previous.home_team_id, previous.away_team_id, match.home_team_id, match.away_team_id}
            self._refresh_team_stats(sorted(team_ids))
        return match

    def update_match_result(
        self, match_id: str, home_score: int, away_score: int, notes: Optional[str] = None
    ) -> models.Match:
        updates: Dict[str, Any] = {
            "home_score": home_score,
            "away_score": away_score,
            "winner": derived.match_winner(home_score, away_score),
            "status": "completed",
        }
        if notes:
            updates["notes"] = notes
        with self.transaction():
            match = storage.instantiate(models.Match, self._update_entity("matches", match_id, updates))
            self._refresh_team_stats([match.home_team_id, match.away_team_id])
        return match

    def delete_match(self, match_id: str) -> None:
        with self.transaction():
            match = self.get_match_by_id(match_id)
            self._remove_entity("matches", match_id)
            if match.status == "completed":
                self._refresh_team_stats([match.home_team_id, match.away_team_id])

    def generate_season_calendar(
        self,
        season_id: str,
        division_id: str,
        teams: Sequence[models.Team],
        start_date: date,
        fields_only: bool = True,
        double_round_robin: bool = False,
    ) -> List[models.Match]:
        if len(teams) < 2:
            raise GatewayError("Se necesitan al menos 2 equipos para generar un calendario")
        if not self.get_categories_by_division(division_id):
            raise GatewayError("No hay categorías en esta división")
        fields = [field for field in self.get_fields() if field.is_active]
        if fields_only:
            fields = [field for field in fields if field.status == "available"]
        fixtures = scheduling.build_calendar(teams, fields, start_date, double_round_robin=double_round_robin)
        created: List[models.Match] = []
        with self.transaction():
            for fixture in fixtures:
                created.append(
                    self.create_match(
                        models.Match(
                            id="",
                            season_id=season_id,
                            division_id=division_id,
                            category_id=fixture.category_id,
                            field_id=fixture.field_id,
                            home_team_id=fixture.home.id,
                            away_team_id=fixture.away.id,
                            home_team=models.TeamSnapshot(fixture.home.name, fixture.home.primary_color),
                            away_team=models.TeamSnapshot(fixture.away.name, fixture.away.primary_color),
                            round=fixture.round,
                            match_date=fixture.match_date,
                            match_time=fixture.match_time,
                        )
                    )
                )
        log.info("Generated %d matches for division %s", len(created), division_id)
        return created

    # Payments --------------------------------------------------------
    def get_payments_by_team(self, team_id: str) -> List[models.Payment]:
        payments = self._load(models.Payment, self._list_entities("payments", team_id=team_id))
        return sorted(payments, key=lambda payment: payment.payment_date)

    def create_payment(self, payment: models.Payment) -> models.Payment:
        self._find_entity("teams", payment.team_id)
        return storage.instantiate(models.Payment, self._create_entity("payments", payment))

    def record_payment(self, payment: models.Payment) -> models.Team:
        """Insert a payment and refresh the team's payment status in one write."""
        with self.transaction():
            self.create_payment(payment)
            team = self.get_team_by_id(payment.team_id)
            category = self.get_category_by_id(team.category_id)
            total = derived.payments_total(self.get_payments_by_team(team.id))
            team = self.update_payment_status(team.id, derived.derive_payment_status(total, category.price))
        return team

    def payment_summary(self, team_id: str) -> Dict[str, float]:
        payments = self.get_payments_by_team(team_id)
        summary = {"total": derived.payments_total(payments)}
        for status in ("paid", "pending", "overdue"):
            summary[status] = derived.payments_total(p for p in payments if p.status == status)
        return summary

    # Referees --------------------------------------------------------
    def get_referees(self, season_id: Optional[str] = None) -> List[models.Referee]:
        items = self._list_entities("referees", season_id=season_id) if season_id else self._data["referees"]
        return sorted(self._load(models.Referee, items), key=lambda referee: referee.name)

    def get_referee_by_id(self, referee_id: str) -> models.Referee:
        return storage.instantiate(models.Referee, self._find_entity("referees", referee_id))

    def create_referee(self, referee: models.Referee) -> models.Referee:
        return storage.instantiate(models.Referee, self._create_entity("referees", referee))

    def update_referee(self, referee_id: str, updates: Dict) -> models.Referee:
        return storage.instantiate(models.Referee, self._update_entity("referees", referee_id, updates))

    def delete_referee(self, referee_id: str) -> None:
        self._remove_entity("referees", referee_id)

    def assign_referee(self, match_id: str, referee_id: str) -> models.Match:
        """Put a referee on a match and count the assignment on the referee."""
        with self.transaction():
            referee = self._find_entity("referees", referee_id)
            record = self._update_entity(
                "matches", match_id, {"referee_id": referee_id, "referee_name": referee["name"]}
            )
            referee["matches_assigned"] = referee.get("matches_assigned", 0) + 1
        log.info("Referee %s assigned to match %s", referee_id, match_id)
        return storage.instantiate(models.Match, record)

    # Utility ---------------------------------------------------------
    def refresh(self) -> None:
        """Reload data from disk to reflect external changes."""
        with self._lock:
            self._data = storage.load_data(self._path)
