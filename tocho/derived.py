"""Values computed from other documents: payment status, results and standings."""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from . import models

POINTS_PER_WIN = 3
POINTS_PER_DRAW = 1


def derive_payment_status(total_paid: float, category_price: float) -> str:
    """Fold a team's payment total against its category price.

    ``overdue`` is never produced here; it is only ever set explicitly.
    """

    if total_paid <= 0:
        return "pending"
    if total_paid >= category_price:
        return "paid"
    return "partial"


def payments_total(payments: Iterable[models.Payment]) -> float:
    return round(sum(payment.amount for payment in payments), 2)


def match_winner(home_score: int, away_score: int) -> str:
    if home_score > away_score:
        return "home"
    if away_score > home_score:
        return "away"
    return "draw"


def fold_team_stats(
    team_id: str, matches: Iterable[models.Match], *, base: Optional[models.TeamStats] = None
) -> models.TeamStats:
    """Rebuild the result columns of a team's stats from its completed matches.

    Columns not derived from results (``penalties``) are carried over from ``base``.
    """

    stats = models.TeamStats(penalties=base.penalties if base else 0)
    for match in matches:
        if match.status != "completed" or not match.involves(team_id):
            continue
        if match.home_score is None or match.away_score is None:
            continue
        is_home = match.home_team_id == team_id
        scored = match.home_score if is_home else match.away_score
        conceded = match.away_score if is_home else match.home_score
        stats.matches_played += 1
        stats.points_for += scored
        stats.points_against += conceded
        if scored > conceded:
            stats.wins += 1
        elif scored < conceded:
            stats.losses += 1
        else:
            stats.draws += 1
    stats.points = stats.wins * POINTS_PER_WIN + stats.draws * POINTS_PER_DRAW
    return stats


def team_record(team: models.Team) -> models.TeamRecord:
    return models.TeamRecord(wins=team.stats.wins, draws=team.stats.draws, losses=team.stats.losses)


def compute_standings(teams: Iterable[models.Team], matches: Iterable[models.Match]) -> List[models.Standing]:
    """Table ordered by points, point difference, points scored, then name."""
    match_list = list(matches)
    rows: Dict[str, models.Standing] = {}
    for team in teams:
        stats = fold_team_stats(team.id, match_list)
        rows[team.id] = models.Standing(
            team_id=team.id,
            team_name=team.name,
            played=stats.matches_played,
            wins=stats.wins,
            draws=stats.draws,
            losses=stats.losses,
            points_for=stats.points_for,
            points_against=stats.points_against,
            points=stats.points,
        )
    return sorted(
        rows.values(),
        key=lambda row: (-row.points, -row.difference, -row.points_for, row.team_name.lower()),
    )
