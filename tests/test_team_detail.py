from datetime import date

import pytest

from tocho import derived, models, services
from tocho.errors import GatewayError, NotFoundError, ValidationError
from tocho.gateway import LeagueGateway


@pytest.fixture
def detail(league):
    return services.TeamDetail(league.gateway)


@pytest.fixture
def roster(detail, league):
    team = league.teams[0]
    return [
        detail.add_player(team.id, "Ana", number=12, position="quarterback"),
        detail.add_player(team.id, "Beto", number=3),
        detail.add_player(team.id, "Carla", number=None, position="safety"),
    ]


def test_load_resolves_category_chain(detail, league):
    view = detail.load(league.teams[0].id)

    assert view.category.id == league.category.id
    assert view.division.id == league.division.id
    assert view.season.id == league.season.id
    assert view.payment_summary == {"total": 0, "paid": 0, "pending": 0, "overdue": 0}


def test_load_with_broken_category_raises(detail, league):
    league.gateway.update_team(league.teams[0].id, {"category_id": "ghost"})

    with pytest.raises(NotFoundError):
        detail.load(league.teams[0].id)


def test_roster_is_sorted_by_number(detail, roster, league):
    view = detail.load(league.teams[0].id)

    assert [player.name for player in view.players] == ["Beto", "Ana", "Carla"]
    assert all(not player.is_captain for player in view.players)


def test_roster_uses_flag_football_positions(detail, league):
    player = detail.add_player(league.teams[0].id, "Dani")

    assert player.position == "wide_receiver"
    with pytest.raises(ValidationError):
        detail.add_player(league.teams[0].id, "Eva", position="portero")


def test_exactly_one_captain_per_team(detail, roster, league):
    team_id = league.teams[0].id
    ana, beto, _ = roster

    detail.set_captain(team_id, ana.id)
    detail.set_captain(team_id, beto.id)

    view = detail.view
    assert [player.name for player in view.players if player.is_captain] == ["Beto"]
    assert view.captain.id == beto.id
    assert view.team.captain_id == beto.id


def test_vice_captain_is_independent_of_captain(detail, roster, league):
    team_id = league.teams[0].id
    ana, beto, carla = roster

    detail.set_captain(team_id, ana.id)
    detail.set_vice_captain(team_id, carla.id)
    detail.set_vice_captain(team_id, beto.id)

    players = {player.name: player for player in detail.view.players}
    assert players["Ana"].is_captain and not players["Ana"].is_vice_captain
    assert players["Beto"].is_vice_captain
    assert not players["Carla"].is_vice_captain
    assert detail.view.team.vice_captain_id == beto.id


def test_captain_from_another_team_is_refused(detail, roster, league):
    outsider = detail.add_player(league.teams[1].id, "Fede")
    detail.set_captain(league.teams[0].id, roster[0].id)

    with pytest.raises(GatewayError):
        detail.set_captain(league.teams[0].id, outsider.id)

    players = league.gateway.get_players_by_team(league.teams[0].id)
    assert [player.name for player in players if player.is_captain] == ["Ana"]


def test_payment_status_follows_cumulative_total(detail, league):
    team_id = league.teams[0].id

    statuses = [
        detail.add_payment(team_id, amount, payment_date=date(2025, 3, day)).payment_status
        for amount, day in ((500, 1), (800, 2), (700, 3))
    ]

    assert statuses == ["partial", "partial", "paid"]
    assert league.gateway.get_team_by_id(team_id).payment_status == "paid"
    assert detail.view.payment_summary["total"] == 2000


def test_overpayment_is_still_paid(detail, league):
    team = detail.add_payment(league.teams[0].id, 2500)

    assert team.payment_status == "paid"


@pytest.mark.parametrize("amount", [0, -10, "abc", "nan", "inf", "-inf", float("nan")])
def test_invalid_amount_is_rejected(detail, league, amount):
    with pytest.raises(ValidationError):
        detail.add_payment(league.teams[0].id, amount)

    assert league.gateway.get_payments_by_team(league.teams[0].id) == []


def test_rejected_nan_does_not_poison_payment_status(detail, league):
    team_id = league.teams[0].id
    with pytest.raises(ValidationError, match="finito"):
        detail.add_payment(team_id, "nan")

    assert detail.add_payment(team_id, 1000).payment_status == "partial"
    assert detail.add_payment(team_id, 1000).payment_status == "paid"
    assert league.gateway.payment_summary(team_id)["total"] == 2000


def test_failed_status_recompute_leaves_no_payment(detail, league, data_file, monkeypatch):
    def broken(total, price):
        raise GatewayError("sin conexión")

    monkeypatch.setattr(derived, "derive_payment_status", broken)

    with pytest.raises(GatewayError):
        detail.add_payment(league.teams[0].id, 500)

    assert league.gateway.get_payments_by_team(league.teams[0].id) == []
    assert LeagueGateway(data_file).get_payments_by_team(league.teams[0].id) == []


def test_payment_summary_splits_by_status(detail, league):
    team_id = league.teams[0].id
    detail.add_payment(team_id, 300, status="paid")
    detail.add_payment(team_id, 200, status="pending")

    summary = detail.view.payment_summary

    assert summary == {"total": 500, "paid": 300, "pending": 200, "overdue": 0}


def test_paid_payment_records_paid_date(detail, league):
    detail.add_payment(league.teams[0].id, 100, payment_date=date(2025, 4, 6))
    detail.add_payment(league.teams[0].id, 100, payment_date=date(2025, 4, 7), status="pending")

    first, second = detail.view.payments
    assert first.paid_date == date(2025, 4, 6)
    assert second.paid_date is None


def test_payments_cannot_be_edited_or_removed():
    assert not hasattr(LeagueGateway, "delete_payment")
    assert not hasattr(LeagueGateway, "update_payment")
    assert not hasattr(services.TeamDetail, "delete_payment")


def test_update_team_refuses_structural_fields(detail, league):
    with pytest.raises(ValidationError):
        detail.update_team(league.teams[0].id, category_id="other")

    updated = detail.update_team(league.teams[0].id, short_name="HAL", notes="Campeones 2024")
    assert updated.short_name == "HAL"
    assert detail.view.team.notes == "Campeones 2024"


def test_record_reflects_stats(detail, league):
    league.gateway.update_team(league.teams[0].id, {"stats": {"wins": 3, "draws": 1, "losses": 2}})

    record = detail.record(league.teams[0].id)

    assert (record.wins, record.draws, record.losses, record.total_games) == (3, 1, 2, 6)


def test_recent_matches_keep_last_five_completed(detail, league):
    gateway = league.gateway
    home, away = league.teams[:2]
    for day in range(1, 8):
        match = gateway.create_match(
            _match(league, home.id, away.id, date(2025, 3, day), round_number=day)
        )
        gateway.update_match_result(match.id, day, 0)
    gateway.create_match(_match(league, home.id, away.id, date(2025, 3, 20), round_number=8))

    view = detail.load(home.id)

    assert [match.round for match in view.recent_matches] == [7, 6, 5, 4, 3]


def _match(league, home_id, away_id, match_date, round_number):
    return models.Match(
        id="",
        season_id=league.season.id,
        division_id=league.division.id,
        home_team_id=home_id,
        away_team_id=away_id,
        round=round_number,
        match_date=match_date,
        match_time="09:00",
    )
