from datetime import date

import pytest

from tocho import models, services
from tocho.errors import NotFoundError, ValidationError


@pytest.fixture
def directory(league):
    return services.PlayerDirectory(league.gateway)


def test_create_requires_a_team(directory):
    with pytest.raises(ValidationError):
        directory.create("Ana", team_id="")

    assert directory.players == []


def test_create_rejects_unknown_team(directory):
    with pytest.raises(NotFoundError):
        directory.create("Ana", team_id="ghost")


def test_directory_uses_generic_positions(directory, league):
    player = directory.create("Ana", team_id=league.teams[0].id, position="delantero")

    assert player.position == "delantero"
    with pytest.raises(ValidationError):
        directory.create("Beto", team_id=league.teams[0].id, position="quarterback")


@pytest.mark.parametrize("number", [0, 100, "siete"])
def test_jersey_number_must_be_between_1_and_99(directory, league, number):
    with pytest.raises(ValidationError):
        directory.create("Ana", team_id=league.teams[0].id, number=number)


def test_new_player_starts_pending_and_registered(directory, league):
    player = directory.create(
        "Ana",
        team_id=league.teams[0].id,
        last_name="Pérez",
        number="7",
        date_of_birth=date(2000, 1, 31),
        emergency_contact=models.EmergencyContact(name="Luis", phone="555"),
    )

    assert player.status == "pending"
    assert player.number == 7
    assert player.registration_date is not None
    assert player.full_name == "Ana Pérez"
    stored = league.gateway.get_player_by_id(player.id)
    assert stored.emergency_contact.name == "Luis"
    assert stored.date_of_birth == date(2000, 1, 31)


def test_filter_by_search_status_position_and_team(directory, league):
    first, second = league.teams[:2]
    directory.create("Ana", team_id=first.id, email="ana@liga.mx", position="defensa")
    directory.create("Beto", team_id=second.id, phone="555-1234", position="defensa")
    carla = directory.create("Carla", team_id=second.id, position="portero")
    directory.update_status(carla.id, "active")

    assert [p.name for p in directory.filter(search="LIGA.MX")] == ["Ana"]
    assert [p.name for p in directory.filter(search="1234")] == ["Beto"]
    assert [p.name for p in directory.filter(position="defensa", team_id=second.id)] == ["Beto"]
    assert [p.name for p in directory.filter(status="active")] == ["Carla"]
    assert len(directory.filter(status="all", position="", team_id=None)) == 3


def test_update_status_validates(directory, league):
    player = directory.create("Ana", team_id=league.teams[0].id)

    with pytest.raises(ValidationError):
        directory.update_status(player.id, "retired")

    updated = directory.update_status(player.id, "injured")
    assert updated.status == "injured"
    assert directory.players[0].status == "injured"


def test_delete_removes_from_list(directory, league):
    player = directory.create("Ana", team_id=league.teams[0].id)

    directory.delete(player.id)

    assert directory.players == []
    with pytest.raises(NotFoundError):
        league.gateway.get_player_by_id(player.id)
