import pytest

from tocho import catalog, models, services
from tocho.errors import ValidationError


@pytest.fixture
def board(gateway):
    return services.FieldBoard(gateway)


def test_empty_store_shows_unpersisted_catalog(board, gateway):
    fields = board.list()

    assert board.using_fallback
    assert len(fields) == catalog.FIELD_CATALOG_SIZE
    assert fields[0].id == "fallback-1"
    assert gateway.get_fields() == []


def test_default_fields_follow_the_catalog(gateway):
    created = gateway.create_default_fields()

    assert [item.code for item in created[:3]] == ["CAMPO 1", "CAMPO 2", "CAMPO 3"]
    assert [item.type for item in created[:2]] == ["sintético", "césped"]
    assert [item.capacity for item in created[:3]] == [100, 110, 120]
    assert [item.priority for item in created[:4]] == [1, 1, 2, 2]
    assert created[15].priority == 8
    assert created[0].location.address == "Calle Deportes 1, Col. Deportiva"
    assert "iluminación" in created[5].facilities
    assert all(not item.id.startswith("fallback") for item in created)


def test_board_stops_using_fallback_once_fields_exist(board):
    board.create("CAMPO 20", "Campo Norte")

    assert not board.using_fallback
    assert [item.code for item in board.fields] == ["CAMPO 20"]


@pytest.mark.parametrize(
    "code, zone",
    [
        ("CAMPO 1", "bottom_row"),
        ("CAMPO 3", "bottom_row"),
        ("CAMPO 5", "left_side"),
        ("CAMPO 9", "top_row"),
        ("CAMPO 13", "right_side"),
        ("CAMPO 14", "center"),
        ("SIN NUMERO", "center"),
        (None, "center"),
    ],
)
def test_zone_for_code(code, zone):
    assert catalog.zone_for_code(code) == zone


def test_create_assigns_zone_unless_given(board):
    derived_zone = board.create("CAMPO 10", "Campo 10")
    explicit = board.create("CAMPO 11", "Campo 11", zone="center")

    assert derived_zone.zone == "right_side"
    assert explicit.zone == "center"


def test_create_rejects_unknown_type(board, gateway):
    with pytest.raises(ValidationError):
        board.create("CAMPO 1", "Campo 1", type="concreto")

    assert gateway.get_fields() == []


def test_filters_combine_with_and(board):
    board.create("CAMPO 1", "Campo Uno", type="sintético", location={"address": "Av. Juárez 10"})
    board.create("CAMPO 2", "Campo Dos", type="césped", status="maintenance")
    board.create("CAMPO 3", "Campo Tres", type="sintético", status="maintenance")

    assert [item.code for item in board.filter(status="maintenance", field_type="sintético")] == ["CAMPO 3"]
    assert [item.code for item in board.filter(search="juárez")] == ["CAMPO 1"]
    assert [item.code for item in board.filter(search="campo d")] == ["CAMPO 2"]
    assert len(board.filter(status="all", field_type="")) == 3


def test_set_status_validates_and_reloads(board):
    item = board.create("CAMPO 4", "Campo 4")

    board.set_status(item.id, "reserved")
    assert board.fields[0].status == "reserved"

    with pytest.raises(ValidationError):
        board.set_status(item.id, "closed")
    assert board.fields[0].status == "reserved"


def test_map_layout_groups_by_zone(board, gateway):
    gateway.create_default_fields()
    board.list()

    layout = board.map_layout()

    assert set(layout) == set(models.FIELD_ZONES)
    assert [item.code for item in layout["top_row"]] == ["CAMPO 7", "CAMPO 8", "CAMPO 9"]
    assert len(layout["right_side"]) == 4
    assert [item.code for item in layout["center"]] == ["CAMPO 14", "CAMPO 15", "CAMPO 16"]


def test_delete_reloads_list(board):
    first = board.create("CAMPO 1", "Campo 1")
    board.create("CAMPO 2", "Campo 2")

    board.delete(first.id)

    assert [item.code for item in board.fields] == ["CAMPO 2"]
