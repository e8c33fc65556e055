from datetime import date

import pytest

from tocho import services


def _notifications(response):
    return [(item["kind"], item["message"]) for item in response.get_json()["notifications"]]


def test_dashboard_lists_counts(client, league):
    payload = client.get("/").get_json()

    assert payload["seasons"] == 1
    assert payload["teams"] == 4
    assert payload["notifications"] == []


def test_create_season_flashes_success(client):
    response = client.post("/temporadas", data={"name": "Otoño 2025", "status": "upcoming"})

    assert response.status_code == 302
    page = client.get("/temporadas")
    assert _notifications(page) == [("success", "Temporada creada exitosamente.")]
    assert [season["name"] for season in page.get_json()["seasons"]] == ["Otoño 2025"]
    assert page.get_json()["dialog"] is None


def test_invalid_season_keeps_dialog_open_with_typed_values(client):
    response = client.post(
        "/temporadas",
        data={"name": "", "description": "Torneo corto", "status": "upcoming"},
        follow_redirects=True,
    )

    payload = response.get_json()
    assert _notifications(response) == [("error", "El nombre de la temporada es obligatorio.")]
    assert payload["dialog"]["open"] is True
    assert payload["dialog"]["draft"]["description"] == "Torneo corto"
    assert payload["seasons"] == []


def test_edit_dialog_is_built_from_the_entity(client, league):
    payload = client.get(f"/temporadas?edit={league.season.id}").get_json()

    assert payload["dialog"]["title"] == "Editar temporada"
    assert payload["dialog"]["draft"]["name"] == "Primavera 2025"


def test_delete_requires_confirmation(client, league, gateway):
    structure = services.LeagueStructure(gateway)
    spare = structure.create_season("Descartable")

    response = client.post(f"/temporadas/{spare.id}/eliminar", follow_redirects=True)
    assert _notifications(response)[0][0] == "info"
    assert len(response.get_json()["seasons"]) == 2

    response = client.post(f"/temporadas/{spare.id}/eliminar", data={"confirm": "1"}, follow_redirects=True)
    assert _notifications(response) == [("success", "Temporada eliminada.")]
    assert len(response.get_json()["seasons"]) == 1


def test_restricted_delete_reports_error(client, league):
    response = client.post(
        f"/temporadas/{league.season.id}/eliminar", data={"confirm": "1"}, follow_redirects=True
    )

    assert _notifications(response) == [("error", "No se puede eliminar una temporada que tiene divisiones.")]


def test_default_categories_only_for_empty_division(client, league, gateway):
    division = services.LeagueStructure(gateway).create_division(league.season.id, "Femenil")

    first = client.post(f"/divisiones/{division.id}/categorias/predeterminadas", follow_redirects=True)
    second = client.post(f"/divisiones/{division.id}/categorias/predeterminadas", follow_redirects=True)

    assert _notifications(first)[0][0] == "success"
    assert [category["name"] for category in first.get_json()["categories"]] == list("ABCDEFG")
    assert _notifications(second)[0][0] == "info"
    assert len(second.get_json()["categories"]) == 7
    assert second.get_json()["can_create_defaults"] is False


def test_fields_page_shows_fallback_then_seeded_catalog(client):
    page = client.get("/campos").get_json()
    assert page["using_fallback"] is True
    assert len(page["fields"]) == 16

    seeded = client.post("/campos/predeterminados", follow_redirects=True).get_json()
    assert seeded["using_fallback"] is False
    assert seeded["map"]["top_row"] == ["CAMPO 7", "CAMPO 8", "CAMPO 9"]

    filtered = client.get("/campos", query_string={"q": "deportes 12"}).get_json()
    assert [item["code"] for item in filtered["fields"]] == ["CAMPO 12"]


def test_create_field_from_form(client):
    response = client.post(
        "/campos",
        data={
            "code": "CAMPO 5",
            "name": "Campo Oriente",
            "type": "arena",
            "capacity": "80",
            "priority": "3",
            "facilities": "iluminación\ngradas",
            "address": "Av. Oriente 5",
            "is_active": "on",
        },
        follow_redirects=True,
    )

    payload = response.get_json()
    assert _notifications(response) == [("success", "Campo creado exitosamente.")]
    created = payload["fields"][0]
    assert created["zone"] == "left_side"
    assert created["facilities"] == ["iluminación", "gradas"]
    assert created["location"]["address"] == "Av. Oriente 5"


def test_team_detail_unknown_team_redirects_to_listing(client):
    response = client.get("/equipos/ghost")

    assert response.status_code == 302
    assert response.headers["Location"].endswith("/equipos")
    listing = client.get("/equipos")
    assert _notifications(listing)[0][0] == "error"


def test_payment_flow_updates_payment_status(client, league):
    team_id = league.teams[0].id

    client.post(f"/equipos/{team_id}/pagos", data={"amount": "500", "payment_date": "2025-03-01"})
    page = client.get(f"/equipos/{team_id}").get_json()

    assert page["team"]["payment_status"] == "partial"
    assert page["payment_summary"]["total"] == 500
    assert page["category"]["name"] == "A"
    assert page["season"]["id"] == league.season.id


def test_invalid_payment_reopens_payment_dialog(client, league):
    team_id = league.teams[0].id

    response = client.post(f"/equipos/{team_id}/pagos", data={"amount": "0"}, follow_redirects=True)

    payload = response.get_json()
    assert _notifications(response)[0][0] == "error"
    assert payload["dialog"]["title"] == "Registrar pago"
    assert payload["payments"] == []


def test_roster_player_and_captain(client, league, gateway):
    team_id = league.teams[0].id

    client.post(
        f"/equipos/{team_id}/jugadores",
        data={"name": "Ana", "number": "10", "position": "quarterback", "status": "active"},
        follow_redirects=True,
    )
    gateway.refresh()
    player = gateway.get_players_by_team(team_id)[0]
    response = client.post(f"/equipos/{team_id}/capitan", data={"player_id": player.id}, follow_redirects=True)

    payload = response.get_json()
    assert _notifications(response) == [("success", "Capitán designado exitosamente.")]
    assert payload["team"]["captain_id"] == player.id
    assert payload["players"][0]["is_captain"] is True


def test_calendar_generation_and_result(client, league, gateway):
    gateway.create_default_fields()

    response = client.post(
        "/partidos/calendario",
        data={
            "season_id": league.season.id,
            "division_id": league.division.id,
            "start_date": "2025-03-05",
        },
        follow_redirects=True,
    )

    payload = response.get_json()
    assert _notifications(response)[0][0] == "success"
    assert [block["round"] for block in payload["rounds"]] == [1, 2, 3]
    first = payload["rounds"][0]["matches"][0]
    assert first["match_date"] == "2025-03-09"

    client.post(f"/partidos/{first['id']}/resultado", data={"home_score": "14", "away_score": "0"})
    finished = client.get(
        f"/partidos?temporada={league.season.id}&division={league.division.id}&estado=finalizado"
    ).get_json()
    assert [match["id"] for block in finished["rounds"] for match in block["matches"]] == [first["id"]]

    table = client.get(f"/divisiones/{league.division.id}/posiciones").get_json()["standings"]
    assert table[0]["points"] == 3


@pytest.mark.parametrize("path", ["/jugadores", "/equipos", "/arbitros", "/partidos"])
def test_listing_pages_render(client, league, path):
    response = client.get(path)

    assert response.status_code == 200
    assert "notifications" in response.get_json()


@pytest.mark.parametrize("score", ["nan", "inf"])
def test_non_finite_score_flashes_error(client, league, gateway, score):
    a, b = league.teams[:2]
    match = services.MatchBoard(gateway).create_match(
        league.season.id, league.division.id, a.id, b.id, date(2025, 3, 9), "07:00"
    )

    response = client.post(
        f"/partidos/{match.id}/resultado",
        data={"home_score": score, "away_score": "0"},
        follow_redirects=True,
    )

    assert response.status_code == 200
    assert _notifications(response) == [("error", "El marcador local debe ser un número finito.")]
    gateway.refresh()
    assert gateway.get_match_by_id(match.id).status == "scheduled"


def test_infinite_category_limit_flashes_error(client, league):
    response = client.post(
        f"/divisiones/{league.division.id}/categorias",
        data={"name": "B", "level": "2", "team_limit": "inf", "price": "100"},
        follow_redirects=True,
    )

    payload = response.get_json()
    assert response.status_code == 200
    assert _notifications(response) == [("error", "El límite de equipos debe ser un número finito.")]
    assert payload["dialog"]["draft"]["team_limit"] == "inf"
    assert [category["name"] for category in payload["categories"]] == ["A"]


def test_team_status_and_payment_status_routes(client, league):
    team_id = league.teams[0].id

    client.post(f"/equipos/{team_id}/estado", data={"status": "approved"}, follow_redirects=True)
    response = client.post(
        f"/equipos/{team_id}/estado-pago", data={"payment_status": "overdue"}, follow_redirects=True
    )

    assert _notifications(response) == [("success", "Estado de pago actualizado exitosamente.")]
    overdue = client.get("/equipos?pago=overdue&estado=approved").get_json()["teams"]
    assert [(team["name"], team["status"]) for team in overdue] == [("Halcones", "approved")]

    response = client.post(f"/equipos/{team_id}/estado", data={"status": "retired"}, follow_redirects=True)
    assert _notifications(response)[0][0] == "error"


def test_manual_match_create_and_edit(client, league):
    a, b, c = league.teams[:3]
    form = {
        "season_id": league.season.id,
        "division_id": league.division.id,
        "home_team_id": a.id,
        "away_team_id": b.id,
        "match_date": "2025-04-06",
        "match_time": "09:00",
        "round": "2",
    }

    response = client.post("/partidos", data=form, follow_redirects=True)

    assert _notifications(response) == [("success", "Partido creado exitosamente.")]
    created = response.get_json()["rounds"][0]["matches"][0]
    assert (created["round"], created["home_team"]["name"]) == (2, "Halcones")

    edit = client.get(
        f"/partidos?temporada={league.season.id}&division={league.division.id}&editar={created['id']}"
    ).get_json()
    assert edit["dialog"]["title"] == "Editar partido"
    assert edit["dialog"]["draft"]["away_team_id"] == b.id

    response = client.post(
        f"/partidos/{created['id']}", data={**form, "away_team_id": c.id}, follow_redirects=True
    )
    assert _notifications(response) == [("success", "Partido actualizado exitosamente.")]
    assert response.get_json()["rounds"][0]["matches"][0]["away_team"]["name"] == "Toros"


def test_manual_match_with_same_teams_keeps_dialog(client, league):
    a = league.teams[0]

    response = client.post(
        "/partidos",
        data={
            "season_id": league.season.id,
            "division_id": league.division.id,
            "home_team_id": a.id,
            "away_team_id": a.id,
            "match_date": "2025-04-06",
            "match_time": "09:00",
        },
        follow_redirects=True,
    )

    payload = response.get_json()
    assert _notifications(response) == [("error", "El equipo local y visitante no pueden ser el mismo.")]
    assert payload["dialog"]["title"] == "Crear nuevo partido"
    assert payload["rounds"] == []


def test_referee_routes(client, league, gateway):
    response = client.post(
        "/arbitros",
        data={
            "season_id": league.season.id,
            "name": "Rosa Méndez",
            "level": "advanced",
            "specialization": "main",
        },
        follow_redirects=True,
    )
    assert _notifications(response) == [("success", "Árbitro creado exitosamente.")]
    referee = response.get_json()["referees"][0]

    a, b = league.teams[:2]
    gateway.refresh()
    match = services.MatchBoard(gateway).create_match(
        league.season.id, league.division.id, a.id, b.id, date(2025, 3, 9), "07:00"
    )
    response = client.post(
        f"/partidos/{match.id}/arbitro", data={"referee_id": referee["id"]}, follow_redirects=True
    )
    assert _notifications(response) == [("success", "Árbitro asignado exitosamente.")]
    assert response.get_json()["rounds"][0]["matches"][0]["referee_name"] == "Rosa Méndez"

    response = client.post(
        "/arbitros",
        data={"referee_id": referee["id"], "name": "Rosa M.", "level": "fifa", "specialization": "var"},
        follow_redirects=True,
    )
    assert _notifications(response) == [("success", "Árbitro actualizado exitosamente.")]
    assert response.get_json()["referees"][0]["level"] == "fifa"

    response = client.post(f"/arbitros/{referee['id']}/eliminar", data={"confirm": "1"}, follow_redirects=True)
    assert _notifications(response) == [("success", "Árbitro eliminado.")]
    assert response.get_json()["referees"] == []


def test_season_archive_duplicate_and_default_divisions_routes(client, league):
    season_id = league.season.id

    response = client.post(f"/temporadas/{season_id}/duplicar", follow_redirects=True)
    assert _notifications(response) == [("success", "Temporada duplicada exitosamente.")]
    names = {season["name"]: season for season in response.get_json()["seasons"]}
    assert names["Primavera 2025 - Copia"]["status"] == "upcoming"

    response = client.post(f"/temporadas/{season_id}/archivar", follow_redirects=True)
    assert _notifications(response) == [("success", "Temporada archivada exitosamente.")]
    archived = next(season for season in response.get_json()["seasons"] if season["id"] == season_id)
    assert archived["status"] == "archived"

    response = client.post(f"/temporadas/{season_id}/divisiones/predeterminadas", follow_redirects=True)
    assert _notifications(response)[0][0] == "info"
    assert response.get_json()["can_create_defaults"] is False

    client.post("/temporadas", data={"name": "Invierno 2025", "status": "upcoming"}, follow_redirects=True)
    empty = next(
        season for season in client.get("/temporadas").get_json()["seasons"] if season["name"] == "Invierno 2025"
    )
    response = client.post(f"/temporadas/{empty['id']}/divisiones/predeterminadas", follow_redirects=True)
    assert _notifications(response) == [("success", "Divisiones predeterminadas creadas exitosamente.")]
    assert [division["name"] for division in response.get_json()["divisions"]] == ["Varonil", "Femenil", "Mixto"]
