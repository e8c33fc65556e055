from datetime import date
from types import SimpleNamespace

import pytest

from tocho import services
from tocho.gateway import LeagueGateway
from tocho.web import create_app


@pytest.fixture
def data_file(tmp_path):
    return tmp_path / "league.json"


@pytest.fixture
def gateway(data_file):
    return LeagueGateway(data_file)


@pytest.fixture
def league(gateway):
    """One season, one division, category A (price 2000) and four teams."""
    structure = services.LeagueStructure(gateway)
    season = structure.create_season(
        "Primavera 2025", start_date=date(2025, 3, 1), end_date=date(2025, 6, 30), status="active"
    )
    division = structure.create_division(season.id, "Varonil", order=1)
    category = services.CategoryManager(gateway).create(division.id, season.id, "a", level=1, price=2000)
    teams = [
        structure.create_team(name, category.id, primary_color=color)
        for name, color in (
            ("Halcones", "#ff0000"),
            ("Lobos", "#00ff00"),
            ("Toros", "#0000ff"),
            ("Coyotes", "#ffff00"),
        )
    ]
    return SimpleNamespace(gateway=gateway, season=season, division=division, category=category, teams=teams)


@pytest.fixture
def app(data_file):
    app = create_app({"DATA_FILE": str(data_file), "TESTING": True, "SECRET_KEY": "test"})
    return app


@pytest.fixture
def client(app):
    return app.test_client()
