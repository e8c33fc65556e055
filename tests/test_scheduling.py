from collections import Counter
from datetime import date, timedelta
from itertools import combinations

import pytest

from tocho import catalog, models, scheduling
from tocho.errors import GatewayError


def _teams(count, category_id="cat-a"):
    return [
        models.Team(id=f"{category_id}-{index}", name=f"Equipo {index}", category_id=category_id, season_id="s")
        for index in range(1, count + 1)
    ]


@pytest.mark.parametrize(
    "day, expected",
    [
        (date(2025, 3, 9), date(2025, 3, 9)),
        (date(2025, 3, 10), date(2025, 3, 16)),
        (date(2025, 3, 15), date(2025, 3, 16)),
        (date(2025, 12, 31), date(2026, 1, 4)),
    ],
)
def test_next_sunday(day, expected):
    assert scheduling.next_sunday(day) == expected
    assert expected.weekday() == 6


def test_round_robin_pairs_everyone_once():
    ids = ["a", "b", "c", "d", "e", "f"]

    rounds = scheduling.round_robin(ids)

    assert len(rounds) == 5
    assert all(len(pairs) == 3 for pairs in rounds)
    played = Counter(frozenset(pair) for pairs in rounds for pair in pairs)
    assert set(played) == {frozenset(pair) for pair in combinations(ids, 2)}
    assert set(played.values()) == {1}
    for pairs in rounds:
        teams_in_round = [team for pair in pairs for team in pair]
        assert len(teams_in_round) == len(set(teams_in_round))


def test_odd_group_rests_one_team_per_round():
    rounds = scheduling.round_robin(["a", "b", "c", "d", "e"])

    assert len(rounds) == 5
    resting = []
    for pairs in rounds:
        playing = {team for pair in pairs for team in pair}
        assert len(pairs) == 2
        resting.extend({"a", "b", "c", "d", "e"} - playing)
    assert sorted(resting) == ["a", "b", "c", "d", "e"]


def test_calendar_rounds_fall_on_consecutive_sundays():
    fields = catalog.fallback_fields()

    fixtures = scheduling.build_calendar(_teams(4), fields, date(2025, 3, 5))

    dates = sorted({fixture.match_date for fixture in fixtures})
    assert dates == [date(2025, 3, 9) + timedelta(days=7 * offset) for offset in range(3)]
    assert all(fixture.match_date.weekday() == 6 for fixture in fixtures)


def test_calendar_never_double_books_a_field():
    fields = [
        models.Field(id="f-low", code="CAMPO 2", name="Campo 2", priority=2),
        models.Field(id="f-high", code="CAMPO 1", name="Campo 1", priority=1),
    ]

    fixtures = scheduling.build_calendar(_teams(6) + _teams(4, "cat-b"), fields, date(2025, 3, 9))

    slots = Counter((fixture.match_date, fixture.field_id, fixture.match_time) for fixture in fixtures)
    assert max(slots.values()) == 1
    first_round = [fixture for fixture in fixtures if fixture.round == 1]
    assert (first_round[0].field_id, first_round[0].match_time) == ("f-high", "07:00")
    assert (first_round[1].field_id, first_round[1].match_time) == ("f-low", "07:00")
    assert (first_round[2].field_id, first_round[2].match_time) == ("f-high", "08:00")


def test_categories_are_paired_separately():
    fixtures = scheduling.build_calendar(
        _teams(3) + _teams(2, "cat-b"), catalog.fallback_fields(), date(2025, 3, 9)
    )

    for fixture in fixtures:
        assert fixture.home.category_id == fixture.away.category_id == fixture.category_id
    assert sum(1 for fixture in fixtures if fixture.category_id == "cat-b") == 1


def test_double_round_robin_mirrors_the_first_leg():
    single = scheduling.build_calendar(_teams(4), catalog.fallback_fields(), date(2025, 3, 9))
    double = scheduling.build_calendar(
        _teams(4), catalog.fallback_fields(), date(2025, 3, 9), double_round_robin=True
    )

    assert len(double) == 2 * len(single)
    first_leg = {(f.home.id, f.away.id) for f in double if f.round <= 3}
    second_leg = {(f.home.id, f.away.id) for f in double if f.round > 3}
    assert second_leg == {(away, home) for home, away in first_leg}


def test_calendar_requires_a_field():
    with pytest.raises(GatewayError):
        scheduling.build_calendar(_teams(4), [], date(2025, 3, 9))


def test_calendar_fails_when_a_round_exceeds_capacity():
    one_field = [models.Field(id="f1", code="CAMPO 1", name="Campo 1")]

    with pytest.raises(GatewayError):
        scheduling.build_calendar(_teams(22), one_field, date(2025, 3, 9))
