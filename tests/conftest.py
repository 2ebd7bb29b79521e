import pytest

from sos_ratings.models.schedule import TeamSchedule


def competitor(team_id, score):
    entry = {"id": team_id}
    if score is not None:
        entry["score"] = {"value": score, "displayValue": str(score)}
    return entry


def game(team_id, opponent_id, points_for, points_against, team_first=True):
    """A schedule event with a single competition."""
    us = competitor(team_id, points_for)
    them = competitor(opponent_id, points_against)
    competitors = [us, them] if team_first else [them, us]
    return {"competitions": [{"competitors": competitors}]}


@pytest.fixture
def schedule_payload():
    """Builds a raw schedule document: games are (opponent, points_for, points_against)."""

    def build(team_id, location, games):
        return {
            "team": {"id": team_id, "location": location, "abbreviation": location[:3]},
            "events": [
                game(team_id, opponent, points_for, points_against)
                for opponent, points_for, points_against in games
            ],
        }

    return build


@pytest.fixture
def make_schedule(schedule_payload):
    def build(team_id, location, games):
        return TeamSchedule.model_validate(schedule_payload(team_id, location, games))

    return build
