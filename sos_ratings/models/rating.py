from pydantic import BaseModel, ConfigDict, computed_field

from .team import Team


class TeamRating(BaseModel):
    """Opponent-adjusted ratings for one team."""

    model_config = ConfigDict(frozen=True)

    team: Team
    defense_rating: float
    offense_rating: float

    @computed_field  # type: ignore[misc]
    @property
    def overall_rating(self) -> float:
        return self.defense_rating + self.offense_rating


class TableRow(BaseModel):
    """A ranked row of the ratings table."""

    model_config = ConfigDict(frozen=True)

    rank: int
    team: str
    overall_rating: float
    defense_rating: float
    offense_rating: float
