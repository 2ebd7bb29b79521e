import math
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from .team import Team, TeamId


class CompetitorScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Untyped: a non-numeric value makes the game unusable, not the schedule
    value: Any = None


class Competitor(BaseModel):
    """One side of a competition."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    id: TeamId
    score: Optional[CompetitorScore] = None

    @property
    def points(self) -> Optional[float]:
        """The score as a float, or None when absent or not a finite number."""
        if self.score is None:
            return None
        value = self.score.value
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        try:
            points = float(value)
        except OverflowError:
            # integers beyond float range
            return None
        if not math.isfinite(points):
            return None
        return points


class Competition(BaseModel):
    model_config = ConfigDict(frozen=True)

    competitors: List[Competitor] = []

    def sides(self, team_id: TeamId) -> Optional[Tuple[Competitor, Competitor]]:
        """Returns `(team, opponent)` for `team_id`, matched by id.

        None when the competition is not a two-sided matchup involving the team.
        """
        if len(self.competitors) != 2:
            return None
        first, second = self.competitors
        if first.id == team_id:
            return first, second
        if second.id == team_id:
            return second, first
        return None


class Event(BaseModel):
    """A schedule entry. Postponed or resumed games can carry several competitions."""

    model_config = ConfigDict(frozen=True)

    competitions: List[Competition] = []

    @property
    def final_competition(self) -> Optional[Competition]:
        """The last competition, which reflects the official result."""
        return self.competitions[-1] if self.competitions else None


class TeamSchedule(BaseModel):
    """A team's season schedule as returned by the site API."""

    model_config = ConfigDict(frozen=True)

    team: Team
    events: List[Event] = []
