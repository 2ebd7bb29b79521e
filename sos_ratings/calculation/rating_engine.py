from dataclasses import dataclass
from types import MappingProxyType
from typing import FrozenSet, Iterator, List, Mapping, NamedTuple, Optional, Sequence

from loguru import logger

from sos_ratings.models.rating import TeamRating
from sos_ratings.models.schedule import TeamSchedule
from sos_ratings.models.team import TeamId


class ScoredGame(NamedTuple):
    """A countable game seen from one team's side."""

    opponent_id: TeamId
    points_for: float
    points_against: float


class Baseline(NamedTuple):
    """A team's average points scored and allowed."""

    scored: float
    allowed: float


@dataclass(frozen=True)
class RatingContext:
    """Read-only view of every fetched schedule, shared by all rating lookups."""

    schedules: Mapping[TeamId, TeamSchedule]

    @property
    def known_team_ids(self) -> FrozenSet[TeamId]:
        return frozenset(self.schedules)

    @classmethod
    def from_schedules(cls, schedules: Sequence[TeamSchedule]) -> "RatingContext":
        by_id = {schedule.team.id: schedule for schedule in schedules}
        return cls(schedules=MappingProxyType(by_id))

    def is_known(self, team_id: TeamId) -> bool:
        return team_id in self.schedules


def scored_games(
    schedule: TeamSchedule,
    context: RatingContext,
    exclude_opponent: Optional[TeamId] = None,
) -> Iterator[ScoredGame]:
    """Yields the games of `schedule` that can be used for rating.

    A game counts when its final competition involves the team, the opponent
    is a known team other than `exclude_opponent`, and both scores are numeric.
    """
    team_id = schedule.team.id
    for event in schedule.events:
        competition = event.final_competition
        if competition is None:
            continue
        sides = competition.sides(team_id)
        if sides is None:
            continue
        us, them = sides
        if them.id == exclude_opponent or not context.is_known(them.id):
            continue
        points_for, points_against = us.points, them.points
        if points_for is None or points_against is None:
            continue
        yield ScoredGame(them.id, points_for, points_against)


def opponent_baseline(
    opponent_id: TeamId, rated_team_id: TeamId, context: RatingContext
) -> Optional[Baseline]:
    """Average scoring of `opponent_id` over its games against everyone but the rated team.

    Returns None when the opponent has no such games.
    """
    schedule = context.schedules.get(opponent_id)
    if schedule is None:
        return None
    games = list(scored_games(schedule, context, exclude_opponent=rated_team_id))
    if not games:
        return None
    return Baseline(
        scored=sum(game.points_for for game in games) / len(games),
        allowed=sum(game.points_against for game in games) / len(games),
    )


def rate_team(schedule: TeamSchedule, context: RatingContext) -> Optional[TeamRating]:
    """Rates one team against its opponents' baselines.

    Returns None when no game survives filtering.
    """
    team_id = schedule.team.id
    defense_total = 0.0
    offense_total = 0.0
    count = 0

    for game in scored_games(schedule, context):
        baseline = opponent_baseline(game.opponent_id, team_id, context)
        if baseline is None:
            logger.debug(
                f"Skipping {schedule.team.location} vs {game.opponent_id}: "
                f"opponent has no games to average"
            )
            continue
        defense_total += baseline.scored - game.points_against
        offense_total += game.points_for - baseline.allowed
        count += 1

    if count == 0:
        return None

    return TeamRating(
        team=schedule.team,
        defense_rating=defense_total / count,
        offense_rating=offense_total / count,
    )


def compute_ratings(schedules: Sequence[TeamSchedule]) -> List[TeamRating]:
    """Computes opponent-adjusted defense and offense ratings for every team.

    Only the complete set of fetched schedules gives correct baselines, so
    this runs once after all fetches have finished. Teams with no usable
    games are omitted from the result.
    """
    context = RatingContext.from_schedules(schedules)
    logger.info(f"Calculating ratings for {len(context.schedules)} teams...")

    ratings: List[TeamRating] = []
    for schedule in context.schedules.values():
        if not schedule.events:
            continue
        rating = rate_team(schedule, context)
        if rating is None:
            logger.debug(f"No usable games for {schedule.team.location}, omitting")
            continue
        ratings.append(rating)

    logger.success(
        f"Rating calculation complete. Rated {len(ratings)} of {len(context.schedules)} teams."
    )
    return ratings
