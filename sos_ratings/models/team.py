# sos_ratings/models/team.py
from pydantic import BaseModel, ConfigDict

# ESPN serves ids as strings on the site API and as integers in $ref URLs
TeamId = str


class Team(BaseModel):
    """A team as described by its schedule document."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    id: TeamId
    location: str  # e.g. "Michigan", used as the display name
