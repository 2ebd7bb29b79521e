from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SeasonQuery(BaseModel):
    """Identifies the league season whose teams are rated."""

    model_config = ConfigDict(frozen=True)

    sport: str  # e.g. "football"
    league: str  # e.g. "college-football"
    season: int = Field(..., ge=0)
    group: Optional[int] = None  # e.g. 80 for FBS

    def __str__(self) -> str:
        group = f" group {self.group}" if self.group is not None else ""
        return f"{self.sport}/{self.league} {self.season}{group}"
