# sos_ratings/scrapers/espn_scraper.py

import asyncio
from typing import Callable, Iterable, List, Optional, Set, Union

from loguru import logger
from pydantic import ValidationError

from sos_ratings.config.settings import settings
from sos_ratings.models.listing import PaginatedItems
from sos_ratings.models.schedule import TeamSchedule
from sos_ratings.models.season import SeasonQuery
from .base_scraper import BaseScraper, DiscoveryError, FetchError

# The regular season is season type 2 on the core API
REGULAR_SEASON_TYPE = 2


class EspnScraper(BaseScraper):
    """Scraper for team listings and team schedules from the public ESPN APIs."""

    source: str = "ESPN"

    def __init__(
        self,
        *args,
        core_api_base_url: Optional[str] = None,
        site_api_base_url: Optional[str] = None,
        page_limit: Optional[int] = None,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self.core_api_base_url = (core_api_base_url or settings.core_api_base_url).rstrip("/")
        self.site_api_base_url = (site_api_base_url or settings.site_api_base_url).rstrip("/")
        self.page_limit = page_limit or settings.page_limit

    def teams_url(self, query: SeasonQuery) -> str:
        season_url = (
            f"{self.core_api_base_url}/sports/{query.sport}"
            f"/leagues/{query.league}/seasons/{query.season}"
        )
        if query.group is not None:
            return f"{season_url}/types/{REGULAR_SEASON_TYPE}/groups/{query.group}/teams"
        return f"{season_url}/teams"

    def schedule_url(self, query: SeasonQuery, team_id: Union[int, str]) -> str:
        return (
            f"{self.site_api_base_url}/sports/{query.sport}/{query.league}"
            f"/teams/{team_id}/schedule"
        )

    async def discover_team_ids(self, query: SeasonQuery) -> Set[int]:
        """Walks the paginated team listing and collects every team id.

        Stops after the page that reports itself as the last one. Items whose
        reference carries no numeric id are skipped.

        Raises:
            DiscoveryError: if any page cannot be fetched or parsed.
        """
        url = self.teams_url(query)
        team_ids: Set[int] = set()
        page = 0

        logger.info(f"Discovering teams for {query}")
        while True:
            page += 1
            params = {"limit": self.page_limit, "page": page}
            try:
                payload = await self._get_json(url, params=params)
                listing = PaginatedItems.model_validate(payload)
            except FetchError as e:
                raise DiscoveryError(f"Failed to fetch team listing page {page}: {e}") from e
            except ValidationError as e:
                raise DiscoveryError(
                    f"Malformed team listing page {page} from {self.source}: {e}"
                ) from e

            page_ids = {
                team_id
                for item in listing.items
                if (team_id := item.team_id()) is not None
            }
            team_ids.update(page_ids)
            logger.debug(
                f"Listing page {listing.page_index}/{listing.page_count}: "
                f"{len(page_ids)} ids from {len(listing.items)} items"
            )

            # a stale pageIndex must not keep the loop alive
            if listing.is_last_page or page >= listing.page_count:
                break

        logger.info(f"Discovered {len(team_ids)} teams across {page} page(s)")
        return team_ids

    async def fetch_schedule(
        self, query: SeasonQuery, team_id: Union[int, str]
    ) -> TeamSchedule:
        """Fetches one team's season schedule.

        Raises:
            FetchError: on transport failure or a payload that does not parse.
        """
        url = self.schedule_url(query, team_id)
        payload = await self._get_json(url, params={"season": query.season})
        try:
            return TeamSchedule.model_validate(payload)
        except ValidationError as e:
            raise FetchError(
                f"Malformed schedule for team {team_id} from {self.source}: "
                f"{e.error_count()} validation error(s)"
            ) from e

    async def fetch_schedules(
        self,
        query: SeasonQuery,
        team_ids: Iterable[Union[int, str]],
        concurrency_limit: Optional[int] = None,
        on_progress: Optional[Callable[[], None]] = None,
    ) -> List[TeamSchedule]:
        """Fetches schedules for all teams with at most `concurrency_limit` in flight.

        Teams whose fetch fails are left out of the result. The result order
        carries no meaning.
        """
        limit = settings.max_concurrency if concurrency_limit is None else concurrency_limit
        if limit < 1:
            raise ValueError(f"concurrency_limit must be at least 1, got {limit}")

        team_ids = list(team_ids)
        semaphore = asyncio.Semaphore(limit)

        async def fetch_one(team_id: Union[int, str]) -> TeamSchedule:
            try:
                async with semaphore:
                    return await self.fetch_schedule(query, team_id)
            finally:
                if on_progress:
                    on_progress()

        logger.info(
            f"Fetching {len(team_ids)} schedules from {self.source} "
            f"({limit} concurrent)"
        )
        results = await asyncio.gather(
            *(fetch_one(team_id) for team_id in team_ids), return_exceptions=True
        )

        schedules: List[TeamSchedule] = []
        for team_id, result in zip(team_ids, results):
            if isinstance(result, TeamSchedule):
                schedules.append(result)
            elif isinstance(result, FetchError):
                logger.warning(f"Dropping team {team_id}: {result}")
            elif isinstance(result, Exception):
                logger.opt(exception=result).error(
                    f"Dropping team {team_id} after unexpected error: {result}"
                )
            else:
                raise result

        dropped = len(team_ids) - len(schedules)
        logger.info(
            f"Fetched {len(schedules)} schedules"
            + (f", dropped {dropped}" if dropped else "")
        )
        return schedules
