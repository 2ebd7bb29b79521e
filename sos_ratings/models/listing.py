from typing import List, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field


class Ref(BaseModel):
    """A `$ref` link to a resource on the ESPN core API."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    url: str = Field(..., alias="$ref")

    def team_id(self) -> Optional[int]:
        """Extracts the numeric id from a reference such as `.../teams/333?lang=en`.

        Returns None for references that do not end in `<digits>?<query>`.
        """
        _, sep, last_segment = self.url.rpartition("/")
        if not sep:
            logger.debug(f"Ignoring unparseable team reference: {self.url}")
            return None
        segment, sep, _ = last_segment.partition("?")
        if not sep or not (segment.isascii() and segment.isdigit()):
            logger.debug(f"Ignoring unparseable team reference: {self.url}")
            return None
        return int(segment)


class PaginatedItems(BaseModel):
    """One page of a paginated ESPN listing."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    page_index: int = Field(..., alias="pageIndex")
    page_count: int = Field(..., alias="pageCount")
    items: List[Ref] = []

    @property
    def is_last_page(self) -> bool:
        # pageCount is 0 for an empty listing
        return self.page_index >= self.page_count
