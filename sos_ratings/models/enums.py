from enum import Enum


class SortKey(str, Enum):
    """Rating column a ratings table is ordered by."""

    OVERALL = "OVERALL"
    DEFENSE = "DEFENSE"
    OFFENSE = "OFFENSE"
