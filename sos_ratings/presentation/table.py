from typing import List, Optional, Sequence

from rich.table import Table
from rich import box

from sos_ratings.models.enums import SortKey
from sos_ratings.models.rating import TableRow, TeamRating

_SORT_ATTRIBUTES = {
    SortKey.OVERALL: "overall_rating",
    SortKey.DEFENSE: "defense_rating",
    SortKey.OFFENSE: "offense_rating",
}


def build_table_rows(
    ratings: Sequence[TeamRating],
    sort_by: SortKey = SortKey.OVERALL,
    reverse: bool = False,
    top: Optional[int] = None,
) -> List[TableRow]:
    """Ranks teams by overall rating and orders the rows for display.

    Ranks always reflect the overall ordering, even when the rows are
    re-sorted by defense or offense. Ties keep their input order.
    """
    by_overall = sorted(ratings, key=lambda r: r.overall_rating, reverse=True)
    rows = [
        TableRow(
            rank=position,
            team=rating.team.location,
            overall_rating=rating.overall_rating,
            defense_rating=rating.defense_rating,
            offense_rating=rating.offense_rating,
        )
        for position, rating in enumerate(by_overall, start=1)
    ]

    if sort_by is not SortKey.OVERALL:
        attribute = _SORT_ATTRIBUTES[sort_by]
        rows.sort(key=lambda row: getattr(row, attribute), reverse=True)

    if reverse:
        rows.reverse()

    if top is not None:
        rows = rows[:top]

    return rows


def render_table(rows: Sequence[TableRow], title: Optional[str] = None) -> Table:
    """Builds a rich table with one line per ranked team."""
    table = Table(title=title, box=box.SIMPLE_HEAD)
    table.add_column("#", justify="right")
    table.add_column("Team", justify="left")
    table.add_column("OVR", justify="right")
    table.add_column("DEF", justify="right")
    table.add_column("OFF", justify="right")

    for row in rows:
        table.add_row(
            str(row.rank),
            row.team,
            f"{row.overall_rating:.2f}",
            f"{row.defense_rating:.2f}",
            f"{row.offense_rating:.2f}",
        )
    return table
