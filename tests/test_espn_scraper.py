import asyncio

import httpx
import pytest

from sos_ratings.models.listing import Ref
from sos_ratings.models.season import SeasonQuery
from sos_ratings.scrapers.base_scraper import DiscoveryError, FetchError
from sos_ratings.scrapers.espn_scraper import EspnScraper

CORE = "https://core.test/v2"
SITE = "https://site.test/apis/site/v2"


def team_ref(team_id):
    return {
        "$ref": f"http://sports.core.api.espn.com/v2/sports/football/leagues/college-football/seasons/2024/teams/{team_id}?lang=en&region=us"
    }


def make_scraper(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return EspnScraper(
        client=client, core_api_base_url=CORE, site_api_base_url=SITE, page_limit=1000
    )


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def query():
    return SeasonQuery(sport="football", league="college-football", season=2024)


def listing_handler(pages, seen=None):
    def handler(request):
        if seen is not None:
            seen.append(request)
        page = int(request.url.params["page"])
        return httpx.Response(200, json=pages[page - 1])

    return handler


async def discover(handler, query):
    async with make_scraper(handler) as scraper:
        return await scraper.discover_team_ids(query)


@pytest.mark.parametrize(
    "url, expected",
    [
        ("http://x/teams/333?lang=en", 333),
        ("http://x/teams/2?", 2),
        ("http://x/teams/333", None),
        ("http://x/teams/abc?lang=en", None),
        ("http://x/teams/-4?lang=en", None),
        ("333?lang=en", None),
    ],
)
def test_ref_team_id(url, expected):
    assert Ref.model_validate({"$ref": url}).team_id() == expected


def test_discovery_unions_all_pages(query):
    pages = [
        {"count": 3, "pageIndex": 1, "pageSize": 2, "pageCount": 2, "items": [team_ref(1), team_ref(2)]},
        {"count": 3, "pageIndex": 2, "pageSize": 2, "pageCount": 2, "items": [team_ref(3)]},
    ]
    seen = []
    assert run(discover(listing_handler(pages, seen), query)) == {1, 2, 3}
    assert [r.url.params["page"] for r in seen] == ["1", "2"]
    assert all(r.url.params["limit"] == "1000" for r in seen)
    assert seen[0].url.path == "/v2/sports/football/leagues/college-football/seasons/2024/teams"


def test_discovery_continues_past_empty_page(query):
    pages = [
        {"pageIndex": 1, "pageCount": 3, "items": []},
        {"pageIndex": 2, "pageCount": 3, "items": [team_ref(8)]},
        {"pageIndex": 3, "pageCount": 3, "items": [team_ref(9)]},
    ]
    assert run(discover(listing_handler(pages), query)) == {8, 9}


def test_discovery_stops_at_reported_last_page_even_with_items_left(query):
    pages = [
        {"pageIndex": 1, "pageCount": 1, "items": [team_ref(5)]},
        {"pageIndex": 2, "pageCount": 1, "items": [team_ref(6)]},
    ]
    seen = []
    assert run(discover(listing_handler(pages, seen), query)) == {5}
    assert len(seen) == 1


def test_discovery_stops_on_empty_listing(query):
    pages = [{"pageIndex": 1, "pageCount": 0, "items": []}]
    assert run(discover(listing_handler(pages), query)) == set()


def test_discovery_stops_when_page_index_never_advances(query):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(
            200, json={"pageIndex": 1, "pageCount": 3, "items": [team_ref(len(seen))]}
        )

    assert run(discover(handler, query)) == {1, 2, 3}
    assert [r.url.params["page"] for r in seen] == ["1", "2", "3"]


def test_discovery_drops_malformed_references(query):
    pages = [
        {
            "pageIndex": 1,
            "pageCount": 1,
            "items": [team_ref(1), {"$ref": "http://x/teams/notanid?lang=en"}, team_ref(4)],
        }
    ]
    assert run(discover(listing_handler(pages), query)) == {1, 4}


def test_discovery_uses_group_path():
    seen = []
    pages = [{"pageIndex": 1, "pageCount": 1, "items": [team_ref(7)]}]
    grouped = SeasonQuery(sport="football", league="college-football", season=2024, group=80)
    run(discover(listing_handler(pages, seen), grouped))
    assert seen[0].url.path.endswith("/seasons/2024/types/2/groups/80/teams")


def test_discovery_fails_on_http_error(query):
    def handler(request):
        if request.url.params["page"] == "2":
            return httpx.Response(503)
        return httpx.Response(200, json={"pageIndex": 1, "pageCount": 2, "items": []})

    with pytest.raises(DiscoveryError):
        run(discover(handler, query))


def test_discovery_fails_on_malformed_page(query):
    def handler(request):
        return httpx.Response(200, json={"items": [team_ref(1)]})

    with pytest.raises(DiscoveryError):
        run(discover(handler, query))


def test_discovery_fails_on_transport_error(query):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(DiscoveryError) as excinfo:
        run(discover(handler, query))
    assert isinstance(excinfo.value, FetchError)


def schedule_handler(schedule_payload, failures=None):
    failures = failures or {}

    def handler(request):
        team_id = request.url.path.split("/")[-2]
        if team_id in failures:
            return failures[team_id](request)
        return httpx.Response(
            200, json=schedule_payload(team_id, f"Team {team_id}", [])
        )

    return handler


def test_fetch_schedule_url(query, schedule_payload):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=schedule_payload("12", "Twelve", [("34", 3, 0)]))

    async def go():
        async with make_scraper(handler) as scraper:
            return await scraper.fetch_schedule(query, 12)

    schedule = run(go())
    assert schedule.team.id == "12"
    assert schedule.team.location == "Twelve"
    assert seen[0].url.path == "/apis/site/v2/sports/football/college-football/teams/12/schedule"
    assert seen[0].url.params["season"] == "2024"


def test_fetch_isolates_failures(query, schedule_payload):
    failures = {
        "1": lambda request: httpx.Response(500),
        "2": lambda request: httpx.Response(200, content=b"<html>oops</html>"),
        "3": lambda request: httpx.Response(200, json={"team": {"id": "3"}}),
    }
    progress = []

    async def go():
        async with make_scraper(schedule_handler(schedule_payload, failures)) as scraper:
            return await scraper.fetch_schedules(
                query, [1, 2, 3, 4, 5], concurrency_limit=2,
                on_progress=lambda: progress.append(1),
            )

    schedules = run(go())
    assert sorted(s.team.id for s in schedules) == ["4", "5"]
    assert len(progress) == 5


def test_fetch_respects_concurrency_limit(query, schedule_payload):
    in_flight = 0
    peak = 0

    async def handler(request):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        team_id = request.url.path.split("/")[-2]
        return httpx.Response(200, json=schedule_payload(team_id, team_id, []))

    async def go():
        async with make_scraper(handler) as scraper:
            return await scraper.fetch_schedules(query, range(10), concurrency_limit=3)

    schedules = run(go())
    assert len(schedules) == 10
    assert peak == 3


def test_fetch_rejects_zero_concurrency(query, schedule_payload):
    async def go():
        async with make_scraper(schedule_handler(schedule_payload)) as scraper:
            return await scraper.fetch_schedules(query, [1], concurrency_limit=0)

    with pytest.raises(ValueError):
        run(go())


def test_fetch_with_no_teams(query, schedule_payload):
    async def go():
        async with make_scraper(schedule_handler(schedule_payload)) as scraper:
            return await scraper.fetch_schedules(query, [], concurrency_limit=4)

    assert run(go()) == []
