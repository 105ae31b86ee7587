"""Tests for the ScraperWiki API client."""

from unittest.mock import MagicMock

import pytest
import requests

from scraperwiki_api.client import ApiRequestError, ScraperWikiAPI
from scraperwiki_api.config import ClientConfig, ScraperWikiConfig


def make_session(payload=None, status_code=200, error=None):
    """Build a session mock whose GET returns ``payload``."""
    session = MagicMock()
    session.headers = {}
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(response=response)
    if error is not None:
        session.get.side_effect = error
    else:
        session.get.return_value = response
    return session


def sent(session):
    """Return the URL and params of the last GET."""
    args, kwargs = session.get.call_args
    return args[0], kwargs["params"]


class TestRequests:
    """Test URLs and query parameters of each operation."""

    def test_datastore_sqlite(self):
        session = make_session([{"a": 1}])
        api = ScraperWikiAPI(session=session)

        rows = api.datastore_sqlite("example", "SELECT * FROM swdata", format="jsondict", attach=["x", "y"])

        url, params = sent(session)
        assert rows == [{"a": 1}]
        assert url == "https://api.scraperwiki.com/api/1.0/datastore/sqlite"
        assert params == {
            "name": "example",
            "query": "SELECT * FROM swdata",
            "format": "jsondict",
            "attach": "x;y",
        }

    def test_attach_string_passes_through(self):
        session = make_session([])
        ScraperWikiAPI(session=session).datastore_sqlite("example", "q", attach="x;y")

        assert sent(session)[1]["attach"] == "x;y"

    def test_getinfo(self):
        session = make_session([{"short_name": "example"}])
        api = ScraperWikiAPI(session=session)

        api.scraper_getinfo("example", version=-1, quietfields=["code", "history"])

        url, params = sent(session)
        assert url.endswith("/scraper/getinfo")
        assert params == {"shortname": "example", "version": -1, "quietfields": "code|history"}

    def test_getruninfo(self):
        session = make_session([])
        ScraperWikiAPI(session=session).scraper_getruninfo("example", runid="1234")

        url, params = sent(session)
        assert url.endswith("/scraper/getruninfo")
        assert params == {"shortname": "example", "runid": "1234"}

    def test_getuserinfo(self):
        session = make_session([])
        ScraperWikiAPI(session=session).scraper_getuserinfo("frabcus")

        url, params = sent(session)
        assert url.endswith("/scraper/getuserinfo")
        assert params == {"username": "frabcus"}

    def test_search(self):
        session = make_session([])
        ScraperWikiAPI(session=session).scraper_search(searchquery="lobbyists", maxrows=10)

        url, params = sent(session)
        assert url.endswith("/scraper/search")
        assert params == {"searchquery": "lobbyists", "maxrows": 10}

    def test_usersearch_joins_nolist_and_omits_apikey(self):
        session = make_session([])
        api = ScraperWikiAPI("secret", session=session)

        api.scraper_usersearch(searchquery="fr", nolist=["alice", "bob"])

        url, params = sent(session)
        assert url.endswith("/scraper/usersearch")
        assert params == {"searchquery": "fr", "nolist": "alice bob"}

    def test_apikey_added(self):
        session = make_session([])
        ScraperWikiAPI("secret", session=session).scraper_search()

        assert sent(session)[1] == {"apikey": "secret"}

    def test_none_options_dropped(self):
        session = make_session([])
        ScraperWikiAPI(session=session).scraper_getinfo("example", version=None, history_start_date=None)

        assert sent(session)[1] == {"shortname": "example"}

    def test_config_applied(self):
        session = make_session([])
        config = ClientConfig(baseUrl="http://localhost:8000/api/", apikey="from-config",
                              timeoutSeconds=5, userAgent="tests")

        api = ScraperWikiAPI(config=config, session=session)
        api.scraper_getuserinfo("frabcus")

        url, params = sent(session)
        assert url == "http://localhost:8000/api/scraper/getuserinfo"
        assert params["apikey"] == "from-config"
        assert session.get.call_args.kwargs["timeout"] == 5
        assert session.headers["User-Agent"] == "tests"

    def test_explicit_apikey_overrides_config(self):
        config = ScraperWikiConfig(client={"apikey": "from-config"})
        api = ScraperWikiAPI("explicit", config=config, session=make_session())

        assert api.apikey == "explicit"


class TestConvenience:
    """Test get_scraper_info and get_dataset."""

    def test_get_scraper_info(self):
        api = ScraperWikiAPI(session=make_session([{"short_name": "example"}]))
        assert api.get_scraper_info("example") == {"short_name": "example"}

    def test_get_scraper_info_empty(self):
        api = ScraperWikiAPI(session=make_session([]))

        with pytest.raises(ApiRequestError, match="no scraper info returned for missing"):
            api.get_scraper_info("missing")

    def test_get_dataset_defaults_to_jsondict(self):
        session = make_session([])
        ScraperWikiAPI(session=session).get_dataset("example", "SELECT 1")

        assert sent(session)[1]["format"] == "jsondict"


class TestErrors:
    """Test transport and decoding failures."""

    def test_http_error(self):
        api = ScraperWikiAPI(session=make_session(status_code=500))

        with pytest.raises(ApiRequestError) as exc_info:
            api.scraper_getuserinfo("frabcus")

        assert exc_info.value.status_code == 500
        assert exc_info.value.path == "/scraper/getuserinfo"
        assert "HTTP error 500" in str(exc_info.value)

    def test_connection_error(self):
        api = ScraperWikiAPI(session=make_session(error=requests.ConnectionError("refused")))

        with pytest.raises(ApiRequestError, match="request failed: refused"):
            api.scraper_search()

    def test_invalid_json(self):
        session = make_session()
        session.get.return_value.json.side_effect = ValueError("Expecting value")
        api = ScraperWikiAPI(session=session)

        with pytest.raises(ApiRequestError, match="response was not valid JSON"):
            api.scraper_search()
