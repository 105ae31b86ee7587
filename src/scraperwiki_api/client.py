"""HTTP client for the ScraperWiki API.

See https://scraperwiki.com/docs/api for the remote operations. Every call is
a GET with query-string parameters and a JSON response body.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import requests

from scraperwiki_api.config import ClientConfig, ScraperWikiConfig

logger = logging.getLogger(__name__)


class ApiRequestError(RuntimeError):
    """
    Raised when a ScraperWiki API call fails or returns an undecodable body.
    """

    def __init__(self, path: str, message: str, status_code: int | None = None) -> None:
        self.path = path
        self.status_code = status_code
        super().__init__(f"{path}: {message}")


def _join(value: Any, separator: str) -> Any:
    """Join list-valued options the way the API expects them."""
    if isinstance(value, Iterable) and not isinstance(value, (str, bytes)):
        return separator.join(str(item) for item in value)
    return value


class ScraperWikiAPI:
    """
    Thin wrapper around the six ScraperWiki API operations.
    """

    def __init__(
        self,
        apikey: str | None = None,
        *,
        config: ScraperWikiConfig | ClientConfig | None = None,
        session: requests.Session | None = None,
    ) -> None:
        if isinstance(config, ScraperWikiConfig):
            config = config.client
        self._config = config or ClientConfig()
        self.apikey = apikey if apikey is not None else self._config.apikey
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": self._config.user_agent})

    @property
    def base_url(self) -> str:
        return self._config.base_url

    def datastore_sqlite(self, shortname: str, query: str, **opts: Any) -> Any:
        """Query and extract data via a general purpose SQL interface.

        Args:
            shortname: the scraper's shortname (as it appears in the URL)
            query: a SQL query
            **opts: ``format`` (one of "jsondict", "jsonlist", "csv",
                "htmltable" or "rss2") and ``attach`` (datastores from other
                scrapers, a list or a ';'-delimited string)
        """
        if "attach" in opts:
            opts["attach"] = _join(opts["attach"], ";")
        return self._request_with_apikey("/datastore/sqlite", {"name": shortname, "query": query, **opts})

    def scraper_getinfo(self, shortname: str, **opts: Any) -> list[dict[str, Any]]:
        """Extract data about a scraper's code, owner, history, etc.

        Args:
            shortname: the scraper's shortname
            **opts: ``version`` (-1 for most recent), ``history_start_date``
                (YYYY-MM-DD) and ``quietfields`` (fields to leave out, a
                subset of code|runevents|datasummary|userroles|history, as a
                list or a '|'-delimited string)
        """
        if "quietfields" in opts:
            opts["quietfields"] = _join(opts["quietfields"], "|")
        return self._request_with_apikey("/scraper/getinfo", {"shortname": shortname, **opts})

    def scraper_getruninfo(self, shortname: str, **opts: Any) -> list[dict[str, Any]]:
        """See what the scraper did during each run.

        Args:
            shortname: the scraper's shortname
            **opts: ``runid``
        """
        return self._request_with_apikey("/scraper/getruninfo", {"shortname": shortname, **opts})

    def scraper_getuserinfo(self, username: str) -> list[dict[str, Any]]:
        """Find out information about a user."""
        return self._request_with_apikey("/scraper/getuserinfo", {"username": username})

    def scraper_search(self, **opts: Any) -> list[dict[str, Any]]:
        """Search the titles and descriptions of all the scrapers.

        Example output::

            [
              {
                "description": "Scrapes stuff.",
                "language": "python",
                "created": "1970-01-01T00:00:00",
                "title": "Example scraper",
                "short_name": "example-scraper",
                "privacy_status": "public"
              },
              ...
            ]

        Args:
            **opts: ``searchquery``, ``maxrows`` (default 5) and
                ``requestinguser`` (orders the matches)
        """
        return self._request_with_apikey("/scraper/search", opts)

    def scraper_usersearch(self, **opts: Any) -> list[dict[str, Any]]:
        """Search for a user by name.

        Args:
            **opts: ``searchquery``, ``maxrows``, ``nolist`` (users not to
                return, a list or a space-separated string) and
                ``requestinguser``
        """
        if "nolist" in opts:
            opts["nolist"] = _join(opts["nolist"], " ")
        return self._request("/scraper/usersearch", opts)

    def get_scraper_info(self, shortname: str, **opts: Any) -> dict[str, Any]:
        """Return the single info record for a scraper."""
        response = self.scraper_getinfo(shortname, **opts)
        if not isinstance(response, list) or not response:
            raise ApiRequestError("/scraper/getinfo", f"no scraper info returned for {shortname}")
        return response[0]

    def get_dataset(self, shortname: str, query: str, **opts: Any) -> Any:
        """Return the rows of a datastore query as a list of records."""
        opts.setdefault("format", "jsondict")
        return self.datastore_sqlite(shortname, query, **opts)

    def _request_with_apikey(self, path: str, params: dict[str, Any]) -> Any:
        if self.apikey:
            params = {**params, "apikey": self.apikey}
        return self._request(path, params)

    def _request(self, path: str, params: dict[str, Any]) -> Any:
        """Execute a GET request and return the decoded JSON body."""
        url = f"{self.base_url}{path}"
        query = {key: value for key, value in params.items() if value is not None}
        logger.debug(f"GET {url} params={sorted(query)}")

        try:
            response = self._session.get(url, params=query, timeout=self._config.timeout_seconds)
            response.raise_for_status()
        except requests.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else None
            logger.error(f"Request to {path} failed with status {status_code}")
            raise ApiRequestError(path, f"HTTP error {status_code}", status_code) from e
        except requests.RequestException as e:
            logger.error(f"Request to {path} failed: {e}")
            raise ApiRequestError(path, f"request failed: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise ApiRequestError(path, "response was not valid JSON", response.status_code) from e
