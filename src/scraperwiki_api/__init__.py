"""scraperwiki-api - ScraperWiki API client and scraper validation matchers.

Wraps the ScraperWiki API (version 1.0) and provides matchers that check a
scraper's metadata and the rows in its datastore.
"""

__version__ = "0.1.0"
__author__ = "scraperwiki-api contributors"
__description__ = "ScraperWiki API client and matchers for scrapers and datastores"

from scraperwiki_api.client import ApiRequestError, ScraperWikiAPI
from scraperwiki_api.config import ScraperWikiConfig
from scraperwiki_api.models import scraper_url

__all__ = [
    "__version__",
    "__author__",
    "__description__",
    "ApiRequestError",
    "ScraperWikiAPI",
    "ScraperWikiConfig",
    "scraper_url",
]
