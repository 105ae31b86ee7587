"""Enumerations and constants for ScraperWiki scraper metadata."""

from enum import Enum

SCRAPER_URL_TEMPLATE = "https://scraperwiki.com/scrapers/{shortname}/"


class PrivacyStatus(str, Enum):
    """Values of a scraper's ``privacy_status`` field."""
    PUBLIC = "public"
    PROTECTED = "visible"
    PRIVATE = "private"


class RunInterval(int, Enum):
    """Schedules a scraper can run on, as ``run_interval`` seconds."""
    NEVER = -1
    MONTHLY = 2678400
    WEEKLY = 604800
    DAILY = 86400
    HOURLY = 3600

    @classmethod
    def from_name(cls, name: "str | RunInterval") -> "RunInterval":
        """Look up an interval by its lowercase name, e.g. ``"daily"``.

        Raises:
            KeyError: If the name is not a known interval
        """
        if isinstance(name, RunInterval):
            return name
        return cls[str(name).strip().upper()]

    @property
    def label(self) -> str:
        return self.name.lower()


def scraper_url(shortname: str) -> str:
    """Return the public page of a scraper."""
    return SCRAPER_URL_TEMPLATE.format(shortname=shortname)
