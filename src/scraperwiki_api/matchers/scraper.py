"""Matchers for a scraper's metadata, as returned by ``scraper_getinfo``.

Each matcher checks one aspect of a single ScraperInfo mapping. Missing
sections of the mapping (``datasummary``, ``userroles``, ``runevents``)
degrade to empty values instead of raising.
"""

from abc import abstractmethod
from dataclasses import dataclass
from typing import Any

from ..models import PrivacyStatus, RunInterval, scraper_url
from .framework import Matcher, MatcherUsageError, MatchResult, TableScopedMixin, expected_tuple


def _tables(info: dict) -> dict:
    return (info.get("datasummary") or {}).get("tables") or {}


@dataclass(frozen=True)
class ScraperInfoMatcher(Matcher):
    """Base class for matchers over a single ScraperInfo mapping."""

    def evaluate(self, actual: Any) -> MatchResult:
        info = self._check_info(actual)
        return MatchResult(self.predicate(info), self._explain(info, self.failure_phrase(info)))

    def evaluate_negated(self, actual: Any) -> MatchResult:
        info = self._check_info(actual)
        return MatchResult(not self.predicate(info), self._explain(info, self.negative_failure_phrase(info)))

    @abstractmethod
    def predicate(self, info: dict) -> bool:
        """Whether the scraper satisfies the matcher."""

    @abstractmethod
    def failure_phrase(self, info: dict) -> str:
        """Explanation when the positive assertion fails."""

    @abstractmethod
    def negative_failure_phrase(self, info: dict) -> str:
        """Explanation when the negative assertion fails."""

    def _check_info(self, actual: Any) -> dict:
        if not isinstance(actual, dict):
            raise MatcherUsageError(self.name, f"expected scraper info mapping, got {type(actual).__name__}")
        return actual

    @staticmethod
    def shortname(info: dict) -> str:
        return info.get("short_name") or "scraper"

    def _explain(self, info: dict, phrase: str) -> str:
        return "\n".join([phrase, scraper_url(self.shortname(info))])


@dataclass(frozen=True)
class PrivacyStatusMatcher(ScraperInfoMatcher):
    expected: PrivacyStatus = PrivacyStatus.PUBLIC

    def predicate(self, info: dict) -> bool:
        return info.get("privacy_status") == self.expected.value

    def failure_phrase(self, info: dict) -> str:
        return f"expected {self.shortname(info)} to be {self.expected.value}"

    def negative_failure_phrase(self, info: dict) -> str:
        return f"expected {self.shortname(info)} not to be {self.expected.value}"


@dataclass(frozen=True)
class UserRolesMatcher(ScraperInfoMatcher):
    """The user is an owner or an editor of the scraper."""
    expected: str = ""

    def predicate(self, info: dict) -> bool:
        userroles = info.get("userroles") or {}
        return any(self.expected in (userroles.get(role) or []) for role in ("owner", "editor"))

    def failure_phrase(self, info: dict) -> str:
        return f"expected {self.shortname(info)} to be editable by {self.expected}"

    def negative_failure_phrase(self, info: dict) -> str:
        return f"expected {self.shortname(info)} not to be editable by {self.expected}"


@dataclass(frozen=True)
class RunIntervalMatcher(ScraperInfoMatcher):
    expected: RunInterval = RunInterval.NEVER

    def predicate(self, info: dict) -> bool:
        return info.get("run_interval") == self.expected.value

    def failure_phrase(self, info: dict) -> str:
        if self.expected is RunInterval.NEVER:
            return f"expected {self.shortname(info)} to never run"
        return f"expected {self.shortname(info)} to run {self.expected.label}"

    def negative_failure_phrase(self, info: dict) -> str:
        if self.expected is RunInterval.NEVER:
            return f"expected {self.shortname(info)} to run"
        return f"expected {self.shortname(info)} not to run {self.expected.label}"


@dataclass(frozen=True)
class TableMatcher(ScraperInfoMatcher):
    """The scraper's datastore has a table of the given name."""
    expected: str = "swdata"

    def predicate(self, info: dict) -> bool:
        return self.expected in _tables(info)

    def failure_phrase(self, info: dict) -> str:
        return f"expected {self.shortname(info)} to have a {self.expected} table"

    def negative_failure_phrase(self, info: dict) -> str:
        return f"expected {self.shortname(info)} not to have a {self.expected} table"


@dataclass(frozen=True)
class TablesMatcher(TableScopedMixin, ScraperInfoMatcher):
    """Base class for matchers scoped to one table with ``on(table)``."""

    def table_summary(self, info: dict) -> dict:
        table = self._require("table", "on")
        return _tables(info).get(table) or {}

    def table_keys(self, info: dict) -> list:
        return list(self.table_summary(info).get("keys") or [])


@dataclass(frozen=True)
class KeysMatcher(TablesMatcher):
    expected: tuple = ()

    @abstractmethod
    def difference(self, info: dict) -> list:
        """Keys that violate the matcher, in order."""

    @property
    @abstractmethod
    def failure_predicate(self) -> str:
        ...

    def predicate(self, info: dict) -> bool:
        return not self.difference(info)

    def failure_phrase(self, info: dict) -> str:
        return f"{self.shortname(info)} {self.failure_predicate}: {', '.join(map(str, self.difference(info)))}"

    @property
    @abstractmethod
    def negative_failure_predicate(self) -> str:
        ...

    def negative_failure_phrase(self, info: dict) -> str:
        keys = ", ".join(map(str, self.expected))
        return f"expected {self.shortname(info)} {self.negative_failure_predicate} {keys} on {self.scope.table}"


@dataclass(frozen=True)
class MissingKeysMatcher(KeysMatcher):
    """The table has at least the expected keys."""

    @property
    def failure_predicate(self) -> str:
        return "is missing keys"

    @property
    def negative_failure_predicate(self) -> str:
        return "to be missing some of the keys"

    def difference(self, info: dict) -> list:
        keys = self.table_keys(info)
        return [key for key in self.expected if key not in keys]


@dataclass(frozen=True)
class ExtraKeysMatcher(KeysMatcher):
    """The table has at most the expected keys."""

    @property
    def failure_predicate(self) -> str:
        return "has extra keys"

    @property
    def negative_failure_predicate(self) -> str:
        return "to have keys other than"

    def difference(self, info: dict) -> list:
        return [key for key in self.table_keys(info) if key not in self.expected]


@dataclass(frozen=True)
class CountMatcher(TablesMatcher):
    expected: int = 0

    def count(self, info: dict) -> int:
        return self.table_summary(info).get("count") or 0

    def predicate(self, info: dict) -> bool:
        return self.count(info) == self.expected

    def failure_phrase(self, info: dict) -> str:
        return f"expected {self.shortname(info)} to have {self.expected} rows, not {self.count(info)}"

    def negative_failure_phrase(self, info: dict) -> str:
        return f"expected {self.shortname(info)} not to have {self.expected} rows"


@dataclass(frozen=True)
class ExceptionMessageMatcher(ScraperInfoMatcher):
    """The most recent run raised an exception."""

    def exception_message(self, info: dict) -> Any:
        runevents = info.get("runevents") or []
        if not runevents:
            return None
        return runevents[0].get("exception_message")

    def predicate(self, info: dict) -> bool:
        return self.exception_message(info) is not None

    def failure_phrase(self, info: dict) -> str:
        return f"expected {self.shortname(info)} to be broken"

    def negative_failure_phrase(self, info: dict) -> str:
        return f"{self.shortname(info)} is broken: {self.exception_message(info)}"


def be_public() -> PrivacyStatusMatcher:
    return PrivacyStatusMatcher(PrivacyStatus.PUBLIC)


def be_protected() -> PrivacyStatusMatcher:
    return PrivacyStatusMatcher(PrivacyStatus.PROTECTED)


def be_private() -> PrivacyStatusMatcher:
    return PrivacyStatusMatcher(PrivacyStatus.PRIVATE)


def be_editable_by(username: str) -> UserRolesMatcher:
    return UserRolesMatcher(username)


def run(interval: str | RunInterval) -> RunIntervalMatcher:
    """Match scrapers scheduled at ``interval``, e.g. ``run("daily")``.

    Raises:
        MatcherUsageError: If the interval name is unknown
    """
    try:
        return RunIntervalMatcher(RunInterval.from_name(interval))
    except KeyError:
        known = ", ".join(member.label for member in RunInterval)
        raise MatcherUsageError("RunIntervalMatcher", f"unknown run interval {interval!r} (expected one of {known})") from None


def never_run() -> RunIntervalMatcher:
    return run(RunInterval.NEVER)


def have_a_table(table: str) -> TableMatcher:
    return TableMatcher(table)


def have_total_rows_of(count: int) -> CountMatcher:
    """Use with ``.on(table)``."""
    return CountMatcher(count)


def have_at_least_the_keys(keys) -> MissingKeysMatcher:
    """Use with ``.on(table)``."""
    return MissingKeysMatcher(expected_tuple(keys, "MissingKeysMatcher"))


def have_at_most_the_keys(keys) -> ExtraKeysMatcher:
    """Use with ``.on(table)``."""
    return ExtraKeysMatcher(expected_tuple(keys, "ExtraKeysMatcher"))


def be_broken() -> ExceptionMessageMatcher:
    return ExceptionMessageMatcher()
