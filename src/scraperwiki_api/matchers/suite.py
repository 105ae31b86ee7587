"""Run a set of matchers against one scraper and collect the outcome.

Scraper info is fetched once per run and every distinct datastore query is
fetched once, then each check is evaluated against the fetched snapshot.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..client import ScraperWikiAPI
from .framework import Matcher, MatcherUsageError, MatchResult

logger = logging.getLogger(__name__)


class ValidationStatus(str, Enum):
    PASS = "pass"
    FAIL = "fail"


@dataclass
class ValidationIssue:
    """A check that did not pass."""
    check: str
    status: ValidationStatus
    message: str
    shortname: str | None = None

    def __str__(self) -> str:
        location = f" on {self.shortname}" if self.shortname else ""
        return f"[{self.status.value.upper()}] {self.check}{location}: {self.message}"


@dataclass
class ValidationResult:
    """Results of a suite run."""
    status: ValidationStatus
    issues: list[ValidationIssue] = field(default_factory=list)
    counters: dict[str, int] = field(default_factory=dict)

    @property
    def exit_code(self) -> int:
        """Exit code for CI: 0 = pass, 1 = fail."""
        return 0 if self.status == ValidationStatus.PASS else 1

    def add_issue(self, check: str, message: str, shortname: str | None = None) -> None:
        self.issues.append(ValidationIssue(check, ValidationStatus.FAIL, message, shortname))
        self.status = ValidationStatus.FAIL

    def increment_counter(self, name: str, value: int = 1) -> None:
        self.counters[name] = self.counters.get(name, 0) + value

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "status": self.status.value,
            "exit_code": self.exit_code,
            "counters": self.counters,
            "issues": [
                {
                    "check": issue.check,
                    "status": issue.status.value,
                    "message": issue.message,
                    "shortname": issue.shortname,
                }
                for issue in self.issues
            ],
        }


@dataclass(frozen=True)
class Check:
    """A matcher, the direction to evaluate it in, and where its data comes from."""
    name: str
    matcher: Matcher
    negate: bool = False
    query: str | None = None

    def evaluate(self, actual: Any) -> MatchResult:
        if self.negate:
            return self.matcher.evaluate_negated(actual)
        return self.matcher.evaluate(actual)


def _describe(matcher: Matcher, negate: bool) -> str:
    parts = [f"not {matcher.name}" if negate else matcher.name]
    scope = matcher.scope
    if scope.table:
        parts.append(f"on {scope.table}")
    if scope.field:
        parts.append(f"in {scope.field}")
    if scope.subfield:
        parts.append(f"at {scope.subfield}")
    return " ".join(parts)


class AssertionSuite:
    """Evaluates scraper-info and datastore checks for a scraper."""

    def __init__(self, client: ScraperWikiAPI):
        self.client = client
        self.checks: list[Check] = []

    def add_info_check(self, matcher: Matcher, negate: bool = False, name: str | None = None) -> None:
        """Add a check against the scraper's info record."""
        self.checks.append(Check(name or _describe(matcher, negate), matcher, negate))

    def add_datastore_check(self, query: str, matcher: Matcher, negate: bool = False,
                            name: str | None = None) -> None:
        """Add a check against the rows returned by a datastore query."""
        self.checks.append(Check(name or _describe(matcher, negate), matcher, negate, query))

    def run(self, shortname: str) -> ValidationResult:
        """Fetch the scraper's data and evaluate every check.

        Args:
            shortname: the scraper to validate

        Returns:
            ValidationResult with status, issues, and counters

        Raises:
            ApiRequestError: If the scraper's data cannot be fetched
        """
        result = ValidationResult(status=ValidationStatus.PASS)

        logger.info(f"Validating {shortname} with {len(self.checks)} checks")

        info = None
        if any(check.query is None for check in self.checks):
            info = self.client.get_scraper_info(shortname)

        datasets: dict[str, Any] = {}
        for check in self.checks:
            if check.query is not None and check.query not in datasets:
                datasets[check.query] = self.client.get_dataset(shortname, check.query)

        for check in self.checks:
            actual = info if check.query is None else datasets[check.query]
            logger.debug(f"Evaluating check: {check.name}")
            result.increment_counter("checks_run")
            try:
                outcome = check.evaluate(actual)
            except MatcherUsageError as e:
                logger.error(f"Check {check.name} could not be evaluated: {e}")
                result.increment_counter("checks_failed")
                result.add_issue(check.name, f"Check could not be evaluated: {e}", shortname)
                continue

            if outcome.passed:
                result.increment_counter("checks_passed")
            else:
                result.increment_counter("checks_failed")
                result.add_issue(check.name, outcome.explanation, shortname)

        logger.info(f"Validation of {shortname} completed with status: {result.status.value}")
        return result
