"""Assertion helpers for using matchers in pytest tests.

Example:
    from scraperwiki_api.matchers import be_broken, be_editable_by
    from scraperwiki_api.testing import assert_does_not_match, assert_matches

    def test_scraper(info):
        assert_matches(info, be_editable_by("frabcus"))
        assert_does_not_match(info, be_broken())
"""

from typing import Any

from scraperwiki_api.matchers import Matcher


def assert_matches(actual: Any, matcher: Matcher) -> None:
    """Raise AssertionError with the matcher's explanation unless it matches."""
    result = matcher.evaluate(actual)
    if not result.passed:
        raise AssertionError(result.explanation)


def assert_does_not_match(actual: Any, matcher: Matcher) -> None:
    """Raise AssertionError with the matcher's explanation if it matches."""
    result = matcher.evaluate_negated(actual)
    if not result.passed:
        raise AssertionError(result.explanation)
