"""Matchers for ScraperWiki scrapers and their datastores.

Example:
    from scraperwiki_api import ScraperWikiAPI
    from scraperwiki_api.matchers import be_protected, have_total_rows_of, have_values_of

    api = ScraperWikiAPI()
    info = api.get_scraper_info("frabcus.emailer")

    assert be_protected().matches(info)
    assert have_total_rows_of(42).on("swdata").matches(info)

    rows = api.get_dataset("frabcus.emailer", "SELECT * FROM swdata")
    result = have_values_of(["M", "F"]).in_("gender").evaluate(rows)
    if not result.passed:
        print(result.explanation)
"""

from .datastore import (
    DatasetMatcher,
    FieldMatcher,
    have_blank_values,
    have_integer_values,
    have_unique_values,
    have_values_ending_with,
    have_values_matching,
    have_values_of,
    have_values_starting_with,
    have_values_with_at_least_the_keys,
    have_values_with_at_most_the_keys,
    set_any_of,
)
from .documents import decode_document, is_blank, normalize_records
from .framework import Matcher, MatcherScope, MatcherUsageError, MatchResult
from .scraper import (
    ScraperInfoMatcher,
    be_broken,
    be_editable_by,
    be_private,
    be_protected,
    be_public,
    have_a_table,
    have_at_least_the_keys,
    have_at_most_the_keys,
    have_total_rows_of,
    never_run,
    run,
)

SCRAPER_MATCHERS = {
    "be_public": be_public,
    "be_protected": be_protected,
    "be_private": be_private,
    "be_editable_by": be_editable_by,
    "run": run,
    "never_run": never_run,
    "have_a_table": have_a_table,
    "have_total_rows_of": have_total_rows_of,
    "have_at_least_the_keys": have_at_least_the_keys,
    "have_at_most_the_keys": have_at_most_the_keys,
    "be_broken": be_broken,
}

DATASTORE_MATCHERS = {
    "set_any_of": set_any_of,
    "have_blank_values": have_blank_values,
    "have_unique_values": have_unique_values,
    "have_values_of": have_values_of,
    "have_values_matching": have_values_matching,
    "have_values_starting_with": have_values_starting_with,
    "have_values_ending_with": have_values_ending_with,
    "have_integer_values": have_integer_values,
    "have_values_with_at_least_the_keys": have_values_with_at_least_the_keys,
    "have_values_with_at_most_the_keys": have_values_with_at_most_the_keys,
}

__all__ = [
    "Matcher",
    "MatcherScope",
    "MatcherUsageError",
    "MatchResult",
    "ScraperInfoMatcher",
    "DatasetMatcher",
    "FieldMatcher",
    "SCRAPER_MATCHERS",
    "DATASTORE_MATCHERS",
    "decode_document",
    "is_blank",
    "normalize_records",
    "be_public",
    "be_protected",
    "be_private",
    "be_editable_by",
    "run",
    "never_run",
    "have_a_table",
    "have_total_rows_of",
    "have_at_least_the_keys",
    "have_at_most_the_keys",
    "be_broken",
    "set_any_of",
    "have_blank_values",
    "have_unique_values",
    "have_values_of",
    "have_values_matching",
    "have_values_starting_with",
    "have_values_ending_with",
    "have_integer_values",
    "have_values_with_at_least_the_keys",
    "have_values_with_at_most_the_keys",
]
