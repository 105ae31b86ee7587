"""Tests for the pytest assertion helpers."""

import pytest

from scraperwiki_api.matchers import be_broken, be_public, have_values_of
from scraperwiki_api.testing import assert_does_not_match, assert_matches


@pytest.fixture
def info():
    return {"short_name": "example", "privacy_status": "public", "runevents": []}


def test_assert_matches(info):
    assert_matches(info, be_public())
    assert_does_not_match(info, be_broken())


def test_assert_matches_failure(info):
    info["privacy_status"] = "private"

    with pytest.raises(AssertionError, match="expected example to be public"):
        assert_matches(info, be_public())


def test_assert_does_not_match_failure():
    rows = [{"gender": "M"}]

    with pytest.raises(AssertionError) as exc_info:
        assert_does_not_match(rows, have_values_of(["M", "F"]).in_("gender"))

    assert str(exc_info.value).startswith("1 of 1 records had values in ['M', 'F'] in gender")
