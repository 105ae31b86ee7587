"""Tests for check files."""

import json

import pytest

from scraperwiki_api.checks import CheckSpec, build_matcher, build_suite, load_check_file
from scraperwiki_api.matchers import MatcherUsageError
from scraperwiki_api.matchers.datastore import UniqueValuesMatcher, ValuesOfMatcher
from scraperwiki_api.matchers.scraper import CountMatcher, ExceptionMessageMatcher, RunIntervalMatcher
from scraperwiki_api.models import RunInterval


@pytest.fixture
def check_data():
    return {
        "shortname": "frabcus.emailer",
        "info": [
            {"matcher": "be_protected"},
            {"matcher": "run", "expected": "daily"},
            {"matcher": "be_broken", "negate": True},
            {"matcher": "have_total_rows_of", "expected": 42, "on": "swdata"},
        ],
        "datastore": [
            {
                "query": "SELECT * FROM swdata",
                "checks": [
                    {"matcher": "have_values_of", "expected": ["M", "F"], "in": "gender"},
                    {"matcher": "have_unique_values", "in": "id", "name": "ids are unique"},
                ],
            },
        ],
    }


@pytest.fixture
def check_path(tmp_path, check_data):
    path = tmp_path / "checks.json"
    path.write_text(json.dumps(check_data), encoding="utf-8")
    return path


class TestLoadCheckFile:
    """Test load_check_file."""

    def test_load(self, check_path):
        check_file = load_check_file(check_path)

        assert check_file.shortname == "frabcus.emailer"
        assert len(check_file.info) == 4
        assert check_file.datastore[0].checks[0].field == "gender"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_check_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "checks.json"
        path.write_text("[", encoding="utf-8")

        with pytest.raises(ValueError, match="Invalid JSON"):
            load_check_file(path)

    def test_unknown_scraper_matcher(self, tmp_path, check_data):
        check_data["info"].append({"matcher": "have_values_of", "expected": ["x"]})
        path = tmp_path / "checks.json"
        path.write_text(json.dumps(check_data), encoding="utf-8")

        with pytest.raises(ValueError, match="unknown scraper matcher: have_values_of"):
            load_check_file(path)

    def test_unknown_datastore_matcher(self, tmp_path, check_data):
        check_data["datastore"][0]["checks"].append({"matcher": "be_public"})
        path = tmp_path / "checks.json"
        path.write_text(json.dumps(check_data), encoding="utf-8")

        with pytest.raises(ValueError, match="unknown datastore matcher: be_public"):
            load_check_file(path)

    def test_unknown_key(self, tmp_path, check_data):
        check_data["info"][0]["expect"] = "typo"
        path = tmp_path / "checks.json"
        path.write_text(json.dumps(check_data), encoding="utf-8")

        with pytest.raises(ValueError, match="Invalid check file"):
            load_check_file(path)


class TestBuildMatcher:
    """Test build_matcher."""

    def test_without_expected(self):
        assert build_matcher(CheckSpec(matcher="be_broken")) == ExceptionMessageMatcher()

    def test_with_expected(self):
        matcher = build_matcher(CheckSpec(matcher="run", expected="weekly"))

        assert isinstance(matcher, RunIntervalMatcher)
        assert matcher.expected is RunInterval.WEEKLY

    def test_modifiers(self):
        matcher = build_matcher(CheckSpec(matcher="have_values_of", expected=["a"], field="doc", at="kind"))

        assert isinstance(matcher, ValuesOfMatcher)
        assert matcher.scope.field == "doc"
        assert matcher.scope.subfield == "kind"

    def test_on(self):
        matcher = build_matcher(CheckSpec(matcher="have_total_rows_of", expected=1, on="swdata"))

        assert isinstance(matcher, CountMatcher)
        assert matcher.scope.table == "swdata"

    def test_missing_expected(self):
        with pytest.raises(ValueError, match="have_values_of needs an expected value"):
            build_matcher(CheckSpec(matcher="have_values_of", field="gender"))

    def test_unsupported_modifier(self):
        with pytest.raises(ValueError, match=r"be_public does not take \.in_\(\)"):
            build_matcher(CheckSpec(matcher="be_public", field="gender"))

    def test_unknown_matcher(self):
        with pytest.raises(ValueError, match="unknown matcher: be_shiny"):
            build_matcher(CheckSpec(matcher="be_shiny"))

    @pytest.mark.parametrize("expected", ["[", 5])
    def test_invalid_pattern(self, expected):
        spec = CheckSpec(matcher="have_values_matching", expected=expected, field="f")

        with pytest.raises(MatcherUsageError, match="ValuesMatchingMatcher: invalid pattern"):
            build_matcher(spec)

    def test_string_where_list_expected(self):
        spec = CheckSpec(matcher="have_at_least_the_keys", expected="name", on="swdata")

        with pytest.raises(ValueError, match="MissingKeysMatcher: expected a list"):
            build_matcher(spec)


class TestBuildSuite:
    """Test build_suite."""

    def test_checks_in_file_order(self, check_path):
        suite = build_suite(load_check_file(check_path), client=None)

        assert [check.name for check in suite.checks] == [
            "PrivacyStatusMatcher",
            "RunIntervalMatcher",
            "not ExceptionMessageMatcher",
            "CountMatcher on swdata",
            "ValuesOfMatcher in gender",
            "ids are unique",
        ]
        assert isinstance(suite.checks[-1].matcher, UniqueValuesMatcher)
        assert suite.checks[-1].query == "SELECT * FROM swdata"
        assert suite.checks[2].negate is True
