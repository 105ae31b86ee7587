"""Check files: declare matchers for a scraper in JSON.

Example ``checks.json``::

    {
      "shortname": "frabcus.emailer",
      "info": [
        {"matcher": "be_protected"},
        {"matcher": "run", "expected": "daily"},
        {"matcher": "be_broken", "negate": true},
        {"matcher": "have_total_rows_of", "expected": 42, "on": "swdata"}
      ],
      "datastore": [
        {
          "query": "SELECT * FROM swdata",
          "checks": [
            {"matcher": "have_values_of", "expected": ["M", "F"], "in": "gender"},
            {"matcher": "have_unique_values", "in": "id"}
          ]
        }
      ]
    }
"""

import inspect
import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from scraperwiki_api.client import ScraperWikiAPI
from scraperwiki_api.matchers import DATASTORE_MATCHERS, SCRAPER_MATCHERS, Matcher
from scraperwiki_api.matchers.suite import AssertionSuite


class CheckSpec(BaseModel):
    """A single matcher declaration."""
    matcher: str
    expected: Any = None
    negate: bool = False
    on: str | None = None
    field: str | None = Field(alias="in", default=None)
    at: str | None = None
    name: str | None = None

    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class DatastoreChecks(BaseModel):
    """Checks evaluated against the rows of one query."""
    query: str
    checks: list[CheckSpec] = Field(default_factory=list)

    @field_validator("checks")
    @classmethod
    def validate_matchers(cls, v):
        for spec in v:
            if spec.matcher not in DATASTORE_MATCHERS:
                raise ValueError(f"unknown datastore matcher: {spec.matcher}")
        return v


class CheckFile(BaseModel):
    """Complete check file model."""
    shortname: str
    info: list[CheckSpec] = Field(default_factory=list)
    datastore: list[DatastoreChecks] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @field_validator("info")
    @classmethod
    def validate_matchers(cls, v):
        for spec in v:
            if spec.matcher not in SCRAPER_MATCHERS:
                raise ValueError(f"unknown scraper matcher: {spec.matcher}")
        return v


def load_check_file(path: str | Path) -> CheckFile:
    """Load and validate a check file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not valid JSON or not a valid check file
    """
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in check file {path}: {e}")
    try:
        return CheckFile(**data)
    except Exception as e:
        raise ValueError(f"Invalid check file {path}: {e}")


def build_matcher(spec: CheckSpec, registry: dict | None = None) -> Matcher:
    """Create the matcher a CheckSpec describes.

    Raises:
        ValueError: If the matcher is unknown, needs an expected value that is
            missing, or does not take a modifier the CheckSpec sets
    """
    if registry is None:
        registry = {**SCRAPER_MATCHERS, **DATASTORE_MATCHERS}
    if spec.matcher not in registry:
        raise ValueError(f"unknown matcher: {spec.matcher}")

    factory = registry[spec.matcher]
    if inspect.signature(factory).parameters:
        if spec.expected is None:
            raise ValueError(f"{spec.matcher} needs an expected value")
        matcher = factory(spec.expected)
    else:
        matcher = factory()

    for modifier, value in (("on", spec.on), ("in_", spec.field), ("at", spec.at)):
        if value is None:
            continue
        if not hasattr(matcher, modifier):
            raise ValueError(f"{spec.matcher} does not take .{modifier}()")
        matcher = getattr(matcher, modifier)(value)

    return matcher


def build_suite(check_file: CheckFile, client: ScraperWikiAPI) -> AssertionSuite:
    """Create an AssertionSuite holding every check in the file."""
    suite = AssertionSuite(client)
    for spec in check_file.info:
        suite.add_info_check(build_matcher(spec, SCRAPER_MATCHERS), spec.negate, spec.name)
    for group in check_file.datastore:
        for spec in group.checks:
            suite.add_datastore_check(group.query, build_matcher(spec, DATASTORE_MATCHERS), spec.negate, spec.name)
    return suite
