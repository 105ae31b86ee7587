"""Matchers for the rows of a scraper's datastore.

A datastore matcher scans every record of a dataset and classifies it as a
match or a mismatch. The positive assertion passes when there are no
mismatches; the negative assertion is a second scan that passes when there
are no matches.

Field matchers look at one field of each record, chosen with ``in_(field)``.
With ``at(subfield)`` the field is decoded as a JSON object, or a list of
JSON objects, and the predicate must hold for the subfield of every object.

Blank values are skipped by every value predicate: a record whose value is
blank is neither a match nor a mismatch, so optional fields are only checked
when they are set. ``have_blank_values`` is the exception, since blankness is
what it checks.
"""

import json
import re
from abc import abstractmethod
from collections import Counter
from dataclasses import dataclass
from typing import Any, ClassVar

from .documents import decode_document, document_objects, is_blank, normalize_records
from .framework import FieldScopedMixin, Matcher, MatcherUsageError, MatchResult, expected_tuple


@dataclass(frozen=True)
class DatasetMatcher(Matcher):
    """Base class for matchers over a dataset."""

    def evaluate(self, actual: Any) -> MatchResult:
        self.check_scope()
        records = normalize_records(actual, self.name)
        failures = self.select_mismatches(records)
        return MatchResult(not failures, self._explain(records, failures, self.failure_description))

    def evaluate_negated(self, actual: Any) -> MatchResult:
        self.check_scope()
        records = normalize_records(actual, self.name)
        failures = self.select_matches(records)
        return MatchResult(not failures, self._explain(records, failures, self.negative_failure_description))

    @abstractmethod
    def select_matches(self, records: list[dict]) -> list:
        ...

    @abstractmethod
    def select_mismatches(self, records: list[dict]) -> list:
        ...

    @property
    @abstractmethod
    def failure_description(self) -> str:
        ...

    @property
    @abstractmethod
    def negative_failure_description(self) -> str:
        ...

    def check_scope(self) -> None:
        """Raise MatcherUsageError if a required modifier is missing."""

    def population(self, records: list[dict]) -> int:
        """Number of items the failures are counted against."""
        return len(records)

    def _explain(self, records: list[dict], failures: list, description: str) -> str:
        lines = [f"{len(failures)} of {self.population(records)} {description}"]
        lines.extend(repr(failure) for failure in failures)
        return "\n".join(lines)


@dataclass(frozen=True)
class SetAnyOfMatcher(DatasetMatcher):
    """Each record sets at least one of the expected fields."""
    expected: tuple = ()

    def _sets_any(self, record: dict) -> bool:
        return any(not is_blank(record.get(field)) for field in self.expected)

    def select_matches(self, records: list[dict]) -> list:
        return [record for record in records if self._sets_any(record)]

    def select_mismatches(self, records: list[dict]) -> list:
        return [record for record in records if not self._sets_any(record)]

    @property
    def failure_description(self) -> str:
        return f"records didn't set any of {','.join(self.expected)}"

    @property
    def negative_failure_description(self) -> str:
        return f"records set any of {','.join(self.expected)}"


@dataclass(frozen=True)
class FieldMatcher(FieldScopedMixin, DatasetMatcher):
    """Base class for matchers over one field (or subfield) of each record."""

    skip_blank: ClassVar[bool] = True

    @abstractmethod
    def accepts(self, value: Any) -> bool:
        """Predicate on a single value."""

    @property
    @abstractmethod
    def failure_predicate(self) -> str:
        ...

    @property
    @abstractmethod
    def negative_failure_predicate(self) -> str:
        ...

    @property
    def location(self) -> str:
        if self.scope.subfield is None:
            return str(self.scope.field)
        return f"{self.scope.field} at {self.scope.subfield}"

    @property
    def failure_description(self) -> str:
        return f"{self.failure_predicate} in {self.location}"

    @property
    def negative_failure_description(self) -> str:
        return f"{self.negative_failure_predicate} in {self.location}"

    def check_scope(self) -> None:
        self._require("field", "in_")

    def candidate_values(self, record: dict) -> list:
        """Values of the field, or of the subfield of every decoded object."""
        field = self._require("field", "in_")
        value = record.get(field)
        if self.scope.subfield is None or is_blank(value):
            return [value]
        objects = document_objects(decode_document(value), self.name)
        return [obj.get(self.scope.subfield) for obj in objects]

    def _counts(self, value: Any) -> bool:
        return not (self.skip_blank and is_blank(value))

    def is_match(self, record: dict) -> bool:
        # An empty list of objects has no subfield values, like a blank field.
        values = self.candidate_values(record)
        return bool(values) and all(self._counts(value) and self.accepts(value) for value in values)

    def is_mismatch(self, record: dict) -> bool:
        return any(self._counts(value) and not self.accepts(value) for value in self.candidate_values(record))

    def select_matches(self, records: list[dict]) -> list:
        return [record for record in records if self.is_match(record)]

    def select_mismatches(self, records: list[dict]) -> list:
        return [record for record in records if self.is_mismatch(record)]


@dataclass(frozen=True)
class BlankValuesMatcher(FieldMatcher):
    skip_blank: ClassVar[bool] = False

    def accepts(self, value: Any) -> bool:
        return is_blank(value)

    @property
    def failure_predicate(self) -> str:
        return "records had non-blank values"

    @property
    def negative_failure_predicate(self) -> str:
        return "records had blank values"


@dataclass(frozen=True)
class UniqueValuesMatcher(FieldMatcher):
    """Every non-blank value occurs once.

    Both assertions report the duplicated values rather than records, so the
    negative form also passes when there are no duplicates.
    """

    def accepts(self, value: Any) -> bool:
        return True

    def _values(self, records: list[dict]) -> list:
        return [
            value
            for record in records
            for value in self.candidate_values(record)
            if not is_blank(value)
        ]

    @staticmethod
    def _key(value: Any) -> Any:
        if isinstance(value, (dict, list)):
            return json.dumps(value, sort_keys=True)
        # 1 and True hash alike
        return type(value).__name__, value

    def duplicates(self, records: list[dict]) -> list:
        values = self._values(records)
        counts = Counter(self._key(value) for value in values)
        seen = set()
        duplicates = []
        for value in values:
            key = self._key(value)
            if counts[key] > 1 and key not in seen:
                seen.add(key)
                duplicates.append(value)
        return duplicates

    def population(self, records: list[dict]) -> int:
        return len(self._values(records))

    def select_matches(self, records: list[dict]) -> list:
        return self.duplicates(records)

    def select_mismatches(self, records: list[dict]) -> list:
        return self.duplicates(records)

    @property
    def failure_predicate(self) -> str:
        return "values were not unique"

    @property
    def negative_failure_predicate(self) -> str:
        return "values were not unique"


@dataclass(frozen=True)
class ValuesOfMatcher(FieldMatcher):
    expected: tuple = ()

    def accepts(self, value: Any) -> bool:
        return value in self.expected

    @property
    def failure_predicate(self) -> str:
        return f"records had values not in {list(self.expected)!r}"

    @property
    def negative_failure_predicate(self) -> str:
        return f"records had values in {list(self.expected)!r}"


@dataclass(frozen=True)
class ValuesMatchingMatcher(FieldMatcher):
    expected: re.Pattern = re.compile("")

    @property
    def pattern(self) -> str:
        return self.expected.pattern

    def accepts(self, value: Any) -> bool:
        return self.expected.search(str(value)) is not None

    @property
    def failure_predicate(self) -> str:
        return f"records didn't match /{self.pattern}/"

    @property
    def negative_failure_predicate(self) -> str:
        return f"records matched /{self.pattern}/"


@dataclass(frozen=True)
class ValuesStartingWithMatcher(FieldMatcher):
    expected: str = ""

    def accepts(self, value: Any) -> bool:
        return str(value).startswith(self.expected)

    @property
    def failure_predicate(self) -> str:
        return f"records didn't start with {self.expected!r}"

    @property
    def negative_failure_predicate(self) -> str:
        return f"records started with {self.expected!r}"


@dataclass(frozen=True)
class ValuesEndingWithMatcher(FieldMatcher):
    expected: str = ""

    def accepts(self, value: Any) -> bool:
        return str(value).endswith(self.expected)

    @property
    def failure_predicate(self) -> str:
        return f"records didn't end with {self.expected!r}"

    @property
    def negative_failure_predicate(self) -> str:
        return f"records ended with {self.expected!r}"


@dataclass(frozen=True)
class IntegerValuesMatcher(FieldMatcher):
    def accepts(self, value: Any) -> bool:
        try:
            int(str(value), 10)
        except ValueError:
            return False
        return True

    @property
    def failure_predicate(self) -> str:
        return "records weren't integers"

    @property
    def negative_failure_predicate(self) -> str:
        return "records were integers"


@dataclass(frozen=True)
class FieldKeysMatcher(FieldMatcher):
    """Base class for checks on the keys of JSON objects stored in a field."""
    expected: tuple = ()

    @abstractmethod
    def object_accepts(self, obj: dict) -> bool:
        ...

    def accepts(self, value: Any) -> bool:
        objects = document_objects(decode_document(value), self.name)
        return all(self.object_accepts(obj) for obj in objects)

    @property
    def key_list(self) -> str:
        return ", ".join(self.expected)


@dataclass(frozen=True)
class FieldMissingKeysMatcher(FieldKeysMatcher):
    """Each decoded object has at least the expected keys."""

    def object_accepts(self, obj: dict) -> bool:
        return all(key in obj for key in self.expected)

    @property
    def failure_predicate(self) -> str:
        return f"records had values missing some of the keys {self.key_list}"

    @property
    def negative_failure_predicate(self) -> str:
        return f"records had values with all of the keys {self.key_list}"


@dataclass(frozen=True)
class FieldExtraKeysMatcher(FieldKeysMatcher):
    """Each decoded object has at most the expected keys."""

    def object_accepts(self, obj: dict) -> bool:
        return all(key in self.expected for key in obj)

    @property
    def failure_predicate(self) -> str:
        return f"records had values with keys other than {self.key_list}"

    @property
    def negative_failure_predicate(self) -> str:
        return f"records had values with no keys other than {self.key_list}"


def set_any_of(fields) -> SetAnyOfMatcher:
    return SetAnyOfMatcher(expected_tuple(fields, "SetAnyOfMatcher"))


def have_blank_values() -> BlankValuesMatcher:
    """Use with ``.in_(field)`` and optionally ``.at(subfield)``."""
    return BlankValuesMatcher()


def have_unique_values() -> UniqueValuesMatcher:
    return UniqueValuesMatcher()


def have_values_of(values) -> ValuesOfMatcher:
    return ValuesOfMatcher(expected_tuple(values, "ValuesOfMatcher"))


def have_values_matching(pattern) -> ValuesMatchingMatcher:
    """Match values against a regular expression, given as text or compiled.

    Raises:
        MatcherUsageError: If the pattern is not a valid regular expression
    """
    try:
        compiled = re.compile(pattern)
    except (re.error, TypeError) as e:
        raise MatcherUsageError("ValuesMatchingMatcher", f"invalid pattern {pattern!r}: {e}") from None
    return ValuesMatchingMatcher(compiled)


def have_values_starting_with(prefix: str) -> ValuesStartingWithMatcher:
    return ValuesStartingWithMatcher(prefix)


def have_values_ending_with(suffix: str) -> ValuesEndingWithMatcher:
    return ValuesEndingWithMatcher(suffix)


def have_integer_values() -> IntegerValuesMatcher:
    return IntegerValuesMatcher()


def have_values_with_at_least_the_keys(keys) -> FieldMissingKeysMatcher:
    return FieldMissingKeysMatcher(expected_tuple(keys, "FieldMissingKeysMatcher"))


def have_values_with_at_most_the_keys(keys) -> FieldExtraKeysMatcher:
    return FieldExtraKeysMatcher(expected_tuple(keys, "FieldExtraKeysMatcher"))
