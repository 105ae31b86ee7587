"""Core matcher contract shared by scraper-info and datastore matchers.

A matcher is an immutable value built from an expected value plus the chained
modifiers ``on``, ``in_`` and ``at``. Evaluating it is a pure function of the
matcher and the data it is given; the same matcher can be evaluated for the
positive ("should") and the negative ("should not") assertion.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Any


class MatcherUsageError(ValueError):
    """A matcher was misapplied: missing modifier or unsupported data shape."""

    def __init__(self, matcher: str, message: str) -> None:
        self.matcher = matcher
        super().__init__(f"{matcher}: {message}")


def expected_tuple(values: Any, matcher: str) -> tuple:
    """Return a list of expected keys or values as a tuple.

    Raises:
        MatcherUsageError: If ``values`` is a string or not iterable
    """
    if isinstance(values, (str, bytes)):
        raise MatcherUsageError(matcher, f"expected a list, got the string {values!r}")
    try:
        return tuple(values)
    except TypeError:
        raise MatcherUsageError(matcher, f"expected a list, got {type(values).__name__}") from None


@dataclass(frozen=True)
class MatchResult:
    """Outcome of evaluating a matcher."""
    passed: bool
    explanation: str

    def __bool__(self) -> bool:
        return self.passed


@dataclass(frozen=True)
class MatcherScope:
    """Chained modifiers of a matcher."""
    table: str | None = None
    field: str | None = None
    subfield: str | None = None


@dataclass(frozen=True)
class Matcher(ABC):
    """Base class for matchers."""
    expected: Any = None
    scope: MatcherScope = field(default_factory=MatcherScope)

    @property
    def name(self) -> str:
        """Matcher name for error messages."""
        return type(self).__name__

    @abstractmethod
    def evaluate(self, actual: Any) -> MatchResult:
        """Check that ``actual`` satisfies the matcher."""

    @abstractmethod
    def evaluate_negated(self, actual: Any) -> MatchResult:
        """Check that ``actual`` does not satisfy the matcher."""

    def matches(self, actual: Any) -> bool:
        return self.evaluate(actual).passed

    def does_not_match(self, actual: Any) -> bool:
        return self.evaluate_negated(actual).passed

    def _with_scope(self, **changes: Any) -> "Matcher":
        return replace(self, scope=replace(self.scope, **changes))

    def _require(self, attribute: str, modifier: str) -> str:
        value = getattr(self.scope, attribute)
        if value is None:
            raise MatcherUsageError(self.name, f"call .{modifier}(...) before evaluating")
        return value


class TableScopedMixin:
    """Adds the ``on(table)`` modifier."""

    def on(self, table: str):
        return self._with_scope(table=table)


class FieldScopedMixin:
    """Adds the ``in_(field)`` and ``at(subfield)`` modifiers."""

    def in_(self, field_name: str):
        return self._with_scope(field=field_name)

    def at(self, subfield: str):
        return self._with_scope(subfield=subfield)
