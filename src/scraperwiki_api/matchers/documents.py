"""Record normalization and JSON sub-document decoding for datastore matchers."""

import json
from dataclasses import dataclass
from typing import Any

from .framework import MatcherUsageError


def is_blank(value: Any) -> bool:
    """Blank means missing, None, False, or an empty string or collection."""
    if isinstance(value, (str, bytes, list, tuple, dict, set)):
        return len(value) == 0
    return value is None or value is False


@dataclass(frozen=True)
class Scalar:
    """A plain value, or text that is not JSON."""
    value: Any


@dataclass(frozen=True)
class JsonObject:
    value: dict


@dataclass(frozen=True)
class JsonObjectList:
    items: list[dict]


@dataclass(frozen=True)
class Invalid:
    """A list holding something other than objects."""
    value: Any
    offending: Any


Document = Scalar | JsonObject | JsonObjectList | Invalid


def decode_document(value: Any) -> Document:
    """Classify a field value, parsing it as JSON if it is text."""
    if isinstance(value, (str, bytes)):
        try:
            value = json.loads(value)
        except ValueError:
            return Scalar(value)

    if isinstance(value, dict):
        return JsonObject(value)
    if isinstance(value, list):
        for item in value:
            if not isinstance(item, dict):
                return Invalid(value, item)
        return JsonObjectList(value)
    return Scalar(value)


def document_objects(document: Document, matcher: str) -> list[dict]:
    """Return the objects a document holds.

    Raises:
        MatcherUsageError: If the document is neither an object nor a list of objects
    """
    if isinstance(document, JsonObject):
        return [document.value]
    if isinstance(document, JsonObjectList):
        return document.items
    if isinstance(document, Invalid):
        raise MatcherUsageError(matcher, f"can't handle subitem {document.offending!r}")
    raise MatcherUsageError(matcher, f"can't handle item {document.value!r}")


def normalize_records(dataset: Any, matcher: str = "DatasetMatcher") -> list[dict]:
    """Return a dataset as a list of records.

    Lists of records are returned as they are. The columnar form
    ``{"keys": [...], "data": [[...], ...]}`` is pivoted into one dict per row.
    """
    if isinstance(dataset, list):
        for index, record in enumerate(dataset):
            if not isinstance(record, dict):
                raise MatcherUsageError(matcher, f"record {index} is not a mapping: {record!r}")
        return dataset

    if isinstance(dataset, dict) and "keys" in dataset and "data" in dataset:
        keys = dataset["keys"]
        records = []
        for index, row in enumerate(dataset["data"]):
            if len(row) != len(keys):
                raise MatcherUsageError(
                    matcher,
                    f"row {index} has {len(row)} values but there are {len(keys)} keys",
                )
            records.append(dict(zip(keys, row)))
        return records

    raise MatcherUsageError(matcher, f"can't handle dataset of type {type(dataset).__name__}")
