# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/linkview/data/filters.py

"""
Predicate filter over catalog items.

An ItemFilter combines conditions with AND/OR; each condition combines
rules with AND/OR; each rule compares one item property using one method.
String comparisons ignore case. An empty filter (or empty condition)
matches everything.
"""

from __future__ import annotations

import re
from typing import Any, Iterable, Literal

from pydantic import BaseModel, Field, model_validator

from linkview.data.catalog import CatalogItem


FilterProperty = Literal[
    "id", "name", "ext", "url", "annotation", "tags", "folders",
    "star", "width", "height", "size", "importedAt", "modifiedAt", "isDeleted",
]

FilterMethod = Literal[
    "is", "isNot", "contains", "notContains", "startsWith", "endsWith",
    "matches", "gt", "gte", "lt", "lte", "between",
    "isEmpty", "isNotEmpty", "includesAny", "includesAll", "excludesAny", "excludesAll",
]

# filter property name -> CatalogItem attribute
_PROPERTY_ATTRS: dict[str, str] = {
    "importedAt": "imported_at",
    "modifiedAt": "modified_at",
    "isDeleted": "is_deleted",
}

_VALUELESS_METHODS = frozenset({"isEmpty", "isNotEmpty"})


class FilterRule(BaseModel):
    property: FilterProperty
    method: FilterMethod
    value: Any = None

    @model_validator(mode="after")
    def check_value(self) -> "FilterRule":
        if self.method in _VALUELESS_METHODS:
            return self
        if self.value is None:
            raise ValueError(f"rule '{self.property} {self.method}' needs a value")
        if self.method == "between":
            if not isinstance(self.value, (list, tuple)) or len(self.value) != 2:
                raise ValueError("'between' needs a [low, high] pair")
        if self.method == "matches":
            try:
                re.compile(str(self.value))
            except re.error as e:
                raise ValueError(f"invalid pattern {self.value!r}: {e}")
        return self

    def matches(self, item: CatalogItem) -> bool:
        actual = getattr(item, _PROPERTY_ATTRS.get(self.property, self.property))
        return _apply(self.method, actual, self.value)


class FilterCondition(BaseModel):
    rules: list[FilterRule] = Field(default_factory=list)
    match: Literal["AND", "OR"] = "AND"

    def matches(self, item: CatalogItem) -> bool:
        if not self.rules:
            return True
        results = (rule.matches(item) for rule in self.rules)
        return all(results) if self.match == "AND" else any(results)


class ItemFilter(BaseModel):
    conditions: list[FilterCondition] = Field(default_factory=list)
    match: Literal["AND", "OR"] = "AND"

    def is_empty(self) -> bool:
        return not self.conditions

    def matches(self, item: CatalogItem) -> bool:
        if not self.conditions:
            return True
        results = (condition.matches(item) for condition in self.conditions)
        return all(results) if self.match == "AND" else any(results)


def filter_items(items: Iterable[CatalogItem], item_filter: ItemFilter | None) -> list[CatalogItem]:
    """Items matching the filter, in their original order."""
    if item_filter is None or item_filter.is_empty():
        return list(items)
    return [item for item in items if item_filter.matches(item)]


# ---- Rule evaluation ----

def _fold(value: Any) -> Any:
    return value.casefold() if isinstance(value, str) else value


def _as_list(value: Any) -> list[Any]:
    if isinstance(value, (list, tuple, set)):
        return [_fold(v) for v in value]
    return [_fold(value)]


def _is_empty(actual: Any) -> bool:
    return actual is None or actual == "" or (isinstance(actual, (list, tuple)) and not actual)


def _compare(actual: Any, expected: Any, op) -> bool:
    if actual is None:
        return False
    try:
        return op(float(actual), float(expected))
    except (TypeError, ValueError):
        return False


def _apply(method: str, actual: Any, expected: Any) -> bool:
    if method == "isEmpty":
        return _is_empty(actual)
    if method == "isNotEmpty":
        return not _is_empty(actual)

    if isinstance(actual, list):
        members = {_fold(v) for v in actual}
        wanted = _as_list(expected)
        if method in ("includesAny", "contains"):
            return any(v in members for v in wanted)
        if method == "includesAll":
            return all(v in members for v in wanted)
        if method in ("excludesAny", "notContains"):
            return not any(v in members for v in wanted)
        if method == "excludesAll":
            return not all(v in members for v in wanted)
        if method == "is":
            return members == set(wanted)
        if method == "isNot":
            return members != set(wanted)
        return False

    if method in ("gt", "gte", "lt", "lte", "between"):
        if method == "gt":
            return _compare(actual, expected, lambda a, b: a > b)
        if method == "gte":
            return _compare(actual, expected, lambda a, b: a >= b)
        if method == "lt":
            return _compare(actual, expected, lambda a, b: a < b)
        if method == "lte":
            return _compare(actual, expected, lambda a, b: a <= b)
        low, high = expected
        return _compare(actual, low, lambda a, b: a >= b) and _compare(actual, high, lambda a, b: a <= b)

    if method in ("includesAny", "includesAll", "excludesAny", "excludesAll"):
        # scalar property: treat as a one-element list
        return _apply(method, [] if actual is None else [actual], expected)

    if isinstance(actual, bool) or isinstance(expected, bool):
        equal = actual == _to_bool(expected)
    elif isinstance(actual, (int, float)):
        equal = _compare(actual, expected, lambda a, b: a == b)
    else:
        equal = _fold(actual if actual is not None else "") == _fold(str(expected))

    if method == "is":
        return equal
    if method == "isNot":
        return not equal

    text = _fold(actual) if isinstance(actual, str) else _fold(str(actual if actual is not None else ""))
    needle = _fold(str(expected))
    if method == "contains":
        return needle in text
    if method == "notContains":
        return needle not in text
    if method == "startsWith":
        return text.startswith(needle)
    if method == "endsWith":
        return text.endswith(needle)
    if method == "matches":
        return re.search(str(expected), str(actual or ""), re.IGNORECASE) is not None
    return False


def _to_bool(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)
