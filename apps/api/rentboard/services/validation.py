"""Declarative validation of working copies before they are submitted.

A schema is a tuple of rules plus, optionally, a pydantic model whose type
errors are reported alongside. Every violated rule is reported; validation
does not stop at the first failure.
"""
from __future__ import annotations

import operator
from collections.abc import Callable, Iterable, Mapping, Sized
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Protocol

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .list_view import resolve_field

_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    ">=": operator.ge,
    ">": operator.gt,
    "<=": operator.le,
    "<": operator.lt,
    "==": operator.eq,
    "!=": operator.ne,
}


@dataclass(slots=True, frozen=True)
class FieldError:
    path: str
    message: str


class Rule(Protocol):
    def check(self, record: Mapping[str, Any]) -> Iterable[FieldError]: ...


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict, set)):
        return not value
    return False


def _label(path: str) -> str:
    return path.rsplit(".", 1)[-1].replace("_", " ").capitalize()


@dataclass(slots=True, frozen=True)
class Required:
    path: str
    message: str | None = None

    def check(self, record: Mapping[str, Any]) -> Iterable[FieldError]:
        if _is_blank(resolve_field(record, self.path)):
            yield FieldError(self.path, self.message or f"{_label(self.path)} is required")


@dataclass(slots=True, frozen=True)
class MinLength:
    """Length check on strings and lists; blank values are left to ``Required``."""

    path: str
    length: int
    message: str | None = None

    def check(self, record: Mapping[str, Any]) -> Iterable[FieldError]:
        value = resolve_field(record, self.path)
        if _is_blank(value) or not isinstance(value, Sized):
            return
        size = len(value.strip()) if isinstance(value, str) else len(value)
        if size < self.length:
            yield FieldError(
                self.path,
                self.message or f"{_label(self.path)} must have at least {self.length} characters",
            )


@dataclass(slots=True, frozen=True)
class NumericRange:
    """Bounds check; absent values are left to ``Required``."""

    path: str
    minimum: float | None = None
    maximum: float | None = None
    exclusive_minimum: bool = False
    message: str | None = None

    def check(self, record: Mapping[str, Any]) -> Iterable[FieldError]:
        value = resolve_field(record, self.path)
        if value is None or value == "":
            return
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            try:
                value = float(value)
            except (TypeError, ValueError):
                yield FieldError(self.path, f"{_label(self.path)} must be a number")
                return

        too_low = self.minimum is not None and (
            value <= self.minimum if self.exclusive_minimum else value < self.minimum
        )
        too_high = self.maximum is not None and value > self.maximum
        if too_low or too_high:
            yield FieldError(self.path, self.message or self._default_message())

    def _default_message(self) -> str:
        label = _label(self.path)
        if self.minimum is not None and self.maximum is not None:
            return f"{label} must be between {self.minimum:g} and {self.maximum:g}"
        if self.minimum is not None:
            relation = "greater than" if self.exclusive_minimum else "at least"
            return f"{label} must be {relation} {self.minimum:g}"
        return f"{label} must be at most {self.maximum:g}"


@dataclass(slots=True, frozen=True)
class Compare:
    """Cross-field comparison such as ``budget_range.max >= budget_range.min``.

    Skipped while either side is empty; the error is reported on ``left``.
    """

    left: str
    op: str
    right: str
    message: str

    def check(self, record: Mapping[str, Any]) -> Iterable[FieldError]:
        left = resolve_field(record, self.left)
        right = resolve_field(record, self.right)
        if _is_blank(left) or _is_blank(right):
            return
        try:
            ok = _OPERATORS[self.op](left, right)
        except TypeError:
            ok = False
        if not ok:
            yield FieldError(self.left, self.message)


@dataclass(slots=True, frozen=True)
class DateOrder:
    """``end`` must fall after ``start`` (or on it when ``allow_equal``)."""

    start: str
    end: str
    message: str
    allow_equal: bool = False

    def check(self, record: Mapping[str, Any]) -> Iterable[FieldError]:
        start = _as_date(resolve_field(record, self.start))
        end = _as_date(resolve_field(record, self.end))
        if start is None or end is None:
            return
        if end < start or (end == start and not self.allow_equal):
            yield FieldError(self.end, self.message)


def _as_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value).date()
        except ValueError:
            return None
    return None


@dataclass(slots=True, frozen=True)
class AtLeastOneOf:
    paths: tuple[str, ...]
    message: str

    def check(self, record: Mapping[str, Any]) -> Iterable[FieldError]:
        if all(_is_blank(resolve_field(record, path)) for path in self.paths):
            yield FieldError(self.paths[0], self.message)


@dataclass(slots=True, frozen=True)
class ValidationSchema:
    rules: tuple[Rule, ...] = ()
    model: type[BaseModel] | None = None


@dataclass(slots=True)
class ValidationResult:
    valid: bool
    errors: list[str] = field(default_factory=list)
    field_errors: dict[str, list[str]] = field(default_factory=dict)


def validate(record: Mapping[str, Any], schema: ValidationSchema) -> ValidationResult:
    """Check a record against every rule of the schema and collect all violations."""

    found: list[FieldError] = []
    for rule in schema.rules:
        found.extend(rule.check(record))

    if schema.model is not None:
        # Rule messages are friendlier, so a field already flagged keeps only those.
        flagged = {item.path for item in found}
        try:
            schema.model.model_validate(record)
        except PydanticValidationError as exc:
            for error in exc.errors():
                path = ".".join(str(part) for part in error["loc"])
                if path not in flagged:
                    found.append(FieldError(path, f"{path}: {error['msg']}"))

    field_errors: dict[str, list[str]] = {}
    errors: list[str] = []
    for item in found:
        if item.message in field_errors.get(item.path, []):
            continue
        field_errors.setdefault(item.path, []).append(item.message)
        errors.append(item.message)

    return ValidationResult(valid=not errors, errors=errors, field_errors=field_errors)
