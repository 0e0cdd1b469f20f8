# app/services/hour_aggregator.py
"""
Hour aggregation for complementary activities.

Turns a student's activity records (any order) plus the rules of the list
the student belongs to into a capped, per-category, auditable total:

    1. group records by category, summing raw hours
    2. cap each category at max_hours_per_category
    3. valid total = sum of the capped values
    4. status = complete once valid total >= total_hours_required

Pure and synchronous: no I/O, no shared state. Callers fetch the complete
record set and the *current* list rules before calling `aggregate`.

Record hours are summed exactly as given. Non-positive values are not
clamped or rejected here; validating them is the job of whoever creates
records (see app.schemas.activity).
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from decimal import Decimal, localcontext
from typing import Any, Iterable, Mapping, Protocol


class ActivityCategory(str, enum.Enum):
    EVENTS = "Events"
    ORGANIZATION = "Organization"
    RESEARCH = "Research"
    EXTENSION = "Extension"
    MONITORING = "Monitoring"
    INTERNSHIP = "Internship"
    PUBLICATIONS = "Publications"
    COURSES = "Courses"


class CompletionStatus(str, enum.Enum):
    COMPLETE = "complete"
    IN_PROGRESS = "in progress"


class InvalidListConfigError(ValueError):
    """Raised when list rules cannot produce a meaningful aggregation."""


# ── Inputs ────────────────────────────────────────────────────────────
class HourRecord(Protocol):
    category: Any
    hours: Any


class HourRules(Protocol):
    total_hours_required: Any
    max_hours_per_category: Any


@dataclass(frozen=True)
class ListRules:
    total_hours_required: Decimal | int | float
    max_hours_per_category: Decimal | int | float


# ── Output ────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class CategoryHours:
    raw_hours: Decimal
    capped_hours: Decimal
    is_capped: bool


@dataclass(frozen=True)
class AggregationResult:
    per_category: Mapping[ActivityCategory | str, CategoryHours] = field(default_factory=dict)
    valid_total_hours: Decimal = Decimal(0)
    completion_status: CompletionStatus = CompletionStatus.IN_PROGRESS

    @property
    def is_complete(self) -> bool:
        return self.completion_status == CompletionStatus.COMPLETE


# Wide enough that sums of hour values never round
_PRECISION = 60


def to_decimal(value: Any) -> Decimal:
    """
    Exact decimal for an hour value.

    Floats go through repr() so 0.1 becomes Decimal("0.1") rather than the
    binary expansion; everything else goes straight to Decimal.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def coerce_category(value: Any) -> ActivityCategory | str:
    if isinstance(value, ActivityCategory):
        return value
    try:
        return ActivityCategory(value)
    except ValueError:
        # unknown labels are grouped under their own text
        return value


def _category_sort_key(category: ActivityCategory | str) -> tuple[int, str]:
    if isinstance(category, ActivityCategory):
        return (0, f"{list(ActivityCategory).index(category):02d}")
    return (1, str(category))


def validate_rules(rules: HourRules) -> tuple[Decimal, Decimal]:
    """Return (total_required, cap) as decimals or raise InvalidListConfigError."""
    try:
        cap = to_decimal(rules.max_hours_per_category)
        required = to_decimal(rules.total_hours_required)
    except (TypeError, ValueError, ArithmeticError) as exc:
        raise InvalidListConfigError(f"List rules are not numeric: {exc}") from exc

    if not cap.is_finite() or cap <= 0:
        raise InvalidListConfigError(
            f"max_hours_per_category must be positive, got {rules.max_hours_per_category!r}"
        )
    if not required.is_finite() or required <= 0:
        raise InvalidListConfigError(
            f"total_hours_required must be positive, got {rules.total_hours_required!r}"
        )
    return required, cap


def completion_status(valid_total_hours: Decimal, total_hours_required: Decimal) -> CompletionStatus:
    if valid_total_hours >= total_hours_required:
        return CompletionStatus.COMPLETE
    return CompletionStatus.IN_PROGRESS


def raw_hours_by_category(records: Iterable[HourRecord]) -> dict[ActivityCategory | str, Decimal]:
    totals: dict[ActivityCategory | str, Decimal] = {}
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        for record in records:
            category = coerce_category(record.category)
            totals[category] = totals.get(category, Decimal(0)) + to_decimal(record.hours)
    return totals


def aggregate(records: Iterable[HourRecord], rules: HourRules) -> AggregationResult:
    """
    Compute a student's valid hours and completion status.

    `records` needs `.category` and `.hours` (ORM rows or ActivityRecord-like
    objects); `rules` needs `.total_hours_required` and
    `.max_hours_per_category` (a StudentList row or ListRules).

    Only categories with at least one record appear in `per_category`.
    Raises InvalidListConfigError when either rule is not positive.
    """
    required, cap = validate_rules(rules)
    raw = raw_hours_by_category(records)

    per_category: dict[ActivityCategory | str, CategoryHours] = {}
    valid_total = Decimal(0)

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        for category in sorted(raw, key=_category_sort_key):
            raw_hours = raw[category]
            capped = min(raw_hours, cap)
            per_category[category] = CategoryHours(
                raw_hours=raw_hours,
                capped_hours=capped,
                is_capped=raw_hours > cap,
            )
            valid_total += capped

    return AggregationResult(
        per_category=per_category,
        valid_total_hours=valid_total,
        completion_status=completion_status(valid_total, required),
    )
