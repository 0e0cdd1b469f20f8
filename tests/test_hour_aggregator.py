from dataclasses import dataclass
from decimal import Decimal
from itertools import permutations
from typing import Any

import pytest

from app.services.hour_aggregator import (
    ActivityCategory,
    CategoryHours,
    CompletionStatus,
    InvalidListConfigError,
    ListRules,
    aggregate,
    to_decimal,
)

RULES = ListRules(total_hours_required=150, max_hours_per_category=50)


@dataclass
class Record:
    category: Any
    hours: Any


def records(*pairs):
    return [Record(category, hours) for category, hours in pairs]


def test_empty_input_is_in_progress():
    result = aggregate([], RULES)

    assert result.per_category == {}
    assert result.valid_total_hours == 0
    assert result.completion_status == CompletionStatus.IN_PROGRESS
    assert result.is_complete is False


def test_single_category_is_capped_and_raw_kept():
    result = aggregate(records((ActivityCategory.EVENTS, 70)), RULES)

    assert result.per_category[ActivityCategory.EVENTS] == CategoryHours(
        raw_hours=Decimal(70), capped_hours=Decimal(50), is_capped=True
    )
    assert result.valid_total_hours == 50


def test_multi_category_sum_under_cap():
    result = aggregate(
        records(
            (ActivityCategory.EVENTS, 32),
            (ActivityCategory.ORGANIZATION, 10),
            (ActivityCategory.RESEARCH, 20),
            (ActivityCategory.EXTENSION, 16),
        ),
        RULES,
    )

    assert not any(c.is_capped for c in result.per_category.values())
    assert result.valid_total_hours == 78
    assert result.completion_status == CompletionStatus.IN_PROGRESS


def test_mixed_case_reaches_exactly_the_requirement():
    result = aggregate(
        records(
            (ActivityCategory.EVENTS, 50),
            (ActivityCategory.RESEARCH, 40),
            (ActivityCategory.EXTENSION, 30),
            (ActivityCategory.MONITORING, 30),
        ),
        RULES,
    )

    events = result.per_category[ActivityCategory.EVENTS]
    assert events.raw_hours == 50
    assert events.capped_hours == 50
    # equal to the cap is not "capped"
    assert events.is_capped is False
    assert result.valid_total_hours == 150
    assert result.completion_status == CompletionStatus.COMPLETE


@pytest.mark.parametrize(
    "last_hours, expected",
    [
        (50, CompletionStatus.COMPLETE),
        (49, CompletionStatus.IN_PROGRESS),
    ],
)
def test_completion_boundary(last_hours, expected):
    result = aggregate(
        records(
            (ActivityCategory.EVENTS, 50),
            (ActivityCategory.RESEARCH, 50),
            (ActivityCategory.COURSES, last_hours),
        ),
        RULES,
    )
    assert result.completion_status == expected


def test_order_independence():
    base = records(
        (ActivityCategory.EVENTS, 20),
        (ActivityCategory.RESEARCH, 12.5),
        (ActivityCategory.EVENTS, 40),
        (ActivityCategory.INTERNSHIP, 0.1),
        (ActivityCategory.INTERNSHIP, 0.2),
    )
    expected = aggregate(base, RULES)

    for perm in permutations(base):
        assert aggregate(list(perm), RULES) == expected


def test_per_category_follows_category_order():
    result = aggregate(
        records(
            (ActivityCategory.COURSES, 1),
            (ActivityCategory.EVENTS, 1),
            (ActivityCategory.MONITORING, 1),
        ),
        RULES,
    )
    assert list(result.per_category) == [
        ActivityCategory.EVENTS,
        ActivityCategory.MONITORING,
        ActivityCategory.COURSES,
    ]


def test_adding_a_record_never_lowers_capped_hours():
    recs = []
    previous = Decimal(0)
    for hours in (10, 15, 30, 5, 100):
        recs.append(Record(ActivityCategory.PUBLICATIONS, hours))
        capped = aggregate(recs, RULES).per_category[ActivityCategory.PUBLICATIONS].capped_hours
        assert capped >= previous
        assert capped <= 50
        previous = capped


def test_no_cross_category_borrowing():
    result = aggregate(records((ActivityCategory.EVENTS, 200)), RULES)

    assert result.valid_total_hours == 50
    assert ActivityCategory.RESEARCH not in result.per_category
    assert result.completion_status == CompletionStatus.IN_PROGRESS


def test_aggregate_is_idempotent():
    recs = records((ActivityCategory.EVENTS, 70), (ActivityCategory.RESEARCH, 12))
    assert aggregate(recs, RULES) == aggregate(recs, RULES)


def test_generator_input_is_consumed_once():
    gen = (Record(ActivityCategory.EVENTS, h) for h in (10, 20))
    assert aggregate(gen, RULES).valid_total_hours == 30


def test_fractional_hours_sum_exactly():
    recs = records(*[(ActivityCategory.COURSES, 0.1)] * 10)
    result = aggregate(recs, RULES)

    assert result.valid_total_hours == Decimal("1.0")
    assert result.per_category[ActivityCategory.COURSES].raw_hours == Decimal("1.0")


def test_plain_string_categories_group_with_enum_members():
    result = aggregate(
        records(("Events", 30), (ActivityCategory.EVENTS, 30)),
        RULES,
    )
    assert list(result.per_category) == [ActivityCategory.EVENTS]
    assert result.per_category[ActivityCategory.EVENTS].raw_hours == 60


def test_unknown_category_is_kept_under_its_own_label():
    result = aggregate(
        records(("Sports", 10), (ActivityCategory.EVENTS, 5)),
        RULES,
    )
    assert list(result.per_category) == [ActivityCategory.EVENTS, "Sports"]
    assert result.valid_total_hours == 15


def test_non_positive_hours_do_not_crash():
    result = aggregate(
        records((ActivityCategory.EVENTS, -5), (ActivityCategory.EVENTS, 0), (ActivityCategory.RESEARCH, 10)),
        RULES,
    )
    # summed as given, not clamped
    assert result.per_category[ActivityCategory.EVENTS].raw_hours == -5
    assert result.valid_total_hours == 5


def test_rules_from_any_object_with_the_right_attributes():
    @dataclass
    class Row:
        total_hours_required: int
        max_hours_per_category: int

    result = aggregate(records((ActivityCategory.EVENTS, 70)), Row(60, 30))
    assert result.valid_total_hours == 30
    assert result.completion_status == CompletionStatus.IN_PROGRESS


@pytest.mark.parametrize(
    "rules",
    [
        ListRules(total_hours_required=150, max_hours_per_category=0),
        ListRules(total_hours_required=150, max_hours_per_category=-10),
        ListRules(total_hours_required=0, max_hours_per_category=50),
        ListRules(total_hours_required=-1, max_hours_per_category=50),
        ListRules(total_hours_required="abc", max_hours_per_category=50),
    ],
)
def test_invalid_rules_raise(rules):
    with pytest.raises(InvalidListConfigError):
        aggregate(records((ActivityCategory.EVENTS, 10)), rules)


def test_invalid_rules_raise_even_for_empty_input():
    with pytest.raises(InvalidListConfigError):
        aggregate([], ListRules(total_hours_required=150, max_hours_per_category=0))


def test_to_decimal_uses_the_shortest_float_repr():
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal(Decimal("2.50")) == Decimal("2.50")
    assert to_decimal(3) == Decimal(3)


def test_removing_any_record_never_raises_the_total():
    recs = records(
        (ActivityCategory.EVENTS, 30),
        (ActivityCategory.EVENTS, 45),
        (ActivityCategory.RESEARCH, 50),
        (ActivityCategory.EXTENSION, 12.5),
        (ActivityCategory.MONITORING, 60),
        (ActivityCategory.COURSES, 8),
    )
    full = aggregate(recs, RULES).valid_total_hours

    for i in range(len(recs)):
        remaining = recs[:i] + recs[i + 1:]
        assert aggregate(remaining, RULES).valid_total_hours <= full


def test_total_bounded_by_cap_times_categories():
    recs = records(
        (ActivityCategory.EVENTS, 80),
        (ActivityCategory.RESEARCH, 51),
        (ActivityCategory.INTERNSHIP, 200),
        (ActivityCategory.PUBLICATIONS, 50),
        (ActivityCategory.COURSES, 3),
    )
    result = aggregate(recs, RULES)

    assert sum(c.is_capped for c in result.per_category.values()) == 3
    assert result.valid_total_hours <= len(result.per_category) * RULES.max_hours_per_category
    assert result.valid_total_hours == 50 + 50 + 50 + 50 + 3
