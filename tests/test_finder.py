"""Tests for class selection: filters, ordering and the booking window."""

from datetime import datetime, timedelta, timezone

import pytest

from arena_booker.finder import booking_window, find_class
from arena_booker.models import ActivityRule

from conftest import make_class

# Sunday 18 Oct 2026, 10:00. Monday 19 Oct 19:15 is 33h15m away: window open.
NOW = datetime(2026, 10, 18, 10, 0)
MONDAY = datetime(2026, 10, 19)
TUESDAY = datetime(2026, 10, 20)
FRIDAY = datetime(2026, 10, 23)


def at(day: datetime, hour: int, minute: int = 0) -> datetime:
    return day.replace(hour=hour, minute=minute)


def test_booking_window_is_72h_to_2h_before_start() -> None:
    start = at(MONDAY, 19)
    opens, closes = booking_window(start)
    assert opens == start - timedelta(hours=72)
    assert closes == start - timedelta(hours=2)


def test_selects_first_eligible_after_too_early_class(boxing_rule: ActivityRule) -> None:
    classes = [
        make_class(1, at(MONDAY, 18, 30)),
        make_class(2, at(MONDAY, 19, 15), capacity=10, bookings=9),
    ]
    selected = find_class(classes, boxing_rule, label="boxeo", now=NOW)
    assert selected is not None
    assert selected.id == 2


def test_earliest_eligible_wins_regardless_of_page_order(boxing_rule: ActivityRule) -> None:
    classes = [
        make_class(3, at(MONDAY, 21)),
        make_class(1, at(MONDAY, 19)),
        make_class(2, at(MONDAY, 20)),
    ]
    assert find_class(classes, boxing_rule, now=NOW).id == 1


def test_ignores_other_activities(boxing_rule: ActivityRule) -> None:
    classes = [make_class(1, at(MONDAY, 19), activity=28)]
    assert find_class(classes, boxing_rule, now=NOW) is None


def test_ignores_slots_marked_unavailable(boxing_rule: ActivityRule) -> None:
    classes = [
        make_class(1, at(MONDAY, 19), unavailable=True),
        make_class(2, at(MONDAY, 20)),
    ]
    assert find_class(classes, boxing_rule, now=NOW).id == 2


def test_returns_none_for_empty_page(boxing_rule: ActivityRule) -> None:
    assert find_class([], boxing_rule, now=NOW) is None


@pytest.mark.parametrize(
    "hour, minute, eligible",
    [
        (17, 59, False),
        (18, 0, False),
        (18, 29, False),
        (18, 30, True),
        (18, 45, True),
        (19, 0, True),
    ],
)
def test_minimum_start_time(hour: int, minute: int, eligible: bool) -> None:
    rule = ActivityRule(activity_id=5, allowed_days=[1], min_hour=18, min_minutes=30)
    classes = [make_class(1, at(MONDAY, hour, minute))]
    assert (find_class(classes, rule, now=NOW) is not None) is eligible


def test_skips_weekday_not_allowed(boxing_rule: ActivityRule) -> None:
    # Tuesday is not in {Monday, Friday}
    classes = [
        make_class(1, at(TUESDAY, 19)),
        make_class(2, at(FRIDAY, 19)),
    ]
    # Friday 19:00 is 129h away: outside the window, so nothing with the window enforced
    assert find_class(classes, boxing_rule, now=NOW) is None
    late_now = at(FRIDAY, 9)
    assert find_class(classes, boxing_rule, now=late_now).id == 2


def test_skips_already_booked(boxing_rule: ActivityRule) -> None:
    classes = [
        make_class(1, at(MONDAY, 19), booked=True),
        make_class(2, at(MONDAY, 20)),
    ]
    assert find_class(classes, boxing_rule, now=NOW).id == 2


@pytest.mark.parametrize("bookings", [10, 11])
def test_skips_full_classes(boxing_rule: ActivityRule, bookings: int) -> None:
    classes = [make_class(1, at(MONDAY, 19), capacity=10, bookings=bookings)]
    assert find_class(classes, boxing_rule, now=NOW) is None


def test_missing_capacity_counts_as_full(boxing_rule: ActivityRule) -> None:
    classes = [make_class(1, at(MONDAY, 19), capacity=0, bookings=0)]
    assert find_class(classes, boxing_rule, now=NOW) is None


@pytest.mark.parametrize(
    "now, inside",
    [
        (at(MONDAY, 19) - timedelta(hours=72, seconds=1), False),
        (at(MONDAY, 19) - timedelta(hours=72), True),
        (at(MONDAY, 19) - timedelta(hours=2), True),
        (at(MONDAY, 19) - timedelta(hours=2) + timedelta(seconds=1), False),
        (at(MONDAY, 19) + timedelta(hours=1), False),
    ],
    ids=["before-open", "at-open", "at-close", "after-close", "after-start"],
)
def test_enforced_window_boundaries(
    boxing_rule: ActivityRule, now: datetime, inside: bool
) -> None:
    classes = [make_class(1, at(MONDAY, 19))]
    assert (find_class(classes, boxing_rule, now=now) is not None) is inside


def test_window_skip_falls_through_to_next_candidate(boxing_rule: ActivityRule) -> None:
    now = at(MONDAY, 18)  # Monday 19:00 closed at 17:00, Friday 19:00 opens Tuesday
    classes = [
        make_class(1, at(MONDAY, 19)),
        make_class(2, at(MONDAY, 21)),
        make_class(3, at(FRIDAY, 19)),
    ]
    assert find_class(classes, boxing_rule, now=now).id == 2


@pytest.mark.parametrize(
    "now",
    [at(MONDAY, 19) - timedelta(hours=100), at(MONDAY, 18)],
    ids=["not-open-yet", "closed"],
)
def test_lenient_rule_returns_class_outside_window(now: datetime) -> None:
    rule = ActivityRule(
        activity_id=5, allowed_days=[1], min_hour=19, require_open_window=False
    )
    classes = [make_class(1, at(MONDAY, 19))]
    selected = find_class(classes, rule, now=now)
    assert selected is not None
    assert selected.id == 1


def test_lenient_rule_still_applies_other_filters() -> None:
    rule = ActivityRule(
        activity_id=5, allowed_days=[1], min_hour=19, require_open_window=False
    )
    classes = [
        make_class(1, at(MONDAY, 19), booked=True),
        make_class(2, at(MONDAY, 20), bookings=10),
        make_class(3, at(MONDAY, 18)),
    ]
    assert find_class(classes, rule, now=NOW) is None


def test_timezone_aware_start_times() -> None:
    madrid_summer = timezone(timedelta(hours=2))
    rule = ActivityRule(activity_id=5, allowed_days=[1], min_hour=19)
    start = datetime(2026, 10, 19, 19, 0, tzinfo=madrid_summer)
    classes = [make_class(1, start)]

    # 16:30 UTC is 18:30 local: 30 minutes before start, window closed
    closed = datetime(2026, 10, 19, 16, 30, tzinfo=timezone.utc)
    assert find_class(classes, rule, now=closed) is None

    open_ = datetime(2026, 10, 18, 8, 0, tzinfo=timezone.utc)
    assert find_class(classes, rule, now=open_).id == 1


def test_mixed_naive_and_aware_start_times_sort(boxing_rule: ActivityRule) -> None:
    # Sunday 08:00 UTC is before Monday 19:00 in every local zone
    classes = [
        make_class(1, at(MONDAY, 19)),
        make_class(2, datetime(2026, 10, 18, 8, 0, tzinfo=timezone.utc)),
    ]
    assert find_class(classes, boxing_rule, now=NOW).id == 1
