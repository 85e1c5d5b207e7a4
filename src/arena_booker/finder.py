"""Selects the class to book for an activity rule.

The site accepts reservations from 72 hours before a class starts until
2 hours before. Candidates are tried earliest first and the first one that
passes every check wins; there is no best-of-all ranking.
"""

from collections.abc import Iterable
from datetime import datetime, timedelta

from arena_booker.logging import get_logger
from arena_booker.models import ActivityRule, ClassInstance

log = get_logger(__name__)

WINDOW_OPENS_BEFORE = timedelta(hours=72)
WINDOW_CLOSES_BEFORE = timedelta(hours=2)


def booking_window(start_time: datetime) -> tuple[datetime, datetime]:
    """Return (opens, closes) of the reservation window for a class start time."""
    return start_time - WINDOW_OPENS_BEFORE, start_time - WINDOW_CLOSES_BEFORE


def _hours(delta: timedelta) -> float:
    return round(delta.total_seconds() / 3600, 1)


def _local_naive(value: datetime) -> datetime:
    return value.astimezone().replace(tzinfo=None) if value.tzinfo else value


def _now_for(start_time: datetime, now: datetime | None) -> datetime:
    # Naive schedule times are site-local; aware ones are compared in their own zone
    if now is None:
        now = datetime.now(start_time.tzinfo) if start_time.tzinfo else datetime.now()
    if start_time.tzinfo is not None and now.tzinfo is None:
        now = now.astimezone(start_time.tzinfo)
    elif start_time.tzinfo is None and now.tzinfo is not None:
        now = _local_naive(now)
    return now


def find_class(
    classes: Iterable[ClassInstance],
    rule: ActivityRule,
    *,
    label: str = "",
    now: datetime | None = None,
) -> ClassInstance | None:
    """Pick the earliest class that satisfies the rule.

    Classes of other activities and slots the site marks unavailable are
    dropped first. The rest are sorted by start time and checked in order:
    minimum time of day, allowed weekday, not already booked, free places,
    booking window. A class outside its window is only skipped when
    ``rule.require_open_window`` is set; otherwise it is still returned and
    the reservation is attempted anyway.

    Args:
        classes: Slots extracted from the schedule page.
        rule: Activity rule to match.
        label: Activity name used in log events.
        now: Current time, defaults to the local clock.

    Returns:
        The selected ClassInstance, or None when nothing qualifies.
    """
    bound = log.bind(label=label, activity_id=rule.activity_id)
    candidates = sorted(
        (
            c
            for c in classes
            if c.activity_type_id == rule.activity_id and not c.is_marked_unavailable
        ),
        key=lambda c: _local_naive(c.start_time),
    )
    bound.info("class_search_started", rule=rule.describe(), candidates=len(candidates))

    if not candidates:
        bound.warning("no_candidates_on_page")
        return None

    for slot in candidates:
        start = slot.start_time
        if start.hour < rule.min_hour:
            continue
        if start.hour == rule.min_hour and start.minute < rule.min_minutes:
            continue
        if slot.weekday not in rule.allowed_days:
            continue

        ctx = bound.bind(
            class_id=slot.id,
            class_name=slot.name,
            start_time=start.isoformat(),
            bookings=f"{slot.bookings_made}/{slot.capacity}",
        )

        if slot.already_booked_by_user:
            ctx.info("class_rejected", reason="already_booked")
            continue

        if slot.available <= 0:
            ctx.info("class_rejected", reason="full")
            continue

        opens, closes = booking_window(start)
        current = _now_for(start, now)

        if current < opens:
            ctx.info(
                "booking_window_not_open",
                opens=opens.isoformat(),
                hours_until_open=_hours(opens - current),
                enforced=rule.require_open_window,
            )
            if rule.require_open_window:
                continue
        if current > closes:
            ctx.info(
                "booking_window_closed",
                closed=closes.isoformat(),
                hours_since_close=_hours(current - closes),
                enforced=rule.require_open_window,
            )
            if rule.require_open_window:
                continue

        ctx.info(
            "class_selected",
            available=slot.available,
            closes_in_hours=_hours(closes - current),
        )
        return slot

    bound.warning("no_class_in_open_window")
    return None
