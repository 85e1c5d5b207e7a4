"""Runs login, schedule navigation, class search and reservation per activity.

Activities are processed one after the other on a single page. A failure in
one activity is logged and recorded; it never stops the remaining ones.
"""

from collections.abc import Iterable, Mapping
from datetime import datetime

import structlog
from playwright.async_api import Page

from arena_booker.config import BookerConfig
from arena_booker.errors import ConfigurationError
from arena_booker.finder import find_class
from arena_booker.logging import get_logger
from arena_booker.models import (
    ActivityOutcome,
    ActivityResult,
    ActivityRule,
    ReservationOutcome,
)
from arena_booker.pages.login import LoginPage
from arena_booker.pages.schedule import SchedulePage
from arena_booker.reservation import ReservationClient

log = get_logger(__name__)

_RESERVATION_TO_ACTIVITY = {
    ReservationOutcome.BOOKED: ActivityOutcome.BOOKED,
    ReservationOutcome.WAITLISTED: ActivityOutcome.WAITLISTED,
    ReservationOutcome.REJECTED: ActivityOutcome.REJECTED,
    ReservationOutcome.UNPARSEABLE: ActivityOutcome.REJECTED,
}


def select_activities(
    rules: Mapping[str, ActivityRule], run_filter: Iterable[str] = ()
) -> list[tuple[str, ActivityRule]]:
    """Pick the activities to run, in configuration order.

    Args:
        rules: Activity name -> rule, in configuration order.
        run_filter: Names to run, matched case-insensitively. Empty runs all.

    Returns:
        (name, rule) pairs. Filter names without a configured activity are
        logged and ignored.
    """
    wanted = {name.strip().lower() for name in run_filter if name.strip()}
    if not wanted:
        return list(rules.items())

    configured = {name.lower() for name in rules}
    for name in sorted(wanted - configured):
        log.warning("activity_not_configured", activity=name, configured=list(rules))

    return [(name, rule) for name, rule in rules.items() if name.lower() in wanted]


class BookingRunner:
    """Books every selected activity of a configuration on one browser page."""

    def __init__(
        self,
        page: Page,
        config: BookerConfig,
        *,
        dry_run: bool = False,
        now: datetime | None = None,
    ) -> None:
        self.page = page
        self.config = config
        self.dry_run = dry_run
        self.now = now
        self.login_page = LoginPage(
            page, config.arena_url, settle_ms=config.login_settle_ms
        )
        self.schedule_page = SchedulePage(page, config.arena_url)
        self.reservations = ReservationClient(page, config.arena_url)

    async def run(self) -> list[ActivityResult]:
        """Run every selected activity and return one result per activity."""
        selected = select_activities(self.config.arena_activities, self.config.run_filter)
        log.info(
            "booking_run_started",
            activities=[name for name, _ in selected],
            dry_run=self.dry_run,
        )

        results: list[ActivityResult] = []
        for name, rule in selected:
            with structlog.contextvars.bound_contextvars(activity=name):
                try:
                    result = await self.run_activity(name, rule)
                except ConfigurationError:
                    raise
                except Exception as e:
                    log.exception("activity_failed", error=str(e), type=type(e).__name__)
                    result = ActivityResult(
                        name=name,
                        outcome=ActivityOutcome.ERROR,
                        detail=f"{type(e).__name__}: {e}",
                    )
            results.append(result)

        log.info(
            "booking_run_finished",
            results={r.name: r.outcome.value for r in results},
        )
        return results

    async def run_activity(self, name: str, rule: ActivityRule) -> ActivityResult:
        """Login, navigate, find and (unless dry run) reserve for one activity.

        Raises:
            NavigationError: If login or schedule navigation fails.
        """
        if not rule.enabled:
            log.info("activity_skipped", reason="disabled")
            return ActivityResult(
                name=name, outcome=ActivityOutcome.SKIPPED, detail="disabled"
            )

        await self.login_page.login(self.config.arena_user, self.config.arena_password)
        today = self.now.date() if self.now else None
        await self.schedule_page.navigate(rule.allowed_days, today)
        classes = await self.schedule_page.extract_classes()

        selected = find_class(classes, rule, label=name, now=self.now)
        if selected is None:
            log.info("activity_no_class", rule=rule.describe())
            return ActivityResult(
                name=name,
                outcome=ActivityOutcome.NO_CLASS,
                detail=f"no eligible class ({rule.describe()})",
            )

        found = {
            "class_id": selected.id,
            "class_name": selected.name,
            "start_time": selected.start_time,
        }
        if self.dry_run:
            log.info("dry_run_reservation_skipped", class_id=selected.id)
            return ActivityResult(name=name, outcome=ActivityOutcome.FOUND, **found)

        reservation = await self.reservations.reserve(selected.id, name)
        return ActivityResult(
            name=name,
            outcome=_RESERVATION_TO_ACTIVITY[reservation.outcome],
            detail=reservation.message,
            **found,
        )
