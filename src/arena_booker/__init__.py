"""Arena Alicante group-class booker.

Logs in with Playwright, reads the weekly schedule, picks the earliest class
matching each activity rule and reserves it through the site's AJAX endpoint.
"""

from arena_booker.config import BookerConfig, load_config
from arena_booker.errors import (
    BookerError,
    ConfigurationError,
    NavigationError,
    ParseError,
)
from arena_booker.finder import booking_window, find_class
from arena_booker.models import (
    ActivityOutcome,
    ActivityResult,
    ActivityRule,
    ClassInstance,
    ReservationOutcome,
    ReservationResult,
    Weekday,
)
from arena_booker.orchestrator import BookingRunner, select_activities
from arena_booker.pages.schedule import next_allowed_date
from arena_booker.reservation import classify_reservation

__all__ = [
    "ActivityOutcome",
    "ActivityResult",
    "ActivityRule",
    "BookerConfig",
    "BookerError",
    "BookingRunner",
    "ClassInstance",
    "ConfigurationError",
    "NavigationError",
    "ParseError",
    "ReservationOutcome",
    "ReservationResult",
    "Weekday",
    "booking_window",
    "classify_reservation",
    "find_class",
    "load_config",
    "next_allowed_date",
    "select_activities",
]
