"""Pydantic models for activity rules, schedule slots and booking outcomes.

All data structures use Pydantic v2 for validation, serialization, and type safety.
Remote payload keys (Spanish, PascalCase) are mapped to snake_case fields with aliases.
"""

from datetime import date, datetime
from enum import IntEnum, StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class Weekday(IntEnum):
    """Day of week as numbered by the booking site (Sunday first)."""

    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6


def weekday_of(value: date) -> Weekday:
    """Convert a date/datetime to the site's weekday numbering.

    Python's date.weekday() is Monday=0, the site uses Sunday=0.
    """
    return Weekday((value.weekday() + 1) % 7)


class ActivityRule(BaseModel):
    """Booking rule for one named activity.

    Loaded from the ARENA_ACTIVITIES JSON object, e.g.:
        {"boxeo": {"activityId": 5, "allowedDays": [1, 5], "minHour": 19}}
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )

    activity_id: int
    allowed_days: frozenset[Weekday] = Field(min_length=1)
    min_hour: int = Field(ge=0, le=23)
    min_minutes: int = Field(default=0, ge=0, le=59)
    require_open_window: bool = True
    enabled: bool = True

    def describe(self) -> str:
        """Short human-readable form, e.g. 'days 1/5 19:00+'."""
        days = "/".join(str(int(d)) for d in sorted(self.allowed_days))
        return f"days {days} {self.min_hour:02d}:{self.min_minutes:02d}+"


class ClassInstance(BaseModel):
    """One scheduled occurrence of an activity on the weekly schedule page.

    Built from the ``data-json`` attribute of a ``div`` slot. The
    ``is_marked_unavailable`` flag comes from a ``.no-disponible`` marker in
    the slot's markup, not from the JSON payload.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int = Field(alias="Id")
    name: str = Field(default="", alias="Nombre")
    start_time: datetime = Field(alias="HoraInicio")
    capacity: int = Field(default=0, ge=0, alias="Capacidad")
    bookings_made: int = Field(default=0, ge=0, alias="ReservasHechas")
    activity_type_id: int = Field(alias="IDActividadColectiva")
    already_booked_by_user: bool = Field(
        default=False, alias="EstaReservadaPorLaPersona"
    )
    is_marked_unavailable: bool = False

    @model_validator(mode="before")
    @classmethod
    def _lift_custom_message(cls, data: Any) -> Any:
        # EstaReservadaPorLaPersona lives in a nested customMessage object
        if isinstance(data, dict) and "customMessage" in data:
            data = dict(data)
            custom = data.pop("customMessage")
            if isinstance(custom, dict):
                booked = custom.get("EstaReservadaPorLaPersona")
                data.setdefault("EstaReservadaPorLaPersona", bool(booked))
        return data

    @field_validator("name", mode="before")
    @classmethod
    def _none_name(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("capacity", "bookings_made", mode="before")
    @classmethod
    def _none_is_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    @property
    def available(self) -> int:
        """Free places (may be negative when overbooked)."""
        return self.capacity - self.bookings_made

    @property
    def weekday(self) -> Weekday:
        return weekday_of(self.start_time)


class ReservationOutcome(StrEnum):
    BOOKED = "booked"
    WAITLISTED = "waitlisted"
    REJECTED = "rejected"
    UNPARSEABLE = "unparseable"


class ReservationResult(BaseModel):
    """Interpretation of one reservation response.

    ``success`` is only True for ``BOOKED``. A waiting-list placement is a
    distinct outcome but still not a booking.
    """

    success: bool
    outcome: ReservationOutcome
    http_status: int | None = None
    status: str = ""
    code: float | None = None
    message: str = ""


class ActivityOutcome(StrEnum):
    BOOKED = "booked"
    WAITLISTED = "waitlisted"
    REJECTED = "rejected"
    NO_CLASS = "no_class"
    FOUND = "found"  # dry run: eligible class found, not reserved
    SKIPPED = "skipped"
    ERROR = "error"


_FAILED_OUTCOMES = frozenset(
    {ActivityOutcome.WAITLISTED, ActivityOutcome.REJECTED, ActivityOutcome.ERROR}
)


class ActivityResult(BaseModel):
    """Per-activity result reported by the orchestrator."""

    name: str
    outcome: ActivityOutcome
    class_id: int | None = None
    class_name: str | None = None
    start_time: datetime | None = None
    detail: str = ""

    @property
    def failed(self) -> bool:
        """True when a booking was attempted and not made, or the attempt crashed."""
        return self.outcome in _FAILED_OUTCOMES
