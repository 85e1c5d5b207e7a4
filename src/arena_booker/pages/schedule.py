"""SchedulePage - loads the weekly group-class schedule and extracts its slots.

Navigates to /ActividadesColectivas/ActividadesColectivasHorarioSemanal for the
week containing a given date and reads every class slot on it.

DOM structure:
  div[data-json]            -> one per class slot, attribute holds the slot JSON
    .no-disponible          -> present when the site greys the slot out

Slot JSON (only the keys we use):
  {"Id": 123456, "Nombre": "BOXEO", "HoraInicio": "2026-10-19T19:00:00",
   "Capacidad": 20, "ReservasHechas": 12, "IDActividadColectiva": 5,
   "customMessage": {"EstaReservadaPorLaPersona": false}}
"""

import json
from collections.abc import Iterable
from datetime import date, timedelta

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from pydantic import ValidationError

from arena_booker.errors import NavigationError, ParseError
from arena_booker.logging import get_logger
from arena_booker.models import ClassInstance, Weekday, weekday_of

log = get_logger(__name__)

# How far ahead next_allowed_date looks before giving up
SCAN_DAYS = 14


def next_allowed_date(
    allowed_days: Iterable[Weekday | int], today: date | None = None
) -> date:
    """Return the nearest date (today or later) whose weekday is allowed.

    Scans today and the following 13 days. If nothing matches (only possible
    with an empty set) falls back to today.

    Args:
        allowed_days: Allowed weekdays, Sunday=0 .. Saturday=6.
        today: Reference date, defaults to date.today().
    """
    if today is None:
        today = date.today()
    allowed = {int(d) for d in allowed_days}

    for offset in range(SCAN_DAYS):
        candidate = today + timedelta(days=offset)
        if weekday_of(candidate) in allowed:
            return candidate

    log.warning(
        "no_allowed_date_in_window",
        allowed_days=sorted(allowed),
        scan_days=SCAN_DAYS,
        fallback=today.isoformat(),
    )
    return today


def schedule_url(base_url: str, day: date) -> str:
    """Weekly schedule URL for the week containing ``day``."""
    fecha = f"{day.isoformat()}T00:00:00"
    return (
        f"{base_url}{SchedulePage.URL_PATH}"
        f"?fecha={fecha}&integration=False&publico=False"
    )


def parse_class_record(raw: str, unavailable: bool = False) -> ClassInstance:
    """Deserialize one slot's ``data-json`` payload into a ClassInstance.

    Args:
        raw: JSON text of the data-json attribute.
        unavailable: Whether the slot carries the .no-disponible marker.

    Raises:
        ParseError: If the text is not JSON or required fields are missing/invalid.
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ParseError(f"Slot payload is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ParseError(f"Slot payload is not an object: {type(data).__name__}")

    try:
        return ClassInstance.model_validate(
            {**data, "is_marked_unavailable": unavailable}
        )
    except ValidationError as e:
        raise ParseError(f"Invalid slot payload: {e}") from e


class SchedulePage:
    """Weekly schedule at /ActividadesColectivas/ActividadesColectivasHorarioSemanal."""

    URL_PATH = "/ActividadesColectivas/ActividadesColectivasHorarioSemanal"

    SLOT = "div[data-json]"
    UNAVAILABLE_MARKER = ".no-disponible"

    def __init__(self, page: Page, base_url: str) -> None:
        self.page = page
        self.base_url = base_url

    async def navigate(
        self, allowed_days: Iterable[Weekday | int], today: date | None = None
    ) -> date:
        """Load the week containing the next allowed date and wait for network idle.

        Args:
            allowed_days: Allowed weekdays for the activity.
            today: Reference date, defaults to date.today().

        Returns:
            The date the schedule was requested for.

        Raises:
            NavigationError: If the page fails to load or answers with an error status.
        """
        schedule_date = next_allowed_date(allowed_days, today)
        url = schedule_url(self.base_url, schedule_date)
        log.info("schedule_navigation_started", url=url, date=schedule_date.isoformat())

        try:
            response = await self.page.goto(url)
            await self.page.wait_for_load_state("networkidle")
        except PlaywrightError as e:
            raise NavigationError(f"Schedule page failed to load: {e}") from e

        if response is not None and not response.ok:
            raise NavigationError(
                f"Schedule page answered HTTP {response.status} for {url}"
            )

        log.info("schedule_page_loaded", date=schedule_date.isoformat())
        return schedule_date

    async def extract_classes(self) -> list[ClassInstance]:
        """Read every class slot on the loaded page.

        Slots with an empty payload are ignored; slots whose payload cannot be
        parsed are logged and skipped so the rest of the week stays usable.

        Returns:
            ClassInstance per slot, in page order.
        """
        elements = await self.page.locator(self.SLOT).all()
        log.info("schedule_slots_found", count=len(elements))

        classes: list[ClassInstance] = []
        for element in elements:
            raw = await element.get_attribute("data-json")
            if not raw:
                continue

            unavailable = await element.locator(self.UNAVAILABLE_MARKER).count() > 0
            try:
                classes.append(parse_class_record(raw, unavailable))
            except ParseError as e:
                log.warning("schedule_slot_skipped", error=str(e))

        return classes
