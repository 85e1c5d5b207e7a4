"""Reservation request and response classification.

The booking endpoint answers with JSON such as:
    {"status": "OK", "message": "...",
     "apiMessage": {"Code": 60, "Message": "Reservation correctly made"}}

The response shape is undocumented. classify_reservation() is the only place
that interprets it.
"""

import json
from typing import Any

from playwright.async_api import Page

from arena_booker.errors import ParseError
from arena_booker.logging import get_logger
from arena_booker.models import ReservationOutcome, ReservationResult

log = get_logger(__name__)

RESERVE_PATH = "/ActividadesColectivas/ReservarClaseColectiva"

SUCCESS_CODE = 60
SUCCESS_TEXT = "reservation correctly made"
WAITLIST_TEXT = "waiting list"

REQUEST_HEADERS = {
    "accept": "application/json, text/javascript, */*; q=0.01",
    "accept-language": "es,es-ES;q=0.9",
    "content-type": "application/json",
    "x-requested-with": "XMLHttpRequest",
}


def _as_number(value: Any) -> float | None:
    """Numeric value of an apiMessage.Code, accepting numeric strings."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def parse_reservation_body(text: str) -> dict[str, Any]:
    """Parse a reservation response body.

    Raises:
        ParseError: If the body is not JSON or not a JSON object.
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise ParseError(f"Reservation response is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ParseError(
            f"Reservation response is not an object: {type(data).__name__}"
        )
    return data


def classify_reservation(
    data: dict[str, Any], http_status: int | None = None
) -> ReservationResult:
    """Classify a parsed reservation response.

    Booked: the success code or the success text is present (an "OK" status
    alone is not enough). Waitlisted: not booked, and the success code or the
    waiting-list text is present. Anything else is a rejection.
    """
    api_message = data.get("apiMessage")
    if not isinstance(api_message, dict):
        api_message = {}

    code = _as_number(api_message.get("Code"))
    status = str(data.get("status") or "").upper()
    message = str(api_message.get("Message") or data.get("message") or "")
    normalized = message.lower()

    is_ok = status == "OK"
    is_success_code = code == SUCCESS_CODE
    is_success_message = SUCCESS_TEXT in normalized
    is_waitlist_message = WAITLIST_TEXT in normalized

    if (is_ok or is_success_code or is_success_message) and (
        is_success_code or is_success_message
    ):
        outcome = ReservationOutcome.BOOKED
    elif (is_ok or is_success_code or is_waitlist_message) and (
        is_success_code or is_waitlist_message
    ):
        outcome = ReservationOutcome.WAITLISTED
    else:
        outcome = ReservationOutcome.REJECTED

    return ReservationResult(
        success=outcome is ReservationOutcome.BOOKED,
        outcome=outcome,
        http_status=http_status,
        status=status,
        code=code,
        message=message,
    )


def interpret_reservation_response(
    text: str, http_status: int | None = None
) -> ReservationResult:
    """Parse and classify a response body; never raises.

    An unparseable body is logged and returned as an UNPARSEABLE result.
    """
    try:
        data = parse_reservation_body(text)
    except ParseError as e:
        log.error("reservation_response_unparseable", error=str(e), body=text[:500])
        return ReservationResult(
            success=False,
            outcome=ReservationOutcome.UNPARSEABLE,
            http_status=http_status,
            message=str(e),
        )
    return classify_reservation(data, http_status)


class ReservationClient:
    """Sends reservation requests through the page's authenticated request context."""

    def __init__(self, page: Page, base_url: str) -> None:
        self.page = page
        self.base_url = base_url

    async def reserve(self, class_id: int, label: str) -> ReservationResult:
        """Reserve a class by id.

        Args:
            class_id: ClassInstance.id of the slot to book.
            label: Activity name used in log events.

        Returns:
            ReservationResult; ``success`` is True only for a confirmed booking.
        """
        payload = {"idClaseColectiva": class_id, "idBonoPersona": 0}
        url = f"{self.base_url}{RESERVE_PATH}"
        log.info("reservation_requested", label=label, class_id=class_id, payload=payload)

        response = await self.page.request.post(
            url, headers=REQUEST_HEADERS, data=payload
        )
        text = await response.text()
        log.debug("reservation_response", http_status=response.status, body=text[:2000])

        result = interpret_reservation_response(text, response.status)
        fields = {
            "label": label,
            "class_id": class_id,
            "http_status": result.http_status,
            "status": result.status,
            "code": result.code,
            "message": result.message,
        }
        if result.outcome is ReservationOutcome.BOOKED:
            log.info("reservation_booked", **fields)
        elif result.outcome is ReservationOutcome.WAITLISTED:
            log.warning("reservation_waitlisted", **fields)
        elif result.outcome is ReservationOutcome.REJECTED:
            log.error("reservation_rejected", **fields)
        return result
