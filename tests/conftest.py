"""Shared fixtures and in-memory stand-ins for the Playwright page API."""

import json
from datetime import datetime
from typing import Any

import pytest

from arena_booker.models import ActivityRule, ClassInstance


class FakeHTTPResponse:
    def __init__(self, status: int = 200) -> None:
        self.status = status

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 400


class FakeAPIResponse:
    def __init__(self, body: str, status: int = 200) -> None:
        self.body = body
        self.status = status

    async def text(self) -> str:
        return self.body


class FakeRequestContext:
    """Records POSTs and answers with a canned body."""

    def __init__(self, body: str = "{}", status: int = 200) -> None:
        self.body = body
        self.status = status
        self.calls: list[dict[str, Any]] = []

    async def post(self, url: str, headers: dict | None = None, data: Any = None):
        self.calls.append({"url": url, "headers": headers, "data": data})
        return FakeAPIResponse(self.body, self.status)


class FakeElement:
    """A div[data-json] slot."""

    def __init__(self, data_json: str | None, unavailable: bool = False) -> None:
        self.data_json = data_json
        self.unavailable = unavailable

    async def get_attribute(self, name: str) -> str | None:
        assert name == "data-json"
        return self.data_json

    def locator(self, selector: str) -> "FakeLocator":
        assert selector == ".no-disponible"
        return FakeLocator(count=1 if self.unavailable else 0)


class FakeLocator:
    def __init__(
        self,
        elements: list[FakeElement] | None = None,
        count: int | None = None,
        visible: bool | Exception = False,
    ) -> None:
        self.elements = elements or []
        self._count = len(self.elements) if count is None else count
        self.visible = visible
        self.clicked = 0

    async def all(self) -> list[FakeElement]:
        return list(self.elements)

    async def count(self) -> int:
        return self._count

    async def is_visible(self) -> bool:
        if isinstance(self.visible, Exception):
            raise self.visible
        return self.visible

    async def click(self) -> None:
        self.clicked += 1


class FakePage:
    """Minimal async Page: navigation log, form actions and locators by selector."""

    def __init__(
        self,
        *,
        title: str = "Arena Alicante - Login",
        locators: dict[str, FakeLocator] | None = None,
        redirects: dict[str, str] | None = None,
        goto_status: int = 200,
        goto_error: Exception | None = None,
        request: FakeRequestContext | None = None,
    ) -> None:
        self.url = "about:blank"
        self._title = title
        self.locators = locators or {}
        self.redirects = redirects or {}
        self.goto_status = goto_status
        self.goto_error = goto_error
        self.request = request or FakeRequestContext()
        self.visited: list[str] = []
        self.actions: list[tuple] = []

    async def goto(self, url: str, **kwargs):
        self.visited.append(url)
        if self.goto_error is not None:
            raise self.goto_error
        self.url = self.redirects.get(url, url)
        return FakeHTTPResponse(self.goto_status)

    async def title(self) -> str:
        return self._title

    async def wait_for_load_state(self, state: str = "load", **kwargs) -> None:
        self.actions.append(("wait_for_load_state", state))

    async def wait_for_timeout(self, timeout: float) -> None:
        self.actions.append(("wait_for_timeout", timeout))

    async def wait_for_selector(self, selector: str, **kwargs) -> None:
        self.actions.append(("wait_for_selector", selector))

    async def fill(self, selector: str, value: str, **kwargs) -> None:
        self.actions.append(("fill", selector, value))

    async def click(self, selector: str, **kwargs) -> None:
        self.actions.append(("click", selector))

    def locator(self, selector: str) -> FakeLocator:
        return self.locators.setdefault(selector, FakeLocator())


def slot_json(
    id: int,
    start: str,
    *,
    activity: int = 5,
    name: str = "BOXEO",
    capacity: int | None = 10,
    bookings: int | None = 0,
    booked: bool = False,
) -> str:
    """data-json payload the way the schedule page renders it."""
    return json.dumps(
        {
            "Id": id,
            "Nombre": name,
            "HoraInicio": start,
            "Capacidad": capacity,
            "ReservasHechas": bookings,
            "IDActividadColectiva": activity,
            "customMessage": {"EstaReservadaPorLaPersona": booked},
        }
    )


def make_class(
    id: int,
    start: datetime,
    *,
    activity: int = 5,
    capacity: int = 10,
    bookings: int = 0,
    booked: bool = False,
    unavailable: bool = False,
) -> ClassInstance:
    return ClassInstance(
        id=id,
        name=f"class-{id}",
        start_time=start,
        capacity=capacity,
        bookings_made=bookings,
        activity_type_id=activity,
        already_booked_by_user=booked,
        is_marked_unavailable=unavailable,
    )


@pytest.fixture
def boxing_rule() -> ActivityRule:
    """Monday/Friday from 19:00, window enforced."""
    return ActivityRule(
        activity_id=5,
        allowed_days=[1, 5],
        min_hour=19,
        min_minutes=0,
        require_open_window=True,
    )


@pytest.fixture
def activities_env(monkeypatch: pytest.MonkeyPatch) -> dict:
    """Three activities plus credentials in the environment."""
    activities = {
        "boxeo": {"activityId": 5, "allowedDays": [1, 5], "minHour": 19},
        "crossfit": {
            "activityId": 1,
            "allowedDays": [2, 3],
            "minHour": 17,
            "minMinutes": 30,
        },
        "calistenia": {
            "activityId": 28,
            "allowedDays": [2, 4, 5],
            "minHour": 17,
            "minMinutes": 30,
        },
    }
    monkeypatch.setenv("ARENA_USER", "user@example.com")
    monkeypatch.setenv("ARENA_PASSWORD", "secret")
    monkeypatch.setenv("ARENA_ACTIVITIES", json.dumps(activities))
    monkeypatch.delenv("RUN_ACTIVITIES", raising=False)
    return activities
