"""Page objects for the Arena Alicante site."""

from arena_booker.pages.login import LoginPage
from arena_booker.pages.schedule import SchedulePage

__all__ = ["LoginPage", "SchedulePage"]
