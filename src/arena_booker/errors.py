"""Error hierarchy for the booking workflow.

Only failures that abort an activity attempt are exceptions. A reservation the
site answers with a rejection or a waiting-list placement is a normal
``ReservationResult`` with ``success=False``, not an error.

Example usage:
    try:
        await login_page.login(config.arena_user, config.arena_password)
    except NavigationError:
        log.error("login_failed")
        raise
"""


class BookerError(Exception):
    """Base exception for all booking errors."""

    pass


class ConfigurationError(BookerError):
    """Missing or malformed credentials or activity configuration.

    Fatal: raised before any network activity takes place.
    """

    pass


class NavigationError(BookerError):
    """A page failed to load, timed out, or did not look like the expected page.

    Not recovered; fails the current activity attempt.
    """

    pass


class ParseError(BookerError):
    """Remote data could not be turned into structured records.

    Raised for schedule slot payloads and reservation response bodies.
    """

    pass
