from __future__ import annotations

from pydantic import ValidationError

from .dates import parse_untis_datetime, to_iso_format
from .exceptions import UntisParsingError
from .objects import CalendarEntries, Lesson, Session
from .session import Untis

__all__ = ["CalendarEntryDetails", "fetch_calendar_entry_details"]

CALENDAR_ENTRY_DETAIL_PATH = "view/v2/calendar-entry/detail"


class CalendarEntryDetails:
    """
    Fetches the detailed calendar entries (exam, homework, rooms, teachers, ...) behind a lesson.

    Example:
    -------
    >>> lesson = next(iter(TimeTable(untis)))
    >>> details = CalendarEntryDetails(untis, lesson).get()
    >>> print([teacher.display_name for teacher in details.calendar_entries[0].teachers])
    ['Müller']

    """

    def __init__(self, untis: Untis, lesson: Lesson):
        self.untis = untis
        self.lesson = lesson

    def params(self, session: Session | None = None) -> dict[str, int | str]:
        if session is None:
            session = self.untis.get_session()

        start = parse_untis_datetime(self.lesson.date, self.lesson.start_time)
        end = parse_untis_datetime(self.lesson.date, self.lesson.end_time)

        return {
            "elementId": session.person_id,
            "elementType": int(session.person_type),
            "startDateTime": to_iso_format(start),
            "endDateTime": to_iso_format(end),
        }

    def get(self) -> CalendarEntries:
        session = self.untis.get_session()
        json = self.untis.api_request(
            "GET", "rest", CALENDAR_ENTRY_DETAIL_PATH, self.params(session), authentication="token", session=session
        )
        if not isinstance(json, dict):
            raise UntisParsingError(f"{CALENDAR_ENTRY_DETAIL_PATH} returned {json!r}")

        try:
            return CalendarEntries.model_validate(json)
        except ValidationError as e:
            raise UntisParsingError(f"Unexpected calendar entry payload: {e}") from e


def fetch_calendar_entry_details(untis: Untis, lesson: Lesson) -> CalendarEntries:
    return CalendarEntryDetails(untis, lesson).get()
