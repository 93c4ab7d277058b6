from __future__ import annotations

import logging
from datetime import date
from functools import cached_property
from typing import Iterator

from pydantic import ValidationError

from .dates import format_date_to_untis
from .exceptions import UntisParsingError
from .objects import ALL_TIMETABLE_FIELDS, Lesson, Session, TimeTableElement, TimeTableOptions
from .session import Untis

__all__ = ["TimeTable", "get_timetable"]

logger = logging.getLogger(__name__)


class TimeTable:
    """
    Retrieves the timetable of the logged in user through the ``getTimetable`` call.

    Without dates the backend answers with the current day.

    Example:
    -------
    >>> for lesson in TimeTable(untis, date(2024, 3, 4), date(2024, 3, 8)):
    >>>     print(lesson.date, lesson.start_time, [su.name for su in lesson.su])
    20240304 800 ['M']
    20240304 850 ['D']

    """

    def __init__(self, untis: Untis, start_date: date | None = None, end_date: date | None = None):
        self.untis = untis
        self.start_date = start_date
        self.end_date = end_date

    def options(self, session: Session | None = None) -> TimeTableOptions:
        if session is None:
            session = self.untis.get_session()

        options = TimeTableOptions(
            element=TimeTableElement(id=session.person_id, type=session.person_type),
            show_booking=True,
            show_info=True,
            show_ls_number=True,
            show_ls_text=True,
            show_studentgroup=True,
            show_subst_text=True,
            klasse_fields=list(ALL_TIMETABLE_FIELDS),
            room_fields=list(ALL_TIMETABLE_FIELDS),
            subject_fields=list(ALL_TIMETABLE_FIELDS),
            teacher_fields=list(ALL_TIMETABLE_FIELDS),
        )

        if self.start_date:
            options.start_date = format_date_to_untis(self.start_date)
        if self.end_date:
            options.end_date = format_date_to_untis(self.end_date)

        return options

    @cached_property
    def _list(self) -> list[Lesson]:
        session = self.untis.get_session()
        options = self.options(session)
        result = self.untis.json_rpc("getTimetable", {"options": options.to_params()}, session=session)
        if not isinstance(result, list):
            raise UntisParsingError(f"getTimetable returned {type(result).__name__}, expected a list")

        logger.debug(f"getTimetable returned {len(result)} lessons")
        try:
            return [Lesson.model_validate(lesson) for lesson in result]
        except ValidationError as e:
            raise UntisParsingError(f"Unexpected lesson in getTimetable result: {e}") from e

    def __iter__(self) -> Iterator[Lesson]:
        yield from self._list

    def __len__(self) -> int:
        return len(self._list)


def get_timetable(untis: Untis, start_date: date | None = None, end_date: date | None = None) -> list[Lesson]:
    return list(TimeTable(untis, start_date, end_date))
