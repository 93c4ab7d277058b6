import logging

from .calendar_entries import CalendarEntryDetails, fetch_calendar_entry_details
from .credentials import AppCredentials, Credentials, EnvCredentials, PathCredentials
from .dates import (
    format_date_to_untis,
    parse_untis_date,
    parse_untis_datetime,
    parse_untis_time,
    to_iso_format,
)
from .exceptions import (
    UntisAuthenticationError,
    UntisConfigurationError,
    UntisException,
    UntisParsingError,
    UntisRpcError,
)
from .logger import setup_logger
from .objects import (
    CalendarEntries,
    CalendarEntry,
    Lesson,
    LessonType,
    PersonType,
    Session,
    TimeTableElement,
    TimeTableOptions,
)
from .session import Untis
from .timetable import TimeTable, get_timetable

__all__ = [
    "PathCredentials",
    "EnvCredentials",
    "AppCredentials",
    "Credentials",
    "Untis",
    "logger",
    "setup_logger",
    "Session",
    "PersonType",
    "LessonType",
    "Lesson",
    "TimeTableElement",
    "TimeTableOptions",
    "CalendarEntry",
    "CalendarEntries",
    "TimeTable",
    "get_timetable",
    "CalendarEntryDetails",
    "fetch_calendar_entry_details",
    "format_date_to_untis",
    "parse_untis_date",
    "parse_untis_time",
    "parse_untis_datetime",
    "to_iso_format",
    # Exceptions
    "UntisException",
    "UntisConfigurationError",
    "UntisAuthenticationError",
    "UntisParsingError",
    "UntisRpcError",
]

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())
