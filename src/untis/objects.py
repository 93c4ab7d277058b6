"""
Pydantic models for the payloads exchanged with WebUntis.

Field names are snake_case; the camelCase names used on the wire are kept as
aliases, so ``Model.model_validate(payload)`` and
``model.model_dump(by_alias=True)`` speak the backend's format. Unknown keys are
kept on the instance (``extra="allow"``) so nothing the backend sends is lost.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "PersonType",
    "LessonType",
    "LessonCode",
    "ElementKeyType",
    "TimeTableField",
    "Status",
    "Session",
    "TimeTableElement",
    "TimeTableOptions",
    "TimeTableElementRef",
    "Lesson",
    "Exam",
    "Homework",
    "CalendarLesson",
    "MinimalElement",
    "Element",
    "SubType",
    "Room",
    "Teacher",
    "CalendarEntry",
    "CalendarEntries",
]

ElementKeyType = Literal["id", "name", "externalkey"]
TimeTableField = Literal["id", "name", "externalkey", "longname"]
LessonCode = Literal["cancelled", "irregular"]
Status = Literal["REGULAR", "ABSENT", "SUBSTITUTED"]

ALL_TIMETABLE_FIELDS: list[TimeTableField] = ["id", "name", "externalkey", "longname"]


class PersonType(IntEnum):
    KLASSE = 1
    TEACHER = 2
    SUBJECT = 3
    ROOM = 4
    STUDENT = 5


class LessonType(str, Enum):
    LESSON = "lh"
    OFFICE_HOUR = "oh"
    STANDBY = "sb"
    BREAK_SUPERVISION = "bs"
    EXAMINATION = "ex"


class UntisObject(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")


class Session(UntisObject):
    """The credential bundle returned by the ``authenticate`` call."""

    session_id: str = Field(alias="sessionId")
    person_type: PersonType = Field(alias="personType")
    person_id: int = Field(alias="personId")
    klasse_id: int | None = Field(default=None, alias="klasseId")


class TimeTableElement(UntisObject):
    id: int | str  # internal id, name or external key depending on key_type
    type: PersonType
    key_type: ElementKeyType | None = Field(default=None, alias="keyType")


class TimeTableOptions(UntisObject):
    element: TimeTableElement
    start_date: str | None = Field(default=None, alias="startDate")  # YYYYMMDD
    end_date: str | None = Field(default=None, alias="endDate")  # YYYYMMDD
    only_base_timetable: bool | None = Field(default=None, alias="onlyBaseTimetable")
    show_booking: bool | None = Field(default=None, alias="showBooking")
    show_info: bool | None = Field(default=None, alias="showInfo")
    show_subst_text: bool | None = Field(default=None, alias="showSubstText")
    show_ls_text: bool | None = Field(default=None, alias="showLsText")
    show_ls_number: bool | None = Field(default=None, alias="showLsNumber")
    show_studentgroup: bool | None = Field(default=None, alias="showStudentgroup")
    klasse_fields: list[TimeTableField] | None = Field(default=None, alias="klasseFields")
    room_fields: list[TimeTableField] | None = Field(default=None, alias="roomFields")
    subject_fields: list[TimeTableField] | None = Field(default=None, alias="subjectFields")
    teacher_fields: list[TimeTableField] | None = Field(default=None, alias="teacherFields")

    def to_params(self) -> dict[str, Any]:
        """The JSON form sent as ``options`` to ``getTimetable``."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class TimeTableElementRef(UntisObject):
    """A class/teacher/subject/room reference inside a lesson, carrying the requested fields."""

    id: int | None = None
    name: str | None = None
    externalkey: str | None = None
    longname: str | None = None


class Lesson(UntisObject):
    """One period of the timetable as returned by ``getTimetable``."""

    id: int
    date: int  # YYYYMMDD
    start_time: int = Field(alias="startTime")  # [H]HMM
    end_time: int = Field(alias="endTime")  # [H]HMM
    lstype: LessonType = LessonType.LESSON
    code: LessonCode | None = None
    info: str | None = None
    subst_text: str | None = Field(default=None, alias="substText")
    lstext: str | None = None
    lsnumber: int | None = None
    statflags: str | None = None
    activity_type: str | None = Field(default=None, alias="activityType")
    sg: str | None = None
    bk_remark: str | None = Field(default=None, alias="bkRemark")
    bk_text: str | None = Field(default=None, alias="bkText")
    kl: list[TimeTableElementRef] = Field(default_factory=list)
    te: list[TimeTableElementRef] = Field(default_factory=list)
    su: list[TimeTableElementRef] = Field(default_factory=list)
    ro: list[TimeTableElementRef] = Field(default_factory=list)


class Exam(UntisObject):
    id: int
    name: str | None = None
    description: str | None = None
    type_long_name: str | None = Field(default=None, alias="typeLongName")


class Homework(UntisObject):
    id: int
    attachments: list[Any] = Field(default_factory=list)
    completed: bool = False
    date_time: str | None = Field(default=None, alias="dateTime")
    due_date_time: str | None = Field(default=None, alias="dueDateTime")
    remark: str | None = None
    text: str | None = None


class CalendarLesson(UntisObject):
    lesson_id: int | None = Field(default=None, alias="lessonId")
    lesson_number: int | None = Field(default=None, alias="lessonNumber")


class MinimalElement(UntisObject):
    id: int
    display_name: str | None = Field(default=None, alias="displayName")


class Element(MinimalElement):
    has_timetable: bool | None = Field(default=None, alias="hasTimetable")
    long_name: str | None = Field(default=None, alias="longName")
    short_name: str | None = Field(default=None, alias="shortName")


class SubType(MinimalElement):
    display_in_period_details: bool | None = Field(default=None, alias="displayInPeriodDetails")


class Room(Element):
    status: Status | None = None


class Teacher(Element):
    status: Status | None = None
    image_url: str | None = Field(default=None, alias="imageUrl")


class CalendarEntry(UntisObject):
    """
    Detailed view of one timetable occurrence.

    Values typed ``Any`` are passed through exactly as the backend sends them.
    """

    id: int
    previous_id: int | None = Field(default=None, alias="previousId")
    next_id: int | None = Field(default=None, alias="nextId")
    absence_reason_id: Any = Field(default=None, alias="absenceReasonId")
    booking: Any = None
    color: Any = None
    start_date_time: str | None = Field(default=None, alias="startDateTime")
    end_date_time: str | None = Field(default=None, alias="endDateTime")
    exam: Exam | None = None
    homeworks: list[Homework] = Field(default_factory=list)
    klasses: list[Element] = Field(default_factory=list)
    lesson: CalendarLesson | None = None
    lesson_info: str | None = Field(default=None, alias="lessonInfo")
    main_student_group: Any = Field(default=None, alias="mainStudentGroup")
    notes_all: Any = Field(default=None, alias="notesAll")
    notes_all_files: list[Any] = Field(default_factory=list, alias="notesAllFiles")
    notes_staff: Any = Field(default=None, alias="notesStaff")
    notes_staff_files: list[Any] = Field(default_factory=list, alias="notesStaffFiles")
    original_calendar_entry: Any = Field(default=None, alias="originalCalendarEntry")
    permissions: list[str] = Field(default_factory=list)
    resources: list[Any] = Field(default_factory=list)
    rooms: list[Room] = Field(default_factory=list)
    single_entries: list[Any] = Field(default_factory=list, alias="singleEntries")
    status: str | None = None
    students: list[Any] = Field(default_factory=list)
    sub_type: SubType | None = Field(default=None, alias="subType")
    subject: Element | None = None
    subst_text: str | None = Field(default=None, alias="substText")
    teachers: list[Teacher] = Field(default_factory=list)
    teaching_content: str | None = Field(default=None, alias="teachingContent")
    teaching_content_files: list[Any] = Field(default_factory=list, alias="teachingContentFiles")
    type: str | None = None
    video_call: Any = Field(default=None, alias="videoCall")
    integrations_section: list[Any] = Field(default_factory=list, alias="integrationsSection")


class CalendarEntries(UntisObject):
    calendar_entries: list[CalendarEntry] = Field(default_factory=list, alias="calendarEntries")
