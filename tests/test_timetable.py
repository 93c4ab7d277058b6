import time
from datetime import date

import pytest

from conftest import SCHOOL_B64, FakeBackend, make_client

from untis import (
    CalendarEntryDetails,
    LessonType,
    TimeTable,
    UntisParsingError,
    fetch_calendar_entry_details,
    get_timetable,
)
from untis.objects import Lesson

LESSON = {
    "id": 1201,
    "date": 20240307,
    "startTime": 800,
    "endTime": 945,
    "lstype": "lh",
    "lsnumber": 4300,
    "statflags": "",
    "kl": [{"id": 7, "name": "5a", "longname": "Klasse 5a"}],
    "te": [{"id": 11, "name": "MUE", "externalkey": "T11"}],
    "su": [{"id": 3, "name": "M", "longname": "Mathematik"}],
    "ro": [{"id": 20, "name": "R101"}],
    "sg": "M_5a",
}

DETAIL = {
    "calendarEntries": [
        {
            "id": 98,
            "previousId": 97,
            "nextId": 99,
            "startDateTime": "2024-03-07T08:00",
            "endDateTime": "2024-03-07T09:45",
            "exam": {"id": 5, "name": "Test 1", "description": "Bruchrechnen", "typeLongName": "Schularbeit"},
            "homeworks": [{"id": 1, "completed": False, "dueDateTime": "2024-03-08T08:00", "text": "S. 42"}],
            "rooms": [{"id": 20, "displayName": "R101", "status": "SUBSTITUTED", "hasTimetable": True}],
            "teachers": [{"id": 11, "displayName": "Müller", "status": "ABSENT", "imageUrl": None}],
            "subject": {"id": 3, "displayName": "M", "longName": "Mathematik", "shortName": "M"},
            "lesson": {"lessonId": 77, "lessonNumber": 4300},
            "permissions": ["READ_HOMEWORK"],
            "booking": {"opaque": [1, 2]},
            "videoCall": None,
            "status": "CHANGED",
            "type": "NORMAL_TEACHING_PERIOD",
        }
    ]
}


def test_timetable_returns_backend_lessons_unchanged(untis, backend):
    backend.rpc["getTimetable"] = [LESSON]

    lessons = get_timetable(untis)

    assert len(lessons) == 1
    assert lessons[0].model_dump(mode="json", by_alias=True, exclude_unset=True) == LESSON
    assert lessons[0].lstype is LessonType.LESSON
    assert lessons[0].su[0].longname == "Mathematik"


def test_timetable_options_are_anchored_on_session_person(untis, backend):
    backend.rpc["getTimetable"] = [LESSON]

    list(TimeTable(untis))

    call = backend.rpc_calls("getTimetable")[0]
    options = call["json"]["params"]["options"]
    assert options["element"] == {"id": 42, "type": 5}
    assert "startDate" not in options
    assert "endDate" not in options
    for flag in ("showBooking", "showInfo", "showLsNumber", "showLsText", "showStudentgroup", "showSubstText"):
        assert options[flag] is True
    for fields in ("klasseFields", "roomFields", "subjectFields", "teacherFields"):
        assert options[fields] == ["id", "name", "externalkey", "longname"]


def test_timetable_dates_are_sent_as_untis_dates(untis, backend):
    backend.rpc["getTimetable"] = []

    assert get_timetable(untis, date(2024, 3, 4), date(2024, 3, 8)) == []

    options = backend.rpc_calls("getTimetable")[0]["json"]["params"]["options"]
    assert options["startDate"] == "20240304"
    assert options["endDate"] == "20240308"


def test_timetable_is_fetched_once_per_instance(untis, backend):
    backend.rpc["getTimetable"] = [LESSON]

    timetable = TimeTable(untis)
    assert len(timetable) == 1
    assert len(list(timetable)) == 1
    assert len(backend.rpc_calls("getTimetable")) == 1


def test_timetable_rejects_non_list_result(untis, backend):
    backend.rpc["getTimetable"] = {"unexpected": True}

    with pytest.raises(UntisParsingError):
        get_timetable(untis)


def test_calendar_entry_detail_query(untis, backend):
    backend.rest["rest/view/v2/calendar-entry/detail"] = DETAIL
    lesson = Lesson.model_validate({"id": 1, "date": 20240307, "startTime": 800, "endTime": 945})

    details = fetch_calendar_entry_details(untis, lesson)

    call = backend.rest_calls("/api/rest/view/v2/calendar-entry/detail")[0]
    assert call["method"] == "GET"
    assert call["params"] == {
        "elementId": 42,
        "elementType": 5,
        "startDateTime": "2024-03-07T08:00:00.000Z",
        "endDateTime": "2024-03-07T09:45:00.000Z",
    }
    assert call["headers"]["Authorization"] == "Bearer jwt-token"
    assert "Cookie" not in call["headers"]

    entry = details.calendar_entries[0]
    assert (entry.previous_id, entry.next_id) == (97, 99)
    assert entry.exam.type_long_name == "Schularbeit"
    assert entry.homeworks[0].text == "S. 42"
    assert entry.rooms[0].status == "SUBSTITUTED"
    assert entry.teachers[0].status == "ABSENT"
    assert entry.lesson.lesson_number == 4300
    assert entry.booking == {"opaque": [1, 2]}
    assert entry.permissions == ["READ_HOMEWORK"]


def test_calendar_entry_details_of_timetable_lesson(untis, backend):
    backend.rpc["getTimetable"] = [{**LESSON, "startTime": 1330, "endTime": 1415}]
    backend.rest["rest/view/v2/calendar-entry/detail"] = {"calendarEntries": []}

    lesson = get_timetable(untis)[0]
    details = CalendarEntryDetails(untis, lesson).get()

    assert details.calendar_entries == []
    params = backend.rest_calls("/calendar-entry/detail")[0]["params"]
    assert params["startDateTime"] == "2024-03-07T13:30:00.000Z"
    assert params["endDateTime"] == "2024-03-07T14:15:00.000Z"


@pytest.fixture
def expire_after_resolving(untis, timers, monkeypatch):
    """Fire the expiry timer right after each `get_session()` returns, like a zero delay does."""
    resolve = untis.get_session

    def get_session_then_expire():
        session = resolve()
        for timer in timers:
            timer.fire()
        return session

    monkeypatch.setattr(untis, "get_session", get_session_then_expire)


def test_timetable_keeps_cookie_when_session_expires_at_once(untis, backend, expire_after_resolving):
    backend.rpc["getTimetable"] = [LESSON]

    assert len(get_timetable(untis)) == 1

    call = backend.rpc_calls("getTimetable")[0]
    assert call["headers"]["Cookie"] == f"JSESSIONID=S1; schoolname={SCHOOL_B64}"
    assert untis.session is None


def test_calendar_details_keep_cookie_when_session_expires_at_once(untis, backend, expire_after_resolving):
    backend.rest["rest/view/v2/calendar-entry/detail"] = DETAIL
    lesson = Lesson.model_validate({"id": 1, "date": 20240307, "startTime": 800, "endTime": 945})

    fetch_calendar_entry_details(untis, lesson)

    token_call = backend.rest_calls("/api/token/new")[0]
    assert token_call["headers"]["Cookie"] == f"JSESSIONID=S1; schoolname={SCHOOL_B64}"
    assert backend.rest_calls("/calendar-entry/detail")[0]["headers"]["Authorization"] == "Bearer jwt-token"
    assert len(backend.rpc_calls("authenticate")) == 1


def test_future_import_time_still_sends_cookie_with_real_timer():
    for _ in range(50):
        backend = FakeBackend()
        backend.rpc["getLatestImportTime"] = int(time.time() * 1000) + 60_000
        backend.rpc["getTimetable"] = [LESSON]
        client = make_client(backend)

        get_timetable(client)

        call = backend.rpc_calls("getTimetable")[0]
        assert call["headers"].get("Cookie") == f"JSESSIONID=S1; schoolname={SCHOOL_B64}"
        client.close()
