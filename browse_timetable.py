import sys
import os
import logging
from datetime import date, timedelta

# Add the src directory to the Python path
src_path = os.path.join(os.path.dirname(__file__), 'src')
if (src_path not in sys.path):
    sys.path.insert(0, src_path)

from untis import (
    Untis,
    PathCredentials,
    TimeTable,
    CalendarEntryDetails,
    UntisException,
)
from untis.logger import setup_logger

# Optional: Enable detailed logging
setup_logger(logging.DEBUG)

# Load credentials from credentials.yml (or specified path)
creds = PathCredentials()
# creds = PathCredentials(filename="path/to/your/credentials.yml")

start = date.today()
end = start + timedelta(days=7)

with Untis.start(creds) as untis:
    print(f"Fetching timetable {start} - {end}...")
    lessons = sorted(TimeTable(untis, start, end), key=lambda lesson: (lesson.date, lesson.start_time))
    for lesson in lessons:
        subjects = ", ".join(su.name or "?" for su in lesson.su)
        rooms = ", ".join(ro.name or "?" for ro in lesson.ro)
        print(f"- {lesson.date} {lesson.start_time:04d}-{lesson.end_time:04d} {subjects} [{rooms}] {lesson.code or ''}")

    if lessons:
        print("\nDetails of the first lesson:")
        try:
            details = CalendarEntryDetails(untis, lessons[0]).get()
        except UntisException as e:
            print(f"!!! Could not fetch details: {e}")
        else:
            for entry in details.calendar_entries:
                teachers = ", ".join(f"{t.display_name} ({t.status})" for t in entry.teachers)
                print(f"- {entry.start_date_time}: {entry.subject.long_name if entry.subject else '?'} / {teachers}")
                for homework in entry.homeworks:
                    print(f"    homework due {homework.due_date_time}: {homework.text}")

print("\nDone.")
