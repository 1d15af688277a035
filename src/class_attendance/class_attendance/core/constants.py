"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MIN_SLOT_MINUTES = 30

# Week parity anchor: weeks are counted from September 1 of the academic year.
ACADEMIC_YEAR_START_MONTH = 9
ACADEMIC_YEAR_START_DAY = 1

VIRTUAL_SESSION_PREFIX = "v-"

MAX_ID_LENGTH = 36

USERS_COLLECTION = "users"
GROUPS_COLLECTION = "groups"
SUBJECTS_COLLECTION = "subjects"
SLOTS_COLLECTION = "schedule"
SESSIONS_COLLECTION = "classes"
ATTENDANCE_COLLECTION = "attendance"

UNKNOWN_STUDENT_NAME = "Unknown student"

MAX_RANGE_DAYS = 366
