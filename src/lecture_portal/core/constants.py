"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MIN_PASSWORD_LENGTH = 6

FILTER_ALL = "all"

NOT_RECORDED = "Not recorded"
UNKNOWN_LECTURE = "Unknown Lecture"
UNKNOWN_STUDENT = "Unknown Student"

ALLOWED_LECTURE_EXTENSIONS = frozenset({"pdf"})
