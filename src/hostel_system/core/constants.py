"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 7
DEFAULT_STATS_WINDOW_DAYS = 30
DEFAULT_NOTICE_LIMIT = 10
DEFAULT_BULK_MARK_WORKERS = 8
DEFAULT_LATE_THRESHOLD_MINUTES = 15

# Grade bands are inclusive lower bounds, checked from the top.
GRADE_BANDS = (
    (90.0, "A+"),
    (80.0, "A"),
    (70.0, "B"),
    (60.0, "C"),
)
LOWEST_GRADE = "D"

LOW_ATTENDANCE_PERCENT = 75.0
EXCELLENT_ATTENDANCE_PERCENT = 90.0
FREQUENT_LATE_RATIO = 0.1

AUTO_ABSENT_NOTE = "Auto-marked absent after cutoff"
