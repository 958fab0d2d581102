MONDAY = 0
TUESDAY = 1
WEDNESDAY = 2
THURSDAY = 3
FRIDAY = 4
SATURDAY = 5
SUNDAY = 6

WEEKDAY_NAMES = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
WEEKDAY_TO_INDEX = {name: idx for idx, name in enumerate(WEEKDAY_NAMES)}
DAY_LABELS = ["M", "T", "W", "T", "F", "S", "S"]

DEFAULT_TIMEZONE = "UTC"

# count thresholds: 0 -> empty, 1 -> light, 2..4 -> medium, 5+ -> full
LEVEL_EMPTY = 0
LEVEL_LIGHT = 1
LEVEL_MEDIUM = 2
LEVEL_FULL = 3
LEVEL_OPACITY = {
    LEVEL_EMPTY: 0.0,
    LEVEL_LIGHT: 0.2,
    LEVEL_MEDIUM: 0.5,
    LEVEL_FULL: 1.0,
}
LEVEL_LABELS = {
    LEVEL_EMPTY: "No completions",
    LEVEL_LIGHT: "1 completion",
    LEVEL_MEDIUM: "2-4 completions",
    LEVEL_FULL: "5+ completions",
}
LEVEL_RANGES = {
    LEVEL_EMPTY: (0, 0),
    LEVEL_LIGHT: (1, 1),
    LEVEL_MEDIUM: (2, 4),
    LEVEL_FULL: (5, None),
}

HEATMAP_COLORS = {
    "habits": "#10B981",
    "tasks": "#3B82F6",
    "overall": "#8B5CF6",
}
EMPTY_CELL_COLOR = "#0F172A"
PLOT_THEME = {
    "text_main": "#E2E8F0",
    "text_soft": "#94A3B8",
    "border": "rgba(51, 65, 85, 0.4)",
}

TASK_TYPES = {"my_day": "MY_DAY", "backlog": "BACKLOG", "planned": "PLANNED"}
TASK_TYPE_LABELS = {value: key for key, value in TASK_TYPES.items()}

STARTING_LEVEL = 1
XP_PER_LEVEL = 100
MIN_SESSION_XP = 10

RETRO_RATING_MIN = 1
RETRO_RATING_MAX = 10
RETRO_GOOD_THINGS = ("good_thing_1", "good_thing_2", "good_thing_3")
