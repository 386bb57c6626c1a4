DEFAULT_TIME_PLACEHOLDER = "--:--"
DEFAULT_SCORE_TEXT = "-"
DEFAULT_RANGE_PLACEHOLDER = f"{DEFAULT_TIME_PLACEHOLDER} → {DEFAULT_TIME_PLACEHOLDER}"
EMPTY_LOCAL_VALUE = "—"
SLOT_RANGE_SENTINEL = "time window"
UNKNOWN_PAKSHI = "Unknown Pakshi"

SEVERITIES = ("auspicious", "inauspicious", "neutral")

WINDOWS_JSON_MARKER = "__windows_json__"
DEBUG_MARKERS = (WINDOWS_JSON_MARKER, "__debug__")

FREE_TEXT_FIELDS = ("note", "short_desc", "description")

NAME_KEYS = ("name", "title", "label", "category")
EXPLICIT_SEVERITY_KEYS = ("severity", "impact", "status", "ght_status", "pakshi_status")
CATEGORY_KEYS = ("category", "type")

PAKSHI_DAY_KEYS = ("pakshi_day", "day_ruling_pakshi", "day_pakshi", "pakshi", "dayPakshi")
PAKSHI_NIGHT_KEYS = ("pakshi_night", "night_ruling_pakshi", "night_pakshi", "nightPakshi")
PAKSHI_STATUS_KEYS = ("pakshi_status", "ght_status")

# Substring families checked in order: inauspicious first, so "inauspicious"
# is never read as "auspicious".
CATEGORY_INAUSPICIOUS = (
    "highly inauspicious",
    "inauspicious",
    "bad",
    "avoid",
    "negative",
    "unfavourable",
    "unfavorable",
    "malefic",
)
CATEGORY_AUSPICIOUS = (
    "highly auspicious",
    "auspicious",
    "good",
    "favourable",
    "favorable",
    "excellent",
    "positive",
)
CATEGORY_NEUTRAL = ("challenging", "neutral", "mixed", "moderate")

BOILERPLATE_SENTENCES = (
    "Stay observant today.",
    "Be mindful of changes.",
    "Trust your intuition.",
    "Focus on positive energy.",
)
BOILERPLATE_MAX_OCCURRENCES = 2

DEFAULT_COLLAPSE_PHRASES = (
    "Take ten mindful breaths, journal insights, and let compassion guide every action.",
    "Stay observant.",
)

MAX_JSON_SCAN_ITERATIONS = 100
MAX_JSON_BLOB_SIZE = 5000
MIN_JSON_BLOB_LENGTH = 4
