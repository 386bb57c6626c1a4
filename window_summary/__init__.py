from .settings import FormatOptions, coerce_options
from .schemas import AiTimeWindow, NormalizedTimeWindow, WindowRecord

from .time_values import (
    construct_iso_from_date_and_time,
    format_iso_datetimes_in_text,
    format_local,
    format_time,
    slot_to_time_range,
)
from .scoring import determine_severity, normalize_score, score_text, score_variant
from .embedded_json import extract_and_parse_json, looks_like_raw_json_data, parse_embedded_windows_json
from .debug_strip import strip_debug_blocks

from .windows import (
    build_time_windows,
    build_window_string,
    dedupe_time_windows,
    format_time_range,
    normalize_inauspicious_times,
    normalize_time_window,
    window_label,
)
from .tokens import WarningLatch, expand_time_window_tokens, replace_window_numbers_with_time_ranges
from .clean import SummaryCleaner, clean_summary_with_windows
from .dedupe_summary import dedupe_summary
from .merge import map_ai_windows_to_engine_windows, validate_ai_windows
