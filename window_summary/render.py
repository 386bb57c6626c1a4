"""HTML fragments for expanded ``time_windows[n]`` tokens.

The UI parses these by class name (``mv-time-window``, ``mv-severity--*``,
``mv-score--*``, ``mv-pakshi-badge``), so the markup stays on one line and
its shape does not change.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from jinja2 import Environment, Template

from .mappings import DEFAULT_RANGE_PLACEHOLDER, DEFAULT_SCORE_TEXT
from .schemas import NormalizedTimeWindow


logger = logging.getLogger(__name__)

TIME_WINDOW_TEMPLATE = (
    '<span class="mv-time-window mv-severity--{{ severity }} mv-{{ severity }}" data-severity="{{ severity }}">'
    '<span class="mv-time-range">{{ time_range }}</span> '
    '<span class="mv-score mv-score--{{ variant }}">{{ score_text }}</span>'
    "{% for label, pakshi in badges %}"
    ' <span class="mv-pakshi-badge mv-pakshi--{{ severity }}">{{ label }}: {{ pakshi }}</span>'
    "{% endfor %}"
    "</span>"
)

FALLBACK_FRAGMENT = (
    '<span class="mv-time-window mv-severity--neutral mv-neutral" data-severity="neutral">'
    f'<span class="mv-time-range">{DEFAULT_RANGE_PLACEHOLDER}</span> '
    f'<span class="mv-score mv-score--neutral">{DEFAULT_SCORE_TEXT}</span>'
    "</span>"
)

_jinja_env: Optional[Environment] = None


def _get_jinja_env() -> Environment:
    global _jinja_env
    if _jinja_env is None:
        _jinja_env = Environment(autoescape=True)
    return _jinja_env


@lru_cache(maxsize=16)
def _compile_template(source: str) -> Template:
    return _get_jinja_env().from_string(source)


def render_time_window(window: NormalizedTimeWindow, time_range: Optional[str] = None) -> str:
    badges = []
    if window.pakshi_day:
        badges.append(("Day", window.pakshi_day))
    if window.pakshi_night:
        badges.append(("Night", window.pakshi_night))
    return _compile_template(TIME_WINDOW_TEMPLATE).render(
        severity=window.severity,
        time_range=time_range or f"{window.start_display} → {window.end_display}",
        variant=window.score_variant,
        score_text=window.score_text,
        badges=badges,
    )


def render_fallback() -> str:
    return FALLBACK_FRAGMENT
