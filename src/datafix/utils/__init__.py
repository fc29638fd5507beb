# src/datafix/utils/__init__.py
"""
Shared Utilities - display helpers used across views
"""

from .formatters import (
    format_date,
    format_date_short,
    format_relative_time,
    get_priority_color,
    get_priority_label,
    get_status_color,
    get_status_label,
    truncate_text,
)

__all__ = [
    "format_date",
    "format_date_short",
    "format_relative_time",
    "get_priority_color",
    "get_priority_label",
    "get_status_color",
    "get_status_label",
    "truncate_text",
]
