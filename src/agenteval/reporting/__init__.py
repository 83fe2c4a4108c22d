"""Trace and report artifacts: JSON persistence and HTML rendering."""

from agenteval.reporting.files import (
    load_report_dict,
    load_trace,
    save_report,
    save_trace,
)
from agenteval.reporting.html import render_html, save_html_report, score_color

__all__ = [
    "save_trace",
    "load_trace",
    "save_report",
    "load_report_dict",
    "render_html",
    "save_html_report",
    "score_color",
]
