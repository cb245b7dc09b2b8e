"""Reporting module - JSON exchange reports."""

from .json_reporter import JsonReporter

__all__ = ["JsonReporter"]
