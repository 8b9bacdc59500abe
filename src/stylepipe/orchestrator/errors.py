from __future__ import annotations


class StylepipeError(Exception):
    """Base class for errors raised by the task runner."""


class ConfigurationError(StylepipeError, ValueError):
    """Bad task wiring or configuration: unknown task, cycle, bad config file."""
