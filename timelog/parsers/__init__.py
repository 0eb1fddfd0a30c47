"""Parsers for free-text answers."""

from timelog.parsers.time_parser import DEFAULT_DURATION_MINUTES, has_duration, parse_duration

__all__ = ["parse_duration", "has_duration", "DEFAULT_DURATION_MINUTES"]
