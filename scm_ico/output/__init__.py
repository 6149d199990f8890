"""Output formatting module."""

from .formatters import OutputFormatter, JSONFormatter, TableFormatter, format_timestamp

__all__ = ["OutputFormatter", "JSONFormatter", "TableFormatter", "format_timestamp"]
