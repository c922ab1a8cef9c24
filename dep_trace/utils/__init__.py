"""Shared helpers for the CLI layer."""

from .error_format import escape_markup
from .error_format import format_error_message

__all__ = ["escape_markup", "format_error_message"]
