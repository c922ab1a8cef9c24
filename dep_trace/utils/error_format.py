"""Error message formatting for CLI output.

Some exceptions stringify to "" (RecursionError from deep layouts,
KeyboardInterrupt); these helpers make sure the user still sees something
useful, and that paths containing brackets are not read as Rich markup.
"""

from __future__ import annotations

from rich.markup import escape as _escape_markup

FRIENDLY_MESSAGES: dict[type, str] = {
    RecursionError: "Dependency tree is nested too deeply to scan. Try a lower --depth.",
    PermissionError: "Permission denied while reading the dependency tree.",
    KeyboardInterrupt: "Scan interrupted by user.",
}


def format_error_message(e: BaseException, *, include_type: bool = True) -> str:
    """Format an exception into a non-empty display message.

    Examples:
        >>> format_error_message(ValueError("invalid input"))
        'ValueError: invalid input'

        >>> format_error_message(KeyboardInterrupt())
        'KeyboardInterrupt: Scan interrupted by user.'
    """
    error_str = str(e)
    error_type = type(e).__name__

    if error_str:
        if include_type and error_type not in error_str:
            return f"{error_type}: {error_str}"
        return error_str

    for exc_type, friendly_msg in FRIENDLY_MESSAGES.items():
        if isinstance(e, exc_type):
            return f"{error_type}: {friendly_msg}" if include_type else friendly_msg

    return f"{error_type}: (no additional details)"


def escape_markup(value: object) -> str:
    """Escape a value for interpolation into Rich markup strings."""
    return _escape_markup(str(value))
