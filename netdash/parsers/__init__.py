"""
netdash/parsers
Best-effort parsers for diagnostic tool output.

Tool output is not a stable format: it varies by OS, locale and tool version.
Every parser here is line-oriented, skips lines it does not understand and
never raises on odd input. Zero extracted records means "inconclusive", not
a parser failure.
"""

WINDOWS_NAMES = ("windows", "win32", "cygwin")


def is_windows(platform_name: str) -> bool:
    return (platform_name or "").lower() in WINDOWS_NAMES
