"""
Helper functions for formatting data into human-readable strings.
"""


def format_duration(seconds: float) -> str:
    """
    Formats a duration in seconds into a human-readable string (e.g., '1m 12s').
    """
    minutes, secs = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    parts = [
        f"{value}{label}" for value, label in ((hours, "h"), (minutes, "m")) if value
    ]
    if secs or not parts:
        parts.append(f"{secs}s")
    return " ".join(parts)


def pluralize(count: int, noun: str) -> str:
    """Returns e.g. '1 archive' or '3 archives'."""
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"
