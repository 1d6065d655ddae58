"""Formatting helpers for solver logs."""

LOG_TIME_FORMAT = "%Y-%m-%d %H:%M:%S %Z%z"
"""`strftime` format of the start time written to solver logs."""


def format_duration(seconds: float) -> str:
    """Render an elapsed time for a solver log, e.g. `1h 02m 03.45s` or `7.50s`."""
    minutes, secs = divmod(seconds, 60)
    hours, minutes = divmod(int(minutes), 60)
    if hours:
        return f"{hours}h {minutes:02}m {secs:05.2f}s"
    if minutes:
        return f"{minutes}m {secs:05.2f}s"
    return f"{secs:.2f}s"
