"""Duration rounding policy for recorded time."""


def round_duration(duration_seconds: int, interval_minutes: int) -> int:
    """
    Snap a duration to the nearest multiple of the rounding interval.

    A remainder of at least half the interval rounds up. An interval of zero
    or less disables rounding. The result is never negative.
    """
    seconds = max(int(duration_seconds), 0)
    if not interval_minutes or interval_minutes <= 0:
        return seconds

    interval = int(interval_minutes) * 60
    remainder = seconds % interval
    if remainder * 2 >= interval:
        return seconds - remainder + interval
    return seconds - remainder
