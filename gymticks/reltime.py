MINUTE = 60
HOUR = 60 * MINUTE
DAY = 24 * HOUR


def rel_time(past_ts: int, now: int, compact: bool = False) -> str:
    """Short "how long ago" text for `past_ts`, both in epoch seconds."""
    if compact:
        minute, hour, day, days = "m", "h", "d", "d"
    else:
        minute, hour, day, days = " min", " hr", " day", " days"

    duration = now - past_ts
    minutes = duration // MINUTE
    hours = duration // HOUR
    n_days = duration // DAY

    if minutes < 1:
        return "now"
    if minutes < 60:
        return f"{minutes}{minute}"
    if hours < 24:
        return f"{hours}{hour}"
    if n_days == 1:
        return f"1{day}"
    return f"{n_days}{days}"
