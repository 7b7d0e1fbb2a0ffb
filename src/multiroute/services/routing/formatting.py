"""Human-readable text for route summaries."""

from __future__ import annotations


def duration_to_text(seconds: float) -> str:
    if seconds < 60:
        return "1 min"

    total_minutes = int(round(seconds / 60.0))
    hours, minutes = divmod(total_minutes, 60)
    if hours == 0:
        return f"{minutes} min"
    if minutes == 0:
        return f"{hours} h"
    return f"{hours} h {minutes} min"


def distance_to_text(meters: float) -> str:
    if meters <= 1000:
        return f"{int(round(meters))} m"

    km = meters / 1000.0
    # 3 significant digits without falling into scientific notation
    digits = len(str(int(km)))
    decimals = max(0, 3 - digits)
    # rounding may carry into a new integer digit (9.999 -> 10.0)
    if len(str(int(round(km, decimals)))) > digits:
        decimals = max(0, decimals - 1)
    return f"{km:.{decimals}f} km"


def headline(duration_secs: float, distance_meters: float) -> str:
    return f"{duration_to_text(duration_secs)} ({distance_to_text(distance_meters)})"
