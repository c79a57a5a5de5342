from typing import Any

def format_distance(distance_km: float) -> str:
    """Human readable distance: meters below 1 km, one decimal below 10 km"""
    if distance_km < 1:
        return f"{int(distance_km * 1000 + 0.5)} m"
    elif distance_km < 10:
        return f"{distance_km:.1f} km"
    else:
        return f"{int(distance_km + 0.5)} km"

def format_travel_time(minutes: int) -> str:
    if minutes < 60:
        return f"{minutes} min"
    hours, remaining = divmod(minutes, 60)
    return f"{hours}h {remaining}min"

def format_coordinates(point: Any, precision: int = 6) -> str:
    return f"{point.latitude:.{precision}f}, {point.longitude:.{precision}f}"
