from __future__ import annotations

from typing import Optional, Union
import math
import unicodedata

Number = Union[int, float]

EARTH_RADIUS_KM = 6371.0


def is_valid_number(v: Optional[Number]) -> bool:
    """Check if value is a real number (not None/NaN)."""
    try:
        return v is not None and not math.isnan(float(v))
    except (TypeError, ValueError):
        return False


def coordinates_of(obj) -> Optional[tuple[float, float]]:
    """(lat, lon) when both are usable numbers, else None."""
    lat = getattr(obj, "latitude", None)
    lon = getattr(obj, "longitude", None)
    if is_valid_number(lat) and is_valid_number(lon):
        return float(lat), float(lon)
    return None


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute great-circle distance in kilometers."""
    p1, p2 = math.radians(lat1), math.radians(lat2)
    dp = p2 - p1
    dl = math.radians(lon2 - lon1)
    a = math.sin(dp / 2) ** 2 + math.cos(p1) * math.cos(p2) * math.sin(dl / 2) ** 2
    # clamp: rounding can push a a hair above 1 for antipodal points
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(min(1.0, a)))


def collation_key(text: Optional[str]) -> tuple[str, str]:
    """Sort key close to a locale-aware compare: accents and case folded first."""
    text = text or ""
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), text
