# farm_directory/query.py
"""
Directory view over a set of listings.

``compute_view`` runs a fixed pipeline: search filter, category filter,
distance annotation, ordering. It never touches the store and never mutates
the listings it is given; distance lives on the returned ``ListingView``.

Note the two filters differ on purpose: the search term is matched
case-insensitively, the category chip is a case-sensitive substring of the
raw ``products`` string (tags are not normalized on write).
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Sequence

from farm_directory.utils import collation_key, coordinates_of, haversine_km


@dataclass(frozen=True)
class Origin:
    lat: float
    lon: float


@dataclass(frozen=True)
class ListingView:
    listing: Any
    distance: Optional[float] = None  # km; inf when the listing has no coordinates


def _contains_ci(value: Optional[str], term: str) -> bool:
    return bool(value) and term in value.lower()


def matches_search(listing, term: str) -> bool:
    term = term.lower()
    return (
        _contains_ci(getattr(listing, "name", None), term)
        or _contains_ci(getattr(listing, "location", None), term)
        or _contains_ci(getattr(listing, "products", None), term)
    )


def matches_category(listing, category: str) -> bool:
    products = getattr(listing, "products", None)
    return bool(products) and category in products


def distance_from(origin: Origin, listing) -> float:
    coords = coordinates_of(listing)
    if coords is None:
        return math.inf
    return haversine_km(origin.lat, origin.lon, coords[0], coords[1])


def compute_view(
    listings: Iterable[Any],
    *,
    search_term: Optional[str] = None,
    origin: Optional[Origin] = None,
    selected_category: Optional[str] = None,
) -> list[ListingView]:
    result = list(listings)

    if search_term:
        result = [f for f in result if matches_search(f, search_term)]

    if selected_category:
        result = [f for f in result if matches_category(f, selected_category)]

    if origin is not None:
        views = [ListingView(f, distance_from(origin, f)) for f in result]
        # sorted() is stable, equal distances keep input order
        return sorted(views, key=lambda v: v.distance)

    views = [ListingView(f) for f in result]
    return sorted(views, key=lambda v: collation_key(getattr(v.listing, "name", None)))


def category_vocabulary(listings: Sequence[Any]) -> list[str]:
    tags: set[str] = set()
    for f in listings:
        products = getattr(f, "products", None)
        if not products:
            continue
        for part in products.split(","):
            tag = part.strip()
            if tag:
                tags.add(tag)
    return sorted(tags)
