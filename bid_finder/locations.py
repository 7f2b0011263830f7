"""
Approximate bid locations for the map view.

Coordinates come from a small gazetteer of California place names, not
from a geocoder. A little random jitter is added so markers for bids in
the same city do not stack on top of each other.
"""

import random
from typing import Optional, Tuple

from .config import DEFAULT_COORDINATES

# Checked in insertion order: cities first, the state-wide entry last.
GAZETTEER = {
    'san francisco': (37.7749, -122.4194),
    'sf': (37.7749, -122.4194),
    'oakland': (37.8044, -122.2712),
    'berkeley': (37.8716, -122.2727),
    'sacramento': (38.5816, -121.4944),
    'los angeles': (34.0522, -118.2437),
    'la': (34.0522, -118.2437),
    'san diego': (32.7157, -117.1611),
    'san jose': (37.3382, -121.8863),
    'fresno': (36.7378, -119.7871),
    'long beach': (33.7701, -118.1937),
    'california': (36.7783, -119.4179),
}

JITTER_DEGREES = 0.015


def lookup_coordinates(location: str, agency: str = '') -> Tuple[float, float]:
    """
    Return base (lat, lng) for the first gazetteer key found in location + agency.
    Falls back to San Francisco. Deterministic.
    """
    search_text = f"{location or ''} {agency or ''}".lower()
    for key, coords in GAZETTEER.items():
        if key in search_text:
            return coords
    return DEFAULT_COORDINATES


def apply_jitter(coords: Tuple[float, float], rng: Optional[random.Random] = None,
                 spread: float = JITTER_DEGREES) -> Tuple[float, float]:
    """Offset each coordinate independently by up to +/- spread degrees."""
    rng = rng or random
    lat, lng = coords
    return (lat + rng.uniform(-spread, spread),
            lng + rng.uniform(-spread, spread))


def resolve_location(location: str, agency: str = '',
                     rng: Optional[random.Random] = None) -> Tuple[float, float]:
    """Gazetteer lookup plus jitter. Not deterministic unless rng is seeded."""
    return apply_jitter(lookup_coordinates(location, agency), rng)
