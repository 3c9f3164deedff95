"""
Great-circle distances for the nearby-donor search.
"""

import math

EARTH_RADIUS_KM = 6371


def is_valid_coordinate(lat, lon):
    """True for a finite latitude in [-90, 90] and longitude in [-180, 180]."""
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return False
    return -90 <= lat <= 90 and -180 <= lon <= 180


def haversine_distance(lat1, lon1, lat2, lon2):
    """Straight-line distance in km between two (lat, lon) points given in degrees."""
    phi1, lam1, phi2, lam2 = map(math.radians, (lat1, lon1, lat2, lon2))

    h = (math.sin((phi2 - phi1) / 2) ** 2
         + math.cos(phi1) * math.cos(phi2) * math.sin((lam2 - lam1) / 2) ** 2)

    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(h))


def find_nearby_donors(lat, lon, donors, max_distance):
    """
    Pair every located donor within `max_distance` km of (lat, lon) with its
    distance, nearest first. Donors without coordinates are ignored.
    """
    located = (d for d in donors if d.latitude is not None and d.longitude is not None)
    pairs = ((donor, haversine_distance(lat, lon, donor.latitude, donor.longitude)) for donor in located)

    return sorted((pair for pair in pairs if pair[1] <= max_distance), key=lambda pair: pair[1])
