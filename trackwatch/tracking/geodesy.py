"""Direct geodesic problem on the WGS-84 ellipsoid (Vincenty, 1975)."""

from __future__ import annotations

import math

WGS84_A = 6378137.0
WGS84_F = 1 / 298.257223563
WGS84_B = WGS84_A * (1 - WGS84_F)

_MAX_ITERATIONS = 200
_CONVERGENCE = 1e-12


def destination_point(
    lat: float, lon: float, bearing_deg: float, distance_m: float
) -> tuple[float, float]:
    """Return the point reached from (lat, lon) along an initial bearing.

    Args:
        lat: Start latitude in degrees.
        lon: Start longitude in degrees.
        bearing_deg: Initial bearing in degrees clockwise from true north.
            Values outside [0, 360) are wrapped.
        distance_m: Distance along the geodesic in metres.

    Returns:
        (lat, lon) of the destination in degrees, longitude in [-180, 180).
        A zero distance returns the input point unchanged.
    """

    if distance_m == 0:
        return lat, lon

    a, b, f = WGS84_A, WGS84_B, WGS84_F

    alpha1 = math.radians(bearing_deg % 360.0)
    sin_alpha1 = math.sin(alpha1)
    cos_alpha1 = math.cos(alpha1)

    tan_u1 = (1 - f) * math.tan(math.radians(lat))
    cos_u1 = 1 / math.sqrt(1 + tan_u1 * tan_u1)
    sin_u1 = tan_u1 * cos_u1

    sigma1 = math.atan2(tan_u1, cos_alpha1)
    sin_alpha = cos_u1 * sin_alpha1
    cos_sq_alpha = 1 - sin_alpha * sin_alpha
    u_sq = cos_sq_alpha * (a * a - b * b) / (b * b)
    big_a = 1 + u_sq / 16384 * (4096 + u_sq * (-768 + u_sq * (320 - 175 * u_sq)))
    big_b = u_sq / 1024 * (256 + u_sq * (-128 + u_sq * (74 - 47 * u_sq)))

    sigma = distance_m / (b * big_a)
    for _ in range(_MAX_ITERATIONS):
        cos_2sigma_m = math.cos(2 * sigma1 + sigma)
        sin_sigma = math.sin(sigma)
        cos_sigma = math.cos(sigma)
        delta_sigma = big_b * sin_sigma * (
            cos_2sigma_m
            + big_b
            / 4
            * (
                cos_sigma * (-1 + 2 * cos_2sigma_m * cos_2sigma_m)
                - big_b
                / 6
                * cos_2sigma_m
                * (-3 + 4 * sin_sigma * sin_sigma)
                * (-3 + 4 * cos_2sigma_m * cos_2sigma_m)
            )
        )
        previous = sigma
        sigma = distance_m / (b * big_a) + delta_sigma
        if abs(sigma - previous) <= _CONVERGENCE:
            break

    cos_2sigma_m = math.cos(2 * sigma1 + sigma)
    sin_sigma = math.sin(sigma)
    cos_sigma = math.cos(sigma)

    tmp = sin_u1 * sin_sigma - cos_u1 * cos_sigma * cos_alpha1
    lat2 = math.atan2(
        sin_u1 * cos_sigma + cos_u1 * sin_sigma * cos_alpha1,
        (1 - f) * math.sqrt(sin_alpha * sin_alpha + tmp * tmp),
    )
    lam = math.atan2(
        sin_sigma * sin_alpha1, cos_u1 * cos_sigma - sin_u1 * sin_sigma * cos_alpha1
    )
    c = f / 16 * cos_sq_alpha * (4 + f * (4 - 3 * cos_sq_alpha))
    big_l = lam - (1 - c) * f * sin_alpha * (
        sigma + c * sin_sigma * (cos_2sigma_m + c * cos_sigma * (-1 + 2 * cos_2sigma_m * cos_2sigma_m))
    )
    lon2 = (math.radians(lon) + big_l + 3 * math.pi) % (2 * math.pi) - math.pi

    return math.degrees(lat2), math.degrees(lon2)


__all__ = ["WGS84_A", "WGS84_B", "WGS84_F", "destination_point"]
