"""
Geohash codec
=============

Each character packs 5 bits produced by bisecting the working longitude
and latitude ranges alternately, starting with longitude.  A longer hash
is a smaller box nested inside every one of its prefixes.

Approximate cell size per precision
-----------------------------------
  1: ~5000 km x 5000 km      6: ~1.2 km x 0.6 km
  2: ~1250 km x 625 km       7: ~153 m x 153 m
  3: ~156 km x 156 km        8: ~38 m x 19 m
  4: ~39 km x 19.5 km        9: ~4.8 m x 4.8 m
  5: ~4.9 km x 4.9 km

Neighbours
----------
Adjacent hashes are found with the classic border/neighbour lookup tables:
replace the last character, and recurse into the parent when the step
crosses the parent's border.  The tables depend on hash-length parity
because odd-length hashes end on a longitude bit and even-length hashes
end on a latitude bit.  Longitude wraps at the antimeridian; latitude
does not wrap at the poles.
"""

from __future__ import annotations

from .entities import BoundingBox, InvalidGeohash, Point

BASE32 = "0123456789bcdefghjkmnpqrstuvwxyz"
MAX_PRECISION = 12
BITS_PER_CHAR = 5

_DECODE = {c: i for i, c in enumerate(BASE32)}

# (even length, odd length).  base32[table.index(last_char)] is the neighbour.
_NEIGHBOURS: dict[str, tuple[str, str]] = {
    "n": ("p0r21436x8zb9dcf5h7kjnmqesgutwvy", "bc01fg45238967deuvhjyznpkmstqrwx"),
    "s": ("14365h7k9dcfesgujnmqp0r2twvyx8zb", "238967debc01fg45kmstqrwxuvhjyznp"),
    "e": ("bc01fg45238967deuvhjyznpkmstqrwx", "p0r21436x8zb9dcf5h7kjnmqesgutwvy"),
    "w": ("238967debc01fg45kmstqrwxuvhjyznp", "14365h7k9dcfesgujnmqp0r2twvyx8zb"),
}
_BORDERS: dict[str, tuple[str, str]] = {
    "n": ("prxz", "bcfguvyz"),
    "s": ("028b", "0145hjnp"),
    "e": ("bcfguvyz", "prxz"),
    "w": ("0145hjnp", "028b"),
}


def precision_for_radius(radius_km: float) -> int:
    """Recommended precision for a search of the given radius."""
    if radius_km > 5000:
        return 1
    if radius_km > 625:
        return 2
    if radius_km > 78:
        return 3
    if radius_km > 19.5:
        return 4
    if radius_km > 2.4:
        return 5
    if radius_km > 0.6:
        return 6
    if radius_km > 0.076:
        return 7
    if radius_km > 0.019:
        return 8
    return 9


def encode(point: Point, precision: int = 9) -> str:
    precision = max(1, min(MAX_PRECISION, precision))

    min_lat, max_lat = -90.0, 90.0
    min_lng, max_lng = -180.0, 180.0

    chars: list[str] = []
    ch = 0
    bit = 0
    is_lng = True

    while len(chars) < precision:
        if is_lng:
            mid = (min_lng + max_lng) / 2
            if point.lng >= mid:
                ch |= 1 << (4 - bit)
                min_lng = mid
            else:
                max_lng = mid
        else:
            mid = (min_lat + max_lat) / 2
            if point.lat >= mid:
                ch |= 1 << (4 - bit)
                min_lat = mid
            else:
                max_lat = mid

        is_lng = not is_lng
        bit += 1
        if bit == BITS_PER_CHAR:
            chars.append(BASE32[ch])
            bit = 0
            ch = 0

    return "".join(chars)


def decode_bounds(geohash: str) -> BoundingBox:
    """
    Replay the bisection encoded by *geohash*.

    Case-insensitive.  Unrecognised characters are skipped; a hash with no
    recognised character at all raises ``InvalidGeohash``.
    """
    min_lat, max_lat = -90.0, 90.0
    min_lng, max_lng = -180.0, 180.0
    is_lng = True
    seen = False

    for c in geohash.lower():
        idx = _DECODE.get(c)
        if idx is None:
            continue
        seen = True
        for bit in range(4, -1, -1):
            on = (idx >> bit) & 1
            if is_lng:
                mid = (min_lng + max_lng) / 2
                if on:
                    min_lng = mid
                else:
                    max_lng = mid
            else:
                mid = (min_lat + max_lat) / 2
                if on:
                    min_lat = mid
                else:
                    max_lat = mid
            is_lng = not is_lng

    if not seen:
        raise InvalidGeohash(f"No geohash symbols in {geohash!r}")

    return BoundingBox(min_lat=min_lat, max_lat=max_lat, min_lng=min_lng, max_lng=max_lng)


def decode(geohash: str) -> Point:
    """Centre of the hash's bounding box."""
    return decode_bounds(geohash).center()


def adjacent(geohash: str, direction: str) -> str | None:
    """
    The same-precision hash one step ``n``, ``s``, ``e`` or ``w``.

    Returns ``None`` when stepping north/south would cross a pole.
    """
    geohash = _normalise(geohash)
    last = geohash[-1]
    parent = geohash[:-1]
    parity = len(geohash) % 2

    if last in _BORDERS[direction][parity]:
        if parent:
            parent = adjacent(parent, direction)
            if parent is None:
                return None
        elif direction in ("n", "s"):
            return None
    return parent + BASE32[_NEIGHBOURS[direction][parity].index(last)]


def neighbors(geohash: str) -> list[str]:
    """
    The 8 surrounding hashes: N, NE, E, SE, S, SW, W, NW.

    At a polar edge the missing row is clamped onto the hash's own row, so
    N becomes the hash itself and NE/NW become E/W (likewise for S).
    """
    geohash = _normalise(geohash)
    east = adjacent(geohash, "e")
    west = adjacent(geohash, "w")
    north = adjacent(geohash, "n") or geohash
    south = adjacent(geohash, "s") or geohash
    return [
        north,
        adjacent(north, "e"),
        east,
        adjacent(south, "e"),
        south,
        adjacent(south, "w"),
        west,
        adjacent(north, "w"),
    ]


def neighbors_with_center(geohash: str) -> list[str]:
    geohash = _normalise(geohash)
    return [geohash, *neighbors(geohash)]


def cover_bounding_box(bbox: BoundingBox, precision: int, samples: int = 10) -> list[str]:
    """
    Hashes hit by an ``(samples+1) x (samples+1)`` lattice over *bbox*.

    Heuristic: a cell thinner than the lattice spacing can be missed.
    """
    lat_step = (bbox.max_lat - bbox.min_lat) / samples
    lng_step = (bbox.max_lng - bbox.min_lng) / samples

    hashes: dict[str, None] = {}
    for i in range(samples + 1):
        lat = bbox.min_lat + i * lat_step
        for j in range(samples + 1):
            lng = bbox.min_lng + j * lng_step
            hashes.setdefault(encode(Point(lat, lng), precision))
    return list(hashes)


def cover_radius(center: Point, radius_km: float) -> list[str]:
    """Centre hash plus neighbours, one extra layer beyond 5 km."""
    precision = precision_for_radius(radius_km)
    hashes = dict.fromkeys(neighbors_with_center(encode(center, precision)))

    if radius_km > 5:
        for h in list(hashes):
            for n in neighbors(h):
                hashes.setdefault(n)
    return list(hashes)


def _normalise(geohash: str) -> str:
    lowered = geohash.lower()
    if not lowered or any(c not in _DECODE for c in lowered):
        raise InvalidGeohash(f"Invalid geohash: {geohash!r}")
    return lowered
