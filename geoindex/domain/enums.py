"""Domain enumerations."""

import enum


class Resolution(enum.IntEnum):
    CITY = 7  # ~1.22 km edge
    NEIGHBORHOOD = 8  # ~0.46 km edge
    BLOCK = 9  # ~0.17 km edge


class GeofenceType(str, enum.Enum):
    SERVICE_AREA = "service_area"
    SURGE_ZONE = "surge_zone"
    NO_PICKUP = "no_pickup"
    AIRPORT = "airport"


class HeatColor(str, enum.Enum):
    RED = "#FF0000"  # very high demand
    ORANGE = "#FF6600"  # high demand
    YELLOW = "#FFCC00"  # moderate demand
    GREEN = "#00CC00"  # balanced
    BLUE = "#0066FF"  # oversupply
    GRAY = "#808080"  # no activity


class Direction(str, enum.Enum):
    N = "N"
    NE = "NE"
    E = "E"
    SE = "SE"
    S = "S"
    SW = "SW"
    W = "W"
    NW = "NW"


# Clockwise from north, one entry per 45° sector
COMPASS: tuple[Direction, ...] = tuple(Direction)
