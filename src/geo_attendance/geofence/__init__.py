from .evaluator import bypass_region, haversine_distance, locate, nearest_regions, require_valid, validate_coordinates
from .model import Coordinate, GeoRegion

__all__ = [
    "Coordinate",
    "GeoRegion",
    "bypass_region",
    "haversine_distance",
    "locate",
    "nearest_regions",
    "require_valid",
    "validate_coordinates",
]
