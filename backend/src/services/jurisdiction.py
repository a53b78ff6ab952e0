"""Jurisdiction masking using approximate state bounding boxes"""

import logging
from typing import Dict, Optional

from src.config import settings
from src.schemas.photo import BoundingBox, Jurisdiction, MapCenter

logger = logging.getLogger(__name__)


WORLD_BOUNDS = BoundingBox(north=90, south=-90, east=180, west=-180)

# Approximate bounds only; precise boundaries would need real polygons
STATE_BOUNDS: Dict[str, BoundingBox] = {
    name: BoundingBox(north=n, south=s, east=e, west=w)
    for name, (n, s, e, w) in {
        "Alabama": (35.0080, 30.1955, -84.8880, -88.4731),
        "Alaska": (71.5388, 51.2097, -129.9929, -179.1506),
        "Arizona": (37.0042, 31.3322, -109.0452, -114.8165),
        "Arkansas": (36.4996, 33.0041, -89.6444, -94.6178),
        "California": (42.0095, 32.5343, -114.1312, -124.4096),
        "Colorado": (41.0034, 36.9949, -102.0424, -109.0489),
        "Connecticut": (42.0508, 40.9509, -71.7870, -73.7277),
        "Delaware": (39.8394, 38.4510, -75.0489, -75.7888),
        "Florida": (31.0009, 24.5446, -80.0314, -87.6349),
        "Georgia": (35.0008, 30.3176, -80.7014, -85.6051),
        "Hawaii": (28.4318, 18.9117, -154.8066, -178.4438),
        "Idaho": (49.0011, 41.9880, -111.0435, -117.2431),
        "Illinois": (42.5083, 36.9540, -87.0199, -91.5130),
        "Indiana": (41.7606, 37.7717, -84.7844, -88.0978),
        "Kansas": (40.0031, 36.9932, -94.5888, -102.0517),
        "Kentucky": (39.1472, 36.4970, -81.9648, -89.5715),
        "Louisiana": (33.0197, 28.9210, -88.8172, -94.0431),
        "Maine": (47.4598, 43.0642, -66.9854, -71.0844),
        "Maryland": (39.7237, 37.9113, -75.0487, -79.4877),
        "Massachusetts": (42.8867, 41.2376, -69.8589, -73.5081),
        "Michigan": (48.2388, 41.6960, -82.1430, -90.4180),
        "Minnesota": (49.3844, 43.4994, -89.4836, -97.2390),
        "Mississippi": (35.0041, 30.1390, -88.0972, -91.6540),
        "Missouri": (40.6136, 35.9957, -89.0988, -95.7742),
        "Montana": (49.0011, 44.3583, -104.0573, -116.0636),
        "Nebraska": (43.0017, 39.9999, -95.3080, -104.0573),
        "Nevada": (42.0022, 35.0018, -114.0396, -120.0057),
        "New Hampshire": (45.3058, 42.6970, -70.6103, -72.5570),
        "New Jersey": (41.3574, 38.9284, -73.8935, -75.5594),
        "New Mexico": (37.0002, 31.3328, -103.0418, -109.0501),
        "New York": (45.0158, 40.4774, -71.7776, -79.7624),
        "North Carolina": (36.5881, 33.7514, -75.3274, -84.3218),
        "North Dakota": (49.0011, 45.9354, -96.5543, -104.0489),
        "Ohio": (41.9773, 38.4031, -80.5190, -84.8203),
        "Oklahoma": (37.0020, 33.6323, -94.4312, -103.0025),
        "Oregon": (46.2991, 41.9918, -116.4635, -124.7034),
        "Pennsylvania": (42.5147, 39.7198, -74.6895, -80.5190),
        "Rhode Island": (42.0188, 41.1460, -71.1205, -71.8965),
        "South Carolina": (35.2155, 32.0346, -78.4850, -83.3532),
        "South Dakota": (45.9454, 42.4790, -96.4364, -104.0573),
        "Tennessee": (36.6781, 34.9829, -81.6469, -90.3103),
        "Texas": (36.5007, 25.8371, -93.5080, -106.6456),
        "Utah": (42.0013, 36.9979, -109.0452, -114.0524),
        "Vermont": (45.0155, 42.7269, -71.4653, -73.4379),
        "Virginia": (39.4660, 36.5407, -75.1652, -83.6753),
        "Washington": (49.0024, 45.5437, -116.9177, -124.8489),
        "West Virginia": (40.6381, 37.2015, -77.7190, -82.6447),
        "Wisconsin": (47.0774, 42.4919, -86.2494, -92.8891),
        "Wyoming": (45.0058, 40.9979, -104.0573, -111.0567),
    }.items()
}

NATIONAL_CENTER = MapCenter(lat=39.8283, lng=-98.5795, zoom=4)

STATE_CENTERS: Dict[str, MapCenter] = {
    name: MapCenter(lat=lat, lng=lng, zoom=zoom)
    for name, (lat, lng, zoom) in {
        "Alabama": (32.806671, -86.79113, 7),
        "Alaska": (61.570716, -152.404419, 5),
        "Arizona": (33.729759, -111.431221, 7),
        "Arkansas": (34.969704, -92.373123, 7),
        "California": (36.116203, -119.681564, 6),
        "Colorado": (39.059811, -105.311104, 7),
        "Connecticut": (41.597782, -72.755371, 8),
        "Delaware": (39.318523, -75.507141, 9),
        "Florida": (27.766279, -81.686783, 7),
        "Georgia": (33.040619, -83.643074, 7),
        "Hawaii": (21.094318, -157.498337, 7),
        "Idaho": (44.240459, -114.478828, 6),
        "Illinois": (40.349457, -88.986137, 7),
        "Indiana": (39.849426, -86.258278, 7),
        "Iowa": (42.011539, -93.210526, 7),
        "Kansas": (38.5266, -96.726486, 7),
        "Kentucky": (37.668140, -84.670067, 7),
        "Louisiana": (31.169546, -91.867805, 7),
        "Maine": (44.693947, -69.381927, 7),
        "Maryland": (39.063946, -76.802101, 8),
        "Massachusetts": (42.230171, -71.530106, 8),
        "Michigan": (43.326618, -84.536095, 7),
        "Minnesota": (45.694454, -93.900192, 7),
        "Mississippi": (32.741646, -89.678696, 7),
        "Missouri": (38.456085, -92.288368, 7),
        "Montana": (47.052952, -110.454353, 6),
        "Nebraska": (41.12537, -98.268082, 7),
        "Nevada": (37.881212, -117.220068, 6),
        "New Hampshire": (43.452492, -71.563896, 8),
        "New Jersey": (40.298904, -74.756138, 8),
        "New Mexico": (34.307144, -106.018066, 7),
        "New York": (42.165726, -74.948051, 7),
        "North Carolina": (35.630066, -79.806419, 7),
        "North Dakota": (47.528912, -99.784012, 7),
        "Ohio": (40.388783, -82.764915, 7),
        "Oklahoma": (35.565342, -96.928917, 7),
        "Oregon": (44.931109, -123.029159, 7),
        "Pennsylvania": (40.590752, -77.209755, 7),
        "Rhode Island": (41.680893, -71.51178, 9),
        "South Carolina": (33.856892, -80.945007, 7),
        "South Dakota": (44.299782, -99.438828, 7),
        "Tennessee": (35.747845, -86.692345, 7),
        "Texas": (31.054487, -97.563461, 6),
        "Utah": (40.150032, -111.862434, 7),
        "Vermont": (44.045876, -72.710686, 8),
        "Virginia": (37.769337, -78.169968, 7),
        "Washington": (47.400902, -121.490494, 7),
        "West Virginia": (38.491226, -80.954453, 8),
        "Wisconsin": (44.268543, -89.616508, 7),
        "Wyoming": (42.755966, -107.302490, 7),
    }.items()
}


def national_jurisdiction() -> Jurisdiction:
    """The unrestricted jurisdiction"""
    return Jurisdiction(name=settings.national_jurisdiction, bounds=None)


def get_state_bounds(name: str) -> BoundingBox:
    """
    Bounding box for a named region.

    Unknown names get the world-covering box, so callers with an
    unrecognized region see everything.
    """
    bounds = STATE_BOUNDS.get(name)
    if bounds is None:
        logger.warning(f"No bounds for jurisdiction {name!r}, falling back to world bounds")
        return WORLD_BOUNDS
    return bounds


def resolve_jurisdiction(name: Optional[str]) -> Jurisdiction:
    """Build the caller jurisdiction from a profile location name"""
    if not name or name == settings.national_jurisdiction:
        return national_jurisdiction()
    return Jurisdiction(name=name, bounds=get_state_bounds(name))


def get_location_coordinates(name: Optional[str]) -> MapCenter:
    """Map centre for a jurisdiction, national centre when unknown"""
    if not name:
        return NATIONAL_CENTER
    return STATE_CENTERS.get(name, NATIONAL_CENTER)


def is_within_jurisdiction(latitude: float, longitude: float, jurisdiction: Optional[Jurisdiction]) -> bool:
    """
    Check whether a coordinate lies inside the caller's jurisdiction.

    Args:
        latitude: Latitude in degrees
        longitude: Longitude in degrees
        jurisdiction: Caller jurisdiction; None or unrestricted always passes

    Returns:
        True when inside the jurisdiction's bounding box (edges inclusive)
    """
    if jurisdiction is None or jurisdiction.is_unrestricted:
        return True
    return jurisdiction.bounds.contains(latitude, longitude)
