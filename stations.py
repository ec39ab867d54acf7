"""Nearest monitoring station lookup."""


import math
from pathlib import Path
from typing import Iterable

from pydantic import TypeAdapter

from schemas import Station

EARTH_RADIUS_KM = 6371.0

_STATION_LIST = TypeAdapter(list[Station])


def haversine_distance(lon1: float, lat1: float, lon2: float, lat2: float) -> float:
	"""Great-circle distance in kilometres between two WGS84 points."""
	phi1, phi2 = math.radians(lat1), math.radians(lat2)
	delta_phi = math.radians(lat2 - lat1)
	delta_lambda = math.radians(lon2 - lon1)
	a = math.sin(delta_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
	return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


def find_nearest_station(stations: Iterable[Station], longitude: float, latitude: float) -> Station | None:
	"""Return the station closest to the given point, or ``None`` when there are none."""
	return min(
		stations,
		key=lambda station: haversine_distance(longitude, latitude, station.longitude, station.latitude),
		default=None,
	)


def load_stations(path: Path) -> list[Station]:
	"""Read a JSON array of stations."""
	return _STATION_LIST.validate_json(path.read_bytes())
