"""CSV location repository adapter.

Loads the bounded dataset of well-known cities, airports and stations.
The dataset seeds the location index and is the fallback answer when live
place search is disabled or fails.

Columns: ``id,name,kind,lat,lng`` followed by any number of provider code
columns (``skyscanner``, ``skyscanner_entity``, ...). Empty cells are
ignored.
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from ...config import LocationConfig, get_config
from ...domain.errors import ConfigurationError
from ...domain.models import Coordinates, Location, LocationKind

_BASE_COLUMNS = {"id", "name", "kind", "lat", "lng"}


@dataclass
class CSVLocationRepository:
    """Location repository that loads from a CSV file.

    This adapter implements LocationRepositoryPort and LocationSearchPort.

    Attributes:
        config: Location configuration (dataset path)
    """

    config: LocationConfig = field(default_factory=lambda: get_config().location)
    _logger: logging.Logger = field(init=False, repr=False)

    # Cached data
    _locations: Optional[Dict[str, Location]] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def _load(self) -> Dict[str, Location]:
        if self._locations is not None:
            return self._locations

        path = self.config.dataset_path
        self._logger.debug("Loading location dataset", extra={"path": str(path)})

        try:
            with path.open(encoding="utf-8", newline="") as f:
                locations = {
                    location.id: location
                    for location in (self._parse_row(row) for row in csv.DictReader(f))
                    if location is not None
                }
        except OSError as e:
            raise ConfigurationError(
                f"Cannot read location dataset {path}",
                setting_name="location.dataset_path",
                cause=e,
            )

        self._locations = locations
        self._logger.info("Location dataset loaded", extra={"locations": len(locations)})
        return locations

    def _parse_row(self, row: Dict[str, str]) -> Optional[Location]:
        location_id = (row.get("id") or "").strip()
        if not location_id:
            return None

        kind_value = (row.get("kind") or "").strip().lower()
        try:
            kind = LocationKind(kind_value)
        except ValueError as e:
            raise ConfigurationError(
                f"Unknown location kind '{kind_value}' for {location_id}",
                setting_name="location.dataset_path",
                expected_type="|".join(k.value for k in LocationKind),
                cause=e,
            )

        lat_str = (row.get("lat") or "").strip()
        lng_str = (row.get("lng") or "").strip()
        coordinates = None
        if lat_str and lng_str:
            try:
                coordinates = Coordinates(lat=float(lat_str), lng=float(lng_str))
            except ValueError:
                self._logger.warning(
                    "Ignoring invalid coordinates",
                    extra={"location_id": location_id, "lat": lat_str, "lng": lng_str},
                )

        provider_codes = {
            column: value.strip()
            for column, value in row.items()
            if column not in _BASE_COLUMNS and value and value.strip()
        }

        return Location(
            id=location_id,
            name=(row.get("name") or "").strip() or location_id,
            kind=kind,
            coordinates=coordinates,
            provider_codes=provider_codes,
        )

    def list_locations(self) -> Sequence[Location]:
        return list(self._load().values())

    def get_location(self, location_id: str) -> Optional[Location]:
        """Get a location by id (case-insensitive)."""
        locations = self._load()
        return locations.get(location_id) or locations.get(location_id.lower())

    def list_hubs(self) -> Sequence[Location]:
        return [location for location in self._load().values() if location.kind.is_hub]

    def filter_by_name(self, query: str) -> List[Location]:
        """Locations whose name contains the query, or whose id equals it."""
        needle = query.strip().lower()
        if not needle:
            return []
        return [
            location
            for location in self._load().values()
            if needle in location.name.lower() or needle == location.id.lower()
        ]

    async def search(self, query: str) -> Sequence[Location]:
        return self.filter_by_name(query)
