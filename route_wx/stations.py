"""Static station reference table."""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union

import pandas as pd

from route_wx.errors import StationNotFoundError
from route_wx.geodesy import great_circle_distance
from route_wx.models.coordinate import Coordinate, StationRecord

logger = logging.getLogger(__name__)

# OurAirports columns that may carry an alternative identifier
_ALIAS_COLUMNS = ('iata_code', 'gps_code', 'local_code')


class StationTable:
    """
    Immutable table of reporting stations, loaded once at startup.

    Lookups are case-insensitive and fall back to aliases (IATA or local
    codes), so "JFK" resolves to KJFK.

    Example:
        stations = StationTable.from_csv("airports.csv")
        jfk = stations.get("jfk")
        near = stations.nearest(jfk.coordinate, radius_nm=50, max_results=5)
    """

    def __init__(self, records: Iterable[StationRecord]):
        """
        Args:
            records: Station records; later duplicates of an identifier are ignored
        """
        by_ident: Dict[str, StationRecord] = {}
        for record in records:
            key = record.identifier.upper()
            if key in by_ident:
                continue
            by_ident[key] = record

        aliases: Dict[str, str] = {}
        for key, record in by_ident.items():
            for alias in record.aliases:
                alias_key = alias.upper()
                if alias_key and alias_key not in by_ident:
                    aliases.setdefault(alias_key, key)

        self._records = tuple(by_ident.values())
        self._by_ident = by_ident
        self._aliases = aliases

    @classmethod
    def from_csv(
        cls,
        path: Union[str, Path],
        excluded_types: Iterable[str] = ('heliport', 'closed', 'balloonport', 'seaplane_base'),
    ) -> 'StationTable':
        """
        Load an OurAirports style ``airports.csv``.

        Rows without coordinates and of excluded types are skipped.

        Args:
            path: CSV file path
            excluded_types: Values of the ``type`` column to drop
        """
        df = pd.read_csv(path, encoding='utf-8-sig', dtype=str, keep_default_na=False)
        if 'type' in df.columns:
            df = df[~df['type'].isin(list(excluded_types))]

        records = []
        skipped = 0
        for _, row in df.iterrows():
            record = cls._record_from_row(row)
            if record is None:
                skipped += 1
                continue
            records.append(record)

        if skipped:
            logger.debug("Skipped %d station rows without usable coordinates", skipped)
        logger.info("Loaded %d stations from %s", len(records), path)
        return cls(records)

    @staticmethod
    def _record_from_row(row: pd.Series) -> Optional[StationRecord]:
        ident = _safe_get(row, 'ident')
        lat = _safe_get(row, 'latitude_deg')
        lon = _safe_get(row, 'longitude_deg')
        if not ident or lat is None or lon is None:
            return None
        try:
            coordinate = Coordinate(latitude=float(lat), longitude=float(lon))
        except ValueError:
            return None

        aliases = tuple(
            str(_safe_get(row, col)).upper()
            for col in _ALIAS_COLUMNS
            if _safe_get(row, col) and str(_safe_get(row, col)).upper() != ident.upper()
        )
        return StationRecord(
            identifier=ident.upper(),
            coordinate=coordinate,
            display_name=_safe_get(row, 'name') or ident.upper(),
            aliases=aliases,
        )

    def get(self, identifier: str) -> Optional[StationRecord]:
        """
        Find a station by identifier or alias.

        Returns:
            StationRecord or None
        """
        key = identifier.strip().upper()
        record = self._by_ident.get(key)
        if record is not None:
            return record
        alias_of = self._aliases.get(key)
        return self._by_ident.get(alias_of) if alias_of else None

    def require(self, identifier: str) -> StationRecord:
        """Like get() but raises StationNotFoundError."""
        record = self.get(identifier)
        if record is None:
            raise StationNotFoundError(identifier)
        return record

    def nearest(
        self,
        coordinate: Coordinate,
        radius_nm: float = 50.0,
        max_results: int = 5,
        exclude: Iterable[str] = (),
    ) -> List[StationRecord]:
        """
        Stations within radius of a coordinate, nearest first.

        Args:
            coordinate: Search centre
            radius_nm: Search radius in nautical miles
            max_results: Maximum number of stations returned
            exclude: Identifiers to leave out (e.g. the target station itself)
        """
        excluded = {e.upper() for e in exclude}
        within = []
        for record in self._records:
            if record.identifier in excluded:
                continue
            distance = great_circle_distance(coordinate, record.coordinate)
            if distance <= radius_nm:
                within.append((distance, record))
        within.sort(key=lambda item: item[0])
        return [record for _, record in within[:max_results]]

    def __iter__(self) -> Iterator[StationRecord]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, identifier: object) -> bool:
        return isinstance(identifier, str) and self.get(identifier) is not None

    def __repr__(self) -> str:
        return f"StationTable({len(self._records)} stations)"


def _safe_get(row: pd.Series, key: str) -> Any:
    """Value from a pandas row, with blanks and NaN converted to None."""
    value = row.get(key)
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return value.strip() if isinstance(value, str) else value
