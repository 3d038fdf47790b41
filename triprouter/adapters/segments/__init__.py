"""Segment provider adapters - Implementations of SegmentProviderPort.

- SkyscannerFlightProvider: flights (service 'skyscanner')
- TrainTimetableProvider / BusTimetableProvider: timetable service ('rail', 'coach')
- HereWalkingProvider: pedestrian routes (service 'here')
"""

from .base import BaseSegmentProvider
from .flights import SkyscannerFlightProvider
from .timetable import BusTimetableProvider, TimetableProvider, TrainTimetableProvider
from .walking import HereWalkingProvider

__all__ = [
    "BaseSegmentProvider",
    "SkyscannerFlightProvider",
    "TimetableProvider",
    "TrainTimetableProvider",
    "BusTimetableProvider",
    "HereWalkingProvider",
]
