"""Adapters layer - Concrete implementations of ports.

This module contains implementations of the port interfaces,
connecting the routing core to external systems like:
- Segment sources (Skyscanner, timetable services, HERE)
- Place search (Nominatim) and the bundled location dataset
- Caching (in-memory, null) and outbound rate limiting
"""
