"""Adapters layer - Concrete implementations of ports.

This module contains implementations of the port interfaces,
connecting the wizard to external systems like:
- The pricing and booking backend (httpx)
- Geocoding services (Nominatim via geopy)
- Device geolocation (static or IP lookup)
- Session storage (JSON files, in-memory)
- Caching (in-memory TTL)
"""
