from __future__ import annotations

import logging
from typing import Any

import httpx

from rentals.core.models import Coordinate


LOGGER = logging.getLogger(__name__)


class IpGeolocator:
    """Best-effort position lookup; any failure means "no location"."""

    def __init__(
        self,
        endpoint: str,
        timeout_seconds: float = 5.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    def locate(self) -> Coordinate | None:
        try:
            with httpx.Client(timeout=self.timeout_seconds, transport=self.transport) as client:
                response = client.get(self.endpoint, headers={"Accept": "application/json"})
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            LOGGER.warning("Geolocation lookup failed: %s", exc)
            return None
        return _coordinate_from_payload(payload)


def parse_coordinate(value: str | None) -> Coordinate | None:
    """Parse "lat,lng"; blank input means no location."""
    if not value or not value.strip():
        return None
    parts = [part.strip() for part in value.split(",")]
    if len(parts) != 2:
        raise ValueError(f"Expected 'lat,lng', got {value!r}")
    lat, lng = float(parts[0]), float(parts[1])
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        raise ValueError(f"Coordinate out of range: {value!r}")
    return Coordinate(lat, lng)


def _coordinate_from_payload(payload: Any) -> Coordinate | None:
    if not isinstance(payload, dict):
        return None
    try:
        lat = float(payload["latitude"])
        lng = float(payload["longitude"])
    except (KeyError, TypeError, ValueError):
        return None
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        return None
    return Coordinate(lat, lng)
