"""Bike share (GBFS) source."""

from redmaple.services.citibike.client import CitibikeClient
from redmaple.services.citibike.models import BikeCounts

__all__ = ["BikeCounts", "CitibikeClient"]
