"""Periodic export of provider data points to pluggable sinks."""

from redmaple.export.exporters import InfluxDBExporter, LogExporter
from redmaple.export.hub import ExportHub
from redmaple.export.types import LOCATION_TAG, DataPoint, Exporter, Provider

__all__ = [
    "LOCATION_TAG",
    "DataPoint",
    "ExportHub",
    "Exporter",
    "InfluxDBExporter",
    "LogExporter",
    "Provider",
]
