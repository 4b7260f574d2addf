"""Geo-fenced attendance backend.

This package is organized by feature modules (geofence, attendance,
locations, users, notifications) with a thin Flask controller layer on top
of the service/repository layers.
"""

__version__ = "1.0.0"
