"""IP Geo API: user authentication and IP geolocation backend."""

__version__ = "0.1.0"
