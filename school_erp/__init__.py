"""School ERP console: typed API client, page controllers, seeders and smoke suites."""

__version__ = "1.0.0"
