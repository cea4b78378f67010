"""Sequential HTTP smoke suites run against a live (or mock) API."""
