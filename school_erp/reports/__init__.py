"""Reports module — read-only class, student and attendance reports."""
