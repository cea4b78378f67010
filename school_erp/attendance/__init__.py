"""Attendance module — daily section sheets, bulk marking and reports."""
