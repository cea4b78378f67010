"""Assessments module — build tests from pattern-formatted Word documents."""
