"""Academics module — branches, classes/sections, students and batch transfers."""
