"""Mess module — food catalogue, recipes, staff, menus, meals and kitchen safety."""
