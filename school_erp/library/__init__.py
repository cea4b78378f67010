"""Library module — book categories, books and class access grants."""
