"""Database seeders that insert literal demo fixtures."""
