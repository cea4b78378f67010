"""Transportation module — drivers, vehicles, routes, stops, trips and live tracking."""
