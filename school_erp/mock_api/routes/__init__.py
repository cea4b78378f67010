"""Domain routers of the mock API, one module per backend area."""
