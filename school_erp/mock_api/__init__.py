"""In-process FastAPI stand-in for the School ERP backend (envelope contract, in-memory data)."""
