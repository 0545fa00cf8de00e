"""FastAPI demos: routing, validation, middleware and JWT auth."""
