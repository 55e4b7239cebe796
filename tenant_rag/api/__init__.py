"""HTTP surface: FastAPI routes, schemas and middleware."""
