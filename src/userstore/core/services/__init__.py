"""Service layer: database engine, sessions and query helpers."""
